"""Tests for session token issuance and verification."""

import base64
import jwt
import pytest
from datetime import datetime, timedelta

from fedauth.auth.session_tokens import SessionTokenService
from fedauth.exceptions import ExpiredToken, InvalidToken, Unauthenticated


def _b64decode(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _single_bit_flips(segment: str):
    """Every variant of a base64url segment with exactly one decoded bit flipped."""
    raw = _b64decode(segment)
    for index in range(len(raw)):
        for bit in range(8):
            flipped = bytearray(raw)
            flipped[index] ^= 1 << bit
            yield _b64encode(bytes(flipped))


class TestSessionTokenService:

    def test_round_trip_returns_user_id(self, token_service):
        token = token_service.issue("user-123")
        assert token_service.verify(token) == "user-123"

    def test_token_valid_for_fourteen_days(self, token_service, settings):
        token = token_service.issue("user-123")
        payload = jwt.decode(token, settings.token_secret, algorithms=["HS256"])

        assert payload["sub"] == "user-123"
        assert payload["exp"] - payload["iat"] == int(timedelta(days=14).total_seconds())

    def test_expired_token_rejected(self, settings):
        issued_in_past = SessionTokenService(
            settings.token_secret,
            clock=lambda: datetime.utcnow() - timedelta(days=15),
        )
        token = issued_in_past.issue("user-123")

        with pytest.raises(ExpiredToken):
            SessionTokenService(settings.token_secret).verify(token)

    def test_token_expiring_now_is_rejected(self, settings):
        zero_lifetime = SessionTokenService(
            settings.token_secret,
            lifetime=timedelta(0),
            clock=lambda: datetime.utcnow() - timedelta(seconds=1),
        )
        with pytest.raises(ExpiredToken):
            zero_lifetime.verify(zero_lifetime.issue("user-123"))

    def test_any_payload_bit_flip_rejected(self, token_service):
        header, payload, signature = token_service.issue("user-123").split(".")

        for tampered_payload in _single_bit_flips(payload):
            with pytest.raises(InvalidToken):
                token_service.verify(".".join([header, tampered_payload, signature]))

    def test_any_signature_bit_flip_rejected(self, token_service):
        header, payload, signature = token_service.issue("user-123").split(".")

        for tampered_signature in _single_bit_flips(signature):
            with pytest.raises(InvalidToken):
                token_service.verify(".".join([header, payload, tampered_signature]))

    def test_forged_subject_rejected(self, token_service):
        """Re-signing a modified payload with another key must not verify."""
        forged = jwt.encode(
            {"sub": "admin", "iat": datetime.utcnow(), "exp": datetime.utcnow() + timedelta(days=1)},
            "some-other-secret",
            algorithm="HS256",
        )
        with pytest.raises(InvalidToken):
            token_service.verify(forged)

    def test_malformed_token_rejected(self, token_service):
        with pytest.raises(InvalidToken):
            token_service.verify("not-a-token")

    def test_missing_subject_rejected(self, token_service, settings):
        token = jwt.encode(
            {"iat": datetime.utcnow(), "exp": datetime.utcnow() + timedelta(days=1)},
            settings.token_secret,
            algorithm="HS256",
        )
        with pytest.raises(InvalidToken):
            token_service.verify(token)

    def test_token_errors_are_unauthenticated(self):
        assert issubclass(InvalidToken, Unauthenticated)
        assert issubclass(ExpiredToken, Unauthenticated)

    def test_empty_secret_refused(self):
        with pytest.raises(ValueError):
            SessionTokenService("")
