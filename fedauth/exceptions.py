"""Error taxonomy for the federation service.

Every error raised by the core carries the HTTP status the API layer should
answer with, so routes never translate exceptions by hand.
"""

from typing import Optional


class FederationError(Exception):
    """Base class for errors that are reported to the caller."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class Unauthenticated(FederationError):
    """Missing, invalid or expired session token."""

    status_code = 401


class SessionTokenError(Unauthenticated):
    """Raised by SessionTokenService.verify."""


class InvalidToken(SessionTokenError):
    """Bad signature or malformed token."""


class ExpiredToken(SessionTokenError):
    """Token is past its expiry."""


class InvalidCredentials(Unauthenticated):
    """Local email/password login failed."""


class ProviderError(FederationError):
    """Upstream identity provider failed or returned an error payload."""

    def __init__(self, provider: str, message: str, status_code: int = 500):
        super().__init__(message, status_code)
        self.provider = provider

    def __str__(self) -> str:
        return f"{self.provider}: {self.message}"


class DuplicateIdentity(FederationError):
    """Email or external identity already belongs to another account."""

    status_code = 409


class UnknownProvider(FederationError):
    status_code = 400

    def __init__(self, provider: str):
        super().__init__("Unknown OAuth Provider")
        self.provider = provider


class NotFound(FederationError):
    """Session subject no longer resolves to a stored user."""

    status_code = 400


class InvalidRequest(FederationError):
    """Request is missing a field required before any provider call."""

    status_code = 400
