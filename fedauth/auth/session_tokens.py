"""Signed session tokens (JWT) issued after a successful login."""

import logging
import jwt
from datetime import datetime, timedelta
from typing import Callable, Optional

from fedauth.config import Settings
from fedauth.exceptions import ExpiredToken, InvalidToken

logger = logging.getLogger(__name__)


class SessionTokenService:
    """Issues and verifies HMAC-signed, time-bounded session tokens.

    Tokens are not revocable: expiry is the only invalidation mechanism.
    """

    def __init__(
        self,
        secret: str,
        lifetime: timedelta = timedelta(days=14),
        algorithm: str = "HS256",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if not secret:
            raise ValueError("A signing secret is required for session tokens.")
        self.secret = secret
        self.lifetime = lifetime
        self.algorithm = algorithm
        self.clock = clock or datetime.utcnow

    @classmethod
    def from_settings(cls, settings: Settings) -> "SessionTokenService":
        return cls(
            secret=settings.token_secret,
            lifetime=timedelta(days=settings.token_lifetime_days),
            algorithm=settings.token_algorithm,
        )

    def issue(self, user_id: str) -> str:
        """Create a session token for a user.

        Args:
            user_id: User ID to encode in token

        Returns:
            Encoded JWT token string
        """
        issued_at = self.clock()
        payload = {
            "sub": user_id,
            "iat": issued_at,
            "exp": issued_at + self.lifetime,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """Validate a session token and return the user ID it carries.

        Raises:
            ExpiredToken: Signature is valid but the token is past expiry
            InvalidToken: Bad signature, malformed token or missing claims
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "iat", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise ExpiredToken("Token has expired") from e
        except jwt.InvalidTokenError as e:
            logger.warning(f"Rejected session token: {type(e).__name__}")
            raise InvalidToken(f"Invalid token: {e}") from e

        user_id = payload.get("sub")
        if not isinstance(user_id, str) or not user_id:
            raise InvalidToken("Invalid token: missing subject")
        return user_id
