"""Email/password accounts (signup and login)."""

import logging

from fedauth.auth.passwords import hash_password, verify_password
from fedauth.auth.session_tokens import SessionTokenService
from fedauth.database.user_repository import UserRepository
from fedauth.exceptions import DuplicateIdentity, InvalidCredentials

logger = logging.getLogger(__name__)


class LocalAccountService:
    def __init__(self, users: UserRepository, tokens: SessionTokenService):
        self.users = users
        self.tokens = tokens

    def signup(self, display_name: str, email: str, password: str) -> str:
        """Create a local account and return a session token.

        Raises:
            DuplicateIdentity: If the email is already registered
        """
        if self.users.get_by_email(email) is not None:
            raise DuplicateIdentity("Email is already taken")
        user = self.users.create(
            email=email,
            display_name=display_name,
            password_hash=hash_password(password),
        )
        logger.info(f"Created local account {user.id}")
        return self.tokens.issue(user.id)

    def login(self, email: str, password: str) -> str:
        """Check credentials and return a session token.

        Raises:
            InvalidCredentials: Unknown email, wrong password, or federated-only account
        """
        record = self.users.get_with_password_hash(email)
        if record is None or not verify_password(password, record[1] or ""):
            raise InvalidCredentials("Invalid email and/or password")
        user, _ = record
        return self.tokens.issue(user.id)
