"""Repository for User database operations."""

import logging
from datetime import datetime
from typing import Optional, Tuple
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fedauth.exceptions import DuplicateIdentity
from fedauth.models.user import User, normalize_email
from fedauth.database.models import UserDB, LinkedIdentityDB

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for User database operations.

    Methods returning `User` commit their own work. The `*_row` helpers and
    `set_link` only stage changes on the session so IdentityResolver can run a
    whole read-modify-write in one transaction and finish it with `commit`.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        user_db = self.get_row(user_id)
        return user_db.to_pydantic() if user_db else None

    def get_by_email(self, email: Optional[str]) -> Optional[User]:
        """Get user by email (case-insensitive)."""
        user_db = self.get_row_by_email(email)
        return user_db.to_pydantic() if user_db else None

    def get_with_password_hash(self, email: Optional[str]) -> Optional[Tuple[User, Optional[str]]]:
        """Get user and stored password hash by email, for local login only."""
        user_db = self.get_row_by_email(email)
        if user_db is None:
            return None
        return user_db.to_pydantic(), user_db.password_hash

    # Row-level helpers (no commit)

    def get_row(self, user_id: str, for_update: bool = False) -> Optional[UserDB]:
        query = self.db.query(UserDB).filter(UserDB.id == user_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def get_row_by_email(self, email: Optional[str], for_update: bool = False) -> Optional[UserDB]:
        email = normalize_email(email)
        if email is None:
            return None
        query = self.db.query(UserDB).filter(UserDB.email == email)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def get_row_by_linked_identity(self, provider: str, provider_user_id: str) -> Optional[UserDB]:
        return (
            self.db.query(UserDB)
            .join(LinkedIdentityDB, LinkedIdentityDB.user_id == UserDB.id)
            .filter(
                LinkedIdentityDB.provider == provider,
                LinkedIdentityDB.provider_user_id == provider_user_id,
            )
            .first()
        )

    def add_row(
        self,
        email: Optional[str],
        display_name: Optional[str] = None,
        picture: Optional[str] = None,
        password_hash: Optional[str] = None,
    ) -> UserDB:
        """Stage a new user row and flush it so unique constraints fire now."""
        now = datetime.utcnow()
        user_db = UserDB(
            email=normalize_email(email),
            display_name=display_name,
            picture=picture,
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )
        self.db.add(user_db)
        self.db.flush()
        return user_db

    def set_link(self, user_db: UserDB, provider: str, provider_user_id: str) -> None:
        """Add or overwrite the user's identity for `provider`."""
        for link in user_db.linked_identities:
            if link.provider == provider:
                link.provider_user_id = provider_user_id
                break
        else:
            user_db.linked_identities.append(
                LinkedIdentityDB(provider=provider, provider_user_id=provider_user_id)
            )
        user_db.updated_at = datetime.utcnow()
        self.db.flush()

    def commit(self, user_db: UserDB) -> User:
        self.db.commit()
        self.db.refresh(user_db)
        return user_db.to_pydantic()

    def rollback(self) -> None:
        self.db.rollback()

    # Committing operations

    def create(
        self,
        email: Optional[str],
        display_name: Optional[str] = None,
        picture: Optional[str] = None,
        password_hash: Optional[str] = None,
    ) -> User:
        """Create a user.

        Raises:
            DuplicateIdentity: If the email is already registered
        """
        try:
            user_db = self.add_row(email, display_name, picture, password_hash)
            user = self.commit(user_db)
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Refused to create user with taken email: {type(e).__name__}")
            raise DuplicateIdentity("Email is already taken") from e
        logger.debug(f"Created user {user.id}")
        return user

    def update_profile(
        self,
        user_id: str,
        display_name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Optional[User]:
        """Update profile fields; empty values keep the stored ones.

        Returns None if the user does not exist.

        Raises:
            DuplicateIdentity: If the new email belongs to another account
        """
        user_db = self.get_row(user_id)
        if user_db is None:
            return None

        user_db.display_name = display_name or user_db.display_name
        user_db.email = normalize_email(email) or user_db.email
        user_db.updated_at = datetime.utcnow()
        try:
            user = self.commit(user_db)
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateIdentity("Email is already taken") from e
        logger.debug(f"Updated user {user_id}")
        return user

    def remove_link(self, user_id: str, provider: str) -> Optional[User]:
        """Remove the user's identity for `provider`; no-op if not linked.

        Returns None if the user does not exist.
        """
        user_db = self.get_row(user_id, for_update=True)
        if user_db is None:
            return None

        for link in list(user_db.linked_identities):
            if link.provider == provider:
                user_db.linked_identities.remove(link)
                user_db.updated_at = datetime.utcnow()
                logger.debug(f"Unlinked {provider} from user {user_id}")
        return self.commit(user_db)
