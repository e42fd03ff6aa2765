"""Find, create or merge the local user behind a federated profile."""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError

from fedauth.database.models import UserDB
from fedauth.database.user_repository import UserRepository
from fedauth.exceptions import DuplicateIdentity, NotFound
from fedauth.models.profile import NormalizedProfile
from fedauth.models.user import User

logger = logging.getLogger(__name__)


class IdentityResolver:
    """Resolves a normalized provider profile to exactly one local User.

    Resolution order:

    1. An authenticated caller (link request) is always the target.
    2. A user already linked to this exact provider identity is returned as-is.
    3. A user with the same (lowercase) email gets the provider merged in.
    4. Otherwise a new user is created with the single linked identity.

    Repeat logins through an already-linked identity do not refresh
    `display_name`/`picture`: the stored profile (possibly edited by the user)
    wins over the provider's latest values.

    The whole read-modify-write runs in one transaction. The unique email and
    identity constraints turn a concurrent duplicate create into an
    IntegrityError; the resolve is then retried and finds the winner's row.
    """

    def __init__(self, users: UserRepository, max_attempts: int = 3):
        self.users = users
        self.max_attempts = max_attempts

    def resolve(
        self,
        candidate: NormalizedProfile,
        provider: str,
        caller_user_id: Optional[str] = None,
    ) -> User:
        """Resolve `candidate` from `provider` to a persisted User.

        Raises:
            NotFound: caller_user_id does not resolve to a stored user
            DuplicateIdentity: the provider identity belongs to another account
        """
        attempt = 1
        while True:
            try:
                return self._resolve_once(candidate, provider, caller_user_id)
            except IntegrityError as e:
                self.users.rollback()
                if attempt >= self.max_attempts:
                    raise DuplicateIdentity("Identity was claimed by another account") from e
                logger.warning(
                    f"Concurrent write while resolving {provider} identity "
                    f"(attempt {attempt}/{self.max_attempts}); retrying"
                )
                attempt += 1
            except Exception:
                self.users.rollback()
                raise

    def _resolve_once(
        self,
        candidate: NormalizedProfile,
        provider: str,
        caller_user_id: Optional[str],
    ) -> User:
        owner = self.users.get_row_by_linked_identity(provider, candidate.provider_id)

        if caller_user_id:
            target = self.users.get_row(caller_user_id, for_update=True)
            if target is None:
                raise NotFound("User Not Found")
            if owner is not None and owner.id != target.id:
                raise DuplicateIdentity(f"This {provider} account is already linked to another user")
            return self._merge(target, candidate, provider)

        if owner is not None:
            return owner.to_pydantic()

        target = self.users.get_row_by_email(candidate.email, for_update=True)
        if target is None:
            # No email, or no account with it: start a new one.
            return self._create(candidate, provider)
        return self._merge(target, candidate, provider)

    def _create(self, candidate: NormalizedProfile, provider: str) -> User:
        user_db = self.users.add_row(
            email=candidate.email,
            display_name=candidate.display_name,
            picture=candidate.picture_url,
        )
        self.users.set_link(user_db, provider, candidate.provider_id)
        user = self.users.commit(user_db)
        logger.info(f"Created user {user.id} from {provider} login")
        return user

    def _merge(self, user_db: UserDB, candidate: NormalizedProfile, provider: str) -> User:
        if user_db.linked_providers().get(provider) == candidate.provider_id:
            # Nothing to write; commit only ends the transaction holding the row lock.
            return self.users.commit(user_db)

        # Incoming values only fill empty fields.
        if not user_db.display_name and candidate.display_name:
            user_db.display_name = candidate.display_name
        if not user_db.picture and candidate.picture_url:
            user_db.picture = candidate.picture_url
        if not user_db.email and candidate.email:
            if self.users.get_row_by_email(candidate.email) is None:
                user_db.email = candidate.email

        self.users.set_link(user_db, provider, candidate.provider_id)
        user = self.users.commit(user_db)
        logger.info(f"Linked {provider} identity to user {user.id}")
        return user
