"""Drives one federated login/link request end to end.

    Start -> TokenExchanged -> ProfileFetched -> IdentityResolved -> SessionIssued

Any step may end in Failed instead. Steps run strictly in order with no retries: authorization codes are
single-use, so a failed request must be restarted by the client.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from fedauth.auth.identity_resolver import IdentityResolver
from fedauth.auth.session_tokens import SessionTokenService
from fedauth.database.user_repository import UserRepository
from fedauth.exceptions import FederationError, InvalidRequest, NotFound
from fedauth.models.user import User
from fedauth.providers.base import AccessGrant, ProviderAdapter
from fedauth.providers.registry import ProviderRegistry

logger = logging.getLogger(__name__)


class FederationState(str, Enum):
    START = "start"
    REQUEST_TOKEN_ISSUED = "request_token_issued"  # OAuth1 phase one only
    TOKEN_EXCHANGED = "token_exchanged"
    PROFILE_FETCHED = "profile_fetched"
    IDENTITY_RESOLVED = "identity_resolved"
    SESSION_ISSUED = "session_issued"
    FAILED = "failed"


@dataclass
class FederationRequest:
    """Client-supplied inputs for one login/link attempt."""

    code: Optional[str] = None
    client_id: Optional[str] = None
    redirect_uri: Optional[str] = None
    # OAuth1 (Twitter) second phase
    oauth_token: Optional[str] = None
    oauth_verifier: Optional[str] = None


@dataclass
class FederationResult:
    state: FederationState
    token: Optional[str] = None
    user: Optional[User] = None
    request_token: Optional[Dict[str, str]] = None
    history: List[FederationState] = field(default_factory=list)


class FederationOrchestrator:
    """Provider adapter -> identity resolver -> session token."""

    def __init__(
        self,
        providers: ProviderRegistry,
        users: UserRepository,
        tokens: SessionTokenService,
        resolver: Optional[IdentityResolver] = None,
    ):
        self.providers = providers
        self.users = users
        self.tokens = tokens
        self.resolver = resolver or IdentityResolver(users)

    def login(
        self,
        provider_name: str,
        request: FederationRequest,
        caller_user_id: Optional[str] = None,
    ) -> FederationResult:
        """Log in (or link, when `caller_user_id` is set) through a provider.

        Raises:
            UnknownProvider: provider_name is not supported
            InvalidRequest: required fields are missing
            ProviderError: the provider failed at any step
            NotFound / DuplicateIdentity: from identity resolution
        """
        adapter = self.providers.get(provider_name)
        history = [FederationState.START]

        if adapter.oauth_version == 1 and not (request.oauth_token and request.oauth_verifier):
            if not request.redirect_uri:
                raise InvalidRequest("Missing redirectUri")
            request_token = adapter.request_token(request.redirect_uri)
            self._advance(history, FederationState.REQUEST_TOKEN_ISSUED, adapter)
            return FederationResult(
                state=FederationState.REQUEST_TOKEN_ISSUED,
                request_token=request_token,
                history=history,
            )
        if adapter.oauth_version == 2 and not request.code:
            raise InvalidRequest("Missing authorization code")
        if adapter.oauth_version == 2 and not request.redirect_uri:
            raise InvalidRequest("Missing redirectUri")

        try:
            grant = self._exchange(adapter, request)
            self._advance(history, FederationState.TOKEN_EXCHANGED, adapter)

            profile = adapter.fetch_profile(grant)
            self._advance(history, FederationState.PROFILE_FETCHED, adapter)

            user = self.resolver.resolve(profile, adapter.name, caller_user_id)
            self._advance(history, FederationState.IDENTITY_RESOLVED, adapter)

            token = self.tokens.issue(user.id)
            self._advance(history, FederationState.SESSION_ISSUED, adapter)
        except FederationError as e:
            logger.warning(f"{adapter.name} login failed after {history[-1].value}: {type(e).__name__}: {e}")
            history.append(FederationState.FAILED)
            raise

        logger.info(f"{adapter.name} login complete for user {user.id}")
        return FederationResult(
            state=FederationState.SESSION_ISSUED,
            token=token,
            user=user,
            history=history,
        )

    def unlink(self, user_id: str, provider_name: str) -> User:
        """Remove `provider_name` from the user's linked providers (no-op if absent).

        Raises:
            UnknownProvider: provider_name is not supported
            NotFound: the user no longer exists
        """
        self.providers.get(provider_name)
        user = self.users.remove_link(user_id, provider_name)
        if user is None:
            raise NotFound("User Not Found")
        return user

    @staticmethod
    def _exchange(adapter: ProviderAdapter, request: FederationRequest) -> AccessGrant:
        if adapter.oauth_version == 1:
            return adapter.exchange_code(
                request.oauth_verifier,
                request.client_id,
                request.redirect_uri,
                oauth_token=request.oauth_token,
            )
        return adapter.exchange_code(request.code, request.client_id, request.redirect_uri)

    @staticmethod
    def _advance(history: List[FederationState], state: FederationState, adapter: ProviderAdapter) -> None:
        history.append(state)
        logger.debug(f"{adapter.name} login -> {state.value}")
