"""FastAPI dependencies for authentication and service wiring."""

import logging
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from fedauth.config import Settings, get_settings
from fedauth.database.database import get_db
from fedauth.database.user_repository import UserRepository
from fedauth.auth.federation import FederationOrchestrator
from fedauth.auth.local_accounts import LocalAccountService
from fedauth.auth.session_tokens import SessionTokenService
from fedauth.exceptions import SessionTokenError, Unauthenticated
from fedauth.providers.registry import ProviderRegistry

logger = logging.getLogger(__name__)

# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_token_service(settings: Settings = Depends(get_settings)) -> SessionTokenService:
    return SessionTokenService.from_settings(settings)


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_provider_registry(settings: Settings = Depends(get_settings)) -> ProviderRegistry:
    return ProviderRegistry.from_settings(settings)


def get_orchestrator(
    providers: ProviderRegistry = Depends(get_provider_registry),
    users: UserRepository = Depends(get_user_repository),
    tokens: SessionTokenService = Depends(get_token_service),
) -> FederationOrchestrator:
    return FederationOrchestrator(providers, users, tokens)


def get_local_accounts(
    users: UserRepository = Depends(get_user_repository),
    tokens: SessionTokenService = Depends(get_token_service),
) -> LocalAccountService:
    return LocalAccountService(users, tokens)


def _verify(credentials: HTTPAuthorizationCredentials, tokens: SessionTokenService) -> str:
    try:
        return tokens.verify(credentials.credentials)
    except SessionTokenError as e:
        raise Unauthenticated(e.message) from e


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: SessionTokenService = Depends(get_token_service),
) -> str:
    """Get the authenticated caller's user ID from the `Bearer` session token.

    The ID is only valid for the current request; nothing is stored server-side.

    Raises:
        Unauthenticated: If the header is missing or the token does not verify
    """
    if not credentials:
        raise Unauthenticated("Please make sure your request has an Authorization header")
    return _verify(credentials, tokens)


def get_optional_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: SessionTokenService = Depends(get_token_service),
) -> Optional[str]:
    """Like get_current_user_id, but anonymous callers get None.

    A token that is present but invalid is still rejected rather than silently
    downgrading a link request to a fresh login.
    """
    if not credentials:
        return None
    return _verify(credentials, tokens)
