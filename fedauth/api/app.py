"""FastAPI web application for fedauth."""

import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fedauth.api.auth_models import (
    LoginRequest,
    ProviderLoginRequest,
    SignupRequest,
    TokenResponse,
    UnlinkRequest,
    UpdateProfileRequest,
)
from fedauth.api.middleware import RequestLoggingMiddleware
from fedauth.auth.dependencies import (
    get_current_user_id,
    get_local_accounts,
    get_optional_user_id,
    get_orchestrator,
    get_user_repository,
)
from fedauth.auth.federation import FederationOrchestrator, FederationRequest
from fedauth.auth.local_accounts import LocalAccountService
from fedauth.config import get_settings
from fedauth.database.database import init_db
from fedauth.database.user_repository import UserRepository
from fedauth.exceptions import FederationError, NotFound
from fedauth.models.user import User

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


# Initialize FastAPI app
app = FastAPI(
    title="fedauth API",
    description="OAuth federation, identity merge and session tokens",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in get_settings().cors_origins.split(",") if origin.strip()],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FederationError)
async def federation_error_handler(request: Request, exc: FederationError):
    """Render every core error as `{"message": ...}` with its status code."""
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message}, headers=headers)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


@app.post("/auth/login", response_model=TokenResponse)
def login(body: LoginRequest, accounts: LocalAccountService = Depends(get_local_accounts)):
    """Log in with email and password."""
    return TokenResponse(token=accounts.login(body.email, body.password))


@app.post("/auth/signup", response_model=TokenResponse)
def signup(body: SignupRequest, accounts: LocalAccountService = Depends(get_local_accounts)):
    """Create an email/password account."""
    return TokenResponse(token=accounts.signup(body.display_name, body.email, body.password))


@app.post("/auth/unlink")
def unlink(
    body: UnlinkRequest,
    user_id: str = Depends(get_current_user_id),
    orchestrator: FederationOrchestrator = Depends(get_orchestrator),
):
    """Remove a linked provider from the caller's account."""
    orchestrator.unlink(user_id, body.provider)
    return Response(status_code=200)


# Declared after the fixed /auth/* routes so they take precedence.
@app.post("/auth/{provider}")
def provider_login(
    provider: str,
    body: ProviderLoginRequest,
    caller_user_id: Optional[str] = Depends(get_optional_user_id),
    orchestrator: FederationOrchestrator = Depends(get_orchestrator),
):
    """Log in (or link, with a bearer token) through an external provider.

    Twitter's first call answers with the OAuth1 request token instead of a
    session token.
    """
    result = orchestrator.login(
        provider,
        FederationRequest(
            code=body.code,
            client_id=body.client_id,
            redirect_uri=body.redirect_uri,
            oauth_token=body.oauth_token,
            oauth_verifier=body.oauth_verifier,
        ),
        caller_user_id=caller_user_id,
    )
    if result.request_token is not None:
        return result.request_token
    return {"token": result.token}


@app.get("/api/profile", response_model=User)
def get_profile(
    user_id: str = Depends(get_current_user_id),
    users: UserRepository = Depends(get_user_repository),
):
    """Return the caller's profile (never includes the password hash)."""
    user = users.get(user_id)
    if user is None:
        raise NotFound("User Not Found")
    return user


@app.put("/api/me")
def update_me(
    body: UpdateProfileRequest,
    user_id: str = Depends(get_current_user_id),
    users: UserRepository = Depends(get_user_repository),
):
    """Update the caller's display name and/or email."""
    user = users.update_profile(user_id, display_name=body.display_name, email=body.email)
    if user is None:
        raise NotFound("User Not Found")
    return Response(status_code=200)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=5000)
