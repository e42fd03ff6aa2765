"""Request/response models for authentication endpoints."""

from typing import Optional
from pydantic import BaseModel, Field


class _CamelModel(BaseModel):
    class Config:
        populate_by_name = True


class LoginRequest(_CamelModel):
    """Request model for email/password login."""
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class SignupRequest(_CamelModel):
    """Request model for local account creation."""
    display_name: str = Field(..., alias="displayName")
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ProviderLoginRequest(_CamelModel):
    """Request model for POST /auth/{provider}.

    OAuth2 providers need `code`; Twitter's first call sends only `redirectUri`
    and its second call sends `oauth_token` and `oauth_verifier`.
    """
    code: Optional[str] = Field(None, description="One-time authorization code")
    client_id: Optional[str] = Field(None, alias="clientId")
    redirect_uri: Optional[str] = Field(None, alias="redirectUri")
    oauth_token: Optional[str] = None
    oauth_verifier: Optional[str] = None


class UnlinkRequest(_CamelModel):
    provider: str = Field(..., min_length=1)


class UpdateProfileRequest(_CamelModel):
    display_name: Optional[str] = Field(None, alias="displayName")
    email: Optional[str] = None


class TokenResponse(BaseModel):
    """Response model for every successful login."""
    token: str
