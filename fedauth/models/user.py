"""User data model for fedauth."""

from datetime import datetime
from typing import Dict, Optional
from pydantic import BaseModel, Field


def normalize_email(email: Optional[str]) -> Optional[str]:
    """Lowercase and trim an email; empty values become None."""
    if not email:
        return None
    email = email.strip().lower()
    return email or None


class User(BaseModel):
    """Canonical local identity.

    The password hash is not part of this model: it lives only in
    the database row and is never returned to callers.
    """
    
    id: str = Field(..., description="Unique user identifier")
    email: Optional[str] = Field(None, description="Lowercase email address")
    display_name: Optional[str] = Field(None, alias="displayName", description="User display name")
    picture: Optional[str] = Field(None, description="Avatar URL")
    linked_providers: Dict[str, str] = Field(
        default_factory=dict,
        alias="linkedProviders",
        description="Provider name -> provider user id",
    )
    created_at: datetime = Field(..., alias="createdAt", description="User creation timestamp")
    updated_at: datetime = Field(..., alias="updatedAt", description="User last update timestamp")
    
    class Config:
        """Pydantic configuration."""
        populate_by_name = True

    def is_linked(self, provider: str, provider_user_id: str) -> bool:
        return self.linked_providers.get(provider) == provider_user_id
