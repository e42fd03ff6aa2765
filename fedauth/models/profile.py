"""Normalized profile produced by every provider adapter."""

from typing import Optional
from pydantic import BaseModel, Field, field_validator

from fedauth.models.user import normalize_email


class NormalizedProfile(BaseModel):
    """Provider profile mapped onto the canonical shape.

    Email is optional: several providers never return one.
    """

    provider_id: str = Field(..., description="User id at the provider")
    email: Optional[str] = Field(None, description="Email reported by the provider")
    display_name: Optional[str] = Field(None, description="Display name reported by the provider")
    picture_url: Optional[str] = Field(None, description="Avatar URL reported by the provider")

    @field_validator("provider_id", mode="before")
    @classmethod
    def _stringify_id(cls, value):
        # GitHub, Twitter and others send numeric ids.
        if value is None or value == "":
            raise ValueError("provider_id is required")
        return str(value)

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value):
        return normalize_email(value)
