"""Data models for fedauth."""

from fedauth.models.user import User, normalize_email
from fedauth.models.profile import NormalizedProfile

__all__ = [
    "User",
    "normalize_email",
    "NormalizedProfile",
]
