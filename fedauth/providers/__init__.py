"""Identity provider adapters."""

from fedauth.providers.base import AccessGrant, ProviderAdapter
from fedauth.providers.registry import ProviderRegistry

__all__ = [
    "AccessGrant",
    "ProviderAdapter",
    "ProviderRegistry",
]
