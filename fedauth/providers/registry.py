"""Lookup table of supported identity providers."""

from typing import Dict, Iterable, List

from fedauth.config import Settings
from fedauth.exceptions import UnknownProvider
from fedauth.providers.base import ProviderAdapter
from fedauth.providers.bitbucket import BitbucketAdapter
from fedauth.providers.facebook import FacebookAdapter
from fedauth.providers.foursquare import FoursquareAdapter
from fedauth.providers.github import GitHubAdapter
from fedauth.providers.google import GoogleAdapter
from fedauth.providers.linkedin import LinkedInAdapter
from fedauth.providers.spotify import SpotifyAdapter
from fedauth.providers.twitch import TwitchAdapter
from fedauth.providers.twitter import TwitterAdapter
from fedauth.providers.yahoo import YahooAdapter

ADAPTER_CLASSES = [
    GoogleAdapter,
    GitHubAdapter,
    LinkedInAdapter,
    FacebookAdapter,
    YahooAdapter,
    TwitterAdapter,
    FoursquareAdapter,
    TwitchAdapter,
    BitbucketAdapter,
    SpotifyAdapter,
]


class ProviderRegistry:
    """Adapters keyed by provider name; the keys are the supported set."""

    def __init__(self, adapters: Iterable[ProviderAdapter]):
        self._adapters: Dict[str, ProviderAdapter] = {adapter.name: adapter for adapter in adapters}

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderRegistry":
        return cls(
            adapter_cls(settings.credentials_for(adapter_cls.name), timeout=settings.provider_timeout_seconds)
            for adapter_cls in ADAPTER_CLASSES
        )

    def get(self, name: str) -> ProviderAdapter:
        """Raises UnknownProvider if `name` is not supported."""
        adapter = self._adapters.get(name)
        if adapter is None:
            raise UnknownProvider(name)
        return adapter

    def __contains__(self, name: str) -> bool:
        return name in self._adapters

    @property
    def names(self) -> List[str]:
        return sorted(self._adapters)
