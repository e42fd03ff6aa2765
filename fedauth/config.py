"""Runtime configuration for fedauth, read from the environment."""

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEV_TOKEN_SECRET = "change-me-in-production"

# Provider name -> (client id env var, client secret env var)
PROVIDER_ENV_KEYS: Dict[str, tuple] = {
    "google": ("GOOGLE_CLIENT_ID", "GOOGLE_SECRET"),
    "github": ("GITHUB_CLIENT_ID", "GITHUB_SECRET"),
    "linkedin": ("LINKEDIN_CLIENT_ID", "LINKEDIN_SECRET"),
    "facebook": ("FACEBOOK_CLIENT_ID", "FACEBOOK_SECRET"),
    "yahoo": ("YAHOO_CLIENT_ID", "YAHOO_SECRET"),
    "twitter": ("TWITTER_KEY", "TWITTER_SECRET"),
    "foursquare": ("FOURSQUARE_CLIENT_ID", "FOURSQUARE_SECRET"),
    "twitch": ("TWITCH_CLIENT_ID", "TWITCH_SECRET"),
    "bitbucket": ("BITBUCKET_CLIENT_ID", "BITBUCKET_SECRET"),
    "spotify": ("SPOTIFY_CLIENT_ID", "SPOTIFY_SECRET"),
}


@dataclass(frozen=True)
class ProviderCredentials:
    """Client id/secret pair registered with one identity provider."""

    client_id: Optional[str] = None
    client_secret: Optional[str] = None


@dataclass(frozen=True)
class Settings:
    token_secret: str = DEV_TOKEN_SECRET
    token_algorithm: str = "HS256"
    token_lifetime_days: int = 14
    provider_timeout_seconds: float = 10.0
    cors_origins: str = "*"
    providers: Dict[str, ProviderCredentials] = field(default_factory=dict)

    def credentials_for(self, provider: str) -> ProviderCredentials:
        return self.providers.get(provider, ProviderCredentials())


def _env(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    return value or None


def load_settings() -> Settings:
    """Build Settings from the process environment (and .env, if present)."""
    load_dotenv()

    token_secret = _env("TOKEN_SECRET")
    if not token_secret:
        logger.warning("TOKEN_SECRET is not set - using the development secret")
        token_secret = DEV_TOKEN_SECRET

    providers = {
        name: ProviderCredentials(client_id=_env(id_key), client_secret=_env(secret_key))
        for name, (id_key, secret_key) in PROVIDER_ENV_KEYS.items()
    }

    return Settings(
        token_secret=token_secret,
        token_algorithm=os.getenv("TOKEN_ALGORITHM", "HS256"),
        token_lifetime_days=int(os.getenv("TOKEN_LIFETIME_DAYS", "14")),
        provider_timeout_seconds=float(os.getenv("PROVIDER_TIMEOUT_SEC", "10")),
        cors_origins=os.getenv("CORS_ORIGINS", "*"),
        providers=providers,
    )


@lru_cache()
def get_settings() -> Settings:
    """Cached settings (FastAPI dependency)."""
    return load_settings()
