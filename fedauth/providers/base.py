"""Shared contract and HTTP plumbing for identity provider adapters.

Every adapter performs the same two steps:

1. `exchange_code` - trade the one-time authorization code for an access grant
2. `fetch_profile` - call the provider's identity endpoint and map the payload
   onto `NormalizedProfile`

Any transport failure, timeout, non-2xx status or error payload becomes a
`ProviderError`; adapters never hand back a partially-populated profile.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl

import requests
from pydantic import ValidationError

from fedauth.config import ProviderCredentials
from fedauth.exceptions import ProviderError
from fedauth.models.profile import NormalizedProfile

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass
class AccessGrant:
    """Credential returned by a provider's token endpoint."""

    access_token: str
    token_secret: Optional[str] = None  # OAuth1 only
    raw: Dict[str, Any] = field(default_factory=dict)


def error_message(payload: Any) -> Optional[str]:
    """Extract a provider-reported error message, if the payload carries one."""
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if isinstance(error, dict):
        return error.get("message") or "Provider reported an error"
    if payload.get("error_description"):
        return str(payload["error_description"])
    if error:
        return str(error)
    errors = payload.get("errors")
    if isinstance(errors, list) and errors:
        first = errors[0]
        if isinstance(first, dict):
            return first.get("message") or "Provider reported an error"
        return str(first)
    return None


class ProviderAdapter(ABC):
    """Base class for one external identity provider."""

    name: str = ""
    oauth_version: int = 2

    def __init__(self, credentials: Optional[ProviderCredentials] = None, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.credentials = credentials or ProviderCredentials()
        self.timeout = timeout

    @abstractmethod
    def exchange_code(self, code: str, client_id: Optional[str], redirect_uri: Optional[str]) -> AccessGrant:
        """Exchange an authorization code for an access grant."""

    @abstractmethod
    def fetch_profile(self, grant: AccessGrant) -> NormalizedProfile:
        """Fetch and normalize the authenticated user's profile."""

    # Credentials

    def client_id_for(self, requested: Optional[str]) -> str:
        """Configured client id wins; otherwise use the one the client sent."""
        client_id = self.credentials.client_id or requested
        if not client_id:
            raise ProviderError(self.name, "clientId is required", 400)
        return client_id

    @property
    def client_secret(self) -> str:
        if not self.credentials.client_secret:
            raise ProviderError(self.name, f"{self.name} login is not configured on this server")
        return self.credentials.client_secret

    # HTTP

    def _get(self, url: str, **kwargs) -> requests.Response:
        return self._send("get", url, **kwargs)

    def _post(self, url: str, **kwargs) -> requests.Response:
        return self._send("post", url, **kwargs)

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        send = requests.get if method == "get" else requests.post
        try:
            return send(url, timeout=self.timeout, **kwargs)
        except requests.Timeout as e:
            logger.warning(f"{self.name}: {method.upper()} {url} timed out after {self.timeout}s")
            raise ProviderError(self.name, "Request to provider timed out") from e
        except requests.RequestException as e:
            logger.warning(f"{self.name}: {method.upper()} {url} failed: {type(e).__name__}")
            raise ProviderError(self.name, f"Request to provider failed: {e}") from e

    def _fail(self, response: requests.Response, message: Optional[str], rejection_status: int):
        status = response.status_code
        # Upstream 5xx is never the caller's fault.
        http_status = rejection_status if status < 500 else 500
        logger.warning(f"{self.name}: provider returned HTTP {status}: {message}")
        raise ProviderError(self.name, message or f"Provider returned HTTP {status}", http_status)

    def _read_json(self, response: requests.Response, rejection_status: int = 500) -> Dict[str, Any]:
        try:
            payload = response.json()
        except ValueError:
            payload = None

        message = error_message(payload)
        if not response.ok or message:
            self._fail(response, message, rejection_status)
        if not isinstance(payload, dict):
            raise ProviderError(self.name, "Provider returned an unreadable response")
        return payload

    def _read_form(self, response: requests.Response, rejection_status: int = 500) -> Dict[str, str]:
        """Parse an `application/x-www-form-urlencoded` body (GitHub, OAuth1)."""
        payload = dict(parse_qsl(response.text or ""))
        message = error_message(payload)
        if not response.ok or message:
            self._fail(response, message, rejection_status)
        return payload

    def _require_access_token(self, payload: Dict[str, Any], key: str = "access_token") -> str:
        token = payload.get(key)
        if not token:
            raise ProviderError(self.name, "Provider did not return an access token")
        return token

    def _bearer(self, grant: AccessGrant) -> Dict[str, str]:
        return {"Authorization": f"Bearer {grant.access_token}"}

    def _profile(self, **fields) -> NormalizedProfile:
        try:
            return NormalizedProfile(**fields)
        except ValidationError as e:
            raise ProviderError(self.name, "Provider profile is missing the user id") from e


def full_name(first: Optional[str], last: Optional[str]) -> Optional[str]:
    name = " ".join(part for part in (first, last) if part)
    return name or None
