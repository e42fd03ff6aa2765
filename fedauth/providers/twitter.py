"""Twitter login (OAuth 1.0a, three-legged).

Unlike the OAuth2 providers this takes two round trips from the client:

1. `request_token` - obtain a request token; the client opens Twitter's
   authorization screen with it
2. `exchange_code` - trade the authorized request token plus the
   `oauth_verifier` for an access token and secret

Make sure "Request email addresses from users" is enabled for the Twitter app,
otherwise `verify_credentials` never includes an email.
"""

from typing import Dict, Optional

from requests_oauthlib import OAuth1

from fedauth.exceptions import ProviderError
from fedauth.providers.base import AccessGrant, ProviderAdapter

REQUEST_TOKEN_URL = "https://api.twitter.com/oauth/request_token"
ACCESS_TOKEN_URL = "https://api.twitter.com/oauth/access_token"
PROFILE_URL = "https://api.twitter.com/1.1/account/verify_credentials.json"


class TwitterAdapter(ProviderAdapter):
    name = "twitter"
    oauth_version = 1

    @property
    def consumer_key(self) -> str:
        # Never taken from the request.
        if not self.credentials.client_id:
            raise ProviderError(self.name, f"{self.name} login is not configured on this server")
        return self.credentials.client_id

    def _consumer(self, **kwargs) -> OAuth1:
        return OAuth1(self.consumer_key, client_secret=self.client_secret, **kwargs)

    def request_token(self, redirect_uri: Optional[str]) -> Dict[str, str]:
        """Step 1: returns `oauth_token`, `oauth_token_secret`, `oauth_callback_confirmed`."""
        auth = self._consumer(callback_uri=redirect_uri)
        payload = self._read_form(self._post(REQUEST_TOKEN_URL, auth=auth), rejection_status=400)
        self._require_access_token(payload, key="oauth_token")
        return payload

    def exchange_code(self, code, client_id, redirect_uri, oauth_token: Optional[str] = None):
        """Step 2: `code` is the `oauth_verifier` from the authorization redirect."""
        if not oauth_token or not code:
            raise ProviderError(self.name, "oauth_token and oauth_verifier are required", 400)
        auth = self._consumer(resource_owner_key=oauth_token, verifier=code)
        payload = self._read_form(self._post(ACCESS_TOKEN_URL, auth=auth), rejection_status=400)
        return AccessGrant(
            access_token=self._require_access_token(payload, key="oauth_token"),
            token_secret=payload.get("oauth_token_secret"),
            raw=payload,
        )

    def fetch_profile(self, grant):
        auth = self._consumer(
            resource_owner_key=grant.access_token,
            resource_owner_secret=grant.token_secret,
        )
        profile = self._read_json(self._get(PROFILE_URL, params={"include_email": "true"}, auth=auth))
        picture = profile.get("profile_image_url_https")
        if picture:
            # Drop the size suffix to get the original-size avatar.
            picture = picture.replace("_normal", "")
        return self._profile(
            provider_id=profile.get("id_str") or profile.get("id"),
            email=profile.get("email"),
            display_name=profile.get("name"),
            picture_url=picture,
        )
