"""Bitbucket OAuth2 login."""

from typing import Any, Dict, List, Optional

from fedauth.providers.base import AccessGrant, ProviderAdapter

TOKEN_URL = "https://bitbucket.org/site/oauth2/access_token"
PROFILE_URL = "https://bitbucket.org/api/2.0/user"
EMAILS_URL = "https://bitbucket.org/api/2.0/user/emails"


def pick_email(values: List[Dict[str, Any]]) -> Optional[str]:
    """Primary address if flagged, otherwise the first one listed."""
    for entry in values:
        if entry.get("is_primary") and entry.get("email"):
            return entry["email"]
    for entry in values:
        if entry.get("email"):
            return entry["email"]
    return None


class BitbucketAdapter(ProviderAdapter):
    """Basic-auth client credentials. Email lives behind a separate endpoint,
    so the profile step makes two calls.
    """

    name = "bitbucket"

    def exchange_code(self, code, client_id, redirect_uri):
        data = {
            "code": code,
            "redirect_uri": redirect_uri,
            "grant_type": "authorization_code",
        }
        auth = (self.client_id_for(client_id), self.client_secret)
        payload = self._read_json(self._post(TOKEN_URL, data=data, auth=auth), rejection_status=400)
        return AccessGrant(access_token=self._require_access_token(payload), raw=payload)

    def fetch_profile(self, grant):
        params = {"access_token": grant.access_token}
        profile = self._read_json(self._get(PROFILE_URL, params=params))
        emails = self._read_json(self._get(EMAILS_URL, params=params))
        avatar = ((profile.get("links") or {}).get("avatar") or {}).get("href")
        return self._profile(
            provider_id=profile.get("uuid"),
            email=pick_email(emails.get("values") or []),
            display_name=profile.get("display_name"),
            picture_url=avatar,
        )
