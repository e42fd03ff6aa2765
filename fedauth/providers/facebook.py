"""Facebook login via the Graph API."""

from fedauth.providers.base import AccessGrant, ProviderAdapter

TOKEN_URL = "https://graph.facebook.com/v2.5/oauth/access_token"
PROFILE_URL = "https://graph.facebook.com/v2.5/me"
PROFILE_FIELDS = ["id", "email", "first_name", "last_name", "link", "name", "picture.type(large)"]


class FacebookAdapter(ProviderAdapter):
    """Query-string token request; Graph `me` with an explicit field list."""

    name = "facebook"

    def exchange_code(self, code, client_id, redirect_uri):
        params = {
            "code": code,
            "client_id": self.client_id_for(client_id),
            "client_secret": self.client_secret,
            "redirect_uri": redirect_uri,
        }
        payload = self._read_json(self._get(TOKEN_URL, params=params), rejection_status=400)
        return AccessGrant(access_token=self._require_access_token(payload), raw=payload)

    def fetch_profile(self, grant):
        params = {"access_token": grant.access_token, "fields": ",".join(PROFILE_FIELDS)}
        profile = self._read_json(self._get(PROFILE_URL, params=params))
        picture = (profile.get("picture") or {}).get("data") or {}
        return self._profile(
            provider_id=profile.get("id"),
            email=profile.get("email"),
            display_name=profile.get("name"),
            picture_url=picture.get("url"),
        )
