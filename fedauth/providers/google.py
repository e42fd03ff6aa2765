"""Google OAuth2 login."""

from fedauth.providers.base import AccessGrant, ProviderAdapter

TOKEN_URL = "https://www.googleapis.com/oauth2/v4/token"
PROFILE_URL = "https://www.googleapis.com/oauth2/v2/userinfo"


class GoogleAdapter(ProviderAdapter):
    """Form-encoded token request with body credentials; Bearer profile call."""

    name = "google"

    def exchange_code(self, code, client_id, redirect_uri):
        data = {
            "code": code,
            "client_id": self.client_id_for(client_id),
            "client_secret": self.client_secret,
            "redirect_uri": redirect_uri,
            "grant_type": "authorization_code",
        }
        payload = self._read_json(self._post(TOKEN_URL, data=data), rejection_status=400)
        return AccessGrant(access_token=self._require_access_token(payload), raw=payload)

    def fetch_profile(self, grant):
        profile = self._read_json(self._get(PROFILE_URL, headers=self._bearer(grant)))
        picture = profile.get("picture")
        if picture:
            # Ask for a larger avatar than the default thumbnail.
            picture = picture.replace("sz=50", "sz=200")
        return self._profile(
            provider_id=profile.get("id"),
            email=profile.get("email"),
            display_name=profile.get("name"),
            picture_url=picture,
        )
