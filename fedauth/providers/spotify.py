"""Spotify OAuth2 login."""

from fedauth.providers.base import AccessGrant, ProviderAdapter

TOKEN_URL = "https://accounts.spotify.com/api/token"
PROFILE_URL = "https://api.spotify.com/v1/me"


class SpotifyAdapter(ProviderAdapter):
    name = "spotify"

    def exchange_code(self, code, client_id, redirect_uri):
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
        }
        auth = (self.client_id_for(client_id), self.client_secret)
        payload = self._read_json(self._post(TOKEN_URL, data=data, auth=auth), rejection_status=400)
        return AccessGrant(access_token=self._require_access_token(payload), raw=payload)

    def fetch_profile(self, grant):
        profile = self._read_json(self._get(PROFILE_URL, headers=self._bearer(grant)))
        images = profile.get("images") or []
        return self._profile(
            provider_id=profile.get("id"),
            email=profile.get("email"),
            display_name=profile.get("display_name") or profile.get("id"),
            picture_url=images[0].get("url") if images else None,
        )
