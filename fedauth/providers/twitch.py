"""Twitch OAuth2 login."""

from fedauth.providers.base import AccessGrant, ProviderAdapter

TOKEN_URL = "https://api.twitch.tv/kraken/oauth2/token"
PROFILE_URL = "https://api.twitch.tv/kraken/user"


class TwitchAdapter(ProviderAdapter):
    name = "twitch"

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
        profile = self._read_json(self._get(PROFILE_URL, params={"oauth_token": grant.access_token}))
        return self._profile(
            provider_id=profile.get("_id"),
            email=profile.get("email"),
            display_name=profile.get("name"),
            picture_url=profile.get("logo"),
        )
