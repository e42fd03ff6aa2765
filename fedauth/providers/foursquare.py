"""Foursquare OAuth2 login."""

from fedauth.providers.base import AccessGrant, ProviderAdapter, full_name

TOKEN_URL = "https://foursquare.com/oauth2/access_token"
PROFILE_URL = "https://api.foursquare.com/v2/users/self"
API_VERSION = "20140806"


class FoursquareAdapter(ProviderAdapter):
    name = "foursquare"

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
        params = {"v": API_VERSION, "oauth_token": grant.access_token}
        body = self._read_json(self._get(PROFILE_URL, params=params))
        profile = (body.get("response") or {}).get("user") or {}
        photo = profile.get("photo") or {}
        picture = None
        if photo.get("prefix") and photo.get("suffix"):
            picture = photo["prefix"] + "300x300" + photo["suffix"]
        return self._profile(
            provider_id=profile.get("id"),
            display_name=full_name(profile.get("firstName"), profile.get("lastName")),
            picture_url=picture,
        )
