"""Yahoo OAuth2 login."""

from fedauth.exceptions import ProviderError
from fedauth.providers.base import AccessGrant, ProviderAdapter

TOKEN_URL = "https://api.login.yahoo.com/oauth2/get_token"
PROFILE_URL = "https://social.yahooapis.com/v1/user/{guid}/profile"


class YahooAdapter(ProviderAdapter):
    """Basic-auth client credentials; the profile URL needs the user's GUID
    from the token response. Yahoo does not share an email here.
    """

    name = "yahoo"

    def exchange_code(self, code, client_id, redirect_uri):
        data = {
            "code": code,
            "redirect_uri": redirect_uri,
            "grant_type": "authorization_code",
        }
        auth = (self.client_id_for(client_id), self.client_secret)
        payload = self._read_json(self._post(TOKEN_URL, data=data, auth=auth), rejection_status=400)
        if not payload.get("xoauth_yahoo_guid"):
            raise ProviderError(self.name, "Provider did not return a user GUID")
        return AccessGrant(access_token=self._require_access_token(payload), raw=payload)

    def fetch_profile(self, grant):
        url = PROFILE_URL.format(guid=grant.raw["xoauth_yahoo_guid"])
        body = self._read_json(self._get(url, params={"format": "json"}, headers=self._bearer(grant)))
        profile = body.get("profile") or {}
        return self._profile(
            provider_id=profile.get("guid"),
            display_name=profile.get("nickname"),
        )
