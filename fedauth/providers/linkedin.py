"""LinkedIn OAuth2 login."""

from fedauth.providers.base import AccessGrant, ProviderAdapter, full_name

TOKEN_URL = "https://www.linkedin.com/uas/oauth2/accessToken"
PROFILE_URL = "https://api.linkedin.com/v1/people/~:(id,first-name,last-name,email-address,picture-url)"


class LinkedInAdapter(ProviderAdapter):
    name = "linkedin"

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
        params = {"oauth2_access_token": grant.access_token, "format": "json"}
        profile = self._read_json(self._get(PROFILE_URL, params=params))
        return self._profile(
            provider_id=profile.get("id"),
            email=profile.get("emailAddress"),
            display_name=full_name(profile.get("firstName"), profile.get("lastName")),
            picture_url=profile.get("pictureUrl"),
        )
