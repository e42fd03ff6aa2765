"""GitHub OAuth login."""

from fedauth.providers.base import AccessGrant, ProviderAdapter

TOKEN_URL = "https://github.com/login/oauth/access_token"
PROFILE_URL = "https://api.github.com/user"
USER_AGENT = "fedauth"


class GitHubAdapter(ProviderAdapter):
    """Query-string token request answered with a form-encoded body."""

    name = "github"

    def exchange_code(self, code, client_id, redirect_uri):
        params = {
            "code": code,
            "client_id": self.client_id_for(client_id),
            "client_secret": self.client_secret,
            "redirect_uri": redirect_uri,
        }
        payload = self._read_form(self._get(TOKEN_URL, params=params), rejection_status=400)
        return AccessGrant(access_token=self._require_access_token(payload), raw=payload)

    def fetch_profile(self, grant):
        headers = {
            # GitHub rejects API requests without a User-Agent.
            "User-Agent": USER_AGENT,
            "Authorization": f"token {grant.access_token}",
        }
        profile = self._read_json(self._get(PROFILE_URL, headers=headers))
        return self._profile(
            provider_id=profile.get("id"),
            email=profile.get("email"),
            display_name=profile.get("name") or profile.get("login"),
            picture_url=profile.get("avatar_url"),
        )
