"""GitHub OAuth login."""

import httpx

from core.exceptions import ProviderRejectedError
from domain.entities.identity import ProviderIdentity
from infrastructure.auth.providers.base import OAuthProvider, ProviderCallback

GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_API_URL = "https://api.github.com"


class GitHubProvider(OAuthProvider):
    """Exchanges a GitHub authorization code for the account profile.

    GitHub omits ``email`` from ``/user`` when the address is private, in
    which case the primary verified address comes from ``/user/emails``.
    """

    name = "github"
    authorize_endpoint = GITHUB_AUTHORIZE_URL
    scopes = ("read:user", "user:email")

    async def _exchange_code(self, client: httpx.AsyncClient, callback: ProviderCallback) -> str:
        data = await self._request_json(
            client,
            "POST",
            GITHUB_TOKEN_URL,
            data={
                "code": callback.code,
                "client_id": self._client_id,
                "client_secret": self._client_secret,
                "redirect_uri": callback.redirect_uri,
            },
            headers={"Accept": "application/json"},
        )
        # GitHub reports bad or expired codes with a 200 and an error field
        if not isinstance(data, dict) or data.get("error"):
            reason = data.get("error_description") if isinstance(data, dict) else None
            raise ProviderRejectedError(self.name, reason or "GitHub rejected the code")
        access_token = data.get("access_token")
        if not access_token:
            raise ProviderRejectedError(self.name, "GitHub did not issue an access token")
        return str(access_token)

    async def _fetch_identity(
        self, client: httpx.AsyncClient, access_token: str
    ) -> ProviderIdentity:
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/vnd.github+json",
        }
        user = await self._request_json(client, "GET", f"{GITHUB_API_URL}/user", headers=headers)
        if not isinstance(user, dict):
            raise ProviderRejectedError(self.name, "GitHub returned an unexpected profile")

        email = user.get("email")
        if not email:
            emails = await self._request_json(
                client, "GET", f"{GITHUB_API_URL}/user/emails", headers=headers
            )
            email = next(
                (
                    entry.get("email")
                    for entry in (emails if isinstance(emails, list) else [])
                    if isinstance(entry, dict) and entry.get("primary") and entry.get("verified")
                ),
                None,
            )

        return self._build_identity(
            subject=user.get("id"),
            email=email,
            display_name=user.get("name") or user.get("login"),
            avatar_url=user.get("avatar_url"),
        )
