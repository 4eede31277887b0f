"""Google OpenID Connect login."""

import httpx

from core.exceptions import ProviderRejectedError
from domain.entities.identity import ProviderIdentity
from infrastructure.auth.providers.base import OAuthProvider, ProviderCallback

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


class GoogleProvider(OAuthProvider):
    """Exchanges a Google authorization code for the user's OIDC profile."""

    name = "google"
    authorize_endpoint = GOOGLE_AUTHORIZE_URL
    scopes = ("openid", "email", "profile")

    async def _exchange_code(self, client: httpx.AsyncClient, callback: ProviderCallback) -> str:
        data = await self._request_json(
            client,
            "POST",
            GOOGLE_TOKEN_URL,
            data={
                "code": callback.code,
                "client_id": self._client_id,
                "client_secret": self._client_secret,
                "redirect_uri": callback.redirect_uri,
                "grant_type": "authorization_code",
            },
        )
        access_token = data.get("access_token") if isinstance(data, dict) else None
        if not access_token:
            raise ProviderRejectedError(self.name, "Google did not issue an access token")
        return str(access_token)

    async def _fetch_identity(
        self, client: httpx.AsyncClient, access_token: str
    ) -> ProviderIdentity:
        info = await self._request_json(
            client,
            "GET",
            GOOGLE_USERINFO_URL,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        if not isinstance(info, dict):
            raise ProviderRejectedError(self.name, "Google returned an unexpected profile")
        if info.get("email_verified") is False:
            raise ProviderRejectedError(self.name, "Google account email is not verified")
        return self._build_identity(
            subject=info.get("sub"),
            email=info.get("email"),
            display_name=info.get("name"),
            avatar_url=info.get("picture"),
        )
