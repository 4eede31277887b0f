"""Identity provider protocol and shared OAuth exchange plumbing."""

import logging
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import urlencode

import httpx

from core.exceptions import ProviderRejectedError, ProviderUnreachableError
from domain.entities.identity import ProviderIdentity, normalize_email

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderCallback:
    """Data a provider hands back to the callback route."""

    code: str
    redirect_uri: str


class IIdentityProvider(Protocol):
    """Protocol for third-party login providers."""

    name: str

    def authorization_url(self, state: str, redirect_uri: str) -> str:
        """Build the provider consent URL the browser is redirected to."""
        ...

    async def exchange(self, callback: ProviderCallback) -> ProviderIdentity:
        """
        Exchange callback data for a normalized identity.

        Raises:
            ProviderRejectedError: Provider denied or expired the exchange
            ProviderUnreachableError: Network failure, timeout or provider 5xx
        """
        ...


class OAuthProvider:
    """Authorization-code flow shared by the concrete providers."""

    name: str = ""
    authorize_endpoint: str = ""
    scopes: tuple[str, ...] = ()

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._timeout = timeout
        self._transport = transport

    def authorization_url(self, state: str, redirect_uri: str) -> str:
        params = {
            "client_id": self._client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.scopes),
            "state": state,
        }
        return f"{self.authorize_endpoint}?{urlencode(params)}"

    async def exchange(self, callback: ProviderCallback) -> ProviderIdentity:
        if not callback.code:
            raise ProviderRejectedError(self.name, "Missing authorization code")

        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport
        ) as client:
            access_token = await self._exchange_code(client, callback)
            identity = await self._fetch_identity(client, access_token)

        logger.info("Completed %s exchange for subject %s", self.name, identity.provider_subject)
        return identity

    async def _exchange_code(self, client: httpx.AsyncClient, callback: ProviderCallback) -> str:
        raise NotImplementedError

    async def _fetch_identity(
        self, client: httpx.AsyncClient, access_token: str
    ) -> ProviderIdentity:
        raise NotImplementedError

    async def _request_json(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> Any:
        """Send a request and map transport and status failures to provider errors."""
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException:
            logger.warning("%s timed out calling %s", self.name, url)
            raise ProviderUnreachableError(self.name)
        except httpx.TransportError:
            logger.warning("%s transport failure calling %s", self.name, url, exc_info=True)
            raise ProviderUnreachableError(self.name)

        if response.status_code >= 500:
            logger.warning("%s returned %d from %s", self.name, response.status_code, url)
            raise ProviderUnreachableError(self.name)
        if response.status_code >= 400:
            raise ProviderRejectedError(
                self.name, f"Provider responded with {response.status_code}"
            )

        try:
            return response.json()
        except ValueError:
            raise ProviderRejectedError(self.name, "Provider returned an unreadable response")

    def _build_identity(
        self,
        subject: Any,
        email: str | None,
        display_name: str | None,
        avatar_url: str | None,
    ) -> ProviderIdentity:
        """Normalize provider fields; an identity without email is rejected."""
        normalized_email = normalize_email(email)
        if subject in (None, "") or not normalized_email:
            raise ProviderRejectedError(
                self.name, "Provider did not return a usable identity"
            )
        name = display_name.strip() if display_name else None
        return ProviderIdentity(
            provider=self.name,
            provider_subject=str(subject).strip(),
            email=normalized_email,
            display_name=name or None,
            avatar_url=avatar_url or None,
        )
