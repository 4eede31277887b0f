"""Integration tests for provider login and session endpoints."""

from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, urlparse

import pytest
from httpx import AsyncClient

from core.exceptions import ProviderUnreachableError
from domain.entities.identity import ProviderIdentity, SessionIdentity
from infrastructure.auth.credential_codec import CredentialCodec
from infrastructure.auth.providers.base import IIdentityProvider, ProviderCallback


class FakeProvider:
    """In-process provider that accepts one code."""

    def __init__(self, name: str, identity: ProviderIdentity, error: Exception | None = None):
        self.name = name
        self._identity = identity
        self._error = error

    def authorization_url(self, state: str, redirect_uri: str) -> str:
        return f"https://{self.name}.example/authorize?state={state}&redirect_uri={redirect_uri}"

    async def exchange(self, callback: ProviderCallback) -> ProviderIdentity:
        if self._error is not None:
            raise self._error
        return self._identity


@pytest.fixture
def google(providers: dict[str, IIdentityProvider]) -> FakeProvider:
    provider = FakeProvider(
        "google",
        ProviderIdentity(
            provider="google",
            provider_subject="sub-1",
            email="grace@example.com",
            display_name="Grace Hopper",
        ),
    )
    providers["google"] = provider
    return provider


async def _start(client: AsyncClient, provider: str) -> str:
    response = await client.get(f"/auth/{provider}")
    assert response.status_code == 307
    return parse_qs(urlparse(response.headers["location"]).query)["state"][0]


async def _login(client: AsyncClient, provider: str = "google") -> dict:
    state = await _start(client, provider)
    response = await client.get(
        f"/auth/{provider}/callback",
        params={"code": "good-code", "state": state},
        headers={"Cookie": f"oauth_state={state}"},
    )
    assert response.status_code == 200, response.text
    return response.json()


class TestLoginFlow:
    @pytest.mark.asyncio
    async def test_start_redirects_and_sets_state_cookie(
        self, api_client: AsyncClient, google: FakeProvider
    ):
        response = await api_client.get("/auth/google")

        assert response.status_code == 307
        assert response.headers["location"].startswith("https://google.example/authorize")
        assert "oauth_state=" in response.headers["set-cookie"]

    @pytest.mark.asyncio
    async def test_unknown_provider_is_404(self, api_client: AsyncClient):
        response = await api_client.get("/auth/myspace")

        assert response.status_code == 404
        assert response.json()["error_code"] == "UNKNOWN_PROVIDER"

    @pytest.mark.asyncio
    async def test_callback_issues_credential(
        self, api_client: AsyncClient, google: FakeProvider
    ):
        body = await _login(api_client)

        assert body["token_type"] == "bearer"
        assert body["user"]["email"] == "grace@example.com"
        assert body["user"]["display_name"] == "Grace Hopper"
        assert body["user"]["provider"] == "google"

    @pytest.mark.asyncio
    async def test_state_mismatch_is_rejected(
        self, api_client: AsyncClient, google: FakeProvider
    ):
        await _start(api_client, "google")

        response = await api_client.get(
            "/auth/google/callback",
            params={"code": "good-code", "state": "forged"},
            headers={"Cookie": "oauth_state=original"},
        )

        assert response.status_code == 401
        assert response.json()["error_code"] == "PROVIDER_REJECTED"

    @pytest.mark.asyncio
    async def test_provider_error_param_is_rejected(
        self, api_client: AsyncClient, google: FakeProvider
    ):
        response = await api_client.get(
            "/auth/google/callback", params={"error": "access_denied"}
        )

        assert response.status_code == 401
        assert response.json()["retryable"] is False

    @pytest.mark.asyncio
    async def test_unreachable_provider_is_retryable(
        self, api_client: AsyncClient, providers: dict[str, IIdentityProvider]
    ):
        providers["github"] = FakeProvider(
            "github",
            ProviderIdentity(provider="github", provider_subject="1", email="x@example.com"),
            error=ProviderUnreachableError("github"),
        )
        state = await _start(api_client, "github")

        response = await api_client.get(
            "/auth/github/callback",
            params={"code": "c", "state": state},
            headers={"Cookie": f"oauth_state={state}"},
        )

        assert response.status_code == 503
        assert response.json()["error_code"] == "PROVIDER_UNREACHABLE"
        assert response.json()["retryable"] is True


class TestSession:
    @pytest.mark.asyncio
    async def test_me_with_issued_credential(
        self, api_client: AsyncClient, google: FakeProvider
    ):
        token = (await _login(api_client))["access_token"]

        response = await api_client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json()["email"] == "grace@example.com"

    @pytest.mark.asyncio
    async def test_me_without_credential_is_401(self, api_client: AsyncClient):
        response = await api_client.get("/auth/me")

        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_altered_signature_is_401_invalid_signature(
        self, api_client: AsyncClient, google: FakeProvider
    ):
        token = (await _login(api_client))["access_token"]
        header, payload, signature = token.split(".")
        altered = f"{header}.{payload}.{'A' if signature[0] != 'A' else 'B'}{signature[1:]}"

        response = await api_client.get(
            "/auth/me", headers={"Authorization": f"Bearer {altered}"}
        )

        assert response.status_code == 401
        assert response.json()["error_code"] == "INVALID_SIGNATURE"
        assert response.headers["www-authenticate"] == 'Bearer error="invalid_signature"'

    @pytest.mark.asyncio
    async def test_expired_credential_is_401_token_expired(
        self, api_client: AsyncClient, codec: CredentialCodec, test_identity: SessionIdentity
    ):
        issued = codec.issue(test_identity, now=datetime.now(timezone.utc) - timedelta(hours=1))

        response = await api_client.get(
            "/auth/verify-token", headers={"Authorization": f"Bearer {issued.token}"}
        )

        assert response.status_code == 401
        assert response.json()["error_code"] == "TOKEN_EXPIRED"

    @pytest.mark.asyncio
    async def test_garbage_credential_is_401_malformed(self, api_client: AsyncClient):
        response = await api_client.get(
            "/auth/verify-token", headers={"Authorization": "Bearer not-a-token"}
        )

        assert response.status_code == 401
        assert response.json()["error_code"] == "MALFORMED_TOKEN"

    @pytest.mark.asyncio
    async def test_verify_token_returns_claims(
        self, api_client: AsyncClient, auth_headers: dict[str, str]
    ):
        response = await api_client.get("/auth/verify-token", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["valid"] is True
        assert response.json()["claims"]["email"] == "test@example.com"

    @pytest.mark.asyncio
    async def test_login_then_profile_returns_stub(
        self, api_client: AsyncClient, google: FakeProvider
    ):
        token = (await _login(api_client))["access_token"]

        response = await api_client.get(
            "/api/v1/profile", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["email"] == "grace@example.com"
        assert data["full_name"] == "Grace Hopper"
        assert data["user_type"] is None
