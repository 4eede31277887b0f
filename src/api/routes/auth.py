"""Provider login and session endpoints."""

import secrets
from typing import Annotated

from fastapi import APIRouter, Cookie, Depends, Query, Request, Response
from fastapi.responses import RedirectResponse

from api.dependencies.auth import CurrentIdentity
from api.v1.dependencies import get_login_service
from api.v1.schemas.auth import IdentityResponse, TokenResponse, VerifyTokenResponse
from api.v1.schemas.common import ErrorResponse
from core.config import settings
from core.exceptions import ProviderRejectedError
from core.rate_limit import limiter
from domain.services.login_service import LoginService
from infrastructure.auth.providers.base import ProviderCallback

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
    responses={401: {"model": ErrorResponse, "description": "Login or credential rejected"}},
)

STATE_COOKIE = "oauth_state"
STATE_MAX_AGE_SECONDS = 600


def _callback_url(provider: str) -> str:
    return f"{settings.public_base_url.rstrip('/')}/auth/{provider}/callback"


@router.get(
    "/me",
    response_model=IdentityResponse,
    summary="Current identity",
)
async def me(identity: CurrentIdentity) -> IdentityResponse:
    """Return the identity bound to the presented credential."""
    return IdentityResponse.from_claims(identity)


@router.get(
    "/verify-token",
    response_model=VerifyTokenResponse,
    summary="Verify a credential",
)
async def verify_token(identity: CurrentIdentity) -> VerifyTokenResponse:
    """Succeeds only for a valid, unexpired credential."""
    return VerifyTokenResponse(valid=True, claims=IdentityResponse.from_claims(identity))


@router.get(
    "/{provider}",
    summary="Start provider login",
    responses={
        307: {"description": "Redirect to the provider consent page"},
        404: {"description": "Provider not configured"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def start_login(
    request: Request,
    provider: str,
    service: LoginService = Depends(get_login_service),
) -> RedirectResponse:
    """Redirect the browser to the provider and remember the CSRF state."""
    identity_provider = service.get_provider(provider)
    state = secrets.token_urlsafe(24)

    response = RedirectResponse(
        identity_provider.authorization_url(state=state, redirect_uri=_callback_url(provider))
    )
    response.set_cookie(
        STATE_COOKIE,
        state,
        max_age=STATE_MAX_AGE_SECONDS,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
    return response


@router.get(
    "/{provider}/callback",
    response_model=TokenResponse,
    summary="Complete provider login",
    responses={
        401: {"description": "Provider rejected the login"},
        503: {"description": "Provider unreachable, retry"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def complete_login(
    request: Request,
    response: Response,
    provider: str,
    code: Annotated[str | None, Query()] = None,
    state: Annotated[str | None, Query()] = None,
    error: Annotated[str | None, Query()] = None,
    oauth_state: Annotated[str | None, Cookie()] = None,
    service: LoginService = Depends(get_login_service),
) -> TokenResponse:
    """Exchange the provider callback for a session credential."""
    service.get_provider(provider)

    if error:
        raise ProviderRejectedError(provider, f"Provider returned error: {error}")
    if not state or not oauth_state or not secrets.compare_digest(state, oauth_state):
        raise ProviderRejectedError(provider, "Login state mismatch, please start again")
    if not code:
        raise ProviderRejectedError(provider, "Missing authorization code")

    credential = await service.complete_login(
        provider,
        ProviderCallback(code=code, redirect_uri=_callback_url(provider)),
    )
    response.delete_cookie(STATE_COOKIE)

    return TokenResponse(
        access_token=credential.token,
        expires_at=credential.claims.expires_at,
        user=IdentityResponse.from_claims(credential.claims),
    )
