"""Session authentication dependencies for FastAPI.

Per request: ``UNAUTHENTICATED`` (no bearer credential), or a present
credential that resolves to ``VERIFIED`` or ``REJECTED``.
Routes are public unless they depend on ``CurrentIdentity``. The verified
claim set lives on ``request.state`` for that request only. Nothing here
touches the profile store.
"""

from dataclasses import dataclass
from datetime import timedelta
from enum import StrEnum
from functools import lru_cache
from typing import Annotated

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.config import settings
from core.exceptions import AuthError, ErrorCode
from domain.entities.identity import IdentityClaims
from infrastructure.auth.credential_codec import CredentialCodec

# Security scheme for OpenAPI docs
security = HTTPBearer(auto_error=False)


class SessionState(StrEnum):
    """Authentication state of a single request."""

    UNAUTHENTICATED = "unauthenticated"
    VERIFIED = "verified"
    REJECTED = "rejected"


@dataclass(frozen=True, slots=True)
class SessionContext:
    """Outcome of authenticating a request."""

    state: SessionState
    claims: IdentityClaims | None = None
    error: AuthError | None = None


@lru_cache
def get_credential_codec() -> CredentialCodec:
    """Build the process-wide codec from settings, once."""
    return CredentialCodec(
        secret_key=settings.jwt_secret_key,
        lifetime=timedelta(minutes=settings.session_lifetime_minutes),
        algorithm=settings.jwt_algorithm,
    )


def authenticate(
    credentials: HTTPAuthorizationCredentials | None,
    codec: CredentialCodec,
) -> SessionContext:
    """Run the per-request state machine without raising."""
    if not credentials or not credentials.credentials:
        return SessionContext(state=SessionState.UNAUTHENTICATED)

    try:
        claims = codec.verify(credentials.credentials)
    except AuthError as e:
        return SessionContext(state=SessionState.REJECTED, error=e)

    return SessionContext(state=SessionState.VERIFIED, claims=claims)


def _attach(request: Request, context: SessionContext) -> None:
    request.state.session_state = context.state
    request.state.identity = context.claims
    if context.claims is not None:
        structlog.contextvars.bind_contextvars(user_id=str(context.claims.subject_id))


async def get_current_identity(
    request: Request,
    credentials: Annotated[
        HTTPAuthorizationCredentials | None,
        Depends(security),
    ],
    codec: CredentialCodec = Depends(get_credential_codec),
) -> IdentityClaims:
    """
    Dependency to get the verified identity of the caller.

    Raises:
        AuthError: No credential, or the specific verification failure
            (InvalidSignatureError, MalformedTokenError, TokenExpiredError)
    """
    context = authenticate(credentials, codec)
    _attach(request, context)

    if context.error is not None:
        raise context.error
    if context.claims is None:
        raise AuthError(
            message="Authorization header required",
            error_code=ErrorCode.UNAUTHORIZED,
        )

    return context.claims


async def get_optional_identity(
    request: Request,
    credentials: Annotated[
        HTTPAuthorizationCredentials | None,
        Depends(security),
    ],
    codec: CredentialCodec = Depends(get_credential_codec),
) -> IdentityClaims | None:
    """
    Dependency to get the caller's identity if one was presented and valid.

    Returns:
        IdentityClaims if verified, None otherwise (no exception raised)
    """
    context = authenticate(credentials, codec)
    _attach(request, context)
    return context.claims


# Type alias for convenience in route handlers
CurrentIdentity = Annotated[IdentityClaims, Depends(get_current_identity)]
OptionalIdentity = Annotated[IdentityClaims | None, Depends(get_optional_identity)]
