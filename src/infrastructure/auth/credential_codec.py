"""Session credential codec.

Credentials are HS256 JWTs whose payload is exactly::

    {
        "sub": "canonical-user-uuid",
        "email": "user@example.com",
        "name": "Display Name" | null,
        "provider": "google",
        "iat": 1750841661,
        "exp": 1751446461
    }

Verification is a pure function of the token, the signing secret and the
clock; it never performs I/O.
"""

from datetime import datetime, timedelta, timezone
from uuid import UUID

from jose import jwk, jwt
from jose.exceptions import JWKError, JWTError
from jose.utils import base64url_decode
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from core.exceptions import (
    InvalidSignatureError,
    MalformedTokenError,
    TokenExpiredError,
)
from domain.entities.identity import IdentityClaims, IssuedCredential, SessionIdentity


class CredentialPayload(BaseModel):
    """Wire shape of the credential payload. Unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid", strict=True)

    sub: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    name: str | None
    provider: str = Field(..., min_length=1)
    iat: int
    exp: int


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _to_epoch(value: datetime) -> int:
    return int(value.timestamp())


def _from_epoch(value: int) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc)


class CredentialCodec:
    """Issues and verifies signed, time-bounded session credentials."""

    def __init__(
        self,
        secret_key: str,
        lifetime: timedelta,
        algorithm: str = "HS256",
    ) -> None:
        if not secret_key:
            raise ValueError("A signing secret is required")
        if lifetime <= timedelta(0):
            raise ValueError("Session lifetime must be positive")
        self._secret_key = secret_key
        self._lifetime = lifetime
        self._algorithm = algorithm

    @property
    def lifetime(self) -> timedelta:
        return self._lifetime

    def issue(self, identity: SessionIdentity, now: datetime | None = None) -> IssuedCredential:
        """
        Sign a credential for an identity.

        Args:
            identity: The authenticated identity
            now: Issue instant (defaults to the current UTC time)

        Returns:
            The token and the exact claim set embedded in it
        """
        issued_at = (now or _utcnow()).replace(microsecond=0)
        claims = IdentityClaims(
            subject_id=identity.subject_id,
            email=identity.email,
            display_name=identity.display_name,
            provider=identity.provider,
            issued_at=issued_at,
            expires_at=issued_at + self._lifetime,
        )
        payload = CredentialPayload(
            sub=str(claims.subject_id),
            email=claims.email,
            name=claims.display_name,
            provider=claims.provider,
            iat=_to_epoch(claims.issued_at),
            exp=_to_epoch(claims.expires_at),
        )
        token = jwt.encode(payload.model_dump(), self._secret_key, algorithm=self._algorithm)
        return IssuedCredential(token=token, claims=claims)

    def verify(self, token: str, now: datetime | None = None) -> IdentityClaims:
        """
        Verify a credential and return its claim set.

        Raises:
            InvalidSignatureError: Signature does not match the signed content
            MalformedTokenError: Token or claim set cannot be parsed
            TokenExpiredError: Current time is at or past ``exp``
        """
        self._verify_signature(token)

        try:
            raw = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_exp": False, "verify_aud": False},
            )
            payload = CredentialPayload.model_validate(raw)
            claims = IdentityClaims(
                subject_id=UUID(payload.sub),
                email=payload.email,
                display_name=payload.name,
                provider=payload.provider,
                issued_at=_from_epoch(payload.iat),
                expires_at=_from_epoch(payload.exp),
            )
        except (JWTError, ValidationError, ValueError):
            raise MalformedTokenError()

        if claims.is_expired(now or _utcnow()):
            raise TokenExpiredError()

        return claims

    def _verify_signature(self, token: str) -> None:
        """Check structure first, then the HMAC over ``header.payload``.

        python-jose reports signature mismatches as generic JWS errors; the
        HMAC is compared here so tampering stays distinct from garbage input.
        """
        if not isinstance(token, str) or token.count(".") != 2:
            raise MalformedTokenError("Credential must have three segments")

        try:
            header = jwt.get_unverified_header(token)
        except JWTError:
            raise MalformedTokenError("Credential header is unreadable")
        if header.get("alg") != self._algorithm:
            raise MalformedTokenError("Credential uses an unsupported algorithm")

        signing_input, _, crypto_segment = token.rpartition(".")
        try:
            signature = base64url_decode(crypto_segment.encode("ascii"))
            key = jwk.construct(self._secret_key, self._algorithm)
        except (ValueError, JWKError):
            raise MalformedTokenError("Credential signature is unreadable")

        if not key.verify(signing_input.encode("utf-8"), signature):
            raise InvalidSignatureError()
