"""Identity domain entities."""

from dataclasses import dataclass
from datetime import datetime
from uuid import NAMESPACE_URL, UUID, uuid5


def normalize_email(email: str | None) -> str | None:
    """Lower-case and strip an email address; blank becomes None."""
    if email is None:
        return None
    normalized = email.strip().lower()
    return normalized or None


def canonical_user_id(provider: str, provider_subject: str) -> UUID:
    """Deterministic user id for a first-time provider login."""
    return uuid5(NAMESPACE_URL, f"{provider}:{provider_subject}")


@dataclass(frozen=True, slots=True)
class ProviderIdentity:
    """Normalized facts returned by an identity provider exchange."""

    provider: str
    provider_subject: str
    email: str
    display_name: str | None = None
    avatar_url: str | None = None


@dataclass(frozen=True, slots=True)
class SessionIdentity:
    """The identity a session credential is issued for."""

    subject_id: UUID
    email: str
    provider: str
    display_name: str | None = None


@dataclass(frozen=True, slots=True)
class IdentityClaims:
    """Claim set embedded verbatim in a session credential.

    Timestamps are timezone-aware UTC with whole-second precision, matching
    what survives the JWT ``iat``/``exp`` encoding.
    """

    subject_id: UUID
    email: str
    display_name: str | None
    provider: str
    issued_at: datetime
    expires_at: datetime

    def __post_init__(self) -> None:
        if self.expires_at <= self.issued_at:
            raise ValueError("expires_at must be after issued_at")

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True, slots=True)
class IssuedCredential:
    """A signed credential together with the claims it carries."""

    token: str
    claims: IdentityClaims
