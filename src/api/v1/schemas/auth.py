"""Pydantic schemas for the login and session API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from domain.entities.identity import IdentityClaims


class IdentityResponse(BaseModel):
    """Schema for a verified identity claim set."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "subject_id": "123e4567-e89b-12d3-a456-426614174000",
                "email": "ada@example.com",
                "display_name": "Ada Lovelace",
                "provider": "google",
                "issued_at": "2026-01-28T10:00:00Z",
                "expires_at": "2026-02-04T10:00:00Z",
            }
        },
    )

    subject_id: UUID
    email: str
    display_name: str | None = None
    provider: str
    issued_at: datetime
    expires_at: datetime

    @classmethod
    def from_claims(cls, claims: IdentityClaims) -> "IdentityResponse":
        return cls.model_validate(claims)


class TokenResponse(BaseModel):
    """Schema returned when a provider login completes."""

    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: IdentityResponse


class VerifyTokenResponse(BaseModel):
    """Schema for the token verification endpoint."""

    valid: bool
    claims: IdentityResponse
