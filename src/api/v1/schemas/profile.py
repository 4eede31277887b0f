"""Pydantic schemas for profile API."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from domain.entities.profile import UserType
from domain.entities.reconciliation import ReconciliationOutcome


class UserProfileResponse(BaseModel):
    """Schema for a unified profile."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "user_id": "123e4567-e89b-12d3-a456-426614174000",
                "email": "ada@example.com",
                "full_name": "Ada Lovelace",
                "avatar_url": "http://localhost:3001/uploads/avatars/avatar-1f2e.png",
                "user_type": "freelancer",
                "version": 2,
                "updated_at": "2026-01-28T10:00:00",
            }
        },
    )

    user_id: UUID
    email: str
    full_name: str | None = None
    avatar_url: str | None = None
    user_type: UserType | None = None
    version: int
    updated_at: datetime


class UserProfileDetailResponse(BaseModel):
    """Schema for single unified profile."""

    data: UserProfileResponse


class FreelancerResponse(BaseModel):
    """Schema for a freelancer role record."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    email: str | None = None
    full_name: str | None = None
    title: str | None = None
    bio: str | None = None
    skills: list[str] = []
    hourly_rate: Decimal | None = None
    created_at: datetime


class FreelancerListResponse(BaseModel):
    """Schema for list of freelancers."""

    data: list[FreelancerResponse]


class ReconciliationResponse(BaseModel):
    """Schema for an explicit reconciliation run."""

    outcome: ReconciliationOutcome
    profile: UserProfileResponse | None = None


class AvatarResponse(BaseModel):
    """Schema returned after an avatar update."""

    avatar_url: str
    version: int


class UserProfileListResponse(BaseModel):
    """Schema for list of unified profiles."""

    data: list[UserProfileResponse]
