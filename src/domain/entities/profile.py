"""Profile domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from uuid import UUID, uuid4


class UserType(StrEnum):
    """Kinds of user a unified profile can describe."""

    FREELANCER = "freelancer"
    CLIENT = "client"


@dataclass
class UserProfile:
    """Unified profile record shared by messaging and other cross-cutting features.

    ``version`` increases on every avatar rebind and guards conditional writes.
    """

    user_id: UUID
    email: str
    full_name: str | None = None
    avatar_url: str | None = None
    user_type: UserType | None = None
    version: int = 1
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        """Ensure updated_at is always at least as recent as created_at."""
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at


@dataclass
class FreelancerProfile:
    """Role record for a freelancer, created by the onboarding flow."""

    user_id: UUID
    id: UUID = field(default_factory=uuid4)
    email: str | None = None
    full_name: str | None = None
    title: str | None = None
    bio: str | None = None
    skills: list[str] = field(default_factory=list)
    hourly_rate: Decimal | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
