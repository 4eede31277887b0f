"""Profile repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.profile import FreelancerProfile, UserProfile, UserType


class IProfileRepository(Protocol):
    """Gateway over the freelancer role records and unified profile records."""

    async def get_role(self, user_id: UUID) -> FreelancerProfile | None:
        """Get the freelancer role record owned by a user."""
        ...

    async def list_roles(self, limit: int = 50, offset: int = 0) -> list[FreelancerProfile]:
        """List freelancer role records, newest first."""
        ...

    async def get_unified(self, user_id: UUID) -> UserProfile | None:
        """Get the unified profile record for a user."""
        ...

    async def get_unified_by_email(self, email: str) -> UserProfile | None:
        """Get the unified profile record with a given (normalized) email."""
        ...

    async def list_unified(
        self, limit: int = 50, offset: int = 0, user_type: UserType | None = None
    ) -> list[UserProfile]:
        """List unified profile records, newest first, optionally of one type."""
        ...

    async def upsert_unified(self, profile: UserProfile) -> None:
        """Insert the profile unless one already exists for its user id.

        Existing records are left untouched, so concurrent callers are safe.
        """
        ...

    async def update_avatar_ref(
        self, user_id: UUID, avatar_url: str, expected_version: int
    ) -> UserProfile | None:
        """Rebind the avatar reference if the stored version still matches.

        Returns the updated profile, or None when the version moved on
        (or the profile vanished) so the caller can report a conflict.
        """
        ...
