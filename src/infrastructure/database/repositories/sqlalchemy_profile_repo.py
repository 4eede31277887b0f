"""SQLAlchemy implementation of the profile repository."""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.profile import FreelancerProfile, UserProfile, UserType
from infrastructure.database.models import FreelancerModel, UserProfileModel


class SQLAlchemyProfileRepository:
    """SQLAlchemy implementation of IProfileRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_role(self, user_id: UUID) -> FreelancerProfile | None:
        """Get the freelancer role record owned by a user."""
        stmt = select(FreelancerModel).where(FreelancerModel.user_id == user_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._role_to_entity(model) if model else None

    async def list_roles(self, limit: int = 50, offset: int = 0) -> list[FreelancerProfile]:
        """List freelancer role records, newest first."""
        stmt = (
            select(FreelancerModel)
            .order_by(FreelancerModel.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self._session.execute(stmt)
        return [self._role_to_entity(model) for model in result.scalars()]

    async def get_unified(self, user_id: UUID) -> UserProfile | None:
        """Get the unified profile record for a user."""
        stmt = (
            select(UserProfileModel)
            .where(UserProfileModel.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._profile_to_entity(model) if model else None

    async def get_unified_by_email(self, email: str) -> UserProfile | None:
        """Get the oldest unified profile record with a given email."""
        stmt = (
            select(UserProfileModel)
            .where(UserProfileModel.email == email)
            .order_by(UserProfileModel.created_at)
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._profile_to_entity(model) if model else None

    async def list_unified(
        self, limit: int = 50, offset: int = 0, user_type: UserType | None = None
    ) -> list[UserProfile]:
        """List unified profile records, newest first, optionally of one type."""
        stmt = select(UserProfileModel)
        if user_type is not None:
            stmt = stmt.where(UserProfileModel.user_type == user_type.value)
        stmt = stmt.order_by(UserProfileModel.created_at.desc()).limit(limit).offset(offset)
        result = await self._session.execute(stmt)
        return [self._profile_to_entity(model) for model in result.scalars()]

    async def upsert_unified(self, profile: UserProfile) -> None:
        """Insert the profile unless one already exists for its user id."""
        values = self._profile_values(profile)
        dialect = self._session.get_bind().dialect.name

        if dialect == "postgresql":
            stmt: Any = pg_insert(UserProfileModel).values(**values)
        elif dialect == "sqlite":
            stmt = sqlite_insert(UserProfileModel).values(**values)
        else:
            if await self.get_unified(profile.user_id) is None:
                self._session.add(UserProfileModel(**values))
                await self._session.flush()
            return

        await self._session.execute(stmt.on_conflict_do_nothing(index_elements=["user_id"]))

    async def update_avatar_ref(
        self, user_id: UUID, avatar_url: str, expected_version: int
    ) -> UserProfile | None:
        """Conditionally rebind the avatar reference and bump the version."""
        stmt = (
            update(UserProfileModel)
            .where(
                UserProfileModel.user_id == user_id,
                UserProfileModel.version == expected_version,
            )
            .values(
                avatar_url=avatar_url,
                version=UserProfileModel.version + 1,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount != 1:  # type: ignore[attr-defined]
            return None
        return await self.get_unified(user_id)

    @staticmethod
    def _profile_values(profile: UserProfile) -> dict[str, Any]:
        return {
            "user_id": profile.user_id,
            "email": profile.email,
            "full_name": profile.full_name,
            "avatar_url": profile.avatar_url,
            "user_type": profile.user_type.value if profile.user_type else None,
            "version": profile.version,
            "created_at": profile.created_at,
            "updated_at": profile.updated_at,
        }

    @staticmethod
    def _profile_to_entity(model: UserProfileModel) -> UserProfile:
        return UserProfile(
            user_id=model.user_id,
            email=model.email,
            full_name=model.full_name,
            avatar_url=model.avatar_url,
            user_type=UserType(model.user_type) if model.user_type else None,
            version=model.version,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @staticmethod
    def _role_to_entity(model: FreelancerModel) -> FreelancerProfile:
        return FreelancerProfile(
            id=model.id,
            user_id=model.user_id,
            email=model.email,
            full_name=model.full_name,
            title=model.title,
            bio=model.bio,
            skills=list(model.skills or []),
            hourly_rate=model.hourly_rate,
            created_at=model.created_at,
        )
