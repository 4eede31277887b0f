"""Profile read service."""

from typing import Callable
from uuid import UUID

from core.exceptions import ProfileNotFoundError
from domain.entities.profile import FreelancerProfile, UserProfile, UserType
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.reconciliation_service import ReconciliationService


class ProfileService:
    """Service layer for reading profiles through reconciliation."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        reconciliation_service: ReconciliationService,
    ) -> None:
        self._uow_factory = uow_factory
        self._reconciliation = reconciliation_service

    async def get_unified_profile(self, user_id: UUID) -> UserProfile:
        """Get the unified profile, synthesizing it for a freelancer that lacks one."""
        result = await self._reconciliation.reconcile(user_id)
        if result.profile is None:
            raise ProfileNotFoundError(str(user_id))
        return result.profile

    async def list_freelancers(self, limit: int = 50, offset: int = 0) -> list[FreelancerProfile]:
        """List freelancer role records, newest first."""
        async with self._uow_factory() as uow:
            return await uow.profiles.list_roles(limit=limit, offset=offset)

    async def list_unified_profiles(
        self, limit: int = 50, offset: int = 0, user_type: UserType | None = None
    ) -> list[UserProfile]:
        """List stored unified profiles as-is, without reconciling them.

        Freelancers that have no unified profile yet do not appear here.
        """
        async with self._uow_factory() as uow:
            return await uow.profiles.list_unified(limit=limit, offset=offset, user_type=user_type)

    async def list_clients(self, limit: int = 50, offset: int = 0) -> list[UserProfile]:
        """List unified profiles of client users, newest first."""
        return await self.list_unified_profiles(
            limit=limit, offset=offset, user_type=UserType.CLIENT
        )
