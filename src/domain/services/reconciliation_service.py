"""Reconciliation between freelancer role records and unified profiles."""

from typing import Any, Callable
from uuid import UUID

import structlog

from core.exceptions import IrreconcilableProfileError, ProfileMismatchError
from domain.entities.identity import normalize_email
from domain.entities.profile import FreelancerProfile, UserProfile, UserType
from domain.entities.reconciliation import ReconciliationOutcome, ReconciliationResult
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


class ReconciliationService:
    """Detects and resolves divergence between the two profile representations.

    Resolution policy:

    - no role record: nothing to reconcile (``NOT_A_FREELANCER``)
    - role record without unified profile: synthesize one from the role
      record, insert-if-absent, re-read (``CREATED``); a role record without
      an email raises ``IrreconcilableProfileError`` and nothing is written
    - both present and agreeing: no-op (``CONSISTENT``)
    - both present and disagreeing: ``ProfileMismatchError``, never
      auto-resolved

    A second run over a pair the first run created finds it ``CONSISTENT``.
    """

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def reconcile(self, user_id: UUID) -> ReconciliationResult:
        """
        Reconcile the records for one user.

        Raises:
            IrreconcilableProfileError: Role record lacks a mandatory field
            ProfileMismatchError: Records exist but disagree on a key field
        """
        async with self._uow_factory() as uow:
            role = await uow.profiles.get_role(user_id)
            profile = await uow.profiles.get_unified(user_id)

            if role is None:
                return ReconciliationResult(
                    outcome=ReconciliationOutcome.NOT_A_FREELANCER,
                    profile=profile,
                )

            if profile is not None:
                self._check_consistent(role, profile)
                return ReconciliationResult(
                    outcome=ReconciliationOutcome.CONSISTENT,
                    profile=profile,
                    role=role,
                )

            synthesized = self._synthesize(role)
            await uow.profiles.upsert_unified(synthesized)
            await uow.commit()

            stored = await uow.profiles.get_unified(user_id)
            if stored is None:
                self._report(user_id, "synthesized_profile_unreadable")
                raise IrreconcilableProfileError(str(user_id), missing=["user_profile"])

            # A concurrent writer may have inserted a different record first
            self._check_consistent(role, stored)

            logger.info("profile_synthesized", user_id=str(user_id))
            return ReconciliationResult(
                outcome=ReconciliationOutcome.CREATED,
                profile=stored,
                role=role,
            )

    def _synthesize(self, role: FreelancerProfile) -> UserProfile:
        email = normalize_email(role.email)
        if not email:
            self._report(role.user_id, "irreconcilable_profile", missing=["email"])
            raise IrreconcilableProfileError(str(role.user_id), missing=["email"])

        return UserProfile(
            user_id=role.user_id,
            email=email,
            full_name=(role.full_name or "").strip() or None,
            user_type=UserType.FREELANCER,
        )

    def _check_consistent(self, role: FreelancerProfile, profile: UserProfile) -> None:
        conflicts: dict[str, dict[str, Any]] = {}

        role_email = normalize_email(role.email)
        profile_email = normalize_email(profile.email)
        if role_email and role_email != profile_email:
            conflicts["email"] = {"role": role_email, "profile": profile_email}

        # A login stub has no user type yet; only a contradicting type conflicts
        if profile.user_type is not None and profile.user_type != UserType.FREELANCER:
            conflicts["user_type"] = {
                "role": UserType.FREELANCER.value,
                "profile": profile.user_type.value,
            }

        if conflicts:
            self._report(role.user_id, "profile_mismatch", conflicts=conflicts)
            raise ProfileMismatchError(str(role.user_id), conflicts)

    @staticmethod
    def _report(user_id: UUID, reason: str, **fields: Any) -> None:
        """Emit the data-quality signal operators follow up on."""
        logger.warning(
            "profile_divergence",
            user_id=str(user_id),
            reason=reason,
            **fields,
        )
