"""Reconciliation outcome value objects."""

from dataclasses import dataclass
from enum import StrEnum

from domain.entities.profile import FreelancerProfile, UserProfile


class ReconciliationOutcome(StrEnum):
    """Terminal states of a reconciliation run that did not raise."""

    NOT_A_FREELANCER = "not_a_freelancer"
    CONSISTENT = "consistent"
    CREATED = "created"


@dataclass(frozen=True, slots=True)
class ReconciliationResult:
    """Read-only value object: what reconciliation found and did."""

    outcome: ReconciliationOutcome
    profile: UserProfile | None = None
    role: FreelancerProfile | None = None
