"""Pay run and pay period status rules."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from route_payroll.exceptions import InvalidStatusError

if TYPE_CHECKING:
    from route_payroll.models import PayRun


class PayRunStatus(str, Enum):
    """Pay run status values."""

    DRAFT = "Draft"
    APPROVED = "Approved"


class PayPeriodStatus(str, Enum):
    """Pay period status values (recorded, not enforced by the engine)."""

    OPEN = "Open"
    LOCKED = "Locked"
    APPROVED = "Approved"


class PayRunStateMachine:
    """Status rules for pay runs.

    Lifecycle: absent -> Draft (first computation) -> Approved.
    The Draft -> Approved transition belongs to the approval workflow;
    the engine only needs to know where recomputation is allowed.
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        PayRunStatus.DRAFT: [PayRunStatus.APPROVED],
        PayRunStatus.APPROVED: [],
    }

    # Statuses where lines may be rebuilt
    CALCULATION_ALLOWED = {
        PayRunStatus.DRAFT,
    }

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def can_calculate(cls, status: str) -> bool:
        """Check if recomputation is allowed in this status."""
        return status in cls.CALCULATION_ALLOWED

    @classmethod
    def ensure_can_calculate(cls, pay_run: PayRun) -> None:
        """Raise InvalidStatusError unless the run may be recomputed."""
        if not cls.can_calculate(pay_run.status):
            raise InvalidStatusError("pay run", pay_run.status, "recompute")
