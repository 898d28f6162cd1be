"""Exceptions raised by the payroll engine."""

from __future__ import annotations

from datetime import date
from uuid import UUID


class PayrollError(Exception):
    """Base class for payroll engine errors."""


class ConfigurationMissingError(PayrollError):
    """Raised when configuration required for a computation is absent."""


class RateNotFoundError(ConfigurationMissingError):
    """Raised when no driver rate covers the requested period."""

    def __init__(self, driver_id: UUID, period_start: date, period_end: date):
        self.driver_id = driver_id
        self.period_start = period_start
        self.period_end = period_end
        super().__init__(
            f"No driver rate configured for driver {driver_id} "
            f"covering {period_start} to {period_end}"
        )


class InvalidStatusError(PayrollError):
    """Raised when an action is not allowed in the entity's current status."""

    def __init__(self, entity: str, status: str, action: str):
        self.entity = entity
        self.status = status
        self.action = action
        super().__init__(f"Cannot {action} {entity} in status '{status}'")


class ComputationCancelledError(PayrollError):
    """Raised when a computation is cancelled before its ledger is rebuilt."""
