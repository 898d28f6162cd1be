"""SQLAlchemy ORM models for route payroll."""

from route_payroll.models.base import Base, TimestampMixin
from route_payroll.models.configuration import (
    BonusType,
    DriverRate,
    PayrollBonusRule,
    PayrollConfig,
    PayrollFine,
    PayrollPenaltyRule,
    PayrollWeightRule,
    PenaltyType,
)
from route_payroll.models.operations import Package, PaymentType, Route, RouteStatus, Zone
from route_payroll.models.payroll import PayPeriod, PayrollAdjustment, PayRun, PayRunLine

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Operations
    "Package",
    "PaymentType",
    "Route",
    "RouteStatus",
    "Zone",
    # Configuration
    "BonusType",
    "DriverRate",
    "PayrollBonusRule",
    "PayrollConfig",
    "PayrollFine",
    "PayrollPenaltyRule",
    "PayrollWeightRule",
    "PenaltyType",
    # Payroll
    "PayPeriod",
    "PayRun",
    "PayRunLine",
    "PayrollAdjustment",
]
