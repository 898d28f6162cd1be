"""Payroll services."""

from route_payroll.services.ledger_store import LedgerStore
from route_payroll.services.pay_run_service import PayRunService
from route_payroll.services.period_service import PayPeriodService, PeriodSummary
from route_payroll.services.records import PayrollRecordReader
from route_payroll.services.state_machine import (
    PayPeriodStatus,
    PayRunStateMachine,
    PayRunStatus,
)

__all__ = [
    "LedgerStore",
    "PayPeriodService",
    "PayPeriodStatus",
    "PayRunService",
    "PayRunStateMachine",
    "PayRunStatus",
    "PayrollRecordReader",
    "PeriodSummary",
]
