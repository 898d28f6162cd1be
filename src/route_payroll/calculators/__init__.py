"""Payroll calculation engine."""

from route_payroll.calculators.engine import CalculationResult, PayrollEngine
from route_payroll.calculators.fines import FineAggregator
from route_payroll.calculators.line_builder import LineItemBuilder
from route_payroll.calculators.rate_resolver import RateResolver

__all__ = [
    "PayrollEngine",
    "CalculationResult",
    "FineAggregator",
    "LineItemBuilder",
    "RateResolver",
]
