"""Payroll calculation engine - prices a driver's routes into one ledger."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from route_payroll.calculators.line_builder import LineItemBuilder
from route_payroll.calculators.pricing import price_route
from route_payroll.calculators.types import (
    DriverPayInputs,
    LineCandidate,
    RoutePricing,
    SourceType,
)
from route_payroll.calculators.weight_brackets import compute_weight_extras
from route_payroll.config import get_settings
from route_payroll.exceptions import ComputationCancelledError

logger = logging.getLogger(__name__)


@dataclass
class CalculationResult:
    """Result of pricing one driver's period."""

    driver_id: UUID
    lines: list[LineCandidate]
    gross: Decimal
    warnings: list[str]
    fingerprint: str
    engine_version: str
    routes: list[RoutePricing] = field(default_factory=list)

    @property
    def route_count(self) -> int:
        return len(self.routes)

    @property
    def totals_by_source(self) -> dict[SourceType, Decimal]:
        return LineItemBuilder.sum_by_source_type(self.lines)


class PayrollEngine:
    """Turns loaded driver inputs into an ordered, priced line set.

    Calculation pipeline (stable order per route, routes by date then id):
    1) Payment-type lines (per route / per stop / mixed)
    2) Weight extras, when the warehouse enables them
    3) Failed stop penalty
    4) Minimum pay per route top-up
    5) Fines on the route's packages
    Then a trailing warning summary line when any warnings occurred.

    The engine performs no I/O; running it twice on the same inputs yields
    the same lines in the same order.
    """

    def __init__(self, engine_version: str | None = None):
        self.engine_version = engine_version or get_settings().engine_version

    @staticmethod
    def ensure_not_cancelled(cancel_event: asyncio.Event | None, message: str) -> None:
        """Raise ComputationCancelledError if cancel_event is set."""
        if cancel_event is not None and cancel_event.is_set():
            raise ComputationCancelledError(message)

    def calculate(
        self,
        inputs: DriverPayInputs,
        cancel_event: asyncio.Event | None = None,
    ) -> CalculationResult:
        """Price every route in inputs.

        Raises:
            ComputationCancelledError: If cancel_event is set before, between or after routes
        """
        lines: list[LineCandidate] = []
        warnings: list[str] = []
        priced: list[RoutePricing] = []

        routes = sorted(inputs.routes, key=lambda r: (r.route_date, str(r.route_id)))
        for route in routes:
            self.ensure_not_cancelled(
                cancel_event,
                f"Computation for driver {inputs.driver_id} cancelled "
                f"after {len(priced)} of {len(routes)} routes",
            )

            weight_extras = None
            if inputs.weight_brackets:
                weights = inputs.weights_by_route.get(route.route_id)
                if weights:
                    weight_extras = compute_weight_extras(weights, inputs.weight_brackets)

            pricing = price_route(
                route,
                inputs.rate,
                weight_extras=weight_extras,
                fine_total=inputs.fines_by_route.get(route.route_id),
            )
            logger.debug(
                "Priced route %s for driver %s: subtotal=%s fines=%s lines=%d",
                route.route_id,
                inputs.driver_id,
                pricing.subtotal,
                pricing.fine_total,
                len(pricing.lines),
            )
            for warning in pricing.warnings:
                logger.warning(warning)

            lines.extend(pricing.lines)
            warnings.extend(pricing.warnings)
            priced.append(pricing)

        self.ensure_not_cancelled(
            cancel_event,
            f"Computation for driver {inputs.driver_id} cancelled after pricing",
        )

        if warnings:
            lines.append(LineItemBuilder.create_warning_summary_line(len(warnings)))

        return CalculationResult(
            driver_id=inputs.driver_id,
            lines=lines,
            gross=LineItemBuilder.calculate_gross_from_lines(lines),
            warnings=warnings,
            fingerprint=LineItemBuilder.compute_lines_fingerprint(lines),
            engine_version=self.engine_version,
            routes=priced,
        )
