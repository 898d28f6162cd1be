"""Pay run service - computes and persists a driver's pay run."""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timezone
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from route_payroll.calculators.dates import to_calendar_date
from route_payroll.calculators.engine import CalculationResult, PayrollEngine
from route_payroll.calculators.fines import FineAggregator
from route_payroll.calculators.rate_resolver import RateResolver
from route_payroll.calculators.types import (
    DriverPayInputs,
    RateTerms,
    RouteContext,
    WeightBracket,
)
from route_payroll.calculators.weight_brackets import sort_brackets
from route_payroll.models import PayrollConfig, PayRun
from route_payroll.services.ledger_store import LedgerStore
from route_payroll.services.records import PayrollRecordReader
from route_payroll.services.state_machine import PayRunStateMachine

logger = logging.getLogger(__name__)


class PayRunService:
    """Owns the pay run lifecycle for one driver and period.

    compute_pay_run:
    1. Resolve the driver rate (fails before anything is written)
    2. Load warehouse config, routes, package weights and fines
    3. Price everything in memory
    4. Find-or-create the period and the Draft run
    5. Delete the run's previous lines and insert the new set
    6. Persist gross and audit fields

    Nothing is committed here. Run inside database.get_session() (or an
    equivalent transaction) so the rebuild is all-or-nothing.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.rate_resolver = RateResolver(session)
        self.records = PayrollRecordReader(session)
        self.ledger = LedgerStore(session)
        self.engine = PayrollEngine()

    async def get_pay_run(self, pay_run_id: UUID) -> PayRun | None:
        """Load a pay run with its lines and adjustments."""
        return await self.ledger.load_run(pay_run_id)

    async def compute_pay_run(
        self,
        company_id: UUID,
        driver_id: UUID,
        period_start: date,
        period_end: date,
        warehouse_id: UUID | None = None,
        requested_by: UUID | None = None,
        zone_id: UUID | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> PayRun:
        """Compute (or recompute) a driver's pay run for a period.

        Args:
            company_id: Company owning the period
            driver_id: Driver being paid
            period_start: First day of the period (inclusive)
            period_end: Last day of the period (inclusive)
            warehouse_id: Restrict to one warehouse's routes and config
            requested_by: User recorded as calculated_by
            zone_id: Restrict to routes of one zone
            cancel_event: Checked between routes; cancels before any write

        Returns:
            The pay run with its lines loaded

        Raises:
            RateNotFoundError: If no driver rate covers the period
            InvalidStatusError: If the existing run is no longer Draft
            ComputationCancelledError: If cancel_event was set
        """
        if period_end < period_start:
            raise ValueError(f"Period end {period_end} is before start {period_start}")

        existing = await self._find_existing_run(
            company_id, driver_id, period_start, period_end, warehouse_id
        )
        if existing is not None:
            PayRunStateMachine.ensure_can_calculate(existing)

        result = await self.calculate(
            driver_id,
            period_start,
            period_end,
            warehouse_id=warehouse_id,
            zone_id=zone_id,
            cancel_event=cancel_event,
        )

        # Last point where cancelling leaves the ledger untouched
        self.engine.ensure_not_cancelled(
            cancel_event,
            f"Computation for driver {driver_id} cancelled before ledger rebuild",
        )

        period = await self.ledger.get_or_create_period(
            company_id,
            period_start,
            period_end,
            warehouse_id=warehouse_id,
            created_by=requested_by,
        )
        pay_run = await self.ledger.get_or_create_run(period.pay_period_id, driver_id)

        await self.ledger.replace_lines(pay_run, result.lines)

        pay_run.gross_amount = result.gross
        pay_run.calculated_at = datetime.now(timezone.utc)
        pay_run.calculated_by = requested_by
        await self.session.flush()

        logger.info(
            "Computed pay run %s for driver %s: routes=%d lines=%d gross=%s warnings=%d engine=%s",
            pay_run.pay_run_id,
            driver_id,
            result.route_count,
            len(result.lines),
            result.gross,
            len(result.warnings),
            result.engine_version,
        )

        return await self.ledger.load_run(pay_run.pay_run_id, refresh=True)

    async def compute_pay_run_between(
        self,
        company_id: UUID,
        driver_id: UUID,
        start: date | datetime | str,
        end: date | datetime | str,
        warehouse_id: UUID | None = None,
        requested_by: UUID | None = None,
        zone_id: UUID | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> PayRun:
        """Same as compute_pay_run, accepting datetimes or ISO strings.

        Inputs are normalized to calendar dates; aware datetimes are read in UTC.
        """
        return await self.compute_pay_run(
            company_id,
            driver_id,
            to_calendar_date(start),
            to_calendar_date(end),
            warehouse_id=warehouse_id,
            requested_by=requested_by,
            zone_id=zone_id,
            cancel_event=cancel_event,
        )

    async def calculate(
        self,
        driver_id: UUID,
        period_start: date,
        period_end: date,
        warehouse_id: UUID | None = None,
        zone_id: UUID | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> CalculationResult:
        """Load inputs and price them without touching the ledger."""
        inputs = await self.load_inputs(
            driver_id, period_start, period_end, warehouse_id, zone_id
        )
        return self.engine.calculate(inputs, cancel_event)

    async def load_inputs(
        self,
        driver_id: UUID,
        period_start: date,
        period_end: date,
        warehouse_id: UUID | None = None,
        zone_id: UUID | None = None,
    ) -> DriverPayInputs:
        """Read everything a computation needs. Read-only."""
        rate = await self.rate_resolver.resolve_rate(driver_id, period_start, period_end)

        config: PayrollConfig | None = None
        if warehouse_id is not None:
            config = await self.records.load_payroll_config(warehouse_id)
        zone_scoped = config is not None and config.zone_scoped_routes

        routes = await self.records.load_routes(
            driver_id,
            period_start,
            period_end,
            warehouse_id=warehouse_id,
            zone_id=zone_id,
            zone_scoped=zone_scoped,
        )
        route_ids = [route.route_id for route in routes]
        weights_by_route, package_ids = await self.records.load_package_weights(route_ids)
        fine_rows = await self.records.load_fines(package_ids)

        return DriverPayInputs(
            driver_id=driver_id,
            period_start=period_start,
            period_end=period_end,
            rate=RateTerms.from_rate(rate),
            routes=[RouteContext.from_route(route) for route in routes],
            weight_brackets=self._weight_brackets(config),
            weights_by_route=weights_by_route,
            fines_by_route=FineAggregator.sum_by_route(fine_rows),
        )

    @staticmethod
    def _weight_brackets(config: PayrollConfig | None) -> list[WeightBracket]:
        if config is None or not config.enable_weight_extra:
            return []
        return sort_brackets(
            WeightBracket.from_rule(rule) for rule in config.weight_rules if rule.is_active
        )

    async def _find_existing_run(
        self,
        company_id: UUID,
        driver_id: UUID,
        period_start: date,
        period_end: date,
        warehouse_id: UUID | None,
    ) -> PayRun | None:
        period = await self.ledger.find_period(company_id, period_start, period_end, warehouse_id)
        if period is None:
            return None
        return await self.ledger.find_run(period.pay_period_id, driver_id)
