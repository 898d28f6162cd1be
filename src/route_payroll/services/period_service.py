"""Pay period service - batch computation and summaries for a period."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from route_payroll.exceptions import ConfigurationMissingError, InvalidStatusError
from route_payroll.models import PayPeriod, PayRun
from route_payroll.services.ledger_store import LedgerStore
from route_payroll.services.records import PayrollRecordReader

logger = logging.getLogger(__name__)


@dataclass
class PeriodSummaryRow:
    """One driver's totals in a period."""

    driver_id: UUID
    pay_run_id: UUID
    gross: Decimal
    adjustments: Decimal
    net: Decimal


@dataclass
class PeriodSummary:
    """Per-driver totals of a pay period."""

    pay_period_id: UUID
    start_date: date
    end_date: date
    drivers: list[PeriodSummaryRow] = field(default_factory=list)
    # warehouse_id -> {"YYYY-MM-DD": count} of payable routes lacking a zone
    unzoned_routes: dict[UUID, dict[str, int]] = field(default_factory=dict)
    # driver_id -> reason the driver was not computed
    skipped: dict[UUID, str] = field(default_factory=dict)

    @property
    def total_net(self) -> Decimal:
        return sum((row.net for row in self.drivers), Decimal("0"))


class PayPeriodService:
    """Operations over a whole pay period.

    - get_or_create_period: natural-key lookup-or-create
    - compute_period: compute every driver with payable routes
    - summarize_period: gross/adjustments/net per driver
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.ledger = LedgerStore(session)
        self.records = PayrollRecordReader(session)

    async def get_or_create_period(
        self,
        company_id: UUID,
        start_date: date,
        end_date: date,
        warehouse_id: UUID | None = None,
        created_by: UUID | None = None,
        notes: str | None = None,
    ) -> PayPeriod:
        """Return the period for (company, warehouse, start, end)."""
        return await self.ledger.get_or_create_period(
            company_id,
            start_date,
            end_date,
            warehouse_id=warehouse_id,
            created_by=created_by,
            notes=notes,
        )

    async def compute_period(
        self,
        company_id: UUID,
        start_date: date,
        end_date: date,
        warehouse_id: UUID | None = None,
        requested_by: UUID | None = None,
        zone_id: UUID | None = None,
        recalculate_all: bool = False,
    ) -> PeriodSummary:
        """Compute pay runs for every driver with payable routes in the period.

        Drivers that already have a run are skipped unless recalculate_all.
        Zone-scoped warehouses with payable routes lacking a zone are reported
        in the summary and their drivers are left out until the routes are
        zoned. A driver without a rate card is recorded as skipped; the rest
        of the batch continues.
        """
        # Import here to avoid circular imports
        from route_payroll.services.pay_run_service import PayRunService

        period = await self.get_or_create_period(
            company_id, start_date, end_date, warehouse_id=warehouse_id, created_by=requested_by
        )

        zone_scoped = False
        if warehouse_id is not None:
            config = await self.records.load_payroll_config(warehouse_id)
            zone_scoped = config is not None and config.zone_scoped_routes

        unzoned = await self.records.find_unzoned_routes(
            start_date, end_date, warehouse_id=warehouse_id, zone_id=zone_id
        )
        driver_ids = await self.records.load_driver_ids(
            start_date,
            end_date,
            warehouse_id=warehouse_id,
            zone_id=zone_id,
            zone_scoped=zone_scoped,
            exclude_warehouse_ids=set(unzoned),
        )

        already: set[UUID] = set()
        if not recalculate_all:
            result = await self.session.execute(
                select(PayRun.driver_id).where(PayRun.pay_period_id == period.pay_period_id)
            )
            already = set(result.scalars().all())

        pay_runs = PayRunService(self.session)
        skipped: dict[UUID, str] = {}
        computed = 0
        for driver_id in driver_ids:
            if driver_id in already:
                continue
            try:
                await pay_runs.compute_pay_run(
                    company_id,
                    driver_id,
                    start_date,
                    end_date,
                    warehouse_id=warehouse_id,
                    requested_by=requested_by,
                    zone_id=zone_id,
                )
                computed += 1
            except (ConfigurationMissingError, InvalidStatusError) as e:
                logger.warning("Skipped driver %s in period %s: %s", driver_id, period.pay_period_id, e)
                skipped[driver_id] = str(e)

        logger.info(
            "Computed period %s: drivers=%d computed=%d skipped=%d unzoned_warehouses=%d",
            period.pay_period_id,
            len(driver_ids),
            computed,
            len(skipped),
            len(unzoned),
        )

        summary = await self.summarize_period(period.pay_period_id)
        summary.unzoned_routes = unzoned
        summary.skipped = skipped
        return summary

    async def summarize_period(self, pay_period_id: UUID) -> PeriodSummary:
        """Per-driver gross, adjustments and net for a period."""
        period = await self.session.get(PayPeriod, pay_period_id)
        if period is None:
            raise ValueError(f"Pay period {pay_period_id} not found")

        result = await self.session.execute(
            select(PayRun)
            .where(PayRun.pay_period_id == pay_period_id)
            .order_by(PayRun.driver_id)
        )
        rows = [
            PeriodSummaryRow(
                driver_id=run.driver_id,
                pay_run_id=run.pay_run_id,
                gross=run.gross_amount,
                adjustments=run.adjustments,
                net=run.net_amount,
            )
            for run in result.scalars().all()
        ]
        return PeriodSummary(
            pay_period_id=period.pay_period_id,
            start_date=period.start_date,
            end_date=period.end_date,
            drivers=rows,
        )
