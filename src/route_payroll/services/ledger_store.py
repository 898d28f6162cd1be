"""Ledger persistence: pay periods, pay runs and their lines."""

from __future__ import annotations

import logging
from datetime import date
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from route_payroll.calculators.line_builder import LineItemBuilder
from route_payroll.calculators.types import LineCandidate
from route_payroll.models import PayPeriod, PayRun, PayRunLine
from route_payroll.services.state_machine import PayPeriodStatus, PayRunStatus

logger = logging.getLogger(__name__)


class LedgerStore:
    """Find-or-create and rebuild operations on the payroll ledger.

    Methods flush but never commit; the caller's unit of work decides.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_period(
        self,
        company_id: UUID,
        start_date: date,
        end_date: date,
        warehouse_id: UUID | None = None,
    ) -> PayPeriod | None:
        """Look up a period by its natural key."""
        warehouse_clause = (
            PayPeriod.warehouse_id.is_(None)
            if warehouse_id is None
            else PayPeriod.warehouse_id == warehouse_id
        )
        result = await self.session.execute(
            select(PayPeriod).where(
                PayPeriod.company_id == company_id,
                PayPeriod.start_date == start_date,
                PayPeriod.end_date == end_date,
                warehouse_clause,
            )
        )
        return result.scalar_one_or_none()

    async def get_or_create_period(
        self,
        company_id: UUID,
        start_date: date,
        end_date: date,
        warehouse_id: UUID | None = None,
        created_by: UUID | None = None,
        notes: str | None = None,
    ) -> PayPeriod:
        """Return the period for the natural key, creating it when absent."""
        if end_date < start_date:
            raise ValueError(f"Period end {end_date} is before start {start_date}")

        period = await self.find_period(company_id, start_date, end_date, warehouse_id)
        if period is not None:
            return period

        period = PayPeriod(
            company_id=company_id,
            warehouse_id=warehouse_id,
            start_date=start_date,
            end_date=end_date,
            status=PayPeriodStatus.OPEN.value,
            notes=notes,
            created_by=created_by,
        )
        self.session.add(period)
        await self.session.flush()
        logger.info(
            "Created pay period %s for company %s warehouse %s (%s to %s)",
            period.pay_period_id,
            company_id,
            warehouse_id,
            start_date,
            end_date,
        )
        return period

    async def find_run(self, pay_period_id: UUID, driver_id: UUID) -> PayRun | None:
        """Look up the run for a (period, driver) key."""
        result = await self.session.execute(
            select(PayRun).where(
                PayRun.pay_period_id == pay_period_id,
                PayRun.driver_id == driver_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_or_create_run(self, pay_period_id: UUID, driver_id: UUID) -> PayRun:
        """Return the run for a (period, driver) key, creating a Draft when absent."""
        pay_run = await self.find_run(pay_period_id, driver_id)
        if pay_run is not None:
            return pay_run

        pay_run = PayRun(
            pay_period_id=pay_period_id,
            driver_id=driver_id,
            status=PayRunStatus.DRAFT.value,
        )
        self.session.add(pay_run)
        await self.session.flush()
        logger.info("Created pay run %s for driver %s", pay_run.pay_run_id, driver_id)
        return pay_run

    async def replace_lines(self, pay_run: PayRun, lines: list[LineCandidate]) -> None:
        """Two-phase rebuild: delete every existing line, then insert the new set."""
        await self.session.execute(
            delete(PayRunLine).where(PayRunLine.pay_run_id == pay_run.pay_run_id)
        )
        self.session.expire(pay_run, ["lines"])

        self.session.add_all(
            [
                PayRunLine(
                    pay_run_id=pay_run.pay_run_id,
                    line_no=line_no,
                    source_type=line.source_type.value,
                    source_id=line.source_id,
                    description=line.description,
                    qty=line.quantity,
                    rate=line.rate,
                    amount=line.amount,
                    tags=line.tag.value if line.tag else None,
                    line_hash=LineItemBuilder.compute_line_hash(line),
                )
                for line_no, line in enumerate(lines, start=1)
            ]
        )
        await self.session.flush()

    async def load_run(self, pay_run_id: UUID, refresh: bool = False) -> PayRun | None:
        """Load a run with its lines and adjustment entries."""
        query = (
            select(PayRun)
            .where(PayRun.pay_run_id == pay_run_id)
            .options(
                selectinload(PayRun.lines),
                selectinload(PayRun.adjustment_entries),
            )
        )
        if refresh:
            query = query.execution_options(populate_existing=True)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()
