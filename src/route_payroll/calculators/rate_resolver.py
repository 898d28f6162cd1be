"""Driver rate card resolution."""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from route_payroll.exceptions import RateNotFoundError
from route_payroll.models import DriverRate


class RateResolver:
    """Resolves the driver rate card that applies to a pay period.

    A rate is a candidate when its validity window overlaps the period:
    effective_from <= period_end and (effective_to is open or
    effective_to >= period_start). The candidate with the latest
    effective_from wins.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def resolve_rate(
        self,
        driver_id: UUID,
        period_start: date,
        period_end: date,
    ) -> DriverRate:
        """Resolve the driver's rate for a period.

        Raises:
            RateNotFoundError: If no rate covers the period
        """
        result = await self.session.execute(
            select(DriverRate)
            .where(
                DriverRate.driver_id == driver_id,
                DriverRate.effective_from <= period_end,
                (DriverRate.effective_to.is_(None) | (DriverRate.effective_to >= period_start)),
            )
            .order_by(DriverRate.effective_from.desc())
            .limit(1)
        )
        rate = result.scalar_one_or_none()
        if rate is None:
            raise RateNotFoundError(driver_id, period_start, period_end)
        return rate
