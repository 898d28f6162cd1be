"""Readers for operational records and payroll configuration."""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from route_payroll.models import (
    Package,
    PayrollConfig,
    PayrollFine,
    Route,
    RouteStatus,
    Zone,
)


def day_bounds(period_start: date, period_end: date) -> tuple[datetime, datetime]:
    """Return [start 00:00, day after end 00:00) for an inclusive date range."""
    start = datetime.combine(period_start, time.min)
    end_exclusive = datetime.combine(period_end + timedelta(days=1), time.min)
    return start, end_exclusive


class PayrollRecordReader:
    """Bounded reads the engine needs from dispatch and configuration tables.

    Nothing here writes.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    def qualifying_routes(
        self,
        period_start: date,
        period_end: date,
        warehouse_id: UUID | None = None,
        zone_id: UUID | None = None,
        zone_scoped: bool = False,
    ) -> Select[tuple[Route]]:
        """Build the query for payable routes in a period.

        A route qualifies when it is completed, has stops and falls within
        the period. With a warehouse, zone-scoped warehouses claim routes
        whose zone belongs to them; other warehouses claim routes by their
        own warehouse reference.
        """
        start, end_exclusive = day_bounds(period_start, period_end)
        query = select(Route).where(
            Route.status == RouteStatus.COMPLETED.value,
            Route.delivery_stops > 0,
            Route.route_date >= start,
            Route.route_date < end_exclusive,
            Route.driver_id.is_not(None),
        )

        if zone_id is not None:
            query = query.where(Route.zone_id == zone_id)

        if warehouse_id is not None:
            if zone_scoped:
                query = query.where(
                    Route.zone_id.is_not(None),
                    Route.zone.has(Zone.warehouse_id == warehouse_id),
                )
            else:
                query = query.where(Route.warehouse_id == warehouse_id)

        return query

    async def load_routes(
        self,
        driver_id: UUID,
        period_start: date,
        period_end: date,
        warehouse_id: UUID | None = None,
        zone_id: UUID | None = None,
        zone_scoped: bool = False,
    ) -> list[Route]:
        """Load a driver's payable routes with their zones."""
        query = (
            self.qualifying_routes(period_start, period_end, warehouse_id, zone_id, zone_scoped)
            .where(Route.driver_id == driver_id)
            .options(selectinload(Route.zone))
            .order_by(Route.route_date, Route.route_id)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def load_driver_ids(
        self,
        period_start: date,
        period_end: date,
        warehouse_id: UUID | None = None,
        zone_id: UUID | None = None,
        zone_scoped: bool = False,
        exclude_warehouse_ids: set[UUID] | None = None,
    ) -> list[UUID]:
        """Distinct drivers with at least one payable, warehouse-assigned route."""
        query = self.qualifying_routes(
            period_start, period_end, warehouse_id, zone_id, zone_scoped
        )
        # Routes without a warehouse are not batched
        query = query.where(Route.warehouse_id.is_not(None))
        if exclude_warehouse_ids:
            query = query.where(Route.warehouse_id.not_in(exclude_warehouse_ids))
        result = await self.session.execute(
            query.with_only_columns(Route.driver_id).distinct().order_by(Route.driver_id)
        )
        return [driver_id for driver_id in result.scalars().all() if driver_id is not None]

    async def load_package_weights(
        self,
        route_ids: list[UUID],
    ) -> tuple[dict[UUID, list[Decimal]], list[UUID]]:
        """Load package weights per route and all package ids on those routes.

        Packages without a recorded weight are listed but carry no weight.
        """
        if not route_ids:
            return {}, []

        result = await self.session.execute(
            select(Package.package_id, Package.route_id, Package.weight)
            .where(Package.route_id.in_(route_ids))
            .order_by(Package.route_id, Package.package_id)
        )
        weights: dict[UUID, list[Decimal]] = defaultdict(list)
        package_ids: list[UUID] = []
        for package_id, route_id, weight in result.all():
            package_ids.append(package_id)
            if weight is not None:
                weights[route_id].append(weight)
        return dict(weights), package_ids

    async def load_fines(self, package_ids: list[UUID]) -> list[tuple[UUID, Decimal]]:
        """Load (route_id, amount) for confirmed fines on the given packages."""
        if not package_ids:
            return []

        result = await self.session.execute(
            select(Package.route_id, PayrollFine.amount)
            .select_from(PayrollFine)
            .join(Package, PayrollFine.package_id == Package.package_id)
            .where(
                PayrollFine.package_id.in_(package_ids),
                PayrollFine.amount > 0,
                Package.route_id.is_not(None),
            )
            .order_by(Package.route_id, PayrollFine.fine_id)
        )
        return [(route_id, amount) for route_id, amount in result.all()]

    async def load_payroll_config(self, warehouse_id: UUID) -> PayrollConfig | None:
        """Load a warehouse's payroll config with its rules."""
        result = await self.session.execute(
            select(PayrollConfig)
            .where(PayrollConfig.warehouse_id == warehouse_id)
            .options(
                selectinload(PayrollConfig.weight_rules),
                selectinload(PayrollConfig.penalty_rules),
                selectinload(PayrollConfig.bonus_rules),
            )
        )
        return result.scalar_one_or_none()

    async def load_zone_scoped_warehouse_ids(self, warehouse_ids: list[UUID]) -> set[UUID]:
        """Return which of the given warehouses attribute routes through zones."""
        if not warehouse_ids:
            return set()
        result = await self.session.execute(
            select(PayrollConfig.warehouse_id).where(
                PayrollConfig.warehouse_id.in_(warehouse_ids),
                PayrollConfig.zone_scoped_routes.is_(True),
            )
        )
        return set(result.scalars().all())

    async def find_unzoned_routes(
        self,
        period_start: date,
        period_end: date,
        warehouse_id: UUID | None = None,
        zone_id: UUID | None = None,
    ) -> dict[UUID, dict[str, int]]:
        """Count payable routes without a zone in zone-scoped warehouses.

        Returns {warehouse_id: {"YYYY-MM-DD": route count}}.
        """
        base = self.qualifying_routes(period_start, period_end, warehouse_id, zone_id)
        result = await self.session.execute(
            base.with_only_columns(Route.warehouse_id).where(
                Route.warehouse_id.is_not(None)
            ).distinct()
        )
        warehouse_ids = list(result.scalars().all())
        zone_scoped = await self.load_zone_scoped_warehouse_ids(warehouse_ids)
        if not zone_scoped:
            return {}

        result = await self.session.execute(
            base.with_only_columns(Route.warehouse_id, Route.route_date).where(
                Route.zone_id.is_(None),
                Route.warehouse_id.in_(zone_scoped),
            )
        )
        counts: dict[UUID, dict[str, int]] = defaultdict(lambda: defaultdict(int))
        for wid, route_date in result.all():
            counts[wid][route_date.date().isoformat()] += 1
        return {wid: dict(sorted(days.items())) for wid, days in counts.items()}
