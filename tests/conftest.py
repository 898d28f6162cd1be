"""Pytest fixtures for route payroll tests."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import AsyncGenerator
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from route_payroll.models import (
    Base,
    DriverRate,
    Package,
    PaymentType,
    PayrollConfig,
    PayrollFine,
    PayrollWeightRule,
    Route,
    RouteStatus,
    Zone,
)

# Use in-memory SQLite for tests (with async support)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def engine():
    """Create a fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def company_id() -> UUID:
    return uuid4()


@pytest.fixture
def warehouse_id() -> UUID:
    return uuid4()


@pytest.fixture
def driver_id() -> UUID:
    return uuid4()


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest_asyncio.fixture
async def zone(session: AsyncSession, warehouse_id: UUID) -> Zone:
    """A zone paying 2.50 per stop."""
    zone = Zone(
        zone_id=uuid4(),
        zone_code="Z-NORTH",
        price_stop=Decimal("2.50"),
        warehouse_id=warehouse_id,
        area="North",
    )
    session.add(zone)
    await session.flush()
    return zone


@pytest_asyncio.fixture
async def driver_rate(session: AsyncSession, driver_id: UUID) -> DriverRate:
    """Driver base of 2.00 per stop with a 1.00 failed-stop penalty."""
    rate = DriverRate(
        driver_rate_id=uuid4(),
        driver_id=driver_id,
        rate_type="PerStop",
        base_amount=Decimal("2.00"),
        failed_stop_penalty=Decimal("1.00"),
        effective_from=date(2024, 1, 1),
    )
    session.add(rate)
    await session.flush()
    return rate


@pytest_asyncio.fixture
async def payroll_config(session: AsyncSession, warehouse_id: UUID) -> PayrollConfig:
    """Warehouse config with weight extras enabled and two brackets."""
    config = PayrollConfig(
        payroll_config_id=uuid4(),
        warehouse_id=warehouse_id,
        enable_weight_extra=True,
    )
    config.weight_rules = [
        PayrollWeightRule(
            weight_rule_id=uuid4(),
            min_weight=Decimal("50"),
            max_weight=Decimal("100"),
            extra_amount=Decimal("1.50"),
            priority=0,
        ),
        PayrollWeightRule(
            weight_rule_id=uuid4(),
            min_weight=Decimal("100.01"),
            max_weight=Decimal("150"),
            extra_amount=Decimal("3.00"),
            priority=0,
        ),
    ]
    session.add(config)
    await session.flush()
    return config


@pytest.fixture
def make_route(session: AsyncSession, driver_id: UUID, warehouse_id: UUID):
    """Factory adding a completed route for the test driver."""

    async def _make_route(
        stops: int = 10,
        cnl: int = 0,
        payment_type: PaymentType = PaymentType.PER_STOP,
        price_route: Decimal | None = None,
        zone: Zone | None = None,
        route_date: datetime = datetime(2024, 1, 16, 8, 30),
        status: RouteStatus = RouteStatus.COMPLETED,
        driver: UUID | None = None,
        warehouse: UUID | None = None,
    ) -> Route:
        route = Route(
            route_id=uuid4(),
            route_date=route_date,
            delivery_stops=stops,
            cnl=cnl,
            driver_id=driver or driver_id,
            status=status.value,
            zone_id=zone.zone_id if zone is not None else None,
            payment_type=payment_type.value,
            price_route=price_route,
            warehouse_id=warehouse or warehouse_id,
        )
        session.add(route)
        await session.flush()
        return route

    return _make_route


@pytest.fixture
def make_package(session: AsyncSession):
    """Factory adding a package to a route."""

    async def _make_package(route: Route, weight: Decimal | None = None) -> Package:
        package = Package(
            package_id=uuid4(),
            route_id=route.route_id,
            tracking=f"TRK-{uuid4().hex[:10]}",
            weight=weight,
        )
        session.add(package)
        await session.flush()
        return package

    return _make_package


@pytest.fixture
def make_fine(session: AsyncSession, driver_id: UUID):
    """Factory adding a fine on a package."""

    async def _make_fine(package: Package, amount: Decimal, type: str = "MissingPackage") -> PayrollFine:
        fine = PayrollFine(
            fine_id=uuid4(),
            package_id=package.package_id,
            driver_id=driver_id,
            tracking=package.tracking,
            amount=amount,
            type=type,
        )
        session.add(fine)
        await session.flush()
        return fine

    return _make_fine
