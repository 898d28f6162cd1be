"""Operational records owned by dispatch: zones, routes and packages.

The payroll engine only reads these tables.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from route_payroll.models.base import Base, TimestampMixin


class RouteStatus(str, Enum):
    """Dispatch status of a route."""

    PENDING = "Pending"
    ASSIGNED = "Assigned"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    DELAYED = "Delayed"
    FUTURE = "Future"
    CREATED = "Created"
    AVAILABLE = "Available"
    LOADING = "Loading"
    PENDING_COMPLETION = "PendingCompletion"


class PaymentType(str, Enum):
    """How a route is paid to its driver."""

    PER_ROUTE = "PerRoute"
    PER_STOP = "PerStop"
    MIXED = "Mixed"


class Zone(Base, TimestampMixin):
    """Delivery zone of a warehouse with its own per-stop price."""

    __tablename__ = "zone"

    zone_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    zone_code: Mapped[str] = mapped_column(String(50), nullable=False)
    price_stop: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    warehouse_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    area: Mapped[str | None] = mapped_column(String(100), nullable=True)


class Route(Base, TimestampMixin):
    """A delivery route driven on a given day."""

    __tablename__ = "route"

    route_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    route_date: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    delivery_stops: Mapped[int] = mapped_column(Integer, nullable=False)
    cnl: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    driver_id: Mapped[UUID | None] = mapped_column(nullable=True, index=True)
    status: Mapped[str | None] = mapped_column(String, nullable=True)
    zone_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("zone.zone_id"),
        nullable=True,
    )
    payment_type: Mapped[str] = mapped_column(
        String, nullable=False, default=PaymentType.PER_STOP.value
    )
    price_route: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    route_code: Mapped[str | None] = mapped_column(String, nullable=True)
    warehouse_id: Mapped[UUID | None] = mapped_column(nullable=True, index=True)

    __table_args__ = (
        CheckConstraint("delivery_stops >= 0", name="route_stops_check"),
    )

    # Relationships
    zone: Mapped[Zone | None] = relationship()


class Package(Base, TimestampMixin):
    """A package delivered (or attempted) on a route."""

    __tablename__ = "package"

    package_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    route_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("route.route_id"),
        nullable=True,
        index=True,
    )
    tracking: Mapped[str] = mapped_column(String, nullable=False)
    weight: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
