"""Driver rate cards and per-warehouse payroll configuration."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from route_payroll.models.base import Base, TimestampMixin


class PenaltyType(str, Enum):
    """Incident categories a penalty rule can price."""

    UNKNOWN = "Unknown"
    DELIVERY_ERROR = "DeliveryError"
    DAMAGED = "Damaged"
    WRONG_ADDRESS = "WrongAddress"
    LATE_DELIVERY = "LateDelivery"
    NO_SCAN = "NoScan"
    MANUAL_ENTRY = "ManualEntry"
    CUSTOMER_COMPLAINT = "CustomerComplaint"


class BonusType(str, Enum):
    """Performance categories a bonus rule can reward."""

    UNKNOWN = "Unknown"
    HIGH_ON_TIME = "HighOnTime"
    HIGH_STOPS = "HighStops"
    LOW_CNL = "LowCnl"


class DriverRate(Base, TimestampMixin):
    """Versioned driver rate card."""

    __tablename__ = "driver_rate"

    driver_rate_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    driver_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    rate_type: Mapped[str] = mapped_column(String, nullable=False, default="PerStop")
    base_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    min_pay_per_route: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    over_stop_bonus_threshold: Mapped[int | None] = mapped_column(Integer, nullable=True)
    over_stop_bonus_per_stop: Mapped[Decimal | None] = mapped_column(
        Numeric(18, 2), nullable=True
    )
    failed_stop_penalty: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    rescue_stop_rate: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    night_delivery_bonus: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    effective_from: Mapped[date] = mapped_column(Date, nullable=False)
    effective_to: Mapped[date | None] = mapped_column(Date, nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "rate_type IN ('PerRoute', 'PerStop', 'PerPackage', 'PerMile', 'Hourly', 'Mixed')",
            name="driver_rate_type_check",
        ),
        CheckConstraint(
            "effective_to IS NULL OR effective_to >= effective_from",
            name="driver_rate_dates_check",
        ),
    )


class PayrollConfig(Base, TimestampMixin):
    """Payroll feature flags and rules for one warehouse."""

    __tablename__ = "payroll_config"

    payroll_config_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    warehouse_id: Mapped[UUID] = mapped_column(nullable=False, unique=True)
    enable_weight_extra: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    enable_penalties: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    enable_bonuses: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Routes of a zone-scoped warehouse are attributed through their zone.
    zone_scoped_routes: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    default_penalty_amount: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False, default=Decimal("0")
    )
    penalty_cap_per_week: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    weight_rules: Mapped[list[PayrollWeightRule]] = relationship(
        cascade="all, delete-orphan",
    )
    penalty_rules: Mapped[list[PayrollPenaltyRule]] = relationship(
        cascade="all, delete-orphan",
    )
    bonus_rules: Mapped[list[PayrollBonusRule]] = relationship(
        cascade="all, delete-orphan",
    )


class PayrollWeightRule(Base):
    """Weight bracket paying an extra amount per matching package."""

    __tablename__ = "payroll_weight_rule"

    weight_rule_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    payroll_config_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_config.payroll_config_id", ondelete="CASCADE"),
        nullable=False,
    )
    min_weight: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    max_weight: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    extra_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint(
            "max_weight IS NULL OR max_weight >= min_weight",
            name="payroll_weight_rule_range_check",
        ),
    )


class PayrollPenaltyRule(Base):
    """Fixed penalty per incident type."""

    __tablename__ = "payroll_penalty_rule"

    penalty_rule_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    payroll_config_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_config.payroll_config_id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[str] = mapped_column(String, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    apply_per_occurrence: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    max_occurrences_per_week: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("payroll_config_id", "type", name="payroll_penalty_rule_type_unique"),
    )


class PayrollBonusRule(Base):
    """Bonus paid when a performance threshold is met."""

    __tablename__ = "payroll_bonus_rule"

    bonus_rule_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    payroll_config_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_config.payroll_config_id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[str] = mapped_column(String, nullable=False)
    threshold: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class PayrollFine(Base, TimestampMixin):
    """Confirmed monetary charge against a driver for one package."""

    __tablename__ = "payroll_fine"

    fine_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    package_id: Mapped[UUID] = mapped_column(
        ForeignKey("package.package_id"),
        nullable=False,
        index=True,
    )
    driver_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    tracking: Mapped[str | None] = mapped_column(String(100), nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
