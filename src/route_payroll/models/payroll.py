"""Pay period, pay run and pay run line models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import Mapped, mapped_column, relationship

from route_payroll.models.base import Base, TimestampMixin


class PayPeriod(Base, TimestampMixin):
    """Company (and optionally warehouse) scoped payroll date range."""

    __tablename__ = "pay_period"

    pay_period_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    company_id: Mapped[UUID] = mapped_column(nullable=False)
    warehouse_id: Mapped[UUID | None] = mapped_column(nullable=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="Open")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[UUID | None] = mapped_column(nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "company_id",
            "warehouse_id",
            "start_date",
            "end_date",
            name="pay_period_natural_key_unique",
        ),
        # NULLs are distinct in the key above; company-wide periods need their own
        Index(
            "pay_period_company_wide_unique",
            "company_id",
            "start_date",
            "end_date",
            unique=True,
            postgresql_where=text("warehouse_id IS NULL"),
            sqlite_where=text("warehouse_id IS NULL"),
        ),
        CheckConstraint(
            "status IN ('Open', 'Locked', 'Approved')",
            name="pay_period_status_check",
        ),
        CheckConstraint("end_date >= start_date", name="pay_period_dates_check"),
    )


class PayRun(Base, TimestampMixin):
    """One driver's computed ledger for a pay period."""

    __tablename__ = "pay_run"

    pay_run_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    pay_period_id: Mapped[UUID] = mapped_column(
        ForeignKey("pay_period.pay_period_id", ondelete="CASCADE"),
        nullable=False,
    )
    driver_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    gross_amount: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False, default=Decimal("0")
    )
    adjustments: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False, default=Decimal("0")
    )
    status: Mapped[str] = mapped_column(String, nullable=False, default="Draft")
    calculated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    calculated_by: Mapped[UUID | None] = mapped_column(nullable=True)

    __table_args__ = (
        UniqueConstraint("pay_period_id", "driver_id", name="pay_run_period_driver_unique"),
        CheckConstraint("status IN ('Draft', 'Approved')", name="pay_run_status_check"),
    )

    # Relationships
    lines: Mapped[list[PayRunLine]] = relationship(
        cascade="all, delete-orphan",
        order_by="PayRunLine.line_no",
    )
    adjustment_entries: Mapped[list[PayrollAdjustment]] = relationship(
        cascade="all, delete-orphan",
    )

    @hybrid_property
    def net_amount(self) -> Decimal:
        """Net pay: gross plus separately entered adjustments."""
        return self.gross_amount + self.adjustments


class PayRunLine(Base, TimestampMixin):
    """One priced fact within a pay run."""

    __tablename__ = "pay_run_line"

    pay_run_line_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    pay_run_id: Mapped[UUID] = mapped_column(
        ForeignKey("pay_run.pay_run_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    line_no: Mapped[int] = mapped_column(Integer, nullable=False)
    source_type: Mapped[str] = mapped_column(String, nullable=False)
    source_id: Mapped[str | None] = mapped_column(String, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    qty: Mapped[Decimal] = mapped_column(Numeric(18, 4), nullable=False)
    rate: Mapped[Decimal] = mapped_column(Numeric(18, 4), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 4), nullable=False)
    tags: Mapped[str | None] = mapped_column(String, nullable=True)
    line_hash: Mapped[str] = mapped_column(String, nullable=False)

    __table_args__ = (
        UniqueConstraint("pay_run_id", "line_no", name="pay_run_line_position_unique"),
        CheckConstraint(
            "source_type IN ('Route', 'Stop', 'WeightExtra', 'Fine', 'Bonus', 'Info')",
            name="pay_run_line_source_type_check",
        ),
    )


class PayrollAdjustment(Base, TimestampMixin):
    """Manually entered bonus, penalty or reimbursement on a pay run."""

    __tablename__ = "payroll_adjustment"

    adjustment_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    pay_run_id: Mapped[UUID] = mapped_column(
        ForeignKey("pay_run.pay_run_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[str] = mapped_column(String, nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    created_by: Mapped[UUID | None] = mapped_column(nullable=True)

    __table_args__ = (
        CheckConstraint(
            "type IN ('Bonus', 'Penalty', 'Reimbursement')",
            name="payroll_adjustment_type_check",
        ),
    )
