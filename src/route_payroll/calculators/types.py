"""Type definitions for the route pricing pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID

if TYPE_CHECKING:
    from route_payroll.models import DriverRate, PayrollWeightRule, Route


class SourceType(str, Enum):
    """What a pay run line was priced from."""

    ROUTE = "Route"
    STOP = "Stop"
    WEIGHT_EXTRA = "WeightExtra"
    FINE = "Fine"
    BONUS = "Bonus"
    INFO = "Info"


class LineTag(str, Enum):
    """Machine-readable outcome code attached to a line."""

    PAY_PER_ROUTE = "PAY_PER_ROUTE"
    PAY_MIXED_ROUTE = "PAY_MIXED_ROUTE"
    PAY_MIXED_STOP = "PAY_MIXED_STOP"
    USE_DRIVER_BASE = "USE_DRIVER_BASE"
    USE_ZONE_RATE = "USE_ZONE_RATE"
    WARN_NO_ZONE = "WARN_NO_ZONE"
    WARN_ZONE_PRICE_FALLBACK = "WARN_ZONE_PRICE_FALLBACK"
    WARN_NO_ROUTE_PRICE = "WARN_NO_ROUTE_PRICE"
    INFO_ZERO_DELIVERED = "INFO_ZERO_DELIVERED"
    WEIGHT_EXTRA = "WEIGHT_EXTRA"
    CNL_PENALTY = "CNL_PENALTY"
    MIN_ROUTE_ADJUST = "MIN_ROUTE_ADJUST"
    FINE_APPLIED = "FINE_APPLIED"
    WARN_SUMMARY = "WARN_SUMMARY"


@dataclass(frozen=True)
class LineCandidate:
    """A priced line before persistence.

    The amount is always qty * rate; there is no way to set it directly.
    """

    source_type: SourceType
    source_id: str | None
    description: str | None
    quantity: Decimal
    rate: Decimal
    tag: LineTag | None = None

    @property
    def amount(self) -> Decimal:
        return self.quantity * self.rate

    def to_canonical_dict(self) -> dict[str, Any]:
        """Return canonical dict for hashing (deterministic ordering)."""
        return {
            "source_type": self.source_type.value,
            "source_id": self.source_id,
            "description": self.description,
            "quantity": str(self.quantity),
            "rate": str(self.rate),
            "amount": str(self.amount),
            "tag": self.tag.value if self.tag else None,
        }


@dataclass(frozen=True)
class RateTerms:
    """Snapshot of the driver rate fields that drive route pricing."""

    base_amount: Decimal
    failed_stop_penalty: Decimal | None = None
    min_pay_per_route: Decimal | None = None

    @classmethod
    def from_rate(cls, rate: DriverRate) -> RateTerms:
        return cls(
            base_amount=Decimal(rate.base_amount),
            failed_stop_penalty=rate.failed_stop_penalty,
            min_pay_per_route=rate.min_pay_per_route,
        )


@dataclass(frozen=True)
class RouteContext:
    """Snapshot of a completed route and its zone, as pricing sees it."""

    route_id: UUID
    route_date: date
    stops: int
    cnl: int
    payment_type: str
    price_route: Decimal | None = None
    zone_id: UUID | None = None
    zone_price_stop: Decimal | None = None

    @property
    def has_zone(self) -> bool:
        return self.zone_id is not None

    @property
    def delivered(self) -> int:
        return max(0, self.stops - self.cnl)

    @property
    def failed(self) -> int:
        return max(0, self.cnl)

    @classmethod
    def from_route(cls, route: Route) -> RouteContext:
        """Build from a route loaded with its zone."""
        route_date = route.route_date
        if isinstance(route_date, datetime):
            route_date = route_date.date()
        zone = route.zone
        return cls(
            route_id=route.route_id,
            route_date=route_date,
            stops=route.delivery_stops,
            cnl=route.cnl,
            payment_type=route.payment_type,
            price_route=route.price_route,
            zone_id=route.zone_id if zone is not None else None,
            zone_price_stop=zone.price_stop if zone is not None else None,
        )


@dataclass(frozen=True)
class WeightBracket:
    """An active weight rule reduced to what matching needs."""

    rule_id: UUID
    min_weight: Decimal
    max_weight: Decimal | None
    extra_amount: Decimal
    priority: int = 0

    @classmethod
    def from_rule(cls, rule: PayrollWeightRule) -> WeightBracket:
        return cls(
            rule_id=rule.weight_rule_id,
            min_weight=rule.min_weight,
            max_weight=rule.max_weight,
            extra_amount=rule.extra_amount,
            priority=rule.priority,
        )

    def matches(self, weight: Decimal) -> bool:
        if weight < self.min_weight:
            return False
        if self.max_weight is not None and weight > self.max_weight:
            return False
        return True

    @property
    def label(self) -> str:
        upper = str(self.max_weight) if self.max_weight is not None else "inf"
        return f"[{self.min_weight}-{upper}]"


@dataclass
class RoutePricing:
    """All lines priced for one route."""

    route_id: UUID
    lines: list[LineCandidate] = field(default_factory=list)
    subtotal: Decimal = Decimal("0")  # before fines
    fine_total: Decimal = Decimal("0")
    warnings: list[str] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return sum((line.amount for line in self.lines), Decimal("0"))


@dataclass
class DriverPayInputs:
    """Everything the engine needs to price one driver's period."""

    driver_id: UUID
    period_start: date
    period_end: date
    rate: RateTerms
    routes: list[RouteContext]
    weight_brackets: list[WeightBracket] = field(default_factory=list)
    weights_by_route: dict[UUID, list[Decimal]] = field(default_factory=dict)
    fines_by_route: dict[UUID, Decimal] = field(default_factory=dict)
