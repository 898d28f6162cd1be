"""Route pricing policy.

Prices one completed route into pay lines: the payment-type branch, weight
extras, the failed-stop penalty, the minimum-per-route top-up and fines, in
that order. Pure functions; inputs are snapshots built by the engine.
"""

from __future__ import annotations

from decimal import Decimal

from route_payroll.calculators.line_builder import LineItemBuilder
from route_payroll.calculators.types import (
    LineCandidate,
    LineTag,
    RateTerms,
    RouteContext,
    RoutePricing,
    SourceType,
    WeightBracket,
)
from route_payroll.models import PaymentType


def resolve_per_stop_rate(
    driver_base: Decimal,
    zone_price: Decimal | None,
    has_zone: bool,
) -> tuple[Decimal, LineTag]:
    """Pick the per-stop rate between the driver's base and the zone price.

    A positive zone price competes with the base and the higher one wins, so
    a driver is never paid below their own base. Without a usable zone price
    the base applies and the outcome is tagged as a warning.
    """
    if zone_price is not None and zone_price > 0:
        if driver_base > zone_price:
            return driver_base, LineTag.USE_DRIVER_BASE
        return Decimal(zone_price), LineTag.USE_ZONE_RATE

    if not has_zone:
        return driver_base, LineTag.WARN_NO_ZONE
    return driver_base, LineTag.WARN_ZONE_PRICE_FALLBACK


def price_route(
    route: RouteContext,
    rate: RateTerms,
    weight_extras: list[tuple[WeightBracket, int]] | None = None,
    fine_total: Decimal | None = None,
) -> RoutePricing:
    """Price a single route.

    Args:
        route: The route snapshot
        rate: The driver's resolved rate terms
        weight_extras: Matched (bracket, package count) pairs for this route
        fine_total: Sum of confirmed fines on this route's packages

    Returns:
        RoutePricing with lines in emission order
    """
    result = RoutePricing(route_id=route.route_id)
    source_id = str(route.route_id)
    day = route.route_date.isoformat()

    def emit(line: LineCandidate) -> Decimal:
        result.lines.append(line)
        return line.amount

    per_stop, stop_tag = resolve_per_stop_rate(
        rate.base_amount, route.zone_price_stop, route.has_zone
    )
    delivered = route.delivered
    failed = route.failed
    price = route.price_route
    subtotal = Decimal("0")

    if route.payment_type == PaymentType.PER_ROUTE.value:
        if price is None or price <= 0:
            result.warnings.append(
                f"Route {route.route_id}: PerRoute payment without a valid route price "
                f"({price}); paid 0."
            )
            emit(
                LineItemBuilder.create_line(
                    SourceType.ROUTE,
                    source_id,
                    f"Route {route.route_id} - {day} (PerRoute, no price)",
                    1,
                    0,
                    LineTag.WARN_NO_ROUTE_PRICE,
                )
            )
        else:
            subtotal += emit(
                LineItemBuilder.create_line(
                    SourceType.ROUTE,
                    source_id,
                    f"Route {route.route_id} - {day} (PerRoute)",
                    1,
                    price,
                    LineTag.PAY_PER_ROUTE,
                )
            )

    elif route.payment_type == PaymentType.PER_STOP.value:
        if delivered > 0:
            zone_label = f"zone {route.zone_id}" if route.has_zone else "no zone"
            subtotal += emit(
                LineItemBuilder.create_line(
                    SourceType.STOP,
                    source_id,
                    f"Delivered stops ({zone_label}) (PerStop)",
                    delivered,
                    per_stop,
                    stop_tag,
                )
            )
        else:
            # Zero-amount record that the route was considered
            emit(
                LineItemBuilder.create_line(
                    SourceType.STOP,
                    source_id,
                    "Delivered stops 0 (PerStop)",
                    0,
                    per_stop,
                    LineTag.INFO_ZERO_DELIVERED,
                )
            )

    else:
        # Mixed, and anything unrecognized: route and stop pay are additive
        if price is not None and price > 0:
            subtotal += emit(
                LineItemBuilder.create_line(
                    SourceType.ROUTE,
                    source_id,
                    f"Route {route.route_id} - {day} (Mixed-Route)",
                    1,
                    price,
                    LineTag.PAY_MIXED_ROUTE,
                )
            )
        if delivered > 0:
            subtotal += emit(
                LineItemBuilder.create_line(
                    SourceType.STOP,
                    source_id,
                    "Delivered stops (Mixed-Stop)",
                    delivered,
                    per_stop,
                    LineTag.PAY_MIXED_STOP,
                )
            )

    for bracket, count in weight_extras or []:
        subtotal += emit(
            LineItemBuilder.create_line(
                SourceType.WEIGHT_EXTRA,
                source_id,
                f"Weight extra {bracket.label}",
                count,
                bracket.extra_amount,
                LineTag.WEIGHT_EXTRA,
            )
        )

    penalty = rate.failed_stop_penalty
    if failed > 0 and penalty is not None and penalty > 0:
        subtotal += emit(
            LineItemBuilder.create_charge_line(
                SourceType.STOP,
                source_id,
                "Failed stop penalty (CNL)",
                failed,
                penalty,
                LineTag.CNL_PENALTY,
            )
        )

    minimum = rate.min_pay_per_route
    if minimum is not None and subtotal < minimum:
        subtotal += emit(
            LineItemBuilder.create_line(
                SourceType.BONUS,
                source_id,
                "Minimum pay per route adjustment",
                1,
                minimum - subtotal,
                LineTag.MIN_ROUTE_ADJUST,
            )
        )

    result.subtotal = subtotal

    if fine_total:
        result.fine_total = Decimal(fine_total)
        emit(
            LineItemBuilder.create_charge_line(
                SourceType.FINE,
                source_id,
                "Fines applied",
                1,
                fine_total,
                LineTag.FINE_APPLIED,
            )
        )

    return result
