"""Tests for single-route pricing."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from route_payroll.calculators.pricing import price_route, resolve_per_stop_rate
from route_payroll.calculators.types import (
    LineTag,
    RateTerms,
    RouteContext,
    SourceType,
    WeightBracket,
)


def make_route(**overrides) -> RouteContext:
    values = dict(
        route_id=uuid4(),
        route_date=date(2024, 1, 16),
        stops=10,
        cnl=0,
        payment_type="PerStop",
        price_route=None,
        zone_id=None,
        zone_price_stop=None,
    )
    values.update(overrides)
    return RouteContext(**values)


BASE = RateTerms(base_amount=Decimal("2.00"))


class TestResolvePerStopRate:
    """Test choosing between the driver base and the zone price."""

    def test_zone_price_higher_wins(self):
        assert resolve_per_stop_rate(Decimal("2.00"), Decimal("2.50"), True) == (
            Decimal("2.50"),
            LineTag.USE_ZONE_RATE,
        )

    def test_driver_base_higher_wins(self):
        assert resolve_per_stop_rate(Decimal("3.00"), Decimal("2.50"), True) == (
            Decimal("3.00"),
            LineTag.USE_DRIVER_BASE,
        )

    def test_equal_uses_zone_rate(self):
        assert resolve_per_stop_rate(Decimal("2.50"), Decimal("2.50"), True)[1] == LineTag.USE_ZONE_RATE

    def test_no_zone(self):
        assert resolve_per_stop_rate(Decimal("2.00"), None, False) == (
            Decimal("2.00"),
            LineTag.WARN_NO_ZONE,
        )

    @pytest.mark.parametrize("zone_price", [None, Decimal("0")])
    def test_zone_without_usable_price(self, zone_price):
        assert resolve_per_stop_rate(Decimal("2.00"), zone_price, True) == (
            Decimal("2.00"),
            LineTag.WARN_ZONE_PRICE_FALLBACK,
        )


class TestPerStop:
    """Test PerStop routes."""

    def test_no_zone_uses_base(self):
        """10 stops, 0 cnl, no zone: one line 10 x 2.00."""
        route = make_route()
        result = price_route(route, BASE)

        assert len(result.lines) == 1
        line = result.lines[0]
        assert line.source_type == SourceType.STOP
        assert line.source_id == str(route.route_id)
        assert line.description == "Delivered stops (no zone) (PerStop)"
        assert line.quantity == 10
        assert line.amount == Decimal("20.00")
        assert line.tag == LineTag.WARN_NO_ZONE
        assert result.warnings == []

    def test_zone_rate_with_penalty(self):
        """12 stops, 2 cnl, zone 2.50, penalty 1.00."""
        zone_id = uuid4()
        route = make_route(stops=12, cnl=2, zone_id=zone_id, zone_price_stop=Decimal("2.50"))
        rate = RateTerms(base_amount=Decimal("2.00"), failed_stop_penalty=Decimal("1.00"))

        result = price_route(route, rate)

        assert [line.tag for line in result.lines] == [LineTag.USE_ZONE_RATE, LineTag.CNL_PENALTY]
        stops, penalty = result.lines
        assert stops.description == f"Delivered stops (zone {zone_id}) (PerStop)"
        assert stops.quantity == 10
        assert stops.amount == Decimal("25.00")
        assert penalty.source_type == SourceType.STOP
        assert penalty.quantity == 2
        assert penalty.rate == Decimal("-1.00")
        assert penalty.amount == Decimal("-2.00")
        assert result.total == Decimal("23.00")

    def test_zone_beats_base_with_one_failed_stop(self):
        """Base 2.00, zone 2.50, 10 stops, 1 CNL, penalty 1.00 nets 21.50."""
        route = make_route(stops=10, cnl=1, zone_id=uuid4(), zone_price_stop=Decimal("2.50"))
        rate = RateTerms(base_amount=Decimal("2.00"), failed_stop_penalty=Decimal("1.00"))

        result = price_route(route, rate)

        stops, penalty = result.lines
        assert (stops.quantity, stops.rate, stops.amount) == (9, Decimal("2.50"), Decimal("22.50"))
        assert (penalty.quantity, penalty.rate) == (1, Decimal("-1.00"))
        assert result.total == Decimal("21.50")

    def test_zero_delivered_is_recorded(self):
        """All stops failed still leaves a zero line for the route."""
        route = make_route(stops=3, cnl=3)
        result = price_route(route, BASE)

        assert len(result.lines) == 1
        assert result.lines[0].tag == LineTag.INFO_ZERO_DELIVERED
        assert result.lines[0].description == "Delivered stops 0 (PerStop)"
        assert result.lines[0].amount == 0

    def test_cnl_above_stops_clamps_delivered(self):
        route = make_route(stops=2, cnl=5)
        assert route.delivered == 0
        result = price_route(route, BASE)
        assert result.lines[0].quantity == 0

    def test_no_penalty_configured(self):
        route = make_route(stops=12, cnl=2)
        result = price_route(route, BASE)
        assert [line.tag for line in result.lines] == [LineTag.WARN_NO_ZONE]


class TestPerRoute:
    """Test PerRoute routes."""

    def test_flat_price(self):
        route = make_route(payment_type="PerRoute", price_route=Decimal("120.00"))
        result = price_route(route, BASE)

        assert len(result.lines) == 1
        line = result.lines[0]
        assert line.source_type == SourceType.ROUTE
        assert line.tag == LineTag.PAY_PER_ROUTE
        assert line.quantity == 1
        assert line.amount == Decimal("120.00")
        assert line.description == f"Route {route.route_id} - 2024-01-16 (PerRoute)"

    @pytest.mark.parametrize("price", [None, Decimal("0"), Decimal("-5")])
    def test_missing_price_warns_and_pays_zero(self, price):
        route = make_route(payment_type="PerRoute", price_route=price)
        result = price_route(route, BASE)

        assert len(result.lines) == 1
        assert result.lines[0].tag == LineTag.WARN_NO_ROUTE_PRICE
        assert result.lines[0].amount == 0
        assert len(result.warnings) == 1
        assert str(route.route_id) in result.warnings[0]

    def test_stop_count_ignored(self):
        route = make_route(stops=40, payment_type="PerRoute", price_route=Decimal("90"))
        assert price_route(route, BASE).total == Decimal("90")


class TestMixed:
    """Test Mixed routes."""

    def test_route_and_stop_lines_add_up(self):
        route = make_route(
            stops=10,
            payment_type="Mixed",
            price_route=Decimal("50.00"),
            zone_id=uuid4(),
            zone_price_stop=Decimal("1.00"),
        )
        result = price_route(route, BASE)

        assert [line.tag for line in result.lines] == [
            LineTag.PAY_MIXED_ROUTE,
            LineTag.PAY_MIXED_STOP,
        ]
        assert [line.source_type for line in result.lines] == [SourceType.ROUTE, SourceType.STOP]
        # base 2.00 beats zone 1.00
        assert result.lines[1].rate == Decimal("2.00")
        assert result.total == Decimal("70.00")

    def test_mixed_without_price_pays_stops_only(self):
        route = make_route(payment_type="Mixed", price_route=None)
        result = price_route(route, BASE)

        assert [line.tag for line in result.lines] == [LineTag.PAY_MIXED_STOP]
        assert result.warnings == []

    def test_unknown_payment_type_treated_as_mixed(self):
        route = make_route(payment_type="Hourly", price_route=Decimal("10"))
        result = price_route(route, BASE)
        assert result.total == Decimal("30.00")


class TestAdjustments:
    """Test extras, minimum top-up and fines."""

    def test_emission_order(self):
        bracket = WeightBracket(
            rule_id=uuid4(),
            min_weight=Decimal("50"),
            max_weight=Decimal("100"),
            extra_amount=Decimal("1.50"),
        )
        route = make_route(stops=5, cnl=1)
        rate = RateTerms(
            base_amount=Decimal("2.00"),
            failed_stop_penalty=Decimal("1.00"),
            min_pay_per_route=Decimal("20.00"),
        )

        result = price_route(route, rate, weight_extras=[(bracket, 2)], fine_total=Decimal("4.00"))

        assert [line.tag for line in result.lines] == [
            LineTag.WARN_NO_ZONE,
            LineTag.WEIGHT_EXTRA,
            LineTag.CNL_PENALTY,
            LineTag.MIN_ROUTE_ADJUST,
            LineTag.FINE_APPLIED,
        ]
        # 4 x 2.00 + 2 x 1.50 - 1 x 1.00 = 10.00, topped up by 10.00
        assert result.lines[1].description == "Weight extra [50-100]"
        assert result.lines[3].source_type == SourceType.BONUS
        assert result.lines[3].amount == Decimal("10.00")
        assert result.subtotal == Decimal("20.00")
        assert result.fine_total == Decimal("4.00")
        # Fines apply after the minimum and are not topped up
        assert result.total == Decimal("16.00")

    def test_minimum_not_applied_when_met(self):
        route = make_route(stops=20)
        rate = RateTerms(base_amount=Decimal("2.00"), min_pay_per_route=Decimal("30.00"))
        result = price_route(route, rate)

        assert LineTag.MIN_ROUTE_ADJUST not in [line.tag for line in result.lines]
        assert result.total == Decimal("40.00")

    def test_minimum_tops_up_unpriced_per_route(self):
        route = make_route(payment_type="PerRoute", price_route=None)
        rate = RateTerms(base_amount=Decimal("2.00"), min_pay_per_route=Decimal("25.00"))
        result = price_route(route, rate)

        assert [line.tag for line in result.lines] == [
            LineTag.WARN_NO_ROUTE_PRICE,
            LineTag.MIN_ROUTE_ADJUST,
        ]
        assert result.total == Decimal("25.00")

    def test_fine_line(self):
        route = make_route()
        result = price_route(route, BASE, fine_total=Decimal("15.00"))

        fine = result.lines[-1]
        assert fine.source_type == SourceType.FINE
        assert fine.tag == LineTag.FINE_APPLIED
        assert fine.description == "Fines applied"
        assert fine.quantity == 1
        assert fine.amount == Decimal("-15.00")
        assert result.total == Decimal("5.00")

    def test_zero_fine_emits_nothing(self):
        result = price_route(make_route(), BASE, fine_total=Decimal("0"))
        assert LineTag.FINE_APPLIED not in [line.tag for line in result.lines]
