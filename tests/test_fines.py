"""Tests for fine aggregation."""

from decimal import Decimal
from uuid import uuid4

from route_payroll.calculators.fines import FineAggregator


class TestFineAggregator:
    """Test summing fines per route."""

    def test_sums_per_route(self):
        route_a, route_b = uuid4(), uuid4()
        totals = FineAggregator.sum_by_route(
            [
                (route_a, Decimal("10.00")),
                (route_a, Decimal("5.00")),
                (route_b, Decimal("2.50")),
            ]
        )
        assert totals == {route_a: Decimal("15.00"), route_b: Decimal("2.50")}

    def test_unconfirmed_amounts_ignored(self):
        """Zero, negative and missing amounts are not confirmed fines."""
        route_a, route_b = uuid4(), uuid4()
        totals = FineAggregator.sum_by_route(
            [
                (route_a, Decimal("0")),
                (route_a, Decimal("-4")),
                (route_a, None),
                (route_b, Decimal("7")),
            ]
        )
        assert route_a not in totals
        assert totals[route_b] == Decimal("7")

    def test_empty(self):
        assert FineAggregator.sum_by_route([]) == {}
