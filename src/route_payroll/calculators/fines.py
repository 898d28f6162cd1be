"""Aggregation of confirmed package fines per route."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal
from uuid import UUID


class FineAggregator:
    """Sums confirmed fines for the routes under consideration.

    A fine is confirmed when its amount is positive. Fines are read-only
    inputs; they are created and edited outside the engine.
    """

    @staticmethod
    def sum_by_route(rows: Iterable[tuple[UUID, Decimal]]) -> dict[UUID, Decimal]:
        """Sum (route_id, amount) rows into a total per route."""
        totals: dict[UUID, Decimal] = {}
        for route_id, amount in rows:
            if amount is None or amount <= 0:
                continue
            totals[route_id] = totals.get(route_id, Decimal("0")) + Decimal(amount)
        return {route_id: total for route_id, total in totals.items() if total != 0}
