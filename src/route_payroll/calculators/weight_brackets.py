"""Weight bracket matching for per-package extras.

Everything here is a pure function over already-loaded rules so it can be
exercised without a database.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from route_payroll.calculators.types import WeightBracket


def sort_brackets(brackets: Iterable[WeightBracket]) -> list[WeightBracket]:
    """Order brackets for matching: priority desc, then min_weight desc."""
    return sorted(brackets, key=lambda b: (-b.priority, -b.min_weight))


def find_bracket(weight: Decimal, brackets: list[WeightBracket]) -> WeightBracket | None:
    """Return the first bracket containing weight.

    brackets must already be in matching order (see sort_brackets).
    """
    for bracket in brackets:
        if bracket.matches(weight):
            return bracket
    return None


def compute_weight_extras(
    weights: Iterable[Decimal | None],
    brackets: list[WeightBracket],
) -> list[tuple[WeightBracket, int]]:
    """Count packages per matching bracket.

    Unknown weights and weights outside every bracket are dropped. The result
    follows bracket order, one entry per bracket with at least one match.
    """
    counts: dict[WeightBracket, int] = {}
    for weight in weights:
        if weight is None:
            continue
        bracket = find_bracket(Decimal(weight), brackets)
        if bracket is None:
            continue
        counts[bracket] = counts.get(bracket, 0) + 1

    return [(bracket, counts[bracket]) for bracket in brackets if bracket in counts]
