"""Line item builder with idempotent hashing."""

from __future__ import annotations

import hashlib
import json
from decimal import ROUND_HALF_UP, Decimal

from route_payroll.calculators.types import LineCandidate, LineTag, SourceType


class LineItemBuilder:
    """Builds pay run lines and rolls them into totals.

    Conventions:
    - amount is always qty * rate, never supplied separately
    - charges (penalties, fines) carry a negative rate, so their amount is negative
    - warnings are zero-amount lines, never omissions
    - gross is the plain sum of every line, rounded to cents
    """

    OUTPUT_PRECISION = Decimal("0.01")  # 2 decimal places for totals

    @staticmethod
    def round_to_cents(amount: Decimal) -> Decimal:
        """Round amount to 2 decimal places (cents)."""
        return amount.quantize(LineItemBuilder.OUTPUT_PRECISION, rounding=ROUND_HALF_UP)

    @staticmethod
    def create_line(
        source_type: SourceType,
        source_id: str | None,
        description: str | None,
        quantity: Decimal | int,
        rate: Decimal | int,
        tag: LineTag | None = None,
    ) -> LineCandidate:
        """Create a line; its amount follows from quantity and rate."""
        return LineCandidate(
            source_type=source_type,
            source_id=source_id,
            description=description,
            quantity=Decimal(quantity),
            rate=Decimal(rate),
            tag=tag,
        )

    @staticmethod
    def create_charge_line(
        source_type: SourceType,
        source_id: str | None,
        description: str,
        quantity: Decimal | int,
        amount_per_unit: Decimal,
        tag: LineTag,
    ) -> LineCandidate:
        """Create a deduction line (negative rate)."""
        return LineItemBuilder.create_line(
            source_type,
            source_id,
            description,
            quantity,
            -abs(Decimal(amount_per_unit)),
            tag,
        )

    @staticmethod
    def create_warning_summary_line(warning_count: int) -> LineCandidate:
        """Create the trailing informational line counting warnings."""
        return LineItemBuilder.create_line(
            SourceType.INFO,
            None,
            f"Warnings: {warning_count}",
            Decimal("0"),
            Decimal("0"),
            LineTag.WARN_SUMMARY,
        )

    @staticmethod
    def calculate_gross_from_lines(lines: list[LineCandidate]) -> Decimal:
        """Calculate gross pay: GROSS = sum(qty * rate) over all lines."""
        gross = Decimal("0")
        for line in lines:
            gross += line.amount
        return LineItemBuilder.round_to_cents(gross)

    @staticmethod
    def compute_line_hash(line: LineCandidate) -> str:
        """Compute deterministic hash for a line item.

        The hash is based on the canonical representation of defining fields,
        ensuring identical inputs produce identical hashes.
        """
        canonical = line.to_canonical_dict()
        json_str = json.dumps(canonical, sort_keys=True)
        return hashlib.sha256(json_str.encode()).hexdigest()[:32]

    @staticmethod
    def compute_lines_fingerprint(lines: list[LineCandidate]) -> str:
        """Fingerprint an ordered line set; order is significant."""
        hashes = [LineItemBuilder.compute_line_hash(line) for line in lines]
        json_str = json.dumps(hashes)
        return hashlib.sha256(json_str.encode()).hexdigest()[:32]

    @staticmethod
    def sum_by_source_type(lines: list[LineCandidate]) -> dict[SourceType, Decimal]:
        """Sum line amounts by source type."""
        totals: dict[SourceType, Decimal] = {st: Decimal("0") for st in SourceType}
        for line in lines:
            totals[line.source_type] += line.amount
        return totals
