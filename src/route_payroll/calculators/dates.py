"""Normalization of caller-supplied dates to calendar dates."""

from __future__ import annotations

from datetime import date, datetime, timezone


def to_calendar_date(value: date | datetime | str) -> date:
    """Normalize a date-like value to a calendar date.

    Accepts:
    - date: returned as is
    - naive datetime: its date part
    - aware datetime: converted to UTC, then its date part
    - str: 'YYYY-MM-DD', or an ISO 8601 date-time (a trailing 'Z' is UTC)

    Raises:
        ValueError: If the value cannot be interpreted as a date
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return to_calendar_date(datetime.fromisoformat(text))
        except ValueError:
            raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD") from None

    raise ValueError(f"Unsupported date value: {value!r}")
