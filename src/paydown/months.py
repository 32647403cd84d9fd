"""Month-key ("YYYY-MM") and calendar helpers."""

from __future__ import annotations

import re
from calendar import monthrange
from datetime import date, datetime
from typing import Any

from .errors import ValidationError

_MONTH_KEY_RE = re.compile(r"^(\d{4})-(\d{2})$")


def month_key(value: date) -> str:
    """Return the canonical month key for a date."""

    return f"{value.year:04d}-{value.month:02d}"


def parse_month_key(key: str, *, field: str = "month") -> tuple[int, int]:
    """Split a month key into (year, month), rejecting malformed keys."""

    match = _MONTH_KEY_RE.match(key or "")
    if not match:
        raise ValidationError(f"{field} must look like YYYY-MM, got {key!r}", field=field)
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValidationError(f"{field} has an invalid month: {key!r}", field=field)
    return year, month


def shift_month(key: str, months: int) -> str:
    """Return the month key ``months`` away from ``key`` (negative goes back)."""

    year, month = parse_month_key(key)
    index = year * 12 + (month - 1) + months
    return f"{index // 12:04d}-{index % 12 + 1:02d}"


def due_date(key: str, due_day: int) -> date:
    """Return the due date inside a month, clamping the day to the month length."""

    year, month = parse_month_key(key)
    last_day = monthrange(year, month)[1]
    return date(year, month, min(max(due_day, 1), last_day))


def parse_date(value: Any, *, field: str) -> date:
    """Accept a date, datetime or ISO-8601 string."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError as exc:
            raise ValidationError(f"{field} must be an ISO date, got {value!r}", field=field) from exc
    raise ValidationError(f"{field} is required", field=field)


__all__ = ["month_key", "parse_month_key", "shift_month", "due_date", "parse_date"]
