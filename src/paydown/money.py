"""Decimal helpers for money and rate values."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from .errors import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Any, *, field: str, allow_negative: bool = False) -> Decimal:
    """Parse a money/rate input into a finite Decimal.

    Floats are routed through ``str`` so 0.1 stays 0.1 instead of the
    binary approximation.
    """

    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field} is required", field=field)
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number", field=field)
    if isinstance(value, float):
        value = str(value)
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"{field} must be a number", field=field) from exc
    if not result.is_finite():
        raise ValidationError(f"{field} must be a finite number", field=field)
    if not allow_negative and result < 0:
        raise ValidationError(f"{field} must not be negative", field=field)
    return result


def to_cents(value: Decimal) -> Decimal:
    """Round to cents using half-up rounding (presentation and storage only)."""

    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_wire(value: Decimal | None) -> str:
    """Render a money value as a decimal string for export/CLI output."""

    if value is None:
        return ""
    return str(to_cents(value))


__all__ = ["CENT", "ZERO", "to_decimal", "to_cents", "to_wire"]
