"""Recurring schedule generation for incomes and expenses."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Iterable, Optional

from dateutil.relativedelta import relativedelta

from ..errors import ValidationError
from ..money import to_decimal
from ..months import parse_date

INCOME = "income"
EXPENSE = "expense"
KINDS = (INCOME, EXPENSE)

FREQUENCIES = ("weekly", "monthly", "yearly")

DEFAULT_HORIZON_MONTHS = 24
DEFAULT_INCOME_CAP = 24
MAX_STEPS = 100


@dataclass(slots=True, frozen=True)
class RecurrenceSpec:
    """Base amount/date/frequency a schedule is projected from."""

    amount: Optional[Any]
    start_date: Optional[Any]
    is_recurring: bool = False
    frequency: Optional[str] = None
    end_date: Optional[Any] = None


@dataclass(slots=True)
class ScheduleEntry:
    """One dated occurrence of an income or expense."""

    entry_date: date
    amount: Decimal
    settled: bool = False


def _next_occurrence(current: date, frequency: str) -> date:
    # Each date steps from the previous one, so a clamped month-end day
    # stays clamped (Jan 31 -> Feb 28 -> Mar 28).
    if frequency == "weekly":
        return current + timedelta(days=7)
    if frequency == "monthly":
        return current + relativedelta(months=1)
    return current + relativedelta(years=1)


def _is_blank(value: Any) -> bool:
    return isinstance(value, str) and not value.strip()


def generate(
    spec: RecurrenceSpec,
    *,
    kind: str = EXPENSE,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
    income_cap: int = DEFAULT_INCOME_CAP,
    max_steps: int = MAX_STEPS,
) -> list[ScheduleEntry]:
    """Project a recurrence spec into an ordered list of unsettled entries.

    Missing amount or start date yields an empty schedule. A one-off spec
    yields exactly one entry. Recurring expenses stop at ``end_date`` or
    ``start_date + horizon_months``; recurring incomes stop after
    ``income_cap`` entries (or earlier at ``end_date`` when one is given).
    No schedule ever exceeds ``max_steps`` entries.
    """

    if kind not in KINDS:
        raise ValidationError(f"kind must be one of {', '.join(KINDS)}", field="kind")
    if spec.amount is None or spec.start_date is None:
        return []
    if _is_blank(spec.amount) or _is_blank(spec.start_date):
        return []

    amount = to_decimal(spec.amount, field="amount")
    start = parse_date(spec.start_date, field="start_date")

    if not spec.is_recurring:
        return [ScheduleEntry(entry_date=start, amount=amount)]

    if spec.frequency not in FREQUENCIES:
        raise ValidationError(
            f"frequency must be one of {', '.join(FREQUENCIES)}", field="frequency"
        )
    end = parse_date(spec.end_date, field="end_date") if spec.end_date else None
    if end is not None and end < start:
        raise ValidationError("end_date must not be before start_date", field="end_date")

    if kind == INCOME:
        stop_date = end
        cap = min(income_cap, max_steps)
    else:
        stop_date = end or start + relativedelta(months=horizon_months)
        cap = max_steps

    entries: list[ScheduleEntry] = []
    current = start
    while len(entries) < cap:
        if stop_date is not None and current > stop_date:
            break
        entries.append(ScheduleEntry(entry_date=current, amount=amount))
        current = _next_occurrence(current, spec.frequency)
    return entries


def carry_over_settlement(
    previous: Iterable[Any], regenerated: Iterable[ScheduleEntry]
) -> list[ScheduleEntry]:
    """Copy settled flags from an old schedule onto regenerated entries with the same date.

    ``previous`` may hold ScheduleEntry objects or stored entry rows; anything
    exposing ``entry_date`` and ``settled`` works.
    """

    settled_dates = {
        getattr(item, "entry_date") for item in previous if getattr(item, "settled", False)
    }
    return [
        replace(entry, settled=entry.settled or entry.entry_date in settled_dates)
        for entry in regenerated
    ]


def spec_from_parent(parent: Any) -> RecurrenceSpec:
    """Build a RecurrenceSpec from a stored Income/Expense row."""

    return RecurrenceSpec(
        amount=parent.amount,
        start_date=parent.start_date,
        is_recurring=bool(parent.is_recurring),
        frequency=parent.frequency,
        end_date=parent.end_date,
    )


__all__ = [
    "EXPENSE",
    "FREQUENCIES",
    "INCOME",
    "RecurrenceSpec",
    "ScheduleEntry",
    "carry_over_settlement",
    "generate",
    "spec_from_parent",
]
