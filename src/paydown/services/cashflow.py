"""Create, edit, settle and delete incomes and expenses with their schedules."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any, Optional

from ..errors import ValidationError
from ..logging_config import get_logger
from ..models.expense import Expense
from ..models.income import Income
from ..money import to_decimal
from ..months import parse_date
from .schedules import (
    DEFAULT_HORIZON_MONTHS,
    DEFAULT_INCOME_CAP,
    EXPENSE,
    INCOME,
    MAX_STEPS,
    RecurrenceSpec,
    carry_over_settlement,
    generate,
)

if TYPE_CHECKING:  # pragma: no cover
    from ..domain.repositories.schedule import EntryView, ScheduleRepository

logger = get_logger("services.cashflow")

_PARENT_MODELS = {INCOME: Income, EXPENSE: Expense}


def _parent_fields(name: str, spec: RecurrenceSpec) -> dict[str, Any]:
    """Validate the stored columns of an income/expense."""

    if not name or not name.strip():
        raise ValidationError("name is required", field="name")
    amount = to_decimal(spec.amount, field="amount")
    start: date = parse_date(spec.start_date, field="start_date")
    return {
        "name": name.strip(),
        "amount": amount,
        "start_date": start,
        "is_recurring": bool(spec.is_recurring),
        "frequency": spec.frequency if spec.is_recurring else None,
        "end_date": parse_date(spec.end_date, field="end_date") if spec.end_date else None,
    }


def create_item(
    repo: "ScheduleRepository",
    *,
    name: str,
    spec: RecurrenceSpec,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
    income_cap: int = DEFAULT_INCOME_CAP,
    max_steps: int = MAX_STEPS,
) -> Any:
    """Create an income or expense together with its generated entries."""

    fields = _parent_fields(name, spec)
    entries = generate(
        spec,
        kind=repo.kind,
        horizon_months=horizon_months,
        income_cap=income_cap,
        max_steps=max_steps,
    )
    parent = _PARENT_MODELS[repo.kind](**fields)
    stored = repo.create_with_entries(parent, entries)
    logger.info(
        "Schedule created",
        extra={"kind": repo.kind, "parent_id": stored.id, "entries": len(entries)},
    )
    return stored


def update_item(
    repo: "ScheduleRepository",
    parent_id: int,
    *,
    name: Optional[str] = None,
    spec: RecurrenceSpec,
    keep_settled: bool = True,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
    income_cap: int = DEFAULT_INCOME_CAP,
    max_steps: int = MAX_STEPS,
) -> Any:
    """Regenerate the whole schedule of an existing income or expense.

    Every entry is replaced. With ``keep_settled`` the settled flag of any
    old entry is carried onto the regenerated entry with the same date;
    otherwise all settlement state is discarded.
    """

    existing = repo.get_by_id(parent_id)
    fields = _parent_fields(name if name is not None else existing.name, spec)
    entries = generate(
        spec,
        kind=repo.kind,
        horizon_months=horizon_months,
        income_cap=income_cap,
        max_steps=max_steps,
    )
    if keep_settled:
        entries = carry_over_settlement(existing.entries, entries)
    stored = repo.replace_entries(parent_id, entries, **fields)
    logger.info(
        "Schedule replaced",
        extra={
            "kind": repo.kind,
            "parent_id": parent_id,
            "entries": len(entries),
            "settled_kept": sum(1 for e in entries if e.settled),
        },
    )
    return stored


def settle_entry(repo: "ScheduleRepository", entry_id: int, settled: bool = True) -> "EntryView":
    """Mark one entry received/paid (or undo it)."""

    view = repo.update_entry(entry_id, settled=settled)
    logger.info(
        "Entry settled" if settled else "Entry unsettled",
        extra={"kind": repo.kind, "entry_id": entry_id},
    )
    return view


def delete_item(repo: "ScheduleRepository", parent_id: int) -> None:
    """Delete an income or expense along with its entries."""

    repo.delete(parent_id)
    logger.info("Schedule deleted", extra={"kind": repo.kind, "parent_id": parent_id})


__all__ = ["create_item", "delete_item", "settle_entry", "update_item"]
