"""CSV export helpers for payoff plans and schedule entries."""

from __future__ import annotations

import csv
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from ..money import to_wire
from .debts import Projection

if TYPE_CHECKING:  # pragma: no cover
    from ..domain.repositories.schedule import EntryView


def _serialize_value(value):
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return to_wire(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def _write(output_path: Path, headers: list[str], rows: Iterable[dict]) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    # Use newline='' for csv on Windows
    with output_path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(
            fh, fieldnames=headers, extrasaction="ignore", quoting=csv.QUOTE_MINIMAL
        )
        writer.writeheader()
        for row in rows:
            writer.writerow({key: _serialize_value(row.get(key)) for key in headers})
    return output_path


def export_projection_csv(*, projection: Projection, output_path: Path) -> Path:
    """Write a payoff plan to CSV at `output_path`.

    Money columns are rounded to cents; this is the only place rows get rounded.
    Returns the path written.
    """

    headers = [
        "month_key",
        "due_date",
        "starting_debt",
        "interest",
        "payment",
        "remaining_debt",
        "is_custom_payment",
        "is_paid",
    ]
    rows = (
        {
            "month_key": row.month_key,
            "due_date": row.due_date,
            "starting_debt": row.starting_debt,
            "interest": row.interest_accrued,
            "payment": row.payment_applied,
            "remaining_debt": row.remaining_debt,
            "is_custom_payment": row.is_custom_payment,
            "is_paid": row.is_paid,
        }
        for row in projection.rows
    )
    return _write(output_path, headers, rows)


def export_entries_csv(*, entries: Iterable["EntryView"], output_path: Path) -> Path:
    """Write schedule entries (income or expense) to CSV."""

    headers = ["id", "parent_id", "name", "date", "amount", "settled"]
    rows = (
        {
            "id": entry.id,
            "parent_id": entry.parent_id,
            "name": entry.parent_name,
            "date": entry.entry_date,
            "amount": entry.amount,
            "settled": entry.settled,
        }
        for entry in entries
    )
    return _write(output_path, headers, rows)
