"""Tests for CSV export of payoff plans and schedule entries."""

from __future__ import annotations

import csv
from datetime import date
from decimal import Decimal
from pathlib import Path

from paydown.domain.repositories import EntryView
from paydown.services import export_csv
from paydown.services.debts import DebtAccount, project


def _read(path: Path) -> list[dict[str, str]]:
    with path.open(newline="", encoding="utf-8") as fh:
        return list(csv.DictReader(fh))


def test_export_projection_csv_rounds_to_cents(tmp_path):
    """Money columns are written as half-up cent strings."""

    account = DebtAccount(
        total_debt="100.01",
        interest_rate="1",
        min_payment_amount="50",
        custom_payments={"2025-02": "20.005"},
    )
    projection = project(account, today=date(2025, 1, 15))
    output_path = tmp_path / "exports" / "plan.csv"

    written = export_csv.export_projection_csv(projection=projection, output_path=output_path)

    assert written == output_path
    rows = _read(output_path)
    assert list(rows[0]) == [
        "month_key",
        "due_date",
        "starting_debt",
        "interest",
        "payment",
        "remaining_debt",
        "is_custom_payment",
        "is_paid",
    ]
    assert rows[0] == {
        "month_key": "2025-01",
        "due_date": "2025-01-05",
        "starting_debt": "100.01",
        "interest": "1.00",
        "payment": "50.00",
        "remaining_debt": "51.01",
        "is_custom_payment": "false",
        "is_paid": "false",
    }
    assert rows[1]["payment"] == "20.01"
    assert rows[1]["is_custom_payment"] == "true"
    assert len(rows) == len(projection.rows)


def test_export_entries_csv(tmp_path):
    """Entry exports carry the parent name and ISO dates."""

    entries = [
        EntryView(1, 10, "Salary", date(2025, 1, 5), Decimal("5000"), True),
        EntryView(2, 11, "Rent, downtown", date(2025, 1, 1), Decimal("1500.5"), False),
    ]
    output_path = tmp_path / "entries.csv"

    export_csv.export_entries_csv(entries=entries, output_path=output_path)

    rows = _read(output_path)
    assert rows == [
        {
            "id": "1",
            "parent_id": "10",
            "name": "Salary",
            "date": "2025-01-05",
            "amount": "5000.00",
            "settled": "true",
        },
        {
            "id": "2",
            "parent_id": "11",
            "name": "Rent, downtown",
            "date": "2025-01-01",
            "amount": "1500.50",
            "settled": "false",
        },
    ]


def test_export_empty_projection_writes_header_only(tmp_path):
    projection = project(
        DebtAccount(total_debt="0", interest_rate="0", min_payment_amount="0"),
        today=date(2025, 1, 15),
    )
    output_path = tmp_path / "empty.csv"

    export_csv.export_projection_csv(projection=projection, output_path=output_path)

    assert output_path.read_text(encoding="utf-8").strip().startswith("month_key,due_date")
    assert _read(output_path) == []
