"""Repository tests against a temporary SQLite database."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from paydown.errors import NotFoundError, ValidationError
from paydown.models import ExpenseEntry, IncomeEntry
from paydown.services.schedules import ScheduleEntry


class TestBankRepository:
    def test_create_and_get(self, bank_factory, bank_repo):
        bank = bank_factory(name="Visa", total_debt="1234.56")

        loaded = bank_repo.get_by_id(bank.id)

        assert loaded.name == "Visa"
        assert loaded.total_debt == Decimal("1234.56")
        assert loaded.custom_payments == {}
        assert loaded.paid_months == []
        assert loaded.is_active is True

    def test_list_all_and_active(self, bank_factory, bank_repo):
        bank_factory(name="B")
        bank_factory(name="A", is_active=False)

        assert [b.name for b in bank_repo.list_all()] == ["A", "B"]
        assert [b.name for b in bank_repo.list_active()] == ["B"]

    def test_update_partial_fields(self, bank_factory, bank_repo):
        bank = bank_factory()

        updated = bank_repo.update(
            bank.id, total_debt=Decimal("10.00"), paid_months=["2025-01"]
        )

        assert updated.total_debt == Decimal("10.00")
        assert bank_repo.get_by_id(bank.id).paid_months == ["2025-01"]
        assert bank_repo.get_by_id(bank.id).name == "Test Card"

    def test_update_rejects_unknown_field(self, bank_factory, bank_repo):
        bank = bank_factory()

        with pytest.raises(ValidationError) as exc_info:
            bank_repo.update(bank.id, balance=Decimal("1"))
        assert exc_info.value.field == "balance"

    def test_missing_ids(self, bank_repo):
        with pytest.raises(NotFoundError):
            bank_repo.get_by_id(42)
        with pytest.raises(NotFoundError):
            bank_repo.update(42, name="x")
        with pytest.raises(NotFoundError):
            bank_repo.delete(42)

    def test_delete(self, bank_factory, bank_repo):
        bank = bank_factory()
        bank_repo.delete(bank.id)
        assert bank_repo.list_all() == []

    def test_total_debt_counts_active_banks(self, bank_factory, bank_repo):
        bank_factory(total_debt="100.50")
        bank_factory(total_debt="200.25")
        bank_factory(total_debt="999", is_active=False)

        assert bank_repo.get_total_debt() == Decimal("300.75")


class TestScheduleRepository:
    def test_create_with_entries(self, expense_factory):
        expense = expense_factory(name="Rent", amount="1500", end_date=date(2025, 3, 1))

        assert expense.id is not None
        assert [e.entry_date for e in expense.entries] == [
            date(2025, 1, 1),
            date(2025, 2, 1),
            date(2025, 3, 1),
        ]
        assert all(e.expense_id == expense.id for e in expense.entries)

    def test_list_entries_by_month_carries_parent_name(self, expense_factory, expense_repo):
        expense_factory(name="Rent", start_date=date(2025, 1, 10), end_date=date(2025, 3, 10))
        expense_factory(name="Gym", start_date=date(2025, 2, 3), is_recurring=False)

        rows = expense_repo.list_entries(month="2025-02")

        assert [(r.parent_name, r.entry_date) for r in rows] == [
            ("Gym", date(2025, 2, 3)),
            ("Rent", date(2025, 2, 10)),
        ]

    def test_list_entries_with_cutoff(self, expense_factory, expense_repo):
        expense_factory(name="Rent", start_date=date(2025, 1, 10), end_date=date(2025, 3, 10))

        rows = expense_repo.list_entries(month="2025-02", cutoff_day=6)

        assert [r.entry_date for r in rows] == [date(2025, 1, 10)]

    def test_list_entries_by_date_range(self, income_factory, income_repo):
        income_factory(name="Salary", start_date=date(2025, 1, 5))

        rows = income_repo.list_entries(start=date(2025, 3, 1), end=date(2025, 5, 5))

        assert [r.entry_date for r in rows] == [
            date(2025, 3, 5),
            date(2025, 4, 5),
            date(2025, 5, 5),
        ]

    def test_update_entry(self, income_factory, income_repo):
        income = income_factory(is_recurring=False)
        entry_id = income.entries[0].id

        view = income_repo.update_entry(entry_id, settled=True)

        assert view.settled is True
        assert view.parent_name == "Item"
        assert income_repo.get_by_id(income.id).entries[0].is_received is True

    def test_update_missing_entry(self, income_repo):
        with pytest.raises(NotFoundError):
            income_repo.update_entry(12345, settled=True)

    def test_replace_entries_updates_parent_and_children(self, expense_factory, expense_repo):
        expense = expense_factory(end_date=date(2025, 3, 1))

        stored = expense_repo.replace_entries(
            expense.id,
            [ScheduleEntry(date(2025, 6, 1), Decimal("80"), settled=True)],
            name="Renamed",
            amount=Decimal("80"),
        )

        assert stored.name == "Renamed"
        assert [(e.entry_date, e.is_paid) for e in stored.entries] == [(date(2025, 6, 1), True)]

    def test_replace_entries_is_atomic(self, expense_factory, expense_repo, session_factory):
        expense = expense_factory(end_date=date(2025, 3, 1))
        broken = [
            ScheduleEntry(date(2025, 4, 1), Decimal("100")),
            ScheduleEntry(None, Decimal("100")),  # violates NOT NULL
        ]

        with pytest.raises(IntegrityError):
            expense_repo.replace_entries(expense.id, broken, name="Should not stick")

        reloaded = expense_repo.get_by_id(expense.id)
        assert reloaded.name == "Item"
        assert [e.entry_date for e in reloaded.entries] == [
            date(2025, 1, 1),
            date(2025, 2, 1),
            date(2025, 3, 1),
        ]
        with session_factory() as session:
            assert len(session.exec(select(ExpenseEntry)).all()) == 3

    def test_replace_entries_rejects_unknown_field(self, expense_factory, expense_repo):
        expense = expense_factory()
        with pytest.raises(ValidationError):
            expense_repo.replace_entries(expense.id, [], colour="red")

    def test_delete_cascades(self, income_factory, income_repo, session_factory):
        income = income_factory(end_date=date(2025, 6, 1))
        keep = income_factory(name="Other", is_recurring=False)

        income_repo.delete(income.id)

        with pytest.raises(NotFoundError):
            income_repo.get_by_id(income.id)
        with session_factory() as session:
            remaining = session.exec(select(IncomeEntry)).all()
        assert [e.income_id for e in remaining] == [keep.id]

    def test_list_all_orders_by_name(self, income_factory, income_repo):
        income_factory(name="Zeta", is_recurring=False)
        income_factory(name="Alpha", is_recurring=False)

        assert [i.name for i in income_repo.list_all()] == ["Alpha", "Zeta"]
