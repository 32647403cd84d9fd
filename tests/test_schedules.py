"""Recurring schedule generator tests."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

import pytest

from paydown.errors import ValidationError
from paydown.services.schedules import (
    EXPENSE,
    INCOME,
    RecurrenceSpec,
    ScheduleEntry,
    carry_over_settlement,
    generate,
    spec_from_parent,
)


def _spec(**overrides) -> RecurrenceSpec:
    values = {
        "amount": "100",
        "start_date": date(2025, 1, 1),
        "is_recurring": True,
        "frequency": "monthly",
        "end_date": None,
    }
    values.update(overrides)
    return RecurrenceSpec(**values)


class TestOneOffAndEmpty:
    def test_non_recurring_yields_single_entry(self):
        entries = generate(_spec(is_recurring=False, frequency=None, amount="42.50"))

        assert entries == [ScheduleEntry(entry_date=date(2025, 1, 1), amount=Decimal("42.50"))]

    def test_non_recurring_ignores_frequency_and_end_date(self):
        entries = generate(_spec(is_recurring=False, frequency="weekly", end_date=date(2025, 6, 1)))
        assert len(entries) == 1

    @pytest.mark.parametrize(
        "overrides",
        [
            {"amount": None},
            {"start_date": None},
            {"amount": "  "},
            {"start_date": ""},
            {"start_date": "   "},
        ],
    )
    def test_missing_amount_or_start_yields_nothing(self, overrides):
        assert generate(_spec(**overrides)) == []


class TestRecurring:
    def test_monthly_with_end_date_is_inclusive(self):
        entries = generate(_spec(end_date="2025-03-01"))

        assert [e.entry_date for e in entries] == [
            date(2025, 1, 1),
            date(2025, 2, 1),
            date(2025, 3, 1),
        ]
        assert all(e.amount == Decimal("100") for e in entries)
        assert not any(e.settled for e in entries)

    def test_weekly_steps_seven_days(self):
        entries = generate(_spec(frequency="weekly", end_date=date(2025, 2, 1)))

        dates = [e.entry_date for e in entries]
        assert dates[0] == date(2025, 1, 1)
        assert all(b - a == timedelta(days=7) for a, b in zip(dates, dates[1:]))
        assert dates[-1] <= date(2025, 2, 1)
        assert len(dates) == 5

    def test_yearly(self):
        entries = generate(_spec(frequency="yearly", end_date=date(2027, 6, 30)))
        assert [e.entry_date for e in entries] == [
            date(2025, 1, 1),
            date(2026, 1, 1),
            date(2027, 1, 1),
        ]

    def test_month_end_start_steps_from_previous_date(self):
        entries = generate(_spec(start_date=date(2025, 1, 31), end_date=date(2025, 4, 30)))

        assert [e.entry_date for e in entries] == [
            date(2025, 1, 31),
            date(2025, 2, 28),
            date(2025, 3, 28),
            date(2025, 4, 28),
        ]

    def test_expense_defaults_to_24_month_horizon(self):
        entries = generate(_spec(), kind=EXPENSE)

        # start month plus 24 more, the horizon date itself included
        assert len(entries) == 25
        assert entries[-1].entry_date == date(2027, 1, 1)

    def test_expense_horizon_is_configurable(self):
        entries = generate(_spec(), kind=EXPENSE, horizon_months=3)
        assert len(entries) == 4

    def test_income_is_capped_by_entry_count(self):
        entries = generate(_spec(frequency="weekly"), kind=INCOME)

        assert len(entries) == 24
        assert entries[-1].entry_date == date(2025, 1, 1) + timedelta(days=7 * 23)

    def test_income_honors_end_date(self):
        entries = generate(
            _spec(start_date=date(2025, 1, 5), end_date=date(2025, 6, 5)), kind=INCOME
        )
        assert len(entries) == 6

    def test_never_more_than_max_steps(self):
        entries = generate(_spec(frequency="weekly", end_date=date(2040, 1, 1)))
        assert len(entries) == 100

    def test_entries_strictly_increase_and_stay_within_end(self):
        end = date(2026, 8, 15)
        for frequency in ("weekly", "monthly", "yearly"):
            entries = generate(_spec(frequency=frequency, end_date=end))
            dates = [e.entry_date for e in entries]
            assert dates == sorted(set(dates))
            assert all(d <= end for d in dates)

    def test_end_date_equal_to_start_yields_one_entry(self):
        entries = generate(_spec(end_date=date(2025, 1, 1)))
        assert len(entries) == 1


class TestValidation:
    def test_unknown_frequency(self):
        with pytest.raises(ValidationError) as exc_info:
            generate(_spec(frequency="fortnightly"))
        assert exc_info.value.field == "frequency"

    def test_end_before_start(self):
        with pytest.raises(ValidationError) as exc_info:
            generate(_spec(end_date=date(2024, 12, 1)))
        assert exc_info.value.field == "end_date"

    @pytest.mark.parametrize("amount", ["-5", "abc", "NaN"])
    def test_bad_amount(self, amount):
        with pytest.raises(ValidationError):
            generate(_spec(amount=amount))

    def test_bad_start_date(self):
        with pytest.raises(ValidationError):
            generate(_spec(start_date="01/02/2025"))

    def test_unknown_kind(self):
        with pytest.raises(ValidationError):
            generate(_spec(), kind="transfer")


class TestCarryOver:
    def test_settled_flags_follow_matching_dates(self):
        previous = [
            ScheduleEntry(date(2025, 1, 1), Decimal("100"), settled=True),
            ScheduleEntry(date(2025, 2, 1), Decimal("100"), settled=False),
            ScheduleEntry(date(2025, 3, 1), Decimal("100"), settled=True),
        ]
        regenerated = generate(_spec(amount="120", start_date=date(2025, 2, 1), end_date=date(2025, 4, 1)))

        merged = carry_over_settlement(previous, regenerated)

        assert [(e.entry_date, e.settled) for e in merged] == [
            (date(2025, 2, 1), False),
            (date(2025, 3, 1), True),
            (date(2025, 4, 1), False),
        ]
        assert all(e.amount == Decimal("120") for e in merged)

    def test_spec_from_parent(self, expense_factory):
        parent = expense_factory(amount="75.00", end_date=date(2025, 5, 1))

        spec = spec_from_parent(parent)

        assert spec.amount == Decimal("75.00")
        assert spec.frequency == "monthly"
        assert len(generate(spec)) == len(parent.entries) == 5
