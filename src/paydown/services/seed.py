"""Demo data seeding."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from dateutil.relativedelta import relativedelta

from ..logging_config import get_logger
from . import banks, cashflow
from .schedules import RecurrenceSpec

if TYPE_CHECKING:  # pragma: no cover
    from ..domain.repositories import BankRepository, ScheduleRepository

logger = get_logger("services.seed")

_DEMO_BANKS = [
    {
        "name": "Chase Sapphire",
        "debt_type": "Credit Card",
        "total_debt": Decimal("2500.00"),
        "interest_rate": Decimal("24.99"),
        "interest_type": "Daily",
        "min_payment_amount": Decimal("75.00"),
        "payment_due_day": 5,
    },
    {
        "name": "Citi Simplicity",
        "debt_type": "Credit Card",
        "total_debt": Decimal("500.00"),
        "interest_rate": Decimal("0.00"),
        "interest_type": "Monthly",
        "min_payment_amount": Decimal("25.00"),
        "payment_due_day": 15,
    },
    {
        "name": "Bank of America KMH",
        "debt_type": "KMH",
        "total_debt": Decimal("1000.00"),
        "interest_rate": Decimal("5.00"),
        "interest_type": "Monthly",
        "min_payment_amount": Decimal("50.00"),
        "payment_due_day": 10,
    },
]


@dataclass(frozen=True)
class SeedSummary:
    """Counts of rows created by a seed run."""

    incomes: int
    expenses: int
    banks: int


def _clear(bank_repo: "BankRepository", *schedule_repos: "ScheduleRepository") -> None:
    for bank in bank_repo.list_all():
        bank_repo.delete(bank.id)
    for repo in schedule_repos:
        for parent in repo.list_all():
            repo.delete(parent.id)


def run_demo_seed(
    *,
    bank_repo: "BankRepository",
    income_repo: "ScheduleRepository",
    expense_repo: "ScheduleRepository",
    today: date | None = None,
    reset: bool = False,
) -> SeedSummary:
    """Insert a salary, a rent expense and three banks; skip anything already present by name."""

    today = today or date.today()
    if reset:
        _clear(bank_repo, income_repo, expense_repo)

    created_incomes = created_expenses = created_banks = 0

    salary_start = today.replace(day=5)
    if "Monthly Salary" not in {i.name for i in income_repo.list_all()}:
        cashflow.create_item(
            income_repo,
            name="Monthly Salary",
            spec=RecurrenceSpec(
                amount=Decimal("5000.00"),
                start_date=salary_start,
                is_recurring=True,
                frequency="monthly",
                end_date=salary_start + relativedelta(months=5),
            ),
        )
        created_incomes += 1

    rent_start = today.replace(day=1)
    if "Rent" not in {e.name for e in expense_repo.list_all()}:
        cashflow.create_item(
            expense_repo,
            name="Rent",
            spec=RecurrenceSpec(
                amount=Decimal("1500.00"),
                start_date=rent_start,
                is_recurring=True,
                frequency="monthly",
                end_date=rent_start + relativedelta(months=5),
            ),
        )
        created_expenses += 1

    existing_banks = {b.name for b in bank_repo.list_all()}
    for payload in _DEMO_BANKS:
        if payload["name"] in existing_banks:
            continue
        banks.create_bank(bank_repo, **payload)
        created_banks += 1

    summary = SeedSummary(incomes=created_incomes, expenses=created_expenses, banks=created_banks)
    logger.info("Demo seed complete", extra={"reset": reset, **summary.__dict__})
    return summary
