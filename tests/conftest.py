"""Pytest configuration and shared fixtures for Paydown tests.

Provides an isolated database per test, repository fixtures and factories for
banks, incomes and expenses, without touching the real app database.
"""

from __future__ import annotations

import tempfile
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
from sqlmodel import create_engine

from paydown.config import BaseConfig
from paydown.context import AppContext
from paydown.infra.database import create_session_factory, init_database
from paydown.infra.repositories import (
    SQLModelBankRepository,
    SQLModelExpenseRepository,
    SQLModelIncomeRepository,
)
from paydown.models import Bank
from paydown.services import cashflow
from paydown.services.schedules import RecurrenceSpec

FIXED_TODAY = date(2025, 1, 15)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated temp-file SQLite database for each test.

    Yields:
        Engine: SQLModel engine with all tables created
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    init_database(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching the repositories' Callable[[], Session] contract."""

    return create_session_factory(db_engine)


@pytest.fixture
def today() -> date:
    """Fixed reference date so month 0 of every projection is January 2025."""

    return FIXED_TODAY


# =============================================================================
# Repositories
# =============================================================================


@pytest.fixture
def bank_repo(session_factory) -> SQLModelBankRepository:
    return SQLModelBankRepository(session_factory)


@pytest.fixture
def income_repo(session_factory) -> SQLModelIncomeRepository:
    return SQLModelIncomeRepository(session_factory)


@pytest.fixture
def expense_repo(session_factory) -> SQLModelExpenseRepository:
    return SQLModelExpenseRepository(session_factory)


@pytest.fixture
def paydown_config(tmp_path, monkeypatch) -> BaseConfig:
    """Configuration pointing at a throwaway data directory."""

    monkeypatch.setenv("PAYDOWN_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("PAYDOWN_DATABASE_URL", raising=False)
    monkeypatch.delenv("PAYDOWN_BILLING_CUTOFF_DAY", raising=False)
    monkeypatch.delenv("PAYDOWN_PROJECTION_HORIZON_MONTHS", raising=False)
    monkeypatch.delenv("PAYDOWN_SCHEDULE_HORIZON_MONTHS", raising=False)
    return BaseConfig()


@pytest.fixture
def app_context(paydown_config, db_engine, session_factory, bank_repo, income_repo, expense_repo):
    """AppContext wired to the per-test database."""

    return AppContext(
        config=paydown_config,
        engine=db_engine,
        session_factory=session_factory,
        bank_repo=bank_repo,
        income_repo=income_repo,
        expense_repo=expense_repo,
    )


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def bank_factory(bank_repo):
    """Factory for creating test banks.

    Returns:
        Callable: Function that creates and persists Bank instances
    """

    def _create_bank(
        name: str = "Test Card",
        total_debt: str = "1000.00",
        interest_rate: str = "5",
        min_payment_amount: str = "50",
        min_payment_type: str = "amount",
        interest_type: str = "Monthly",
        payment_due_day: int = 5,
        is_active: bool = True,
        custom_payments: dict[str, str] | None = None,
        paid_months: list[str] | None = None,
        debt_type: str = "Credit Card",
    ) -> Bank:
        return bank_repo.create(
            Bank(
                name=name,
                debt_type=debt_type,
                total_debt=Decimal(total_debt),
                interest_rate=Decimal(interest_rate),
                min_payment_amount=Decimal(min_payment_amount),
                min_payment_type=min_payment_type,
                interest_type=interest_type,
                payment_due_day=payment_due_day,
                is_active=is_active,
                custom_payments=custom_payments or {},
                paid_months=paid_months or [],
            )
        )

    return _create_bank


def _schedule_factory(repo):
    def _create(
        name: str = "Item",
        amount: str = "100.00",
        start_date: date = date(2025, 1, 1),
        is_recurring: bool = True,
        frequency: str | None = "monthly",
        end_date: date | None = None,
    ):
        return cashflow.create_item(
            repo,
            name=name,
            spec=RecurrenceSpec(
                amount=amount,
                start_date=start_date,
                is_recurring=is_recurring,
                frequency=frequency if is_recurring else None,
                end_date=end_date,
            ),
        )

    return _create


@pytest.fixture
def income_factory(income_repo):
    """Factory for incomes with generated entries."""

    return _schedule_factory(income_repo)


@pytest.fixture
def expense_factory(expense_repo):
    """Factory for expenses with generated entries."""

    return _schedule_factory(expense_repo)
