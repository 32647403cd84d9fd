"""Portfolio-level figures folded from banks and schedule entries.

Month bucketing goes through :func:`bucket_month` everywhere. The optional
``cutoff_day`` (``BaseConfig.BILLING_CUTOFF_DAY``) moves entries dated on or
after that day into the following month's bucket; ``None`` keeps plain
calendar months.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Optional

from ..errors import ValidationError
from ..money import ZERO
from ..months import month_key, parse_month_key, shift_month
from .debts import DebtAccount, minimum_payment_for


@dataclass(slots=True, frozen=True)
class MonthOverview:
    """Totals for one kind of entry (income or expense) in one month."""

    month_key: str
    expected_total: Decimal
    settled_total: Decimal
    entry_count: int
    settled_count: int

    @property
    def settled_percent(self) -> int:
        if not self.entry_count:
            return 0
        ratio = Decimal(self.settled_count * 100) / Decimal(self.entry_count)
        return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(slots=True, frozen=True)
class PortfolioSummary:
    """Dashboard figures for a selected month."""

    month_key: str
    minimum_due: Decimal
    total_debt: Decimal
    cash_balance: Decimal
    income: MonthOverview
    expenses: MonthOverview


def _validate_cutoff(cutoff_day: Optional[int]) -> None:
    if cutoff_day is not None and not 1 <= cutoff_day <= 31:
        raise ValidationError("cutoff_day must be between 1 and 31", field="cutoff_day")


def bucket_month(value: date, cutoff_day: Optional[int] = None) -> str:
    """Return the month key an entry dated ``value`` is reported under."""

    _validate_cutoff(cutoff_day)
    key = month_key(value)
    if cutoff_day is not None and value.day >= cutoff_day:
        return shift_month(key, 1)
    return key


def _as_account(item: Any) -> DebtAccount:
    return item if isinstance(item, DebtAccount) else DebtAccount.from_bank(item)


def monthly_minimum_due(accounts: Iterable[Any], for_month_key: str) -> Decimal:
    """Sum the minimum payment of every active account not yet paid for the month.

    Accepts DebtAccount snapshots or stored Bank rows.
    """

    parse_month_key(for_month_key)
    total = ZERO
    for account in map(_as_account, accounts):
        if not account.is_active or for_month_key in account.paid_months:
            continue
        total += minimum_payment_for(account, account.total_debt)
    return total


def total_debt(accounts: Iterable[Any]) -> Decimal:
    """Sum outstanding balances across active accounts."""

    return sum(
        (account.total_debt for account in map(_as_account, accounts) if account.is_active),
        ZERO,
    )


def entries_for_month(
    entries: Iterable[Any], key: str, *, cutoff_day: Optional[int] = None
) -> list[Any]:
    """Filter entries (anything with ``entry_date``) down to one month bucket."""

    parse_month_key(key)
    return [e for e in entries if bucket_month(e.entry_date, cutoff_day) == key]


def cash_balance(
    income_entries: Iterable[Any],
    expense_entries: Iterable[Any],
    *,
    month: Optional[str] = None,
    cutoff_day: Optional[int] = None,
) -> Decimal:
    """Received income minus paid expenses, optionally scoped to one month."""

    incomes = list(income_entries)
    expenses = list(expense_entries)
    if month is not None:
        incomes = entries_for_month(incomes, month, cutoff_day=cutoff_day)
        expenses = entries_for_month(expenses, month, cutoff_day=cutoff_day)
    received = sum((Decimal(e.amount) for e in incomes if e.settled), ZERO)
    paid = sum((Decimal(e.amount) for e in expenses if e.settled), ZERO)
    return received - paid


def month_overview(
    entries: Iterable[Any], key: str, *, cutoff_day: Optional[int] = None
) -> MonthOverview:
    """Expected vs settled totals for the entries falling in ``key``."""

    scoped = entries_for_month(entries, key, cutoff_day=cutoff_day)
    settled = [e for e in scoped if e.settled]
    return MonthOverview(
        month_key=key,
        expected_total=sum((Decimal(e.amount) for e in scoped), ZERO),
        settled_total=sum((Decimal(e.amount) for e in settled), ZERO),
        entry_count=len(scoped),
        settled_count=len(settled),
    )


def month_selector(today: date | None = None, *, back: int = 5, forward: int = 6) -> list[str]:
    """Month keys offered by the month picker, oldest first."""

    anchor = month_key(today or date.today())
    return [shift_month(anchor, offset) for offset in range(-back, forward + 1)]


def portfolio_summary(
    *,
    accounts: Iterable[Any],
    income_entries: Iterable[Any],
    expense_entries: Iterable[Any],
    month: str,
    cutoff_day: Optional[int] = None,
) -> PortfolioSummary:
    """Compose the dashboard figures for ``month``."""

    snapshots = [_as_account(a) for a in accounts]
    incomes = list(income_entries)
    expenses = list(expense_entries)
    return PortfolioSummary(
        month_key=month,
        minimum_due=monthly_minimum_due(snapshots, month),
        total_debt=total_debt(snapshots),
        cash_balance=cash_balance(incomes, expenses, month=month, cutoff_day=cutoff_day),
        income=month_overview(incomes, month, cutoff_day=cutoff_day),
        expenses=month_overview(expenses, month, cutoff_day=cutoff_day),
    )


__all__ = [
    "MonthOverview",
    "PortfolioSummary",
    "bucket_month",
    "cash_balance",
    "entries_for_month",
    "month_overview",
    "month_selector",
    "monthly_minimum_due",
    "portfolio_summary",
    "total_debt",
]
