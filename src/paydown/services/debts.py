"""Debt payoff projection for a single bank account.

The engine always restarts from the account's current ``total_debt`` and the
current calendar month; nothing is resumed from a saved cursor. Interest is a
flat monthly rate (``interest_rate`` percent of the balance per month) for
both interest types, and every figure stays an unrounded Decimal between
steps. Rounding happens only when rows are rendered.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional

from ..errors import NonConvergenceWarning, ValidationError
from ..logging_config import get_logger
from ..money import ZERO, to_decimal
from ..months import due_date, month_key, parse_month_key, shift_month

logger = get_logger("services.debts")

MIN_PAYMENT_TYPES = ("amount", "percentage")
INTEREST_TYPES = ("Daily", "Monthly")

PAID_OFF_THRESHOLD = Decimal("0.01")
DEFAULT_HORIZON_MONTHS = 60
NON_PAYOFF_CUTOFF_MONTH = 23


@dataclass(slots=True, frozen=True)
class DebtAccount:
    """Immutable snapshot of a bank used as projection input.

    Values are normalized to Decimal on construction, so callers may pass
    strings or ints straight from storage or user input.
    """

    total_debt: Decimal
    interest_rate: Decimal
    min_payment_amount: Decimal
    min_payment_type: str = "amount"
    interest_type: str = "Monthly"
    payment_due_day: int = 5
    is_active: bool = True
    custom_payments: dict[str, Decimal] = field(default_factory=dict)
    paid_months: tuple[str, ...] = ()
    id: Optional[int] = None
    name: str = ""

    def __post_init__(self) -> None:
        set_ = object.__setattr__
        set_(self, "total_debt", to_decimal(self.total_debt, field="total_debt"))
        set_(self, "interest_rate", to_decimal(self.interest_rate, field="interest_rate"))
        set_(
            self,
            "min_payment_amount",
            to_decimal(self.min_payment_amount, field="min_payment_amount"),
        )
        if self.min_payment_type not in MIN_PAYMENT_TYPES:
            raise ValidationError(
                f"min_payment_type must be one of {', '.join(MIN_PAYMENT_TYPES)}",
                field="min_payment_type",
            )
        if self.interest_type not in INTEREST_TYPES:
            raise ValidationError(
                f"interest_type must be one of {', '.join(INTEREST_TYPES)}",
                field="interest_type",
            )
        if not 1 <= int(self.payment_due_day) <= 31:
            raise ValidationError("payment_due_day must be between 1 and 31", field="payment_due_day")

        overrides: dict[str, Decimal] = {}
        for key, amount in (self.custom_payments or {}).items():
            parse_month_key(key, field="custom_payments")
            overrides[key] = to_decimal(amount, field=f"custom_payments[{key}]")
        set_(self, "custom_payments", overrides)

        for key in self.paid_months:
            parse_month_key(key, field="paid_months")
        set_(self, "paid_months", tuple(sorted(set(self.paid_months))))

    @classmethod
    def from_bank(cls, bank: Any) -> "DebtAccount":
        """Snapshot a stored Bank row."""

        return cls(
            id=bank.id,
            name=bank.name,
            total_debt=bank.total_debt,
            interest_rate=bank.interest_rate,
            interest_type=bank.interest_type,
            min_payment_amount=bank.min_payment_amount,
            min_payment_type=bank.min_payment_type,
            payment_due_day=bank.payment_due_day,
            is_active=bank.is_active,
            custom_payments=dict(bank.custom_payments or {}),
            paid_months=tuple(bank.paid_months or ()),
        )


@dataclass(slots=True, frozen=True)
class MonthPlan:
    """Figures for one simulated month, before they become a row."""

    interest: Decimal
    payment_amount: Decimal
    actual_payment: Decimal
    remaining_debt: Decimal
    is_custom_payment: bool

    @property
    def amortizing(self) -> bool:
        return self.payment_amount > self.interest


@dataclass(slots=True)
class ProjectionRow:
    """One month of a payoff plan."""

    month_index: int
    month_key: str
    due_date: date
    starting_debt: Decimal
    interest_accrued: Decimal
    payment_applied: Decimal
    remaining_debt: Decimal
    is_custom_payment: bool = False
    is_paid: bool = False


@dataclass(slots=True)
class Projection:
    """Result of a projection run."""

    rows: list[ProjectionRow]
    truncated_by_non_payoff: bool = False
    warning: Optional[NonConvergenceWarning] = None

    @property
    def paid_off(self) -> bool:
        if self.truncated_by_non_payoff:
            return False
        return not self.rows or self.rows[-1].remaining_debt <= PAID_OFF_THRESHOLD

    def row_for(self, key: str) -> Optional[ProjectionRow]:
        return next((row for row in self.rows if row.month_key == key), None)


@dataclass(slots=True, frozen=True)
class ProjectionSummary:
    """Headline numbers for a projection."""

    payoff_month: Optional[str]
    months: int
    total_interest: Decimal
    total_paid: Decimal
    truncated: bool


def minimum_payment_for(account: DebtAccount, balance: Decimal) -> Decimal:
    """Return the rule-based minimum payment against ``balance``.

    Percentage minimums are recomputed against the moving balance each month.
    """

    if account.min_payment_type == "percentage":
        return balance * account.min_payment_amount / Decimal(100)
    return account.min_payment_amount


def plan_month(account: DebtAccount, balance: Decimal, key: str) -> MonthPlan:
    """Compute interest, payment and the resulting balance for one month.

    This is the single source of the per-month arithmetic; both the projection
    loop and the payment flow go through it.
    """

    interest = balance * (account.interest_rate / Decimal(100))
    override = account.custom_payments.get(key)
    payment_amount = override if override is not None else minimum_payment_for(account, balance)
    # A payment never carries the balance past zero.
    actual_payment = min(payment_amount, balance + interest)
    remaining = max(ZERO, balance + interest - actual_payment)
    return MonthPlan(
        interest=interest,
        payment_amount=payment_amount,
        actual_payment=actual_payment,
        remaining_debt=remaining,
        is_custom_payment=override is not None,
    )


def project(
    account: DebtAccount,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
    *,
    today: date | None = None,
    cutoff_month: int = NON_PAYOFF_CUTOFF_MONTH,
) -> Projection:
    """Simulate the month-by-month payoff of ``account`` starting this month.

    Stops once the balance is at or below one cent or ``horizon_months`` rows
    exist. When a month at or past ``cutoff_month`` does not out-pay its
    interest, that row is emitted and the run ends with
    ``truncated_by_non_payoff`` set and a NonConvergenceWarning attached.
    Months already in ``paid_months`` are shown as settled rows with no new
    interest or payment, since ``total_debt`` already reflects them.
    """

    if horizon_months < 1:
        raise ValidationError("horizon_months must be at least 1", field="horizon_months")

    start_key = month_key(today or date.today())
    settled = set(account.paid_months)
    balance = account.total_debt
    rows: list[ProjectionRow] = []
    month_index = 0

    if account.interest_type == "Daily":
        logger.debug(
            "Daily interest type simulated as a flat monthly rate",
            extra={"bank_id": account.id},
        )

    while balance > PAID_OFF_THRESHOLD and month_index < horizon_months:
        key = shift_month(start_key, month_index)
        due = due_date(key, account.payment_due_day)

        if key in settled:
            rows.append(
                ProjectionRow(
                    month_index=month_index,
                    month_key=key,
                    due_date=due,
                    starting_debt=balance,
                    interest_accrued=ZERO,
                    payment_applied=ZERO,
                    remaining_debt=balance,
                    is_paid=True,
                )
            )
            month_index += 1
            continue

        plan = plan_month(account, balance, key)
        rows.append(
            ProjectionRow(
                month_index=month_index,
                month_key=key,
                due_date=due,
                starting_debt=balance,
                interest_accrued=plan.interest,
                payment_applied=plan.actual_payment,
                remaining_debt=plan.remaining_debt,
                is_custom_payment=plan.is_custom_payment,
            )
        )

        if not plan.amortizing and month_index >= cutoff_month:
            warning = NonConvergenceWarning(key, month_index)
            logger.warning(
                str(warning),
                extra={"bank_id": account.id, "month_key": key, "rows": len(rows)},
            )
            return Projection(rows=rows, truncated_by_non_payoff=True, warning=warning)

        balance = plan.remaining_debt
        month_index += 1

    logger.debug(
        "Projection complete",
        extra={"bank_id": account.id, "rows": len(rows), "remaining": balance},
    )
    return Projection(rows=rows)


def schedule_summary(projection: Projection) -> ProjectionSummary:
    """Return payoff month, totals and row count for a projection."""

    rows = projection.rows
    total_interest = sum((row.interest_accrued for row in rows), ZERO)
    total_paid = sum((row.payment_applied for row in rows), ZERO)
    payoff_month = rows[-1].month_key if rows and projection.paid_off else None
    return ProjectionSummary(
        payoff_month=payoff_month,
        months=len(rows),
        total_interest=total_interest,
        total_paid=total_paid,
        truncated=projection.truncated_by_non_payoff,
    )


def project_many(
    accounts: Iterable[DebtAccount],
    *,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
    today: date | None = None,
    cutoff_month: int = NON_PAYOFF_CUTOFF_MONTH,
) -> dict[int, Projection]:
    """Return projections keyed by account id, skipping unsaved snapshots."""

    projections: dict[int, Projection] = {}
    for account in accounts:
        if account.id is None:
            continue
        projections[account.id] = project(
            account, horizon_months, today=today, cutoff_month=cutoff_month
        )
    return projections


__all__ = [
    "DebtAccount",
    "MonthPlan",
    "Projection",
    "ProjectionRow",
    "ProjectionSummary",
    "minimum_payment_for",
    "plan_month",
    "project",
    "project_many",
    "schedule_summary",
]
