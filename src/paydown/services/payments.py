"""Payment application for debt accounts.

Two distinct mutations exist:

* a scheduled payment settles one projected month. Its interest and payment
  come from the projection row for that month (through
  :func:`~paydown.services.debts.plan_month`), the principal part is taken off
  the balance, and the month key joins ``paid_months``.
* an extra payment subtracts a flat amount from the balance with no interest
  split and no month bookkeeping.

The pure functions return a new :class:`DebtAccount`; the ``record_*``
helpers load a bank, apply the change and write it back through a
repository.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional, Union

from ..errors import ValidationError
from ..logging_config import get_logger
from ..models.bank import Bank
from ..money import ZERO, to_cents, to_decimal
from ..months import month_key, parse_month_key
from .debts import DebtAccount, ProjectionRow, plan_month, project

if TYPE_CHECKING:  # pragma: no cover
    from ..domain.repositories.bank import BankRepository

logger = get_logger("services.payments")

Period = Union[ProjectionRow, str]


def _period_key(period: Period) -> str:
    key = period.month_key if isinstance(period, ProjectionRow) else period
    parse_month_key(key)
    return key


def _starting_debt(account: DebtAccount, period: Period, key: str, today: date | None) -> Decimal:
    if isinstance(period, ProjectionRow):
        return period.starting_debt
    start_key = month_key(today or date.today())
    start_year, start_month = parse_month_key(start_key)
    year, month = parse_month_key(key)
    offset = (year - start_year) * 12 + (month - start_month)
    if offset < 0:
        return account.total_debt
    row = project(account, offset + 1, today=today).row_for(key)
    # Past months and months after payoff fall back to the current balance.
    return row.starting_debt if row is not None else account.total_debt


def apply_scheduled_payment(
    account: DebtAccount, period: Period, *, today: date | None = None
) -> DebtAccount:
    """Settle one month of the plan and return the updated snapshot.

    The interest and payment are the ones the projection shows for that
    month, so paying a later month takes off the same principal the plan
    listed for it. A month key is looked up in a projection started from
    ``today``.

    Raises:
        ValidationError: if the month is already in ``paid_months``.
    """

    key = _period_key(period)
    if key in account.paid_months:
        raise ValidationError(f"{key} is already marked as paid", field="month")

    plan = plan_month(account, _starting_debt(account, period, key, today), key)
    principal = plan.actual_payment - plan.interest
    new_balance = max(ZERO, account.total_debt - principal)
    return replace(account, total_debt=new_balance, paid_months=account.paid_months + (key,))


def apply_extra_payment(account: DebtAccount, amount: Any) -> DebtAccount:
    """Subtract an ad-hoc payment straight from the balance."""

    value = to_decimal(amount, field="amount")
    if value <= 0:
        raise ValidationError("amount must be greater than zero", field="amount")
    return replace(account, total_debt=max(ZERO, account.total_debt - value))


def set_custom_payment(account: DebtAccount, key: str, amount: Optional[Any]) -> DebtAccount:
    """Override (or with ``amount=None`` clear) the payment for one month."""

    parse_month_key(key)
    overrides = dict(account.custom_payments)
    if amount is None:
        overrides.pop(key, None)
    else:
        overrides[key] = to_decimal(amount, field="amount")
    return replace(account, custom_payments=overrides)


def _custom_payments_to_storage(overrides: dict[str, Decimal]) -> dict[str, str]:
    return {key: str(value) for key, value in sorted(overrides.items())}


def record_scheduled_payment(
    repo: BankRepository,
    bank_id: int,
    month: Optional[Period] = None,
    *,
    today: date | None = None,
) -> Bank:
    """Apply and persist the scheduled payment for ``month`` (default: this month)."""

    bank = repo.get_by_id(bank_id)
    account = DebtAccount.from_bank(bank)
    period = month if month is not None else month_key(today or date.today())
    updated = apply_scheduled_payment(account, period, today=today)

    saved = repo.update(
        bank_id,
        total_debt=to_cents(updated.total_debt),
        paid_months=list(updated.paid_months),
    )
    logger.info(
        "Scheduled payment recorded",
        extra={
            "bank_id": bank_id,
            "month_key": _period_key(period),
            "previous_debt": account.total_debt,
            "total_debt": saved.total_debt,
        },
    )
    return saved


def record_extra_payment(repo: BankRepository, bank_id: int, amount: Any) -> Bank:
    """Apply and persist an ad-hoc payment."""

    bank = repo.get_by_id(bank_id)
    updated = apply_extra_payment(DebtAccount.from_bank(bank), amount)
    saved = repo.update(bank_id, total_debt=to_cents(updated.total_debt))
    logger.info(
        "Extra payment recorded",
        extra={"bank_id": bank_id, "amount": amount, "total_debt": saved.total_debt},
    )
    return saved


def update_custom_payment(
    repo: BankRepository, bank_id: int, key: str, amount: Optional[Any]
) -> Bank:
    """Persist a per-month payment override, or clear it when ``amount`` is None."""

    bank = repo.get_by_id(bank_id)
    updated = set_custom_payment(DebtAccount.from_bank(bank), key, amount)
    saved = repo.update(bank_id, custom_payments=_custom_payments_to_storage(updated.custom_payments))
    logger.info(
        "Custom payment cleared" if amount is None else "Custom payment set",
        extra={"bank_id": bank_id, "month_key": key, "amount": amount},
    )
    return saved


__all__ = [
    "apply_extra_payment",
    "apply_scheduled_payment",
    "record_extra_payment",
    "record_scheduled_payment",
    "set_custom_payment",
    "update_custom_payment",
]
