"""Bank (debt account) registration, edits and status changes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..errors import ValidationError
from ..logging_config import get_logger
from ..models.bank import Bank
from ..money import to_cents
from .debts import DebtAccount

if TYPE_CHECKING:  # pragma: no cover
    from ..domain.repositories.bank import BankRepository

logger = get_logger("services.banks")

_EDITABLE_FIELDS = (
    "name",
    "debt_type",
    "total_debt",
    "interest_rate",
    "interest_type",
    "min_payment_amount",
    "min_payment_type",
    "payment_due_day",
)


def _validated_fields(
    *,
    name: str,
    total_debt: Any,
    interest_rate: Any,
    min_payment_amount: Any,
    min_payment_type: str,
    interest_type: str,
    payment_due_day: int,
    debt_type: str,
) -> dict[str, Any]:
    if not name or not name.strip():
        raise ValidationError("name is required", field="name")
    if not debt_type or not debt_type.strip():
        raise ValidationError("debt_type is required", field="debt_type")

    # DebtAccount carries the numeric and enum validation
    account = DebtAccount(
        total_debt=total_debt,
        interest_rate=interest_rate,
        min_payment_amount=min_payment_amount,
        min_payment_type=min_payment_type,
        interest_type=interest_type,
        payment_due_day=payment_due_day,
    )
    return {
        "name": name.strip(),
        "debt_type": debt_type.strip(),
        "total_debt": to_cents(account.total_debt),
        "interest_rate": account.interest_rate,
        "interest_type": account.interest_type,
        "min_payment_amount": account.min_payment_amount,
        "min_payment_type": account.min_payment_type,
        "payment_due_day": int(account.payment_due_day),
    }


def create_bank(
    repo: "BankRepository",
    *,
    name: str,
    total_debt: Any,
    interest_rate: Any = 0,
    min_payment_amount: Any = 0,
    min_payment_type: str = "amount",
    interest_type: str = "Monthly",
    payment_due_day: int = 5,
    debt_type: str = "Credit Card",
) -> Bank:
    """Validate the inputs and store a new bank.

    Any text is accepted as ``debt_type``; ``DEBT_TYPES`` only lists the usual ones.
    """

    fields = _validated_fields(
        name=name,
        total_debt=total_debt,
        interest_rate=interest_rate,
        min_payment_amount=min_payment_amount,
        min_payment_type=min_payment_type,
        interest_type=interest_type,
        payment_due_day=payment_due_day,
        debt_type=debt_type,
    )
    bank = repo.create(Bank(**fields))
    logger.info("Bank created", extra={"bank_id": bank.id, "debt_type": bank.debt_type})
    return bank


def update_bank(repo: "BankRepository", bank_id: int, **changes: Any) -> Bank:
    """Edit the account terms of a bank.

    Fields left out (or passed as None) keep their stored value. Payment
    history (``paid_months``) and custom payments are not touched.
    """

    unknown = sorted(set(changes) - set(_EDITABLE_FIELDS))
    if unknown:
        raise ValidationError(f"Unknown bank field: {unknown[0]}", field=unknown[0])

    bank = repo.get_by_id(bank_id)
    merged = {field: getattr(bank, field) for field in _EDITABLE_FIELDS}
    merged.update({key: value for key, value in changes.items() if value is not None})
    saved = repo.update(bank_id, **_validated_fields(**merged))
    logger.info(
        "Bank updated",
        extra={"bank_id": bank_id, "fields": sorted(k for k, v in changes.items() if v is not None)},
    )
    return saved


def set_active(repo: "BankRepository", bank_id: int, active: bool) -> Bank:
    """Activate or deactivate a bank; inactive banks drop out of portfolio totals."""

    bank = repo.update(bank_id, is_active=bool(active))
    logger.info(
        "Bank activated" if active else "Bank deactivated", extra={"bank_id": bank_id}
    )
    return bank


def delete_bank(repo: "BankRepository", bank_id: int) -> None:
    """Remove a bank and its payment history."""

    repo.delete(bank_id)
    logger.info("Bank deleted", extra={"bank_id": bank_id})


__all__ = ["create_bank", "delete_bank", "set_active", "update_bank"]
