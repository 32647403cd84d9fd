"""Revolving debt accounts ("banks")."""

from __future__ import annotations

from decimal import Decimal
from typing import ClassVar, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

DEBT_TYPES = ("Credit Card", "Overdraft", "KMH", "Flexible Account")


class Bank(SQLModel, table=True):
    """A debt account whose balance is mutated in place as payments land.

    ``total_debt`` is always the balance after every applied payment; the
    payment plan is recomputed from it on each read and never stored.
    """

    __tablename__: ClassVar[str] = "bank"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=120, index=True)
    debt_type: str = Field(default="Credit Card", max_length=40)
    total_debt: Decimal = Field(max_digits=18, decimal_places=2, nullable=False)
    interest_rate: Decimal = Field(default=Decimal("0"), max_digits=9, decimal_places=4)
    interest_type: str = Field(default="Monthly", max_length=16)
    min_payment_amount: Decimal = Field(default=Decimal("0"), max_digits=18, decimal_places=4)
    min_payment_type: str = Field(default="amount", max_length=16)
    payment_due_day: int = Field(default=5, ge=1, le=31)
    is_active: bool = Field(default=True, nullable=False)

    # monthKey -> decimal string
    custom_payments: dict[str, str] = Field(
        default_factory=dict, sa_column=Column(JSON, nullable=False)
    )
    # sorted, unique monthKeys
    paid_months: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
