"""Scheduled expenses and their dated entries."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel


class Expense(SQLModel, table=True):
    """A one-off or recurring expense."""

    __tablename__: ClassVar[str] = "expense"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=120, index=True)
    amount: Decimal = Field(max_digits=18, decimal_places=2, nullable=False)
    start_date: date = Field(nullable=False)
    is_recurring: bool = Field(default=False, nullable=False)
    frequency: Optional[str] = Field(default=None, max_length=16)
    end_date: Optional[date] = Field(default=None)

    entries: list["ExpenseEntry"] = Relationship(
        back_populates="expense",
        sa_relationship=relationship(
            "ExpenseEntry",
            back_populates="expense",
            cascade="all, delete-orphan",
            order_by="ExpenseEntry.entry_date",
        ),
    )


class ExpenseEntry(SQLModel, table=True):
    """One expected payment of an expense on a given date."""

    __tablename__: ClassVar[str] = "expense_entry"

    id: Optional[int] = Field(default=None, primary_key=True)
    expense_id: int = Field(
        foreign_key="expense.id", ondelete="CASCADE", nullable=False, index=True
    )
    entry_date: date = Field(nullable=False, index=True)
    amount: Decimal = Field(max_digits=18, decimal_places=2, nullable=False)
    is_paid: bool = Field(default=False, nullable=False)

    expense: "Expense" = Relationship(
        back_populates="entries",
        sa_relationship=relationship("Expense", back_populates="entries"),
    )

    @property
    def settled(self) -> bool:
        return bool(self.is_paid)
