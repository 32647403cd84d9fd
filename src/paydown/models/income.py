"""Income sources and their dated schedule entries."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel


class Income(SQLModel, table=True):
    """A one-off or recurring income source."""

    __tablename__: ClassVar[str] = "income"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=120, index=True)
    amount: Decimal = Field(max_digits=18, decimal_places=2, nullable=False)
    start_date: date = Field(nullable=False)
    is_recurring: bool = Field(default=False, nullable=False)
    frequency: Optional[str] = Field(default=None, max_length=16)
    end_date: Optional[date] = Field(default=None)

    entries: list["IncomeEntry"] = Relationship(
        back_populates="income",
        sa_relationship=relationship(
            "IncomeEntry",
            back_populates="income",
            cascade="all, delete-orphan",
            order_by="IncomeEntry.entry_date",
        ),
    )


class IncomeEntry(SQLModel, table=True):
    """One expected receipt of an income on a given date."""

    __tablename__: ClassVar[str] = "income_entry"

    id: Optional[int] = Field(default=None, primary_key=True)
    income_id: int = Field(
        foreign_key="income.id", ondelete="CASCADE", nullable=False, index=True
    )
    entry_date: date = Field(nullable=False, index=True)
    amount: Decimal = Field(max_digits=18, decimal_places=2, nullable=False)
    is_received: bool = Field(default=False, nullable=False)

    income: "Income" = Relationship(
        back_populates="entries",
        sa_relationship=relationship("Income", back_populates="entries"),
    )

    @property
    def settled(self) -> bool:
        return bool(self.is_received)
