"""SQLModel table exports."""

from .bank import DEBT_TYPES, Bank
from .expense import Expense, ExpenseEntry
from .income import Income, IncomeEntry

__all__ = [
    "Bank",
    "DEBT_TYPES",
    "Expense",
    "ExpenseEntry",
    "Income",
    "IncomeEntry",
]
