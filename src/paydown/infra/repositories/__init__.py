"""Concrete repository implementations using SQLModel."""

from .bank import SQLModelBankRepository
from .schedule import SQLModelExpenseRepository, SQLModelIncomeRepository

__all__ = [
    "SQLModelBankRepository",
    "SQLModelExpenseRepository",
    "SQLModelIncomeRepository",
]
