"""Service module exports."""

from . import (
    banks,
    cashflow,
    debts,
    export_csv,
    payments,
    reports,
    schedules,
    seed,
)

__all__ = [
    "banks",
    "cashflow",
    "debts",
    "export_csv",
    "payments",
    "reports",
    "schedules",
    "seed",
]
