"""Repository protocol definitions for domain layer."""

from .bank import BankRepository
from .schedule import EntryView, ScheduleRepository

__all__ = [
    "BankRepository",
    "EntryView",
    "ScheduleRepository",
]
