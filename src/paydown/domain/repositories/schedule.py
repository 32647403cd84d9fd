"""Schedule (income/expense) repository protocol."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional, Protocol

from ...services.schedules import ScheduleEntry


@dataclass(slots=True, frozen=True)
class EntryView:
    """A stored schedule entry joined with its parent's name."""

    id: int
    parent_id: int
    parent_name: str
    entry_date: date
    amount: Decimal
    settled: bool


class ScheduleRepository(Protocol):
    """Parents (Income or Expense) that own dated schedule entries."""

    kind: str

    def get_by_id(self, parent_id: int) -> Any:
        """Retrieve a parent with its entries loaded, or raise NotFoundError."""
        ...

    def list_all(self) -> list[Any]:
        """List parents ordered by name."""
        ...

    def create_with_entries(self, parent: Any, entries: Iterable[ScheduleEntry]) -> Any:
        """Insert the parent and all of its entries in one transaction."""
        ...

    def replace_entries(
        self, parent_id: int, entries: Iterable[ScheduleEntry], **parent_fields: Any
    ) -> Any:
        """Delete and re-insert every entry (and update parent fields) atomically."""
        ...

    def list_entries(
        self,
        *,
        month: Optional[str] = None,
        cutoff_day: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[EntryView]:
        """List entries ordered by date, filtered by month bucket or date range."""
        ...

    def update_entry(self, entry_id: int, *, settled: bool) -> EntryView:
        """Toggle the settled flag of one entry."""
        ...

    def delete(self, parent_id: int) -> None:
        """Delete a parent and, by cascade, its entries."""
        ...
