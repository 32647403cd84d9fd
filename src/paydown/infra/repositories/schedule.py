"""SQLModel implementations of the income and expense schedule repositories."""

from __future__ import annotations

from calendar import monthrange
from datetime import date
from typing import Any, Callable, ClassVar, ContextManager, Iterable, Optional

from sqlalchemy.orm import selectinload
from sqlmodel import Session, SQLModel, select

from ...domain.repositories.schedule import EntryView
from ...errors import NotFoundError, ValidationError
from ...models.expense import Expense, ExpenseEntry
from ...models.income import Income, IncomeEntry
from ...months import parse_month_key, shift_month
from ...services.reports import bucket_month
from ...services.schedules import EXPENSE, INCOME, ScheduleEntry


class _SQLModelScheduleRepository:
    """Shared logic for parents that own a list of dated entries.

    Subclasses name the parent/entry tables, the foreign key column and the
    boolean column that records settlement.
    """

    kind: ClassVar[str]
    parent_model: ClassVar[type[SQLModel]]
    entry_model: ClassVar[type[SQLModel]]
    parent_key: ClassVar[str]
    settled_column: ClassVar[str]

    _parent_fields: ClassVar[frozenset[str]] = frozenset(
        {"name", "amount", "start_date", "is_recurring", "frequency", "end_date"}
    )

    def __init__(self, session_factory: Callable[[], ContextManager[Session]]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    # -- helpers ---------------------------------------------------------

    @property
    def _entity(self) -> str:
        return self.parent_model.__name__

    def _load_parent(self, session: Session, parent_id: int) -> Any:
        statement = (
            select(self.parent_model)
            .where(self.parent_model.id == parent_id)
            .options(selectinload(self.parent_model.entries))
        )
        parent = session.exec(statement).first()
        if parent is None:
            raise NotFoundError(self._entity, parent_id)
        return parent

    def _build_entries(self, parent_id: int, entries: Iterable[ScheduleEntry]) -> list[Any]:
        return [
            self.entry_model(
                **{
                    self.parent_key: parent_id,
                    "entry_date": entry.entry_date,
                    "amount": entry.amount,
                    self.settled_column: entry.settled,
                }
            )
            for entry in entries
        ]

    def _view(self, entry: Any, parent_name: str) -> EntryView:
        return EntryView(
            id=entry.id,
            parent_id=getattr(entry, self.parent_key),
            parent_name=parent_name,
            entry_date=entry.entry_date,
            amount=entry.amount,
            settled=bool(getattr(entry, self.settled_column)),
        )

    # -- parents ---------------------------------------------------------

    def get_by_id(self, parent_id: int) -> Any:
        """Retrieve a parent with its entries loaded."""
        with self.session_factory() as session:
            parent = self._load_parent(session, parent_id)
            session.expunge(parent)
            return parent

    def list_all(self) -> list[Any]:
        """List parents ordered by name."""
        with self.session_factory() as session:
            statement = (
                select(self.parent_model)
                .options(selectinload(self.parent_model.entries))
                .order_by(self.parent_model.name)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create_with_entries(self, parent: Any, entries: Iterable[ScheduleEntry]) -> Any:
        """Insert the parent and all of its entries in one transaction."""
        with self.session_factory() as session:
            session.add(parent)
            session.flush()
            parent_id = parent.id
            session.add_all(self._build_entries(parent_id, entries))
            session.commit()
            session.expire_all()
            stored = self._load_parent(session, parent_id)
            session.expunge(stored)
            return stored

    def replace_entries(
        self, parent_id: int, entries: Iterable[ScheduleEntry], **parent_fields: Any
    ) -> Any:
        """Delete and re-insert every entry (and update parent fields) atomically."""
        unknown = sorted(set(parent_fields) - self._parent_fields)
        if unknown:
            raise ValidationError(f"Unknown {self.kind} field: {unknown[0]}", field=unknown[0])
        with self.session_factory() as session:
            parent = self._load_parent(session, parent_id)
            for name, value in parent_fields.items():
                setattr(parent, name, value)
            # delete-orphan cascade removes the old rows on flush
            parent.entries.clear()
            session.flush()
            parent.entries.extend(self._build_entries(parent_id, entries))
            session.commit()
            session.expire_all()
            stored = self._load_parent(session, parent_id)
            session.expunge(stored)
            return stored

    def delete(self, parent_id: int) -> None:
        """Delete a parent and, by cascade, its entries."""
        with self.session_factory() as session:
            session.delete(self._load_parent(session, parent_id))
            session.commit()

    # -- entries ---------------------------------------------------------

    def list_entries(
        self,
        *,
        month: Optional[str] = None,
        cutoff_day: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[EntryView]:
        """List entries ordered by date.

        ``month`` selects a reporting bucket (see ``reports.bucket_month``), so
        with a billing cutoff the window reaches back into the previous
        calendar month. ``start``/``end`` are inclusive date bounds.
        """
        window_start, window_end = start, end
        if month is not None:
            year, month_no = parse_month_key(month)
            window_end = date(year, month_no, monthrange(year, month_no)[1])
            if cutoff_day is None:
                window_start = date(year, month_no, 1)
            else:
                prev_year, prev_month = parse_month_key(shift_month(month, -1))
                window_start = date(prev_year, prev_month, 1)

        entry_cls = self.entry_model
        statement = (
            select(entry_cls, self.parent_model.name)
            .join(self.parent_model, getattr(entry_cls, self.parent_key) == self.parent_model.id)
            .order_by(entry_cls.entry_date, entry_cls.id)  # type: ignore
        )
        if window_start is not None:
            statement = statement.where(entry_cls.entry_date >= window_start)
        if window_end is not None:
            statement = statement.where(entry_cls.entry_date <= window_end)

        with self.session_factory() as session:
            views = [self._view(entry, name) for entry, name in session.exec(statement).all()]

        if month is not None:
            views = [v for v in views if bucket_month(v.entry_date, cutoff_day) == month]
        return views

    def update_entry(self, entry_id: int, *, settled: bool) -> EntryView:
        """Toggle the settled flag of one entry."""
        with self.session_factory() as session:
            entry = session.get(self.entry_model, entry_id)
            if entry is None:
                raise NotFoundError(f"{self._entity} entry", entry_id)
            setattr(entry, self.settled_column, bool(settled))
            session.add(entry)
            session.commit()
            session.refresh(entry)
            parent = session.get(self.parent_model, getattr(entry, self.parent_key))
            return self._view(entry, parent.name if parent else "")


class SQLModelIncomeRepository(_SQLModelScheduleRepository):
    """Incomes and their expected receipts."""

    kind = INCOME
    parent_model = Income
    entry_model = IncomeEntry
    parent_key = "income_id"
    settled_column = "is_received"


class SQLModelExpenseRepository(_SQLModelScheduleRepository):
    """Expenses and their expected payments."""

    kind = EXPENSE
    parent_model = Expense
    entry_model = ExpenseEntry
    parent_key = "expense_id"
    settled_column = "is_paid"
