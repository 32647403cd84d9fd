"""SQLModel implementation of Bank repository."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Callable, ContextManager

from sqlmodel import Session, select

from ...errors import NotFoundError, ValidationError
from ...models.bank import Bank
from ...money import ZERO

_UPDATABLE_FIELDS = frozenset(Bank.model_fields) - {"id"}


class SQLModelBankRepository:
    """SQLModel-based bank repository implementation."""

    def __init__(self, session_factory: Callable[[], ContextManager[Session]]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    @staticmethod
    def _require(session: Session, bank_id: int) -> Bank:
        bank = session.get(Bank, bank_id)
        if bank is None:
            raise NotFoundError("Bank", bank_id)
        return bank

    def get_by_id(self, bank_id: int) -> Bank:
        """Retrieve a bank by ID."""
        with self.session_factory() as session:
            bank = self._require(session, bank_id)
            session.expunge(bank)
            return bank

    def list_all(self) -> list[Bank]:
        """List all banks."""
        with self.session_factory() as session:
            rows = list(session.exec(select(Bank).order_by(Bank.name)).all())  # type: ignore
            session.expunge_all()
            return rows

    def list_active(self) -> list[Bank]:
        """List banks flagged active."""
        with self.session_factory() as session:
            statement = (
                select(Bank)
                .where(Bank.is_active == True)  # noqa: E712
                .order_by(Bank.name)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, bank: Bank) -> Bank:
        """Create a new bank."""
        with self.session_factory() as session:
            session.add(bank)
            session.commit()
            session.refresh(bank)
            session.expunge(bank)
            return bank

    def update(self, bank_id: int, **fields: Any) -> Bank:
        """Apply a partial update and return the stored row."""
        unknown = sorted(set(fields) - _UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown bank field: {unknown[0]}", field=unknown[0])
        with self.session_factory() as session:
            bank = self._require(session, bank_id)
            for name, value in fields.items():
                setattr(bank, name, value)
            session.add(bank)
            session.commit()
            session.refresh(bank)
            session.expunge(bank)
            return bank

    def delete(self, bank_id: int) -> None:
        """Delete a bank by ID."""
        with self.session_factory() as session:
            session.delete(self._require(session, bank_id))
            session.commit()

    def get_total_debt(self) -> Decimal:
        """Sum outstanding balances of active banks."""
        return sum((Decimal(bank.total_debt) for bank in self.list_active()), ZERO)
