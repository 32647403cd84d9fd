"""Bank repository protocol."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Protocol

from ...models.bank import Bank


class BankRepository(Protocol):
    """Repository for managing debt accounts."""

    def get_by_id(self, bank_id: int) -> Bank:
        """Retrieve a bank by ID or raise NotFoundError."""
        ...

    def list_all(self) -> list[Bank]:
        """List all banks."""
        ...

    def list_active(self) -> list[Bank]:
        """List banks flagged active."""
        ...

    def create(self, bank: Bank) -> Bank:
        """Create a new bank."""
        ...

    def update(self, bank_id: int, **fields: Any) -> Bank:
        """Apply a partial update and return the stored row."""
        ...

    def delete(self, bank_id: int) -> None:
        """Delete a bank by ID."""
        ...

    def get_total_debt(self) -> Decimal:
        """Sum outstanding balances of active banks."""
        ...
