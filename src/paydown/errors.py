"""Error taxonomy shared by services, repositories and the CLI."""

from __future__ import annotations

from typing import Optional


class PaydownError(Exception):
    """Base exception for paydown operations."""


class ValidationError(PaydownError, ValueError):
    """Malformed or missing input, rejected before any simulation or write."""

    def __init__(self, message: str, *, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def as_dict(self) -> dict[str, str]:
        payload = {"message": self.message}
        if self.field:
            payload["field"] = self.field
        return payload


class NotFoundError(PaydownError, LookupError):
    """A referenced bank, income, expense or entry id does not exist."""

    def __init__(self, entity: str, entity_id: object):
        self.entity = entity
        self.entity_id = entity_id
        self.message = f"{entity} not found"
        super().__init__(f"{self.message}: {entity_id}")

    def as_dict(self) -> dict[str, str]:
        return {"message": self.message}


class NonConvergenceWarning(PaydownError, UserWarning):
    """Payments never outpace interest; the projection was cut short.

    Attached to a truncated projection rather than raised.
    """

    def __init__(self, month_key: str, month_index: int):
        self.month_key = month_key
        self.month_index = month_index
        super().__init__(
            f"Payments do not cover accruing interest; projection stopped at {month_key}"
        )


__all__ = ["PaydownError", "ValidationError", "NotFoundError", "NonConvergenceWarning"]
