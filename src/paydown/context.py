"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.engine import Engine

from .config import BaseConfig
from .infra.database import (
    SessionFactory,
    create_db_engine,
    create_session_factory,
    init_database,
)
from .infra.repositories import (
    SQLModelBankRepository,
    SQLModelExpenseRepository,
    SQLModelIncomeRepository,
)


@dataclass
class AppContext:
    """Centralized application context with configuration and repositories."""

    # Configuration
    config: BaseConfig

    # Database
    engine: Engine
    session_factory: SessionFactory

    # Repositories
    bank_repo: SQLModelBankRepository
    income_repo: SQLModelIncomeRepository
    expense_repo: SQLModelExpenseRepository

    @property
    def cutoff_day(self) -> Optional[int]:
        return self.config.BILLING_CUTOFF_DAY

    def schedule_repo(self, kind: str):
        """Return the income or expense repository for ``kind``."""

        if kind == self.income_repo.kind:
            return self.income_repo
        if kind == self.expense_repo.kind:
            return self.expense_repo
        raise KeyError(kind)


def create_app_context(config: Optional[BaseConfig] = None) -> AppContext:
    """Create and initialize the application context."""

    if config is None:
        config = BaseConfig()

    engine = create_db_engine(config)
    init_database(engine)
    session_factory = create_session_factory(engine)

    return AppContext(
        config=config,
        engine=engine,
        session_factory=session_factory,
        bank_repo=SQLModelBankRepository(session_factory),
        income_repo=SQLModelIncomeRepository(session_factory),
        expense_repo=SQLModelExpenseRepository(session_factory),
    )
