"""Database infrastructure: engine, schema and transactional sessions."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, ContextManager, Iterator

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from ..config import BaseConfig

SessionFactory = Callable[[], ContextManager[Session]]


def create_db_engine(config: BaseConfig) -> Engine:
    """Create SQLModel engine from configuration."""
    engine_options = config.sqlalchemy_engine_options()
    return create_engine(config.DATABASE_URL, **engine_options)


def init_database(engine: Engine) -> None:
    """Initialize database schema."""
    # Import all models to ensure they're registered
    from .. import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


@contextmanager
def session_scope(engine: Engine) -> Iterator[Session]:
    """Provide a transactional scope around operations."""
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def create_session_factory(engine: Engine) -> SessionFactory:
    """Create a session factory whose sessions commit on success and roll back on error."""

    def factory() -> ContextManager[Session]:
        return session_scope(engine)

    return factory

