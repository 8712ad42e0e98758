"""SQLite engine and transactional sessions for the habit store."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, ContextManager, Iterator, Tuple

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from ..config import BaseConfig
from ..logging_config import get_logger

logger = get_logger(__name__)

SessionFactory = Callable[[], ContextManager[Session]]


def create_db_engine(config: BaseConfig) -> Engine:
    engine = create_engine(config.DATABASE_URL, **config.sqlalchemy_engine_options())
    logger.debug("Engine created", extra={"dialect": engine.dialect.name})
    return engine


def init_database(engine: Engine) -> None:
    """Create the habit and status entry tables when missing."""
    from .. import models  # noqa: F401  registers the tables

    SQLModel.metadata.create_all(engine)
    logger.debug("Schema ready", extra={"tables": sorted(SQLModel.metadata.tables)})


@contextmanager
def session_scope(engine: Engine) -> Iterator[Session]:
    """Yield a session that commits on success and rolls back on error.

    Objects stay usable after commit so repositories can map rows to
    domain values outside the block.
    """
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        logger.warning("Rolling back habit store transaction")
        session.rollback()
        raise
    finally:
        session.close()


def create_session_factory(engine: Engine) -> SessionFactory:
    def factory() -> ContextManager[Session]:
        return session_scope(engine)

    return factory


def bootstrap_database(config: BaseConfig | None = None) -> Tuple[Engine, SessionFactory]:
    """Return ``(engine, session_factory)`` with the schema in place."""

    engine = create_db_engine(config or BaseConfig())
    init_database(engine)
    return engine, create_session_factory(engine)


__all__ = [
    "SessionFactory",
    "bootstrap_database",
    "create_db_engine",
    "create_session_factory",
    "init_database",
    "session_scope",
]
