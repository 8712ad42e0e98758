"""Pytest configuration and shared fixtures for HabitVault tests.

Provides a fixed "today", plain-data habit factories, and an isolated SQLite
database per test for repository and CLI tests.
"""

from __future__ import annotations

import logging
import tempfile
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable

import pytest
from sqlmodel import SQLModel, create_engine

from habitvault.domain.habit import Habit, HabitStatus, StatusLog, TargetDays
from habitvault.infra.database import create_session_factory
from habitvault.infra.repositories import SQLModelHabitRepository
from habitvault.logging_config import ROOT_LOGGER_NAME

# Wednesday
TODAY = date(2024, 5, 15)


@pytest.fixture(autouse=True)
def reset_habitvault_logging():
    """Detach handlers installed by setup_logging so tests stay isolated."""
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def habit_factory():
    """Factory for plain Habit values with sensible defaults."""

    counter = {"n": 0}

    def _create_habit(
        name: str = "Test Habit",
        target_days: TargetDays = TargetDays.EVERYDAY,
        custom_days: Iterable[int] = (),
        start_date: date = date(2024, 5, 1),
        habit_id: str | None = None,
    ) -> Habit:
        counter["n"] += 1
        return Habit(
            id=habit_id or f"habit-{counter['n']}",
            name=name,
            target_days=target_days,
            custom_days=frozenset(custom_days),
            start_date=start_date,
            created_at=datetime(2024, 4, 1, 12, 0, 0, tzinfo=timezone.utc)
            + timedelta(seconds=counter["n"]),
        )

    return _create_habit


def _make_log(habit_id: str, entries: dict[date, HabitStatus]) -> StatusLog:
    return {habit_id: {day.isoformat(): status for day, status in entries.items()}}


@pytest.fixture
def make_log():
    """Build a StatusLog for one habit from date -> status pairs."""
    return _make_log


@pytest.fixture
def completed_days():
    """Return ``count`` consecutive completed days beginning at ``start``."""

    def _completed(start: date, count: int) -> dict[date, HabitStatus]:
        return {start + timedelta(days=i): HabitStatus.COMPLETED for i in range(count)}

    return _completed


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)

    from habitvault import models  # noqa: F401

    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory committing on success, matching the app wiring."""
    return create_session_factory(db_engine)


@pytest.fixture
def habit_repo(session_factory) -> SQLModelHabitRepository:
    return SQLModelHabitRepository(session_factory)


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    """Point configuration at a temporary data directory."""
    monkeypatch.setenv("HABITVAULT_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("HABITVAULT_DEV_MODE", "true")
    monkeypatch.delenv("HABITVAULT_DATABASE_URL", raising=False)
    monkeypatch.delenv("HABITVAULT_USER_ID", raising=False)
    monkeypatch.delenv("HABITVAULT_LOG_LEVEL", raising=False)
    monkeypatch.delenv("HABITVAULT_ANALYTICS_WINDOW", raising=False)
    return tmp_path
