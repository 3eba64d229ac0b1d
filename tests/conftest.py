"""Pytest configuration and shared fixtures for HabitNexus tests.

This module provides database fixtures, test data factories, and helper utilities
for testing the streak engine, mutations and persistence without touching the
real app database.
"""

from __future__ import annotations

import logging
import tempfile
from datetime import date, timedelta
from pathlib import Path

import pytest
from sqlmodel import SQLModel, create_engine

from habitnexus.infra.database import create_session_factory
from habitnexus.models import AppState, Frequency, FrequencyType, Habit, HabitRecord, HabitType

# Friday. Most scenarios are anchored here so weekday maths is predictable.
TODAY = date(2024, 3, 15)


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point every config lookup at a throwaway data directory."""

    data_dir = tmp_path / "instance"
    monkeypatch.setenv("HABITNEXUS_DATA_DIR", str(data_dir))
    monkeypatch.setenv("HABITNEXUS_DATABASE_URL", f"sqlite:///{data_dir / 'test.db'}")
    monkeypatch.setenv("HABITNEXUS_DEV_MODE", "false")
    monkeypatch.delenv("HABITNEXUS_STORAGE_KEY", raising=False)
    monkeypatch.delenv("HABITNEXUS_REMINDER_POLL_SECONDS", raising=False)
    yield
    # setup_logging attaches handlers to the package logger; drop them between tests.
    pkg_logger = logging.getLogger("habitnexus")
    for handler in list(pkg_logger.handlers):
        pkg_logger.removeHandler(handler)
        handler.close()


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database for each test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)

    from habitnexus import models  # noqa: F401

    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Create a session factory matching what the state store expects.

    Returns:
        Callable: Factory function that returns session context managers
    """

    return create_session_factory(db_engine)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def habit_factory():
    """Factory for building habits with sensible defaults.

    Returns:
        Callable: Function that creates Habit instances
    """

    counter = {"n": 0}

    def _create_habit(
        *,
        habit_id: str | None = None,
        name: str = "Exercise",
        habit_type: HabitType | str = HabitType.YES_NO,
        target_value: int = 1,
        frequency: Frequency | None = None,
        start_date: date = date(2024, 1, 1),
        **kwargs,
    ) -> Habit:
        counter["n"] += 1
        return Habit(
            id=habit_id or f"habit-{counter['n']}",
            name=name,
            type=habit_type,
            target_value=target_value,
            frequency=frequency or Frequency(type=FrequencyType.DAILY),
            start_date=start_date,
            **kwargs,
        )

    return _create_habit


@pytest.fixture
def record_factory():
    """Factory for building records; ``days_ago`` is relative to ``TODAY``."""

    def _create_record(
        habit: Habit,
        *,
        day: date | None = None,
        days_ago: int | None = None,
        value: int = 1,
        is_skipped: bool = False,
    ) -> HabitRecord:
        if day is None:
            day = TODAY - timedelta(days=days_ago or 0)
        return HabitRecord(habit_id=habit.id, date=day, value=value, is_skipped=is_skipped)

    return _create_record


@pytest.fixture
def state_with_habit(habit_factory):
    """AppState holding a single daily yes/no habit."""

    habit = habit_factory(habit_id="h1", name="Read")
    return AppState(habits=[habit]), habit
