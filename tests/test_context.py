"""Tests for the application context and its persistence wiring."""

from __future__ import annotations

from datetime import date

import pytest

from habitnexus.config import BaseConfig, TestConfig
from habitnexus.context import create_app_context
from habitnexus.errors import HabitNotFoundError
from habitnexus.models import AppState
from habitnexus.services import records as mutations

TODAY = date(2024, 3, 15)


@pytest.fixture
def ctx():
    context = create_app_context(TestConfig())
    yield context
    context.engine.dispose()


def test_fresh_context_has_default_state(ctx):
    assert ctx.state == AppState()
    assert ctx.store.storage_key == "habitnexus_v1_data"


def test_apply_persists_and_returns_value(ctx):
    habit = ctx.apply(mutations.create_habit, name="Read", today=TODAY)

    assert ctx.state.habits == [habit]
    assert ctx.store.load().habits == [habit]


def test_apply_without_value_returns_none(ctx):
    habit = ctx.apply(mutations.create_habit, name="Read", today=TODAY)

    assert ctx.apply(mutations.update_record, habit.id, 1, today=TODAY) is None
    assert ctx.reload().records[0].value == 1


def test_failed_mutation_leaves_state_untouched(ctx):
    before = ctx.state

    with pytest.raises(HabitNotFoundError):
        ctx.apply(mutations.update_record, "missing", 1, today=TODAY)

    assert ctx.state is before
    assert ctx.store.load() == AppState()


def test_streak_uses_current_state(ctx):
    habit = ctx.apply(mutations.create_habit, name="Read", start_date=date(2024, 3, 1), today=TODAY)
    ctx.apply(mutations.update_record, habit.id, 1, today=TODAY)

    result = ctx.streak(habit.id, today=TODAY)

    assert result.current == 1
    assert not result.is_pending


def test_state_survives_new_context(tmp_path, monkeypatch):
    monkeypatch.setenv("HABITNEXUS_DATABASE_URL", f"sqlite:///{tmp_path / 'persist.db'}")

    first = create_app_context(BaseConfig())
    habit = first.apply(mutations.create_habit, name="Journal", today=TODAY)
    first.engine.dispose()

    second = create_app_context(BaseConfig())
    assert second.state.find_habit(habit.id) == habit
    second.engine.dispose()
