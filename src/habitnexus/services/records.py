"""State mutations for habits, records and settings.

Each function takes an :class:`AppState` and returns a new one; the input is
never modified. Persisting the result is the caller's job (see
``AppContext.apply``).
"""

from __future__ import annotations

import time
import uuid
from dataclasses import fields, replace
from datetime import date
from typing import Any, Optional

from ..dates import today_date
from ..errors import HabitNotFoundError, HabitValidationError
from ..logging_config import get_logger
from ..models.habit import Frequency, Habit, HabitRecord, HabitType, PomodoroConfig
from ..models.state import AppState

logger = get_logger("records")

_HABIT_FIELDS = {f.name for f in fields(Habit)}
_PROTECTED_FIELDS = {"id", "created_at"}
# Set by create_habit itself or passed as named arguments.
_CREATE_ARGUMENT_FIELDS = {"name", "type", "target_value", "frequency", "is_archived", "is_paused"}
_DEFAULT_TIME_TARGET = 60
_DEFAULT_POMODORO_SESSIONS = 4


def _require_habit(state: AppState, habit_id: str) -> Habit:
    habit = state.find_habit(habit_id)
    if habit is None:
        raise HabitNotFoundError(habit_id)
    return habit


def _normalized_target(habit_type: Any, target_value: Optional[int]) -> int:
    if habit_type == HabitType.YES_NO:
        return 1
    if habit_type == HabitType.TIME:
        return target_value or _DEFAULT_TIME_TARGET
    if habit_type == HabitType.POMODORO:
        return target_value or _DEFAULT_POMODORO_SESSIONS
    return target_value or 1


def _validate(habit: Habit) -> None:
    if not habit.name.strip():
        raise HabitValidationError("Habit name must not be empty")
    if habit.end_date is not None and habit.end_date < habit.start_date:
        raise HabitValidationError("End date must not precede start date")
    if any(d not in range(7) for d in habit.frequency.weekdays or ()):
        raise HabitValidationError("Weekdays must be between 0 (Sunday) and 6 (Saturday)")
    if any(d not in range(1, 32) for d in habit.frequency.monthly_days or ()):
        raise HabitValidationError("Monthly days must be between 1 and 31")
    if habit.frequency.interval is not None and habit.frequency.interval < 0:
        raise HabitValidationError("Interval must be positive")


def update_record(state: AppState, habit_id: str, value: int, *, today: date | None = None) -> AppState:
    """Set today's progress for ``habit_id``, clearing any skip marker."""

    today = today or today_date()
    _require_habit(state, habit_id)

    existing = state.find_record(habit_id, today)
    if existing is not None:
        updated = replace(existing, value=value, is_skipped=False)
        records = [updated if r is existing else r for r in state.records]
    else:
        records = [*state.records, HabitRecord(habit_id=habit_id, date=today, value=value)]

    logger.info("Record updated", extra={"habit_id": habit_id, "date": today.isoformat(), "value": value})
    return replace(state, records=records)


def toggle_skip(state: AppState, habit_id: str, *, today: date | None = None) -> AppState:
    """Flip today's skip marker for ``habit_id``; progress resets to zero either way."""

    today = today or today_date()
    _require_habit(state, habit_id)

    existing = state.find_record(habit_id, today)
    if existing is not None:
        skipped = not existing.is_skipped
        updated = replace(existing, is_skipped=skipped, value=0)
        records = [updated if r is existing else r for r in state.records]
    else:
        skipped = True
        records = [*state.records, HabitRecord(habit_id=habit_id, date=today, value=0, is_skipped=True)]

    logger.info("Skip toggled", extra={"habit_id": habit_id, "date": today.isoformat(), "skipped": skipped})
    return replace(state, records=records)


def create_habit(
    state: AppState,
    *,
    name: str,
    habit_type: HabitType = HabitType.YES_NO,
    target_value: Optional[int] = None,
    frequency: Optional[Frequency] = None,
    today: date | None = None,
    **extra: Any,
) -> tuple[AppState, Habit]:
    """Add a new habit and return ``(new_state, habit)``.

    ``start_date`` defaults to today; pomodoro habits get a default
    work/break configuration when none is supplied.
    """

    unknown = set(extra) - _HABIT_FIELDS
    if unknown:
        raise HabitValidationError(f"Unknown habit fields: {', '.join(sorted(unknown))}")
    reserved = set(extra) & (_PROTECTED_FIELDS | _CREATE_ARGUMENT_FIELDS)
    if reserved:
        raise HabitValidationError(f"Fields cannot be set here: {', '.join(sorted(reserved))}")

    start_date = extra.pop("start_date", None) or today or today_date()
    if habit_type == HabitType.POMODORO and extra.get("pomodoro_config") is None:
        extra["pomodoro_config"] = PomodoroConfig()

    habit = Habit(
        id=str(uuid.uuid4()),
        name=name.strip(),
        type=habit_type,
        target_value=_normalized_target(habit_type, target_value),
        frequency=frequency or Frequency(),
        start_date=start_date,
        created_at=int(time.time() * 1000),
        **extra,
    )
    _validate(habit)

    logger.info("Habit created", extra={"habit_id": habit.id, "habit_type": getattr(habit.type, "value", habit.type)})
    return replace(state, habits=[*state.habits, habit]), habit


def update_habit(state: AppState, habit_id: str, **changes: Any) -> AppState:
    """Apply field ``changes`` to an existing habit."""

    habit = _require_habit(state, habit_id)
    unknown = set(changes) - _HABIT_FIELDS
    if unknown:
        raise HabitValidationError(f"Unknown habit fields: {', '.join(sorted(unknown))}")
    protected = set(changes) & _PROTECTED_FIELDS
    if protected:
        raise HabitValidationError(f"Fields cannot be changed: {', '.join(sorted(protected))}")

    if "name" in changes:
        changes["name"] = changes["name"].strip()
    if "type" in changes or "target_value" in changes:
        changes["target_value"] = _normalized_target(
            changes.get("type", habit.type), changes.get("target_value", habit.target_value)
        )

    updated = replace(habit, **changes)
    _validate(updated)

    logger.info("Habit updated", extra={"habit_id": habit_id, "fields": sorted(changes)})
    return replace(state, habits=[updated if h.id == habit_id else h for h in state.habits])


def set_paused(state: AppState, habit_id: str, paused: bool = True) -> AppState:
    return update_habit(state, habit_id, is_paused=paused)


def set_archived(state: AppState, habit_id: str, archived: bool = True) -> AppState:
    return update_habit(state, habit_id, is_archived=archived)


def delete_habit(state: AppState, habit_id: str) -> AppState:
    """Remove a habit together with all of its records."""

    _require_habit(state, habit_id)
    habits = [h for h in state.habits if h.id != habit_id]
    records = [r for r in state.records if r.habit_id != habit_id]
    routines = [
        replace(rt, habits=[hid for hid in rt.habits if hid != habit_id]) for rt in state.routines
    ]

    logger.info(
        "Habit deleted",
        extra={"habit_id": habit_id, "records_removed": len(state.records) - len(records)},
    )
    return replace(state, habits=habits, records=records, routines=routines)


def update_settings(state: AppState, **changes: Any) -> AppState:
    """Return state with settings fields replaced."""

    try:
        settings = replace(state.settings, **changes)
    except TypeError as exc:
        raise HabitValidationError(f"Unknown settings fields: {', '.join(sorted(changes))}") from exc
    logger.info("Settings updated", extra={"fields": sorted(changes)})
    return replace(state, settings=settings)


__all__ = [
    "create_habit",
    "delete_habit",
    "set_archived",
    "set_paused",
    "toggle_skip",
    "update_habit",
    "update_record",
    "update_settings",
]
