"""Habit service helpers for completion rules and streaks."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

from ..dates import today_date
from ..models.habit import Habit, HabitRecord, HabitType
from .schedule import is_due

# Upper bound on days visited by a backward scan.
MAX_SCAN_DAYS = 5000


@dataclass(frozen=True)
class StreakResult:
    """Streak summary for a single habit."""

    current: int = 0
    longest: int = 0
    is_pending: bool = False


def target_value_for(habit: Habit) -> int:
    """Threshold a record's value must reach to count as a success."""

    return 1 if habit.type == HabitType.YES_NO else habit.target_value


def is_completed(habit: Habit, record: Optional[HabitRecord]) -> bool:
    """Return True when ``record`` is a non-skipped success for ``habit``."""

    if record is None or record.is_skipped:
        return False
    return record.value >= target_value_for(habit)


def _find_habit(habit_id: str, habits: Iterable[Habit]) -> Optional[Habit]:
    return next((h for h in habits if h.id == habit_id), None)


def _records_by_day(habit_id: str, records: Iterable[HabitRecord]) -> dict[date, HabitRecord]:
    return {r.date: r for r in records if r.habit_id == habit_id}


def compute_streak(
    habit_id: str,
    records: Iterable[HabitRecord],
    habits: Iterable[Habit],
    *,
    today: date | None = None,
) -> StreakResult:
    """Return the current streak for ``habit_id`` by walking backward from today.

    Today never breaks the streak: if it is due and not yet completed the
    result is pending, and the count covers the days before it. A completed
    due today is added on top of the backward count. Skipped days are passed
    over without counting; a failed or missing due day ends the walk.

    ``longest`` mirrors ``current``; use :func:`compute_longest_streak` for the
    historical maximum.
    """

    habit = _find_habit(habit_id, habits)
    if habit is None:
        return StreakResult()

    today = today or today_date()
    by_day = _records_by_day(habit_id, records)
    target = target_value_for(habit)

    completed_today = is_completed(habit, by_day.get(today))
    due_today = is_due(habit, today)
    is_pending = due_today and not completed_today

    current = 0
    cursor = today - timedelta(days=1)
    for _ in range(MAX_SCAN_DAYS):
        if cursor < habit.start_date:
            break
        if is_due(habit, cursor):
            record = by_day.get(cursor)
            if record is None:
                break
            if not record.is_skipped:
                if record.value < target:
                    break
                current += 1
        cursor -= timedelta(days=1)

    if due_today and completed_today:
        current += 1

    return StreakResult(current=current, longest=current, is_pending=is_pending)


def compute_longest_streak(
    habit_id: str,
    records: Iterable[HabitRecord],
    habits: Iterable[Habit],
    *,
    today: date | None = None,
) -> int:
    """Return the longest run of successful due days in the habit's history.

    Scans forward from ``start_date`` through today with the same rules as
    :func:`compute_streak`; an unresolved today does not end the final run.
    """

    habit = _find_habit(habit_id, habits)
    if habit is None:
        return 0

    today = today or today_date()
    last_day = min(today, habit.end_date) if habit.end_date else today
    by_day = _records_by_day(habit_id, records)
    target = target_value_for(habit)

    longest = 0
    run = 0
    cursor = habit.start_date
    while cursor <= last_day:
        if is_due(habit, cursor):
            record = by_day.get(cursor)
            if record is not None and record.is_skipped:
                pass
            elif record is not None and record.value >= target:
                run += 1
                longest = max(longest, run)
            elif cursor != today:
                run = 0
        cursor += timedelta(days=1)

    return longest


__all__ = [
    "MAX_SCAN_DAYS",
    "StreakResult",
    "compute_longest_streak",
    "compute_streak",
    "is_completed",
    "target_value_for",
]
