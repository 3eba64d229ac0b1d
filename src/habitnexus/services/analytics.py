"""Aggregate statistics, calendar and heatmap data built on the streak engine."""

from __future__ import annotations

from calendar import monthrange
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

from ..dates import today_date, weekday_index
from ..models.habit import Habit, HabitRecord
from ..models.state import AppState
from .habits import StreakResult, compute_longest_streak, compute_streak, is_completed, target_value_for
from .schedule import is_due

ALL_HABITS = "all"
HEATMAP_WEEKS = 20


@dataclass(frozen=True)
class DailyStats:
    completed: int
    total: int
    percentage: int


@dataclass(frozen=True)
class HabitStreak:
    habit: Habit
    streak: StreakResult
    longest: int


@dataclass(frozen=True)
class GlobalStats:
    """Summary across all habits for the stats screen."""

    week_percentage: int
    active_count: int
    best_streak: int
    active_streak: int
    streaks: list[HabitStreak]
    total_completions: int


@dataclass(frozen=True)
class CalendarCell:
    day: date
    status: str  # none | partial | full | skipped


@dataclass(frozen=True)
class HeatmapCell:
    day: date
    value: float
    intensity: float


def _percentage(part: int, whole: int) -> int:
    """Integer percentage rounded half up; 0 when ``whole`` is 0."""

    if whole <= 0:
        return 0
    return (part * 200 + whole) // (whole * 2)


def habits_due_on(state: AppState, day: date) -> list[Habit]:
    return [h for h in state.habits if is_due(h, day)]


def daily_stats(state: AppState, *, today: date | None = None) -> DailyStats:
    """Completed vs due habits for ``today``."""

    today = today or today_date()
    due = habits_due_on(state, today)
    completed = sum(1 for h in due if is_completed(h, state.find_record(h.id, today)))
    return DailyStats(completed=completed, total=len(due), percentage=_percentage(completed, len(due)))


def global_stats(state: AppState, *, today: date | None = None, days: int = 7) -> GlobalStats:
    """Streak leaderboard plus completion rate over the last ``days`` days (today included)."""

    today = today or today_date()
    streaks = [
        HabitStreak(
            habit=h,
            streak=compute_streak(h.id, state.records, state.habits, today=today),
            longest=compute_longest_streak(h.id, state.records, state.habits, today=today),
        )
        for h in state.habits
    ]

    potential = 0
    done = 0
    records = {(r.habit_id, r.date): r for r in state.records}
    for offset in range(days):
        day = today - timedelta(days=offset)
        for habit in state.habits:
            if is_due(habit, day):
                potential += 1
                if is_completed(habit, records.get((habit.id, day))):
                    done += 1

    return GlobalStats(
        week_percentage=_percentage(done, potential),
        active_count=sum(1 for h in state.habits if not h.is_archived),
        best_streak=max((s.longest for s in streaks), default=0),
        active_streak=max((s.streak.current for s in streaks), default=0),
        streaks=sorted(streaks, key=lambda s: s.streak.current, reverse=True),
        total_completions=sum(1 for r in state.records if r.value > 0),
    )


def _day_status(
    day: date,
    habits: list[Habit],
    day_records: list[HabitRecord],
    habit_id: str,
) -> str:
    if habit_id == ALL_HABITS:
        lookup = {h.id: h for h in habits}
        completed = sum(
            1
            for r in day_records
            if r.habit_id in lookup and r.value >= target_value_for(lookup[r.habit_id])
        )
        if completed == 0:
            return "none"
        if habits and completed >= len(habits):
            return "full"
        return "partial"

    habit = next((h for h in habits if h.id == habit_id), None)
    record = next((r for r in day_records if r.habit_id == habit_id), None)
    if habit is None or record is None:
        return "none"
    if record.is_skipped:
        return "skipped"
    return "full" if record.value >= target_value_for(habit) else "partial"


def calendar_month(
    state: AppState,
    year: int,
    month: int,
    *,
    habit_id: str = ALL_HABITS,
) -> list[list[Optional[CalendarCell]]]:
    """Return Sunday-first weeks for the month; ``None`` pads days outside it."""

    _, total_days = monthrange(year, month)
    first = date(year, month, 1)
    by_day: dict[date, list[HabitRecord]] = defaultdict(list)
    for record in state.records:
        if record.date.year == year and record.date.month == month:
            by_day[record.date].append(record)

    cells: list[Optional[CalendarCell]] = [None] * weekday_index(first)
    for offset in range(total_days):
        day = first + timedelta(days=offset)
        cells.append(CalendarCell(day=day, status=_day_status(day, state.habits, by_day[day], habit_id)))
    cells.extend([None] * (-len(cells) % 7))

    return [cells[i : i + 7] for i in range(0, len(cells), 7)]


def heatmap_grid(
    records: Iterable[HabitRecord],
    *,
    today: date | None = None,
    weeks: int = HEATMAP_WEEKS,
) -> list[list[HeatmapCell]]:
    """Seven rows by ``weeks`` columns of summed daily values.

    The last column holds the most recent week and the bottom-right cell is
    today.
    """

    today = today or today_date()
    totals: dict[date, float] = defaultdict(float)
    for record in records:
        totals[record.date] += record.value

    grid: list[list[HeatmapCell]] = []
    for row in range(7):
        cells = []
        for col in range(weeks):
            day = today - timedelta(days=(weeks - 1 - col) * 7 + (6 - row))
            value = totals.get(day, 0)
            intensity = min(0.2 + value * 0.2, 1.0) if value > 0 else 0.1
            cells.append(HeatmapCell(day=day, value=value, intensity=intensity))
        grid.append(cells)
    return grid


__all__ = [
    "ALL_HABITS",
    "CalendarCell",
    "DailyStats",
    "GlobalStats",
    "HabitStreak",
    "HeatmapCell",
    "calendar_month",
    "daily_stats",
    "global_stats",
    "habits_due_on",
    "heatmap_grid",
]
