"""Model exports: domain dataclasses and the SQLModel storage table."""

from .document import StoredDocument
from .habit import (
    Frequency,
    FrequencyType,
    Habit,
    HabitRecord,
    HabitType,
    PomodoroConfig,
    Reminder,
    ReminderScheduleType,
    ReminderType,
)
from .state import AppState, Category, Routine, Settings

__all__ = [
    "AppState",
    "Category",
    "Frequency",
    "FrequencyType",
    "Habit",
    "HabitRecord",
    "HabitType",
    "PomodoroConfig",
    "Reminder",
    "ReminderScheduleType",
    "ReminderType",
    "Routine",
    "Settings",
    "StoredDocument",
]
