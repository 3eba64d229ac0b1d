"""Domain exceptions raised by HabitNexus collaborators.

The due-date and streak engine itself never raises; these cover the
mutation, persistence and backup layers around it.
"""

from __future__ import annotations


class HabitNexusError(Exception):
    """Base class for all HabitNexus errors."""


class HabitNotFoundError(HabitNexusError, LookupError):
    """Raised when a mutation targets a habit id that does not exist."""

    def __init__(self, habit_id: str):
        super().__init__(f"Habit not found: {habit_id}")
        self.habit_id = habit_id


class HabitValidationError(HabitNexusError, ValueError):
    """Raised when habit fields fail validation."""


class StorageError(HabitNexusError):
    """Raised when the state document cannot be written."""


class BackupError(HabitNexusError):
    """Raised when a backup file cannot be read or parsed."""


__all__ = [
    "BackupError",
    "HabitNexusError",
    "HabitNotFoundError",
    "HabitValidationError",
    "StorageError",
]
