"""Service modules: due dates, streaks, mutations, analytics, reminders, reports."""

from . import analytics, backup, habits, records, reminders, reports, schedule

__all__ = [
    "analytics",
    "backup",
    "habits",
    "records",
    "reminders",
    "reports",
    "schedule",
]
