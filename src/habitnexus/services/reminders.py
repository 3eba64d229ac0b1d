"""Reminder selection for the periodic polling loop."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Callable, Iterable, Optional

from ..dates import weekday_index
from ..logging_config import get_logger
from ..models.habit import Habit, Reminder, ReminderScheduleType, ReminderType
from .schedule import is_due

logger = get_logger("reminders")

ReminderCallback = Callable[[Habit, Reminder], None]


def reminder_key(habit: Habit, reminder: Reminder, day: date) -> str:
    return f"{habit.id}:{reminder.id}:{day.isoformat()}"


def _schedule_matches(habit: Habit, reminder: Reminder, day: date) -> bool:
    if reminder.schedule_type == ReminderScheduleType.ALWAYS:
        return is_due(habit, day)
    if reminder.schedule_type == ReminderScheduleType.SPECIFIC_DAYS:
        return weekday_index(day) in (reminder.specific_days or ())
    if reminder.schedule_type == ReminderScheduleType.DAYS_BEFORE:
        return is_due(habit, day + timedelta(days=reminder.days_before or 1))
    return False


def pending_reminders(
    habits: Iterable[Habit],
    *,
    now: datetime,
    fired: Optional[set[str]] = None,
) -> list[tuple[Habit, Reminder]]:
    """Return reminders whose ``HH:mm`` matches ``now`` and have not fired today."""

    fired = fired or set()
    today = now.date()
    clock = now.strftime("%H:%M")

    due: list[tuple[Habit, Reminder]] = []
    for habit in habits:
        if habit.is_archived or habit.is_paused:
            continue
        for reminder in habit.reminders:
            if not reminder.is_enabled or reminder.type == ReminderType.NONE:
                continue
            if reminder.time != clock:
                continue
            if reminder_key(habit, reminder, today) in fired:
                continue
            if _schedule_matches(habit, reminder, today):
                due.append((habit, reminder))
    return due


class ReminderPoller:
    """Fires each matching reminder at most once per day.

    ``habits_provider`` is called on every poll so edits made between polls
    are picked up.
    """

    def __init__(
        self,
        habits_provider: Callable[[], Iterable[Habit]],
        notify: ReminderCallback,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.habits_provider = habits_provider
        self.notify = notify
        self.clock = clock
        self._fired: set[str] = set()
        self._fired_on: Optional[date] = None

    @property
    def fired(self) -> frozenset[str]:
        return frozenset(self._fired)

    def poll(self) -> list[tuple[Habit, Reminder]]:
        now = self.clock()
        if self._fired_on != now.date():
            self._fired.clear()
            self._fired_on = now.date()

        triggered = pending_reminders(self.habits_provider(), now=now, fired=self._fired)
        for habit, reminder in triggered:
            self._fired.add(reminder_key(habit, reminder, now.date()))
            logger.info(
                "Reminder triggered",
                extra={"habit_id": habit.id, "reminder_id": reminder.id, "reminder_type": getattr(reminder.type, "value", reminder.type)},
            )
            try:
                self.notify(habit, reminder)
            except Exception as exc:
                logger.error(f"Reminder callback failed for {habit.id}: {exc}", exc_info=True)
        return triggered


__all__ = ["ReminderPoller", "pending_reminders", "reminder_key"]
