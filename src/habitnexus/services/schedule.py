"""Due-date evaluation for habit recurrence rules."""

from __future__ import annotations

from ..dates import DateLike, days_between, parse_date, weekday_index
from ..models.habit import FrequencyType, Habit


def is_due(habit: Habit, day: DateLike) -> bool:
    """Return True when ``day`` is an occurrence of ``habit``.

    Archived or paused habits are never due, nor is any date outside
    ``[start_date, end_date]``. Inside that range the frequency decides:

    * DAILY: every day
    * WEEKDAYS: weekday (Sunday=0) is listed in ``weekdays``
    * INTERVAL: whole days since ``start_date`` divisible by ``interval``
      (missing or zero interval means 1)
    * MONTHLY: day-of-month is listed in ``monthly_days``

    An unrecognized frequency type is never due.
    """

    if habit.is_archived or habit.is_paused:
        return False

    target = parse_date(day)
    if target < habit.start_date:
        return False
    if habit.end_date is not None and target > habit.end_date:
        return False

    frequency = habit.frequency
    if frequency.type == FrequencyType.DAILY:
        return True
    if frequency.type == FrequencyType.WEEKDAYS:
        return weekday_index(target) in (frequency.weekdays or ())
    if frequency.type == FrequencyType.INTERVAL:
        interval = frequency.interval or 1
        return days_between(habit.start_date, target) % interval == 0
    if frequency.type == FrequencyType.MONTHLY:
        return target.day in (frequency.monthly_days or ())
    return False


__all__ = ["is_due"]
