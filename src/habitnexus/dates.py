"""Calendar-date helpers.

Every date in HabitNexus is a plain ``datetime.date``: no time of day and no
zone, so day differences, weekdays and day-of-month are exact.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Union

DateLike = Union[date, datetime, str]


def parse_date(value: DateLike) -> date:
    """Return the calendar date for ``value``.

    Accepts a ``date``, a ``datetime`` or an ISO string. Timestamps resolve to
    the local calendar day: a zoned one such as ``2024-01-01T23:30:00.000Z``
    is converted to local time first, a naive one keeps its own date.
    """

    if isinstance(value, datetime):
        return _local_day(value)
    if isinstance(value, date):
        return value
    text = value.strip()
    if len(text) <= 10:
        return date.fromisoformat(text)
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return _local_day(datetime.fromisoformat(text))


def _local_day(moment: datetime) -> date:
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.date()


def format_date(value: date) -> str:
    """Format a date as ``YYYY-MM-DD``."""

    return value.isoformat()


def today_date() -> date:
    """Return today's date from the local clock."""

    return date.today()


def days_between(start: date, end: date) -> int:
    """Whole calendar days from ``start`` to ``end`` (negative if end precedes start)."""

    return (end - start).days


def weekday_index(value: date) -> int:
    """Weekday with Sunday=0 through Saturday=6."""

    return value.isoweekday() % 7


def previous_day(value: date) -> date:
    return value - timedelta(days=1)


__all__ = [
    "DateLike",
    "days_between",
    "format_date",
    "parse_date",
    "previous_day",
    "today_date",
    "weekday_index",
]
