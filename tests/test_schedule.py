"""Tests for due-date evaluation across every recurrence rule."""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from habitnexus.models import Frequency, FrequencyType, Habit
from habitnexus.services.schedule import is_due

START = date(2024, 1, 1)  # Monday


def _days(start: date, count: int):
    return [start + timedelta(days=i) for i in range(count)]


class TestLifecycleGates:
    """Archived, paused and out-of-range dates are never due."""

    @pytest.mark.parametrize(
        "frequency",
        [
            Frequency(type=FrequencyType.DAILY),
            Frequency(type=FrequencyType.WEEKDAYS, weekdays=[0, 1, 2, 3, 4, 5, 6]),
            Frequency(type=FrequencyType.INTERVAL, interval=1),
            Frequency(type=FrequencyType.MONTHLY, monthly_days=list(range(1, 32))),
        ],
    )
    def test_archived_habit_is_never_due(self, habit_factory, frequency):
        habit = habit_factory(frequency=frequency, start_date=START, is_archived=True)
        assert not any(is_due(habit, d) for d in _days(START, 60))

    def test_paused_habit_is_never_due(self, habit_factory):
        habit = habit_factory(start_date=START, is_paused=True)
        assert not any(is_due(habit, d) for d in _days(START, 60))

    def test_dates_before_start_are_not_due(self, habit_factory):
        habit = habit_factory(start_date=date(2024, 2, 1))
        assert not is_due(habit, date(2024, 1, 31))
        assert is_due(habit, date(2024, 2, 1))

    @pytest.mark.parametrize(
        "frequency",
        [
            Frequency(type=FrequencyType.DAILY),
            Frequency(type=FrequencyType.WEEKDAYS, weekdays=[0, 1, 2, 3, 4, 5, 6]),
            Frequency(type=FrequencyType.INTERVAL, interval=1),
            Frequency(type=FrequencyType.MONTHLY, monthly_days=list(range(1, 32))),
        ],
        ids=["daily", "weekdays", "interval", "monthly"],
    )
    def test_end_date_is_inclusive(self, habit_factory, frequency):
        habit = habit_factory(frequency=frequency, start_date=START, end_date=date(2024, 1, 10))
        assert all(is_due(habit, d) for d in _days(START, 10))
        assert not any(is_due(habit, d) for d in _days(date(2024, 1, 11), 60))

    def test_datetime_counts_as_its_calendar_day(self, habit_factory):
        habit = habit_factory(start_date=date(2024, 2, 1))
        assert is_due(habit, datetime(2024, 3, 15, 9, 0))
        assert is_due(habit, datetime(2024, 2, 1, 23, 59))
        assert not is_due(habit, datetime(2024, 1, 31, 23, 59))


class TestDaily:
    def test_every_day_in_range_is_due(self, habit_factory):
        habit = habit_factory(start_date=START)
        assert all(is_due(habit, d) for d in _days(START, 400))

    def test_accepts_iso_strings_and_timestamps(self, habit_factory):
        habit = habit_factory(start_date=START)
        assert is_due(habit, "2024-01-05")
        assert is_due(habit, "2024-01-05T23:59:59.000Z")
        assert not is_due(habit, "2023-12-31")


class TestWeekdays:
    def test_monday_wednesday_friday(self, habit_factory):
        """Weekday numbering is Sunday=0 .. Saturday=6."""
        habit = habit_factory(
            start_date=START,
            frequency=Frequency(type=FrequencyType.WEEKDAYS, weekdays=[1, 3, 5]),
        )
        for day in _days(START, 28):
            # Python's weekday(): Monday=0, Wednesday=2, Friday=4
            assert is_due(habit, day) == (day.weekday() in {0, 2, 4}), day

    def test_sunday_is_zero(self, habit_factory):
        habit = habit_factory(
            start_date=START,
            frequency=Frequency(type=FrequencyType.WEEKDAYS, weekdays=[0]),
        )
        assert is_due(habit, date(2024, 1, 7))  # Sunday
        assert not is_due(habit, date(2024, 1, 6))  # Saturday

    def test_empty_or_missing_weekdays_never_due(self, habit_factory):
        empty = habit_factory(
            start_date=START, frequency=Frequency(type=FrequencyType.WEEKDAYS, weekdays=[])
        )
        missing = habit_factory(start_date=START, frequency=Frequency(type=FrequencyType.WEEKDAYS))
        assert not any(is_due(empty, d) for d in _days(START, 14))
        assert not any(is_due(missing, d) for d in _days(START, 14))


class TestInterval:
    def test_every_third_day(self, habit_factory):
        habit = habit_factory(
            start_date=START, frequency=Frequency(type=FrequencyType.INTERVAL, interval=3)
        )
        assert is_due(habit, date(2024, 1, 1))
        assert not is_due(habit, date(2024, 1, 2))
        assert not is_due(habit, date(2024, 1, 3))
        assert is_due(habit, date(2024, 1, 4))
        assert is_due(habit, date(2024, 1, 7))

    def test_phase_is_anchored_at_start_date(self, habit_factory):
        habit = habit_factory(
            start_date=date(2024, 1, 2),
            frequency=Frequency(type=FrequencyType.INTERVAL, interval=2),
        )
        assert is_due(habit, date(2024, 1, 2))
        assert not is_due(habit, date(2024, 1, 3))
        assert is_due(habit, date(2024, 1, 4))

    @pytest.mark.parametrize("interval", [None, 0, 1])
    def test_missing_or_zero_interval_behaves_daily(self, habit_factory, interval):
        habit = habit_factory(
            start_date=START, frequency=Frequency(type=FrequencyType.INTERVAL, interval=interval)
        )
        assert all(is_due(habit, d) for d in _days(START, 30))


class TestMonthly:
    def test_listed_days_of_month(self, habit_factory):
        habit = habit_factory(
            start_date=START,
            frequency=Frequency(type=FrequencyType.MONTHLY, monthly_days=[1, 15]),
        )
        assert is_due(habit, date(2024, 2, 1))
        assert is_due(habit, date(2024, 2, 15))
        assert not is_due(habit, date(2024, 2, 14))

    def test_day_31_skips_short_months(self, habit_factory):
        habit = habit_factory(
            start_date=START,
            frequency=Frequency(type=FrequencyType.MONTHLY, monthly_days=[31]),
        )
        due = [d for d in _days(START, 91) if is_due(habit, d)]
        assert due == [date(2024, 1, 31), date(2024, 3, 31)]


class TestUnknownFrequency:
    def test_unknown_type_is_never_due(self):
        habit = Habit.from_dict(
            {"id": "x", "startDate": "2024-01-01", "frequency": {"type": "HOURLY"}}
        )
        assert habit.frequency.type == "HOURLY"
        assert not any(is_due(habit, d) for d in _days(START, 14))
