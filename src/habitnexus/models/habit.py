"""Habit tracking data structures.

Habits and records are plain frozen dataclasses; the persisted document uses
camelCase keys, so each type carries its own ``to_dict``/``from_dict`` pair.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional, Type, TypeVar, Union

from ..dates import format_date, parse_date

E = TypeVar("E", bound=Enum)


class HabitType(str, Enum):
    YES_NO = "YES_NO"
    COUNT = "COUNT"
    TIME = "TIME"
    POMODORO = "POMODORO"


class FrequencyType(str, Enum):
    DAILY = "DAILY"
    WEEKDAYS = "WEEKDAYS"
    INTERVAL = "INTERVAL"
    MONTHLY = "MONTHLY"


class ReminderType(str, Enum):
    NONE = "NONE"
    NOTIFICATION = "NOTIFICATION"
    ALARM = "ALARM"


class ReminderScheduleType(str, Enum):
    ALWAYS = "ALWAYS"
    SPECIFIC_DAYS = "SPECIFIC_DAYS"
    DAYS_BEFORE = "DAYS_BEFORE"


def coerce_enum(enum_cls: Type[E], raw: Any) -> Union[E, str]:
    """Return the enum member for ``raw``, or ``raw`` itself when unrecognized.

    Unknown values survive a load/save cycle unchanged; callers treat them as
    inert (an unknown frequency is never due).
    """

    if isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(raw)
    except ValueError:
        return raw


def _enum_value(value: Union[Enum, str]) -> str:
    return value.value if isinstance(value, Enum) else value


def _optional_list(raw: Any) -> Optional[list]:
    return list(raw) if raw is not None else None


@dataclass(frozen=True)
class Frequency:
    """Recurrence rule for a habit."""

    type: Union[FrequencyType, str] = FrequencyType.DAILY
    weekdays: Optional[list[int]] = None  # 0=Sunday .. 6=Saturday
    interval: Optional[int] = None
    monthly_days: Optional[list[int]] = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": _enum_value(self.type)}
        if self.weekdays is not None:
            payload["weekdays"] = list(self.weekdays)
        if self.interval is not None:
            payload["interval"] = self.interval
        if self.monthly_days is not None:
            payload["monthlyDays"] = list(self.monthly_days)
        return payload

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Frequency":
        return cls(
            type=coerce_enum(FrequencyType, data.get("type", FrequencyType.DAILY.value)),
            weekdays=_optional_list(data.get("weekdays")),
            interval=data.get("interval"),
            monthly_days=_optional_list(data.get("monthlyDays")),
        )


@dataclass(frozen=True)
class Reminder:
    """A time-of-day reminder attached to a habit."""

    id: str
    time: str  # HH:mm, local time
    type: Union[ReminderType, str] = ReminderType.NOTIFICATION
    is_enabled: bool = True
    schedule_type: Union[ReminderScheduleType, str] = ReminderScheduleType.ALWAYS
    specific_days: Optional[list[int]] = None
    days_before: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "time": self.time,
            "type": _enum_value(self.type),
            "isEnabled": self.is_enabled,
            "scheduleType": _enum_value(self.schedule_type),
        }
        if self.specific_days is not None:
            payload["specificDays"] = list(self.specific_days)
        if self.days_before is not None:
            payload["daysBefore"] = self.days_before
        return payload

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Reminder":
        return cls(
            id=data["id"],
            time=data["time"],
            type=coerce_enum(ReminderType, data.get("type", ReminderType.NOTIFICATION.value)),
            is_enabled=data.get("isEnabled", True),
            schedule_type=coerce_enum(
                ReminderScheduleType, data.get("scheduleType", ReminderScheduleType.ALWAYS.value)
            ),
            specific_days=_optional_list(data.get("specificDays")),
            days_before=data.get("daysBefore"),
        )


@dataclass(frozen=True)
class PomodoroConfig:
    """Work/break lengths in seconds."""

    work_duration: int = 25 * 60
    break_duration: int = 5 * 60

    def to_dict(self) -> dict[str, Any]:
        return {"workDuration": self.work_duration, "breakDuration": self.break_duration}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PomodoroConfig":
        return cls(
            work_duration=data.get("workDuration", 25 * 60),
            break_duration=data.get("breakDuration", 5 * 60),
        )


@dataclass(frozen=True)
class Habit:
    """A user-defined recurring habit."""

    id: str
    start_date: date
    name: str = ""
    type: Union[HabitType, str] = HabitType.YES_NO
    target_value: int = 1
    frequency: Frequency = field(default_factory=Frequency)
    end_date: Optional[date] = None
    is_archived: bool = False
    is_paused: bool = False
    icon: str = "activity"
    color: str = "#3b82f6"
    description: Optional[str] = None
    category_id: Optional[str] = None
    unit: Optional[str] = None
    reminders: list[Reminder] = field(default_factory=list)
    created_at: int = 0  # epoch milliseconds
    pomodoro_config: Optional[PomodoroConfig] = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "color": self.color,
            "type": _enum_value(self.type),
            "targetValue": self.target_value,
            "frequency": self.frequency.to_dict(),
            "reminders": [r.to_dict() for r in self.reminders],
            "startDate": format_date(self.start_date),
            "isArchived": self.is_archived,
            "isPaused": self.is_paused,
            "createdAt": self.created_at,
        }
        if self.description is not None:
            payload["description"] = self.description
        if self.category_id is not None:
            payload["categoryId"] = self.category_id
        if self.unit is not None:
            payload["unit"] = self.unit
        if self.end_date is not None:
            payload["endDate"] = format_date(self.end_date)
        if self.pomodoro_config is not None:
            payload["pomodoroConfig"] = self.pomodoro_config.to_dict()
        return payload

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Habit":
        end_date = data.get("endDate")
        pomodoro = data.get("pomodoroConfig")
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            icon=data.get("icon", "activity"),
            color=data.get("color", "#3b82f6"),
            type=coerce_enum(HabitType, data.get("type", HabitType.YES_NO.value)),
            target_value=data.get("targetValue", 1),
            frequency=Frequency.from_dict(data.get("frequency") or {}),
            reminders=[Reminder.from_dict(r) for r in data.get("reminders") or []],
            start_date=parse_date(data["startDate"]),
            end_date=parse_date(end_date) if end_date else None,
            is_archived=data.get("isArchived", False),
            is_paused=data.get("isPaused", False),
            created_at=data.get("createdAt", 0),
            description=data.get("description"),
            category_id=data.get("categoryId"),
            unit=data.get("unit"),
            pomodoro_config=PomodoroConfig.from_dict(pomodoro) if pomodoro else None,
        )


@dataclass(frozen=True)
class HabitRecord:
    """Progress for one habit on one calendar day."""

    habit_id: str
    date: date
    value: int = 0
    is_skipped: bool = False
    note: Optional[str] = None
    mood: Optional[str] = None  # great | good | neutral | bad

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "habitId": self.habit_id,
            "date": format_date(self.date),
            "value": self.value,
            "isSkipped": self.is_skipped,
        }
        if self.note is not None:
            payload["note"] = self.note
        if self.mood is not None:
            payload["mood"] = self.mood
        return payload

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HabitRecord":
        return cls(
            habit_id=data["habitId"],
            date=parse_date(data["date"]),
            value=data.get("value", 0),
            is_skipped=bool(data.get("isSkipped", False)),
            note=data.get("note"),
            mood=data.get("mood"),
        )


__all__ = [
    "Frequency",
    "FrequencyType",
    "Habit",
    "HabitRecord",
    "HabitType",
    "PomodoroConfig",
    "Reminder",
    "ReminderScheduleType",
    "ReminderType",
    "coerce_enum",
]
