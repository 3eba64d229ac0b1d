"""Application state container persisted as a single JSON document."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .habit import Habit, HabitRecord


@dataclass(frozen=True)
class Routine:
    """A named grouping of habits (e.g. morning routine)."""

    id: str
    name: str
    icon: str = ""
    start_time: Optional[str] = None  # HH:mm
    habits: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "habits": list(self.habits),
        }
        if self.start_time is not None:
            payload["startTime"] = self.start_time
        return payload

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Routine":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            icon=data.get("icon", ""),
            start_time=data.get("startTime"),
            habits=list(data.get("habits") or []),
        )


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    color: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "color": self.color}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Category":
        return cls(id=data["id"], name=data.get("name", ""), color=data.get("color", ""))


@dataclass(frozen=True)
class Settings:
    """User-facing preferences stored alongside habits."""

    dark_mode: bool = False
    week_start: int = 1
    theme_color: str = "#3b82f6"

    def to_dict(self) -> dict[str, Any]:
        return {
            "darkMode": self.dark_mode,
            "weekStart": self.week_start,
            "themeColor": self.theme_color,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Settings":
        # Missing keys fall back to defaults so older documents still load.
        defaults = cls()
        return cls(
            dark_mode=data.get("darkMode", defaults.dark_mode),
            week_start=data.get("weekStart", defaults.week_start),
            theme_color=data.get("themeColor", defaults.theme_color),
        )


def default_routines() -> list[Routine]:
    return [
        Routine(id="morning", name="Morning Routine", icon="🌅"),
        Routine(id="evening", name="Evening Routine", icon="🌙"),
    ]


@dataclass(frozen=True)
class AppState:
    """Everything the app persists: habits, records, routines, categories, settings."""

    habits: list[Habit] = field(default_factory=list)
    records: list[HabitRecord] = field(default_factory=list)
    routines: list[Routine] = field(default_factory=default_routines)
    categories: list[Category] = field(default_factory=list)
    settings: Settings = field(default_factory=Settings)

    def find_habit(self, habit_id: str) -> Optional[Habit]:
        return next((h for h in self.habits if h.id == habit_id), None)

    def find_record(self, habit_id: str, day) -> Optional[HabitRecord]:
        return next(
            (r for r in self.records if r.habit_id == habit_id and r.date == day),
            None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "habits": [h.to_dict() for h in self.habits],
            "records": [r.to_dict() for r in self.records],
            "routines": [r.to_dict() for r in self.routines],
            "categories": [c.to_dict() for c in self.categories],
            "settings": self.settings.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AppState":
        """Build state from a stored document, merging missing keys from defaults."""

        routines = data.get("routines")
        return cls(
            habits=[Habit.from_dict(h) for h in data.get("habits") or []],
            records=[HabitRecord.from_dict(r) for r in data.get("records") or []],
            routines=(
                [Routine.from_dict(r) for r in routines]
                if routines is not None
                else default_routines()
            ),
            categories=[Category.from_dict(c) for c in data.get("categories") or []],
            settings=Settings.from_dict(data.get("settings") or {}),
        )


__all__ = ["AppState", "Category", "Routine", "Settings", "default_routines"]
