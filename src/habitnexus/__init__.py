"""HabitNexus: local habit tracking with due-date and streak computation."""

from __future__ import annotations

from .config import BaseConfig, DevConfig, TestConfig
from .context import AppContext, create_app_context
from .services.habits import StreakResult, compute_streak
from .services.schedule import is_due

__version__ = "1.4.2"

__all__ = [
    "AppContext",
    "BaseConfig",
    "DevConfig",
    "StreakResult",
    "TestConfig",
    "compute_streak",
    "create_app_context",
    "is_due",
]
