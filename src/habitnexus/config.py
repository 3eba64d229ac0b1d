"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    """Interpret environment variable values as positive integers."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc
    if parsed < 1:
        raise ValueError(f"{name} must be >= 1, got {parsed}")
    return parsed


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "HabitNexus"
    DB_FILENAME = "habitnexus.db"
    DEFAULT_STORAGE_KEY = "habitnexus_v1_data"
    SQLITE_PRAGMAS = {"journal_mode": "wal", "foreign_keys": "on"}

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("HABITNEXUS_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("HABITNEXUS_DATABASE_URL", self._build_sqlite_url())
        self.STORAGE_KEY = os.getenv("HABITNEXUS_STORAGE_KEY", self.DEFAULT_STORAGE_KEY)
        self.REMINDER_POLL_SECONDS = _env_int("HABITNEXUS_REMINDER_POLL_SECONDS", 30)

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file, logs and backups live."""

        data_root = os.getenv("HABITNEXUS_DATA_DIR", "instance")
        base_path = Path(data_root).expanduser()
        try:
            path = base_path.resolve()
            path.mkdir(parents=True, exist_ok=True)
            return path
        except PermissionError:
            # Protected install locations fall back to per-user storage.
            fallback_path = Path.home() / ".local" / "share" / self.APP_NAME.lower()
            fallback_path.mkdir(parents=True, exist_ok=True)
            return fallback_path.resolve()

    def _build_sqlite_url(self) -> str:
        """Construct the default SQLite URL inside the data directory."""

        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    @property
    def backup_dir(self) -> Path:
        return Path(self.DATA_DIR) / "backups"

    @property
    def reports_dir(self) -> Path:
        return Path(self.DATA_DIR) / "reports"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        connect_args: dict[str, Any] = {}
        if self.DATABASE_URL.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        return {"connect_args": connect_args}


class DevConfig(BaseConfig):
    """Development configuration: local SQLite, verbose console."""

    def __init__(self) -> None:
        super().__init__()
        self.DEV_MODE = True


class TestConfig(BaseConfig):
    """Configuration for the test-suite: in-memory database, quiet console."""

    __test__ = False

    def __init__(self) -> None:
        super().__init__()
        self.DEV_MODE = False
        self.DATABASE_URL = "sqlite://"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        from sqlalchemy.pool import StaticPool

        options = super().sqlalchemy_engine_options()
        # A single shared connection keeps the in-memory database alive.
        options["poolclass"] = StaticPool
        return options
