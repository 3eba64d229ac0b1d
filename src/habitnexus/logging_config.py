"""Structured logging: console output, a rotating JSON log and a per-session transcript."""

from __future__ import annotations

import atexit
import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from .config import BaseConfig

PACKAGE_LOGGER = "habitnexus"
LOG_FILENAME = "habitnexus.log"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 3

_DEV_FORMAT = "[%(asctime)s] %(levelname)-8s [%(name)s.%(funcName)s:%(lineno)d] %(message)s"
_PROD_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class _SessionLog:
    """Lines captured during this process, written out once at exit."""

    def __init__(self) -> None:
        self.started = datetime.now()
        self.lines: list[str] = []
        self.path: Optional[Path] = None
        self._registered = False

    def attach(self, logs_dir: Path) -> None:
        self.path = logs_dir / self.started.strftime("session_%Y%m%d_%H%M%S.log")
        if not self._registered:
            atexit.register(self.flush)
            self._registered = True

    def flush(self) -> None:  # pragma: no cover - runs at interpreter exit
        if not self.lines or self.path is None:
            return
        header = [
            "# HabitNexus session log",
            f"# Started: {self.started.isoformat()}",
            f"# Entries: {len(self.lines)}",
            "",
        ]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text("\n".join(header + self.lines) + "\n", encoding="utf-8")
        except OSError as exc:
            sys.stderr.write(f"Failed to flush session log: {exc}\n")


_session = _SessionLog()


class SessionBufferHandler(logging.Handler):
    """Keeps formatted lines in memory for the session transcript."""

    def __init__(self, formatter: logging.Formatter, session: _SessionLog = _session):
        super().__init__()
        self.setFormatter(formatter)
        self.session = session

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.session.lines.append(self.format(record))
        except Exception:  # pragma: no cover
            self.handleError(record)


class JSONFormatter(logging.Formatter):
    """One JSON object per line; ``extra=`` fields are nested under ``"extra"``."""

    # Attributes every LogRecord carries, plus those set by other formatters.
    _RECORD_ATTRS = frozenset(
        vars(logging.LogRecord("", 0, "", 0, "", (), None))
    ) | {"message", "asctime", "taskName"}

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            payload["exception"] = self._exception(record)
        extra = {k: v for k, v in vars(record).items() if k not in self._RECORD_ATTRS}
        if extra:
            payload["extra"] = extra
        return json.dumps(payload, default=str)

    def _exception(self, record: logging.LogRecord) -> dict[str, Optional[str]]:
        exc_type, exc_value, _ = record.exc_info
        return {
            "type": exc_type.__name__ if exc_type else None,
            "message": str(exc_value) if exc_value else None,
            "traceback": self.formatException(record.exc_info),
        }


def _console_handler(dev_mode: bool) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(logging.INFO if dev_mode else logging.WARNING)
    handler.setFormatter(
        logging.Formatter(
            fmt=_DEV_FORMAT if dev_mode else _PROD_FORMAT,
            datefmt="%H:%M:%S" if dev_mode else "%Y-%m-%d %H:%M:%S",
        )
    )
    return handler


def _file_handler(log_file: Path) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=log_file,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(logging.INFO)
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging(config: BaseConfig) -> logging.Logger:
    """Attach console, rotating-file and session handlers to the package logger.

    Calling it again replaces the previous handlers.

    Args:
        config: Supplies ``DATA_DIR`` (logs go to ``<DATA_DIR>/logs``) and ``DEV_MODE``

    Returns:
        The ``habitnexus`` logger
    """
    logs_dir = Path(config.DATA_DIR) / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / LOG_FILENAME

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(logging.INFO)
    for old in list(package_logger.handlers):
        package_logger.removeHandler(old)
        old.close()

    console = _console_handler(config.DEV_MODE)
    session = SessionBufferHandler(console.formatter)
    session.setLevel(logging.DEBUG)
    for handler in (console, _file_handler(log_file), session):
        package_logger.addHandler(handler)

    _session.attach(logs_dir)

    package_logger.info(
        "Logging initialized",
        extra={
            "dev_mode": config.DEV_MODE,
            "log_file": str(log_file),
            "data_dir": str(config.DATA_DIR),
        },
    )
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Return the ``habitnexus.<name>`` child logger."""
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")


def session_log_path() -> Path | None:
    """Where the session transcript will be written at exit."""
    return _session.path
