"""JSON backup export and restore."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

from ..dates import today_date
from ..errors import BackupError
from ..logging_config import get_logger
from ..models.state import AppState

logger = get_logger("backup")

BACKUP_PREFIX = "habitnexus_backup"


def backup_filename(day: date) -> str:
    return f"{BACKUP_PREFIX}_{day.isoformat()}.json"


def export_backup(state: AppState, export_dir: Path, *, today: date | None = None) -> Path:
    """Write ``state`` as indented JSON into ``export_dir`` and return the path.

    A second export on the same day overwrites the first.
    """

    today = today or today_date()
    export_dir.mkdir(parents=True, exist_ok=True)
    path = export_dir / backup_filename(today)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(state.to_dict(), fh, ensure_ascii=False, indent=2)

    logger.info(
        f"Backup written: {path}",
        extra={"habits": len(state.habits), "records": len(state.records)},
    )
    return path


def load_backup(path: Path) -> AppState:
    """Read a backup file produced by :func:`export_backup`."""

    try:
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        raise BackupError(f"Cannot read backup {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise BackupError(f"Backup {path} is not a JSON object")
    try:
        state = AppState.from_dict(data)
    except (ValueError, KeyError, TypeError, AttributeError) as exc:
        raise BackupError(f"Backup {path} has invalid data: {exc}") from exc

    logger.info(f"Backup loaded: {path}", extra={"habits": len(state.habits)})
    return state


__all__ = ["BACKUP_PREFIX", "backup_filename", "export_backup", "load_backup"]
