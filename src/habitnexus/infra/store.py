"""SQLModel implementation of the state store."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Callable, ContextManager

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from ..errors import StorageError
from ..logging_config import get_logger
from ..models.document import StoredDocument
from ..models.state import AppState

logger = get_logger("store")


def serialize_state(state: AppState) -> str:
    return json.dumps(state.to_dict(), ensure_ascii=False)


def deserialize_state(payload: str) -> AppState:
    """Parse a stored document; raises on malformed data."""

    data = json.loads(payload)
    if not isinstance(data, dict):
        raise ValueError("State document must be a JSON object")
    return AppState.from_dict(data)


class SQLModelStateStore:
    """Keeps the whole :class:`AppState` as one JSON row keyed by ``storage_key``."""

    def __init__(self, session_factory: Callable[[], ContextManager[Session]], storage_key: str):
        """Initialize with a session factory and the fixed storage key."""
        self.session_factory = session_factory
        self.storage_key = storage_key

    def load(self) -> AppState:
        """Return the stored state; a missing or unreadable document yields the default state."""
        with self.session_factory() as session:
            row = session.get(StoredDocument, self.storage_key)
            payload = row.payload if row is not None else None

        if payload is None:
            logger.info("No stored state found; using defaults", extra={"storage_key": self.storage_key})
            return AppState()

        try:
            state = deserialize_state(payload)
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.error(
                f"Failed to load state: {exc}",
                exc_info=True,
                extra={"storage_key": self.storage_key},
            )
            return AppState()

        logger.info(
            "State loaded",
            extra={"habits": len(state.habits), "records": len(state.records)},
        )
        return state

    def save(self, state: AppState) -> None:
        """Replace the stored document with ``state``."""
        payload = serialize_state(state)
        try:
            with self.session_factory() as session:
                row = session.get(StoredDocument, self.storage_key)
                if row is None:
                    row = StoredDocument(key=self.storage_key, payload=payload)
                else:
                    row.payload = payload
                    row.updated_at = datetime.now(timezone.utc)
                session.add(row)
                session.commit()
        except SQLAlchemyError as exc:
            logger.error(f"Failed to save state: {exc}", exc_info=True)
            raise StorageError(f"Could not save state under {self.storage_key!r}") from exc

    def clear(self) -> None:
        with self.session_factory() as session:
            row = session.exec(
                select(StoredDocument).where(StoredDocument.key == self.storage_key)
            ).first()
            if row:
                session.delete(row)
                session.commit()
        logger.info("Stored state cleared", extra={"storage_key": self.storage_key})


__all__ = ["SQLModelStateStore", "deserialize_state", "serialize_state"]
