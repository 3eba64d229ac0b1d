"""State store protocol."""

from __future__ import annotations

from typing import Protocol

from ...models.state import AppState


class StateStore(Protocol):
    """Load/save boundary for the application state document."""

    def load(self) -> AppState:
        """Return the persisted state, or the default state when none exists."""
        ...

    def save(self, state: AppState) -> None:
        """Persist ``state`` in full, replacing what was stored."""
        ...

    def clear(self) -> None:
        """Remove the persisted document."""
        ...
