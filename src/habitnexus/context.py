"""Application context: the explicit state container."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Optional

from sqlalchemy.engine import Engine

from .config import BaseConfig
from .domain.repositories import StateStore
from .infra.database import bootstrap_database
from .infra.store import SQLModelStateStore
from .logging_config import get_logger
from .models.state import AppState
from .services.habits import StreakResult, compute_streak

logger = get_logger("context")


@dataclass
class AppContext:
    """Holds configuration, the state store and the current state.

    State is loaded once at construction and written back after every
    mutation applied through :meth:`apply`.
    """

    config: BaseConfig
    store: StateStore
    state: AppState
    engine: Optional[Engine] = None

    def apply(self, mutator: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run a state mutation, persist the new state and return the mutator's result.

        ``mutator`` receives the current state first and returns either a new
        state or a ``(state, value)`` tuple; in the latter case ``value`` is
        returned.
        """

        result = mutator(self.state, *args, **kwargs)
        if isinstance(result, tuple):
            new_state, value = result
        else:
            new_state, value = result, None
        self.store.save(new_state)
        self.state = new_state
        return value

    def reload(self) -> AppState:
        self.state = self.store.load()
        return self.state

    def streak(self, habit_id: str, *, today: date | None = None) -> StreakResult:
        return compute_streak(habit_id, self.state.records, self.state.habits, today=today)


def create_app_context(config: Optional[BaseConfig] = None) -> AppContext:
    """Create and initialize the application context."""

    if config is None:
        config = BaseConfig()

    engine, session_factory = bootstrap_database(config)

    store = SQLModelStateStore(session_factory, config.STORAGE_KEY)
    state = store.load()
    logger.info("App context ready", extra={"storage_key": config.STORAGE_KEY})

    return AppContext(config=config, store=store, state=state, engine=engine)
