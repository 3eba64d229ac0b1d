"""Repository protocols."""

from .state import StateStore

__all__ = ["StateStore"]
