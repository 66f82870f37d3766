"""Authorization flow helpers (CSRF state tokens)."""
from .state import StateStore, InMemoryStateStore

__all__ = ["StateStore", "InMemoryStateStore"]
