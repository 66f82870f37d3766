"""OAuth state tokens for CSRF protection.

A state token is issued before redirecting the user to a provider's
authorization page and must come back unchanged on the callback. Tokens are
single use: the first ``validate`` removes the token whatever the outcome.
Abandoned tokens are removed by a background sweep so the map cannot grow
without bound.
"""
from __future__ import annotations
import logging
import secrets
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict

from ..errors import RandomSourceFailure

logger = logging.getLogger(__name__)

STATE_TTL_SECONDS = 10 * 60
SWEEP_INTERVAL_SECONDS = 5 * 60
STATE_BYTES = 32  # 256 bits


class StateStore(ABC):
    """Issues and validates one-time authorization state tokens."""

    @abstractmethod
    def generate(self) -> str:
        """Create and record a new state token.

        Raises:
            RandomSourceFailure: If secure randomness is unavailable
        """

    @abstractmethod
    def validate(self, state: str) -> bool:
        """Consume the token; True only if it was issued and has not expired."""


class InMemoryStateStore(StateStore):
    """Thread-safe in-memory state store with a periodic expiry sweep.

    The sweep runs on a daemon thread started at construction. Call
    :meth:`close` (or use the store as a context manager) to stop it.

    Args:
        ttl: Token lifetime in seconds
        sweep_interval: Seconds between sweeps; None disables the thread
        clock: Monotonic time source, injectable for tests
    """

    def __init__(
        self,
        ttl: float = STATE_TTL_SECONDS,
        sweep_interval: float | None = SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._lock = threading.Lock()
        self._states: Dict[str, float] = {}
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        if sweep_interval:
            self._thread = threading.Thread(
                target=self._sweep_loop, name="state-sweep", daemon=True
            )
            self._thread.start()

    def generate(self) -> str:
        try:
            state = secrets.token_urlsafe(STATE_BYTES)
        except (OSError, NotImplementedError) as e:
            raise RandomSourceFailure(f"failed to generate random state: {e}") from e
        with self._lock:
            self._states[state] = self._clock() + self.ttl
        return state

    def validate(self, state: str) -> bool:
        if not state:
            return False
        with self._lock:
            expiry = self._states.pop(state, None)
            now = self._clock()
        if expiry is None:
            return False
        if now >= expiry:
            logger.debug("Rejected expired OAuth state")
            return False
        return True

    def sweep(self) -> int:
        """Drop every expired token and return how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [s for s, exp in self._states.items() if now >= exp]
            for s in expired:
                del self._states[s]
        if expired:
            logger.debug(f"Swept {len(expired)} expired OAuth state(s)")
        return len(expired)

    def _sweep_loop(self) -> None:
        while not self._stop.wait(self.sweep_interval):
            self.sweep()

    def close(self) -> None:
        """Stop the background sweep and wait for the thread to exit."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def __enter__(self) -> InMemoryStateStore:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)


__all__ = [
    "StateStore",
    "InMemoryStateStore",
    "STATE_TTL_SECONDS",
    "SWEEP_INTERVAL_SECONDS",
]
