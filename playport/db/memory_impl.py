"""Thread-safe in-memory connection store."""
from __future__ import annotations
import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Dict, List, Tuple

from ..errors import ConnectionNotFound, InvalidConnection
from .interface import ConnectionStore
from .models import Connection, make_key

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryConnectionStore(ConnectionStore):
    """Connection map guarded by a single lock.

    Values are copied on the way in and on the way out, so a reader always
    sees a complete pre- or post-update connection and callers can only change
    stored state through ``save``/``update``.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow):
        self._lock = threading.RLock()
        self._connections: Dict[Tuple[str, str], Connection] = {}
        self._clock = clock

    @staticmethod
    def _validate(conn: Connection | None, operation: str) -> None:
        if conn is None:
            raise InvalidConnection(f"{operation}: connection cannot be None")
        if not conn.provider:
            raise InvalidConnection(f"{operation}: provider cannot be empty")
        if not conn.user_id:
            raise InvalidConnection(f"{operation}: user_id cannot be empty")
        if conn.connected and not conn.access_token:
            raise InvalidConnection(f"{operation}: connected connection requires an access token")

    def save(self, conn: Connection) -> None:
        self._validate(conn, "save")
        key = make_key(conn.provider, conn.user_id)
        with self._lock:
            now = self._clock()
            if not conn.id:
                conn.id = f"{conn.provider}:{conn.user_id}-{int(now.timestamp())}"
                conn.created_at = now
            elif conn.created_at is None:
                conn.created_at = now
            conn.updated_at = now
            self._connections[key] = conn.copy()
        logger.debug(f"Saved connection {conn.id}")

    def get(self, provider: str, user_id: str) -> Connection:
        with self._lock:
            conn = self._connections.get(make_key(provider, user_id))
            if conn is None:
                raise ConnectionNotFound(provider, user_id)
            return conn.copy()

    def update(self, conn: Connection) -> None:
        self._validate(conn, "update")
        key = make_key(conn.provider, conn.user_id)
        with self._lock:
            existing = self._connections.get(key)
            if existing is None:
                raise ConnectionNotFound(conn.provider, conn.user_id)
            if not conn.id:
                conn.id = existing.id
            if conn.created_at is None:
                conn.created_at = existing.created_at
            conn.updated_at = self._clock()
            self._connections[key] = conn.copy()
        logger.debug(f"Updated connection {conn.id}")

    def delete(self, provider: str, user_id: str) -> None:
        key = make_key(provider, user_id)
        with self._lock:
            if key not in self._connections:
                raise ConnectionNotFound(provider, user_id)
            del self._connections[key]
        logger.debug(f"Deleted connection for {provider}/{user_id}")

    def list(self, user_id: str) -> List[Connection]:
        with self._lock:
            return [c.copy() for c in self._connections.values() if c.user_id == user_id]

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)


__all__ = ["InMemoryConnectionStore"]
