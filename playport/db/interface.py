"""Connection store interface.

This interface defines the contract used by providers and the HTTP front end.
An in-memory implementation (`InMemoryConnectionStore`) is the only backend
today; a durable backend must keep per-key atomicity and the rule that
``update`` fails for an absent key.
"""
from abc import ABC, abstractmethod
from typing import List

from .models import Connection


class ConnectionStore(ABC):
    @abstractmethod
    def save(self, conn: Connection) -> None:
        """Insert or replace the connection for its (provider, user) key.

        Assigns ``id`` and ``created_at`` on first save and always refreshes
        ``updated_at``. Last writer wins.

        Raises:
            InvalidConnection: If conn is None or provider/user_id are empty
        """

    @abstractmethod
    def get(self, provider: str, user_id: str) -> Connection:
        """Return the connection for the key.

        Raises:
            ConnectionNotFound: If no entry exists
        """

    @abstractmethod
    def update(self, conn: Connection) -> None:
        """Replace an existing connection; never creates one.

        Raises:
            InvalidConnection: If conn is None or provider/user_id are empty
            ConnectionNotFound: If the key does not exist yet
        """

    @abstractmethod
    def delete(self, provider: str, user_id: str) -> None:
        """Remove the connection for the key.

        Raises:
            ConnectionNotFound: If no entry exists
        """

    @abstractmethod
    def list(self, user_id: str) -> List[Connection]:
        """Return every connection of a user across all providers (unordered)."""


__all__ = ["ConnectionStore"]
