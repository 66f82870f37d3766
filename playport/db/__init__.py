"""Connection storage package."""
from .models import Connection, make_key
from .interface import ConnectionStore
from .memory_impl import InMemoryConnectionStore

__all__ = ["Connection", "make_key", "ConnectionStore", "InMemoryConnectionStore"]
