"""Domain model types for stored entities.

These dataclasses make the connection record explicit so stores, providers and
the HTTP front end agree on one shape.
"""
from __future__ import annotations
from dataclasses import dataclass, field, asdict, replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple


@dataclass
class Connection:
    """A local user's link to one external provider.

    Keyed by (provider, user_id); at most one connection per key.
    """
    provider: str
    user_id: str
    external_user_id: str = ""
    external_user_name: str = ""
    access_token: str = ""
    refresh_token: str = ""
    expires_at: Optional[datetime] = None
    scopes: List[str] = field(default_factory=list)
    connected: bool = False
    id: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def key(self) -> Tuple[str, str]:
        return make_key(self.provider, self.user_id)

    def copy(self) -> Connection:
        """Return an independent copy (scopes list included)."""
        return replace(self, scopes=list(self.scopes))

    def to_dict(self, include_secrets: bool = False) -> Dict[str, Any]:
        """Convert to a JSON-friendly dict.

        Tokens are omitted unless ``include_secrets`` is set.
        """
        data = asdict(self)
        for key in ("expires_at", "created_at", "updated_at"):
            value = data[key]
            data[key] = value.isoformat() if value else None
        if not include_secrets:
            data.pop("access_token")
            data.pop("refresh_token")
        return data


def make_key(provider: str, user_id: str) -> Tuple[str, str]:
    """Build the store key for a (provider, user) pair."""
    return (provider, user_id)


__all__ = ["Connection", "make_key"]
