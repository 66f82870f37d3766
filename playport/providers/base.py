"""Provider abstraction layer.

This module defines provider-neutral domain models and the abstract provider
interface so additional music streaming providers (e.g. Deezer, Tidal, Apple
Music) can be plugged into the transfer service without changing it.

Key abstractions:
- Domain models: Track, Playlist
- ProviderCapabilities: what a provider can do
- Provider: authenticate, list, export and import playlists
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import List, Optional

ARTIST_SEPARATOR = ", "


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------- Domain Models -----------------

@dataclass
class Track:
    id: str
    title: str
    artist: str = ""  # multiple artists joined with ARTIST_SEPARATOR
    album: str = ""
    duration: int = 0  # seconds
    isrc: str = ""  # carried for cross-provider matching, not processed here


@dataclass
class Playlist:
    id: str
    name: str
    description: str = ""
    provider: str = ""
    tracks: List[Track] = field(default_factory=list)
    track_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def copy(self) -> Playlist:
        """Deep-enough copy: new playlist and new track objects."""
        return replace(self, tracks=[replace(t) for t in self.tracks])


# ---------------- Capability descriptor -----------------

@dataclass(frozen=True)
class ProviderCapabilities:
    import_playlists: bool = False
    supports_isrc: bool = True
    # Remote API pages results; provider follows cursors internally
    paginated: bool = False


# ---------------- Provider -----------------

class Provider(ABC):
    """A music platform integration.

    New providers are added by implementing this interface and registering
    the instance with the transfer service. Shared code never branches on a
    provider's name.
    """

    capabilities: ProviderCapabilities = ProviderCapabilities()

    @property
    @abstractmethod
    def name(self) -> str:
        """Stable provider identifier (e.g., 'spotify', 'mock')."""

    @abstractmethod
    def authenticate(self) -> None:
        """Check that a usable credential exists for the current principal.

        Raises:
            NotAuthenticated: If no valid connection/session exists
        """

    @abstractmethod
    def get_playlists(self) -> List[Playlist]:
        """Return every playlist of the current principal.

        Track lists may be left empty; ``track_count`` carries the total.

        Raises:
            NotAuthenticated: If not connected
            FetchFailed: If the remote API rejected a call
        """

    @abstractmethod
    def export_playlist(self, playlist_id: str) -> Playlist:
        """Return one playlist including its full track list.

        The result is an independent value with no tie to live provider state.

        Raises:
            PlaylistNotFound: If the id is unknown
            FetchFailed: If the remote API rejected a call
        """

    @abstractmethod
    def import_playlist(self, playlist: Playlist) -> Playlist:
        """Create a copy of ``playlist`` under this provider.

        Returns:
            The stored copy with its newly assigned id

        Raises:
            NotAuthenticated: If not connected
            Unsupported: If the provider has no write path
            WriteFailed: If the remote API rejected the write
        """


__all__ = [
    'ARTIST_SEPARATOR', 'Track', 'Playlist', 'ProviderCapabilities', 'Provider', 'utcnow',
]
