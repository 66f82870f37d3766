"""In-process mock provider with sample playlists.

Used for demos and tests: it needs no credentials, keeps its playlists in
memory and supports both export and import.
"""
from __future__ import annotations
import itertools
import logging
import threading
from datetime import timedelta
from typing import List

from ..errors import NotAuthenticated, PlaylistNotFound
from .base import Playlist, Provider, ProviderCapabilities, Track, utcnow

logger = logging.getLogger(__name__)


def sample_playlists(provider: str) -> List[Playlist]:
    """Build the seed playlists for a mock provider."""
    now = utcnow()
    seed = [
        Playlist(
            id="mock-1",
            name="Summer Vibes 2024",
            description="Perfect tunes for summer",
            tracks=[
                Track("track-1", "Sunshine Day", "The Happy Band", "Good Times", 180, "MOCK12345001"),
                Track("track-2", "Beach Walk", "Ocean Sounds", "Coastal Dreams", 240, "MOCK12345002"),
                Track("track-3", "Summer Breeze", "Wind Chasers", "Season Collection", 195, "MOCK12345003"),
            ],
            created_at=now - timedelta(days=60),
        ),
        Playlist(
            id="mock-2",
            name="Workout Mix",
            description="High energy tracks to keep you moving",
            tracks=[
                Track("track-4", "Power Up", "Energy Squad", "Motivation", 210, "MOCK12345004"),
                Track("track-5", "Push Harder", "Fitness Beats", "Gym Anthems", 195, "MOCK12345005"),
            ],
            created_at=now - timedelta(days=30),
        ),
        Playlist(
            id="mock-3",
            name="Chill Evening",
            description="Relaxing music for winding down",
            tracks=[
                Track("track-6", "Moonlight", "Ambient Dreams", "Night Sky", 300, "MOCK12345006"),
            ],
            created_at=now - timedelta(days=15),
        ),
    ]
    for pl in seed:
        pl.provider = provider
        pl.track_count = len(pl.tracks)
        pl.updated_at = now
    return seed


class MockProvider(Provider):
    """Mock provider holding playlists in memory.

    Args:
        name: Registry name of this instance
        playlists: Initial playlists (defaults to the sample set; pass [] for empty)
        can_authenticate: When False, authenticate() raises NotAuthenticated
    """

    capabilities = ProviderCapabilities(import_playlists=True, supports_isrc=True, paginated=False)

    def __init__(self, name: str = "mock", playlists: List[Playlist] | None = None, can_authenticate: bool = True):
        self._name = name
        self._playlists = sample_playlists(name) if playlists is None else [p.copy() for p in playlists]
        self.can_authenticate = can_authenticate
        self.authenticated = False
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._name

    def authenticate(self) -> None:
        if not self.can_authenticate:
            raise NotAuthenticated(f"{self._name}: no active session")
        self.authenticated = True

    def _require_auth(self) -> None:
        if not self.authenticated:
            raise NotAuthenticated(f"{self._name}: not authenticated")

    def get_playlists(self) -> List[Playlist]:
        self._require_auth()
        with self._lock:
            return [p.copy() for p in self._playlists]

    def export_playlist(self, playlist_id: str) -> Playlist:
        self._require_auth()
        with self._lock:
            for pl in self._playlists:
                if pl.id == playlist_id:
                    return pl.copy()
        raise PlaylistNotFound(self._name, playlist_id)

    def import_playlist(self, playlist: Playlist) -> Playlist:
        self._require_auth()
        now = utcnow()
        imported = playlist.copy()
        imported.id = f"{self._name}-imported-{next(self._ids)}"
        imported.provider = self._name
        imported.track_count = len(imported.tracks)
        imported.created_at = now
        imported.updated_at = now
        with self._lock:
            self._playlists.append(imported)
        logger.info(f"Imported playlist '{imported.name}' into {self._name} as {imported.id}")
        return imported.copy()


__all__ = ["MockProvider", "sample_playlists"]
