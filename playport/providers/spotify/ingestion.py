"""Spotify payload conversion.

Functions turning Spotify Web API JSON into provider-neutral domain models.
Fields Spotify does not supply fall back to zero values instead of failing.
"""

from __future__ import annotations
import logging
from typing import Any, Dict, Iterable, List, Optional

from ..base import ARTIST_SEPARATOR, Playlist, Track, utcnow

# Provider identifier used for connection keys and playlist origin
PROVIDER_NAME = 'spotify'

logger = logging.getLogger(__name__)


def playlist_from_item(item: Dict[str, Any]) -> Playlist:
    """Convert a playlist object (list or detail endpoint) to a Playlist.

    Args:
        item: Spotify playlist JSON

    Returns:
        Playlist without tracks; track_count holds Spotify's reported total
    """
    now = utcnow()
    tracks_info = item.get('tracks') or {}
    return Playlist(
        id=item.get('id') or "",
        name=item.get('name') or "",
        description=item.get('description') or "",
        provider=PROVIDER_NAME,
        track_count=int(tracks_info.get('total') or 0),
        created_at=now,
        updated_at=now,
    )


def track_from_item(item: Dict[str, Any]) -> Optional[Track]:
    """Convert a playlist track item to a Track.

    Returns:
        Track, or None for removed/unavailable entries (null track or no id)
    """
    track = item.get('track')
    if not track or not track.get('id'):
        return None
    artists = [a.get('name') or "" for a in (track.get('artists') or [])]
    return Track(
        id=track['id'],
        title=track.get('name') or "",
        artist=ARTIST_SEPARATOR.join(a for a in artists if a),
        album=(track.get('album') or {}).get('name') or "",
        duration=int(track.get('duration_ms') or 0) // 1000,
        isrc=(track.get('external_ids') or {}).get('isrc') or "",
    )


def tracks_from_items(items: Iterable[Dict[str, Any]]) -> List[Track]:
    """Convert track items, skipping null or deleted tracks."""
    tracks: List[Track] = []
    skipped = 0
    for item in items:
        track = track_from_item(item)
        if track is None:
            skipped += 1
            continue
        tracks.append(track)
    if skipped:
        logger.debug(f"Skipped {skipped} unavailable track item(s)")
    return tracks


__all__ = ["PROVIDER_NAME", "playlist_from_item", "track_from_item", "tracks_from_items"]
