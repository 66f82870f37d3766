"""Spotify API client.

Handles all HTTP requests to Spotify Web API endpoints through an
authenticated (token-refreshing) session. Paged endpoints are followed via
their ``next`` URL until exhausted, so callers always receive complete lists.
"""

from __future__ import annotations
import requests
from typing import Any, Dict, List
import logging

from ...errors import FetchFailed, PlaylistNotFound

logger = logging.getLogger(__name__)
API_BASE = "https://api.spotify.com/v1"
PLAYLISTS_PAGE_SIZE = 50
TRACKS_PAGE_SIZE = 100


class SpotifyAPIClient:
    """Spotify Web API client (read operations).

    Failures are not retried here; they surface as FetchFailed carrying the
    upstream status and body.
    """

    def __init__(self, session: requests.Session):
        """Initialize client with an authenticated session.

        Args:
            session: Session that attaches (and refreshes) the bearer token
        """
        self.session = session

    def _get(self, url: str, params: Dict[str, Any] | None = None) -> Dict[str, Any]:
        """Execute GET request and decode the JSON body.

        Args:
            url: Absolute URL or API path (e.g., '/me/playlists')
            params: Optional query parameters

        Returns:
            JSON response as dict

        Raises:
            FetchFailed: On transport errors, non-200 responses or invalid JSON
        """
        if url.startswith('/'):
            url = API_BASE + url
        try:
            r = self.session.get(url, params=params)
        except requests.RequestException as e:
            raise FetchFailed("spotify", f"request to {url} failed: {e}") from e
        if r.status_code != 200:
            raise FetchFailed("spotify", f"API error for {url}", status=r.status_code, body=r.text)
        try:
            return r.json()
        except ValueError as e:
            raise FetchFailed("spotify", f"failed to decode response from {url}", status=r.status_code, body=r.text) from e

    def _paginate(self, path: str, limit: int) -> List[Dict[str, Any]]:
        """Collect ``items`` from every page of a paged endpoint."""
        items: List[Dict[str, Any]] = []
        data = self._get(path, params={"limit": limit})
        while True:
            page = data.get("items") or []
            items.extend(page)
            logger.debug(f"Fetched {len(page)} items from {path} (total so far {len(items)})")
            next_url = data.get("next")
            if not next_url:
                break
            # the next URL already carries limit/offset
            data = self._get(next_url)
        return items

    def current_user_profile(self) -> Dict[str, Any]:
        """Get current user's profile information.

        Returns:
            User profile dict with 'id', 'display_name', etc.
        """
        return self._get("/me")

    def current_user_playlists(self) -> List[Dict[str, Any]]:
        """Fetch all playlists for the current user."""
        return self._paginate("/me/playlists", PLAYLISTS_PAGE_SIZE)

    def get_playlist(self, playlist_id: str) -> Dict[str, Any]:
        """Fetch playlist metadata.

        Raises:
            PlaylistNotFound: If Spotify answers 404
        """
        try:
            return self._get(f"/playlists/{playlist_id}", params={"fields": "id,name,description,tracks.total"})
        except FetchFailed as e:
            if e.status == 404:
                raise PlaylistNotFound("spotify", playlist_id) from e
            raise

    def playlist_items(self, playlist_id: str) -> List[Dict[str, Any]]:
        """Fetch all track items in a playlist.

        Returns:
            List of playlist item dicts with a 'track' entry
        """
        return self._paginate(f"/playlists/{playlist_id}/tracks", TRACKS_PAGE_SIZE)


__all__ = ["SpotifyAPIClient", "API_BASE"]
