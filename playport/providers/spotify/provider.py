"""Spotify provider implementation.

Complete Spotify provider that implements the Provider interface on top of
stored connections. Besides the generic operations it exposes the OAuth
exchange steps used by the HTTP front end (auth_url, exchange,
save_connection, disconnect).
"""

from __future__ import annotations
import logging
from contextlib import contextmanager
from typing import Callable, Iterator, List

from ...db import Connection, ConnectionStore
from ...errors import ConnectionNotFound, NotAuthenticated, Unsupported
from ..base import Playlist, Provider, ProviderCapabilities
from .auth import OAuthToken, RefreshingSession, SpotifyOAuth
from .client import SpotifyAPIClient
from .ingestion import PROVIDER_NAME, playlist_from_item, tracks_from_items

logger = logging.getLogger(__name__)

DEFAULT_USER_ID = "default"


class SpotifyProvider(Provider):
    """Spotify streaming provider acting for one local user.

    Args:
        oauth: OAuth client (credentials, token endpoint)
        connection_store: Where the user's Spotify connection lives
        user_id: Local principal this provider acts for
        session_factory: Builds the token-refreshing session for a token
            (defaults to ``oauth.session``)
    """

    capabilities = ProviderCapabilities(import_playlists=False, supports_isrc=True, paginated=True)

    def __init__(
        self,
        oauth: SpotifyOAuth,
        connection_store: ConnectionStore,
        user_id: str = DEFAULT_USER_ID,
        session_factory: Callable[[OAuthToken], RefreshingSession] | None = None,
    ):
        self.oauth = oauth
        self.connection_store = connection_store
        self.user_id = user_id
        self._session_factory = session_factory or oauth.session

    @property
    def name(self) -> str:
        """Provider identifier."""
        return PROVIDER_NAME

    # ---------------- OAuth flow -----------------

    def auth_url(self, state: str) -> str:
        """Authorization redirect URL embedding the CSRF state token."""
        return self.oauth.auth_url(state)

    def exchange(self, code: str) -> OAuthToken:
        """Trade an authorization code for tokens (single attempt)."""
        return self.oauth.exchange(code)

    def save_connection(self, token: OAuthToken) -> Connection:
        """Fetch the Spotify identity for ``token`` and store a live connection.

        Raises:
            FetchFailed: If the profile request fails
        """
        session = self._session_factory(token)
        try:
            profile = SpotifyAPIClient(session).current_user_profile()
        finally:
            session.close()
        # the profile call may already have rotated a short-lived token
        token = session.token
        conn = Connection(
            provider=PROVIDER_NAME,
            user_id=self.user_id,
            external_user_id=profile.get('id') or "",
            external_user_name=profile.get('display_name') or "",
            access_token=token.access_token,
            refresh_token=token.refresh_token,
            expires_at=token.expires_at,
            scopes=list(token.scopes or self.oauth.scopes),
            connected=True,
        )
        self.connection_store.save(conn)
        logger.info(f"Connected Spotify account {conn.external_user_id} for user {self.user_id}")
        return conn

    def disconnect(self) -> None:
        """Remove the stored connection (revocation).

        Raises:
            ConnectionNotFound: If the user was not connected
        """
        self.connection_store.delete(PROVIDER_NAME, self.user_id)
        logger.info(f"Disconnected Spotify for user {self.user_id}")

    # ---------------- Provider interface -----------------

    def _connection(self) -> Connection:
        try:
            conn = self.connection_store.get(PROVIDER_NAME, self.user_id)
        except ConnectionNotFound as e:
            raise NotAuthenticated(f"not connected to Spotify: {e}") from e
        if not conn.connected:
            raise NotAuthenticated("Spotify connection not active")
        return conn

    def authenticate(self) -> None:
        self._connection()

    @contextmanager
    def _client(self) -> Iterator[SpotifyAPIClient]:
        """Yield a client for the stored connection and persist token rotation.

        The rotation check runs once when the block exits, however many
        requests (pages) were made inside it and whether or not it failed.
        When the block failed, its error wins over a failed write-back.
        """
        conn = self._connection()
        token = OAuthToken(
            access_token=conn.access_token,
            refresh_token=conn.refresh_token,
            expires_at=conn.expires_at,
            scopes=list(conn.scopes),
        )
        session = self._session_factory(token)
        try:
            yield SpotifyAPIClient(session)
        except Exception as e:
            session.close()
            try:
                self._update_token_if_changed(session.token, conn)
            except NotAuthenticated as write_err:
                logger.warning(f"Could not persist rotated Spotify token after failed call ({e}): {write_err}")
            raise
        session.close()
        self._update_token_if_changed(session.token, conn)

    def _update_token_if_changed(self, token: OAuthToken, conn: Connection) -> None:
        if token.access_token == conn.access_token and token.expires_at == conn.expires_at:
            return
        conn.access_token = token.access_token
        if token.refresh_token:
            conn.refresh_token = token.refresh_token
        conn.expires_at = token.expires_at
        try:
            self.connection_store.update(conn)
        except ConnectionNotFound as e:
            raise NotAuthenticated("Spotify connection was removed while refreshing its token") from e
        logger.debug(f"Persisted rotated Spotify token for user {self.user_id}")

    def get_playlists(self) -> List[Playlist]:
        with self._client() as client:
            items = client.current_user_playlists()
        playlists = [playlist_from_item(item) for item in items if item]
        logger.debug(f"Fetched {len(playlists)} Spotify playlists")
        return playlists

    def export_playlist(self, playlist_id: str) -> Playlist:
        with self._client() as client:
            detail = client.get_playlist(playlist_id)
            items = client.playlist_items(playlist_id)
        playlist = playlist_from_item(detail)
        playlist.tracks = tracks_from_items(items)
        logger.info(f"Exported Spotify playlist '{playlist.name}' ({len(playlist.tracks)} tracks)")
        return playlist

    def import_playlist(self, playlist: Playlist) -> Playlist:
        raise Unsupported("importing to Spotify is not yet implemented")


__all__ = ["SpotifyProvider", "DEFAULT_USER_ID"]
