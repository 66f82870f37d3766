"""HTTP front end.

A small JSON API over the core: OAuth start/callback for Spotify, provider
and playlist listing, and playlist transfers. Each request runs on its own
thread (ThreadingHTTPServer); the handlers only call into the core and map
its errors to status codes. Upstream error bodies are logged, never returned.
"""
from __future__ import annotations
import json
import logging
import threading
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Callable, Dict, Tuple
from urllib.parse import parse_qs, urlparse

from ..app import App
from ..errors import (
    ConnectionNotFound,
    ExportFailed,
    ImportFailed,
    NotAuthenticated,
    NotFound,
    PlayPortError,
    ProviderError,
    SourceAuthFailed,
    TargetAuthFailed,
    Unsupported,
)
from ..providers.base import Playlist, utcnow
from ..services import TransferProgress
from ..version import __version__

logger = logging.getLogger(__name__)

RECONNECT_HINT = "Please connect your account first."


def playlist_to_dict(pl: Playlist) -> Dict[str, Any]:
    return {
        "id": pl.id,
        "name": pl.name,
        "description": pl.description,
        "provider": pl.provider,
        "track_count": pl.track_count or len(pl.tracks),
    }


def status_for_error(err: PlayPortError) -> HTTPStatus:
    """Map a core error to the HTTP status shown to the caller."""
    cause = err.__cause__
    if isinstance(err, (SourceAuthFailed, TargetAuthFailed, NotAuthenticated)):
        return HTTPStatus.UNAUTHORIZED
    if isinstance(err, (ExportFailed, ImportFailed)) and isinstance(cause, PlayPortError):
        if isinstance(cause, NotAuthenticated):
            return HTTPStatus.UNAUTHORIZED
        return status_for_error(cause)
    if isinstance(err, NotFound):
        return HTTPStatus.NOT_FOUND
    if isinstance(err, Unsupported):
        return HTTPStatus.NOT_IMPLEMENTED
    if isinstance(err, ProviderError):
        return HTTPStatus.BAD_GATEWAY
    return HTTPStatus.INTERNAL_SERVER_ERROR


class PlayPortServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, server_address: Tuple[str, int], app: App):
        super().__init__(server_address, PlayPortHandler)
        self.app = app


class PlayPortHandler(BaseHTTPRequestHandler):
    server: PlayPortServer  # type: ignore[assignment]
    server_version = f"playport/{__version__}"

    # ---------------- plumbing -----------------

    @property
    def app(self) -> App:
        return self.server.app

    def _send_json(self, status: HTTPStatus, payload: Any) -> None:
        body = json.dumps(payload).encode('utf-8')
        self.send_response(status)
        self.send_header('Content-Type', 'application/json')
        self.send_header('Content-Length', str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _send_error(self, status: HTTPStatus, message: str, **extra: Any) -> None:
        self._send_json(status, {"error": message, **extra})

    def _redirect(self, status: HTTPStatus, location: str) -> None:
        self.send_response(status)
        self.send_header('Location', location)
        self.send_header('Content-Length', '0')
        self.end_headers()

    def _query(self) -> Dict[str, str]:
        qs = parse_qs(urlparse(self.path).query)
        return {k: v[0] for k, v in qs.items() if v}

    def _form(self) -> Dict[str, str]:
        length = int(self.headers.get('Content-Length') or 0)
        raw = self.rfile.read(length).decode('utf-8') if length else ""
        if (self.headers.get('Content-Type') or "").startswith('application/json'):
            data = json.loads(raw or "{}")
            if not isinstance(data, dict):
                raise ValueError("JSON body must be an object")
            return {k: str(v) for k, v in data.items() if v is not None}
        return {k: v[0] for k, v in parse_qs(raw).items() if v}

    def _dispatch(self, routes: Dict[str, Callable[[], None]]) -> None:
        path = urlparse(self.path).path
        handler = routes.get(path)
        if handler is None:
            self._send_error(HTTPStatus.NOT_FOUND, "not found")
            return
        try:
            handler()
        except Exception:
            logger.exception(f"Unhandled error for {self.command} {path}")
            self._send_error(HTTPStatus.INTERNAL_SERVER_ERROR, "internal server error")

    def do_GET(self):  # type: ignore[override]
        self._dispatch({
            '/': self.handle_home,
            '/providers': self.handle_providers,
            '/playlists': self.handle_playlists,
            '/auth/spotify/start': self.handle_spotify_start,
            '/auth/spotify/callback': self.handle_spotify_callback,
        })

    def do_POST(self):  # type: ignore[override]
        self._dispatch({
            '/transfer': self.handle_transfer,
            '/auth/spotify/disconnect': self.handle_spotify_disconnect,
        })

    def log_message(self, format, *args):  # route access log through logging
        logger.debug("%s - %s", self.address_string(), format % args)

    # ---------------- routes -----------------

    def handle_home(self) -> None:
        self._send_json(HTTPStatus.OK, {
            "service": "playport",
            "version": __version__,
            "providers": self.app.transfer_service.list_providers(),
        })

    def handle_providers(self) -> None:
        app = self.app
        spotify_status: Dict[str, Any] = {"enabled": app.spotify_enabled, "connected": False, "user_name": ""}
        if app.spotify is not None:
            try:
                conn = app.connection_store.get(app.spotify.name, app.spotify.user_id)
            except ConnectionNotFound:
                pass
            else:
                spotify_status["connected"] = conn.connected
                spotify_status["user_name"] = conn.external_user_name if conn.connected else ""
        connections = app.connection_store.list(app.config.user_id)
        self._send_json(HTTPStatus.OK, {
            "providers": app.transfer_service.list_providers(),
            "spotify": spotify_status,
            "connections": [c.to_dict() for c in connections],
        })

    def handle_playlists(self) -> None:
        name = self._query().get('provider', '')
        if not name:
            self._send_error(HTTPStatus.BAD_REQUEST, "provider parameter required")
            return
        try:
            provider = self.app.transfer_service.get_provider(name)
            provider.authenticate()
            playlists = provider.get_playlists()
        except NotAuthenticated as e:
            logger.info(f"{name} not authenticated: {e}")
            self._send_error(HTTPStatus.UNAUTHORIZED, RECONNECT_HINT, provider=name)
            return
        except PlayPortError as e:
            self._log_core_error(f"Failed to fetch {name} playlists", e)
            message = str(e) if isinstance(e, NotFound) else "failed to fetch playlists"
            self._send_error(status_for_error(e), message)
            return
        self._send_json(HTTPStatus.OK, {
            "provider": name,
            "playlists": [playlist_to_dict(p) for p in playlists],
        })

    def _spotify_guard(self) -> bool:
        if self.app.spotify is None:
            self._send_error(HTTPStatus.SERVICE_UNAVAILABLE, "Spotify is not configured")
            return False
        return True

    def handle_spotify_start(self) -> None:
        if not self._spotify_guard():
            return
        try:
            state = self.app.state_store.generate()
        except PlayPortError as e:
            logger.error(f"Failed to generate state: {e}")
            self._send_error(HTTPStatus.INTERNAL_SERVER_ERROR, "internal server error")
            return
        self._redirect(HTTPStatus.TEMPORARY_REDIRECT, self.app.spotify.auth_url(state))  # type: ignore[union-attr]

    def handle_spotify_callback(self) -> None:
        if not self._spotify_guard():
            return
        spotify = self.app.spotify
        query = self._query()
        if not self.app.state_store.validate(query.get('state', '')):
            logger.warning("Invalid OAuth state")
            self._send_error(HTTPStatus.BAD_REQUEST, "invalid state parameter")
            return
        if query.get('error'):
            logger.warning(f"Spotify OAuth error: {query['error']}")
            self._send_error(HTTPStatus.BAD_REQUEST, f"Spotify authorization failed: {query['error']}")
            return
        code = query.get('code', '')
        if not code:
            self._send_error(HTTPStatus.BAD_REQUEST, "missing authorization code")
            return
        try:
            token = spotify.exchange(code)  # type: ignore[union-attr]
        except PlayPortError as e:
            self._log_core_error("Failed to exchange code", e)
            self._send_error(HTTPStatus.INTERNAL_SERVER_ERROR, "failed to exchange authorization code")
            return
        try:
            spotify.save_connection(token)  # type: ignore[union-attr]
        except PlayPortError as e:
            self._log_core_error("Failed to save connection", e)
            self._send_error(HTTPStatus.INTERNAL_SERVER_ERROR, "failed to save connection")
            return
        self._redirect(HTTPStatus.FOUND, '/providers')

    def handle_spotify_disconnect(self) -> None:
        if not self._spotify_guard():
            return
        try:
            self.app.spotify.disconnect()  # type: ignore[union-attr]
        except ConnectionNotFound:
            self._send_error(HTTPStatus.NOT_FOUND, "Spotify is not connected")
            return
        self._send_json(HTTPStatus.OK, {"provider": "spotify", "connected": False})

    def handle_transfer(self) -> None:
        try:
            form = self._form()
        except ValueError:
            self._send_error(HTTPStatus.BAD_REQUEST, "invalid form data")
            return
        source = form.get('source_provider', '')
        target = form.get('target_provider', '')
        playlist_id = form.get('playlist_id', '')
        if not (source and target and playlist_id):
            self._send_error(HTTPStatus.BAD_REQUEST, "missing required parameters")
            return
        progress = TransferProgress(
            playlist_id=playlist_id,
            source_provider=source,
            target_provider=target,
            status="in_progress",
            message="Starting transfer...",
            started_at=utcnow(),
        )
        try:
            result = self.app.transfer_service.transfer_playlist(source, target, playlist_id)
        except PlayPortError as e:
            self._log_core_error("Transfer failed", e)
            progress.status = "failed"
            progress.message = _user_message(e)
            progress.completed_at = utcnow()
            self._send_json(status_for_error(e), progress.to_dict())
            return
        progress.status = "completed"
        progress.progress = 100
        progress.playlist_name = result.playlist_name
        progress.message = f"Transfer complete! {result.track_count} tracks copied as {result.imported_playlist_id}."
        progress.completed_at = result.finished_at
        self._send_json(HTTPStatus.OK, progress.to_dict())

    @staticmethod
    def _log_core_error(prefix: str, err: PlayPortError) -> None:
        root = err.__cause__ if isinstance(err.__cause__, ProviderError) else err
        if isinstance(root, ProviderError) and root.body:
            logger.error(f"{prefix}: {err} | upstream body: {root.body}")
        else:
            logger.error(f"{prefix}: {err}")


def _user_message(err: PlayPortError) -> str:
    if isinstance(err, (SourceAuthFailed, TargetAuthFailed)):
        return f"{err.source if isinstance(err, SourceAuthFailed) else err.target}: {RECONNECT_HINT}"
    if isinstance(err, ExportFailed):
        return "Could not export the playlist from the source provider."
    if isinstance(err, ImportFailed):
        return "Could not import the playlist into the target provider."
    return str(err)


def create_server(app: App, host: str = "127.0.0.1", port: int = 8080) -> PlayPortServer:
    """Bind the HTTP server (port 0 picks a free port)."""
    return PlayPortServer((host, port), app)


def serve_in_thread(server: PlayPortServer) -> threading.Thread:
    """Run ``server`` on a daemon thread; stop it with ``server.shutdown()``."""
    thread = threading.Thread(target=server.serve_forever, name="playport-http", daemon=True)
    thread.start()
    return thread


__all__ = ["PlayPortServer", "PlayPortHandler", "create_server", "serve_in_thread", "status_for_error", "playlist_to_dict"]
