"""Application assembly.

``build_app`` is the single place where the stores, providers and the
transfer service are constructed and wired together. Every object is created
per call, so tests can build isolated applications side by side.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .auth import InMemoryStateStore, StateStore
from .config import validate_spotify_config
from .config_types import AppConfig
from .db import ConnectionStore, InMemoryConnectionStore
from .providers import MockProvider
from .providers.spotify import SpotifyOAuth, SpotifyProvider
from .services import TransferService

logger = logging.getLogger(__name__)


@dataclass
class App:
    config: AppConfig
    state_store: StateStore
    connection_store: ConnectionStore
    transfer_service: TransferService
    spotify: Optional[SpotifyProvider] = None

    @property
    def spotify_enabled(self) -> bool:
        return self.spotify is not None

    def close(self) -> None:
        """Stop background tasks owned by the stores."""
        close = getattr(self.state_store, "close", None)
        if close is not None:
            close()


def build_app(cfg: Dict[str, Any]) -> App:
    """Construct the application from a config dict (see load_config).

    Raises:
        ConfigurationError: If Spotify settings are only partially present
    """
    validate_spotify_config(cfg)
    typed = AppConfig.from_dict(cfg)

    state_store = InMemoryStateStore(
        ttl=typed.state.ttl_seconds,
        sweep_interval=typed.state.sweep_interval_seconds,
    )
    connection_store = InMemoryConnectionStore()
    transfer_service = TransferService()

    if typed.providers.mock.enabled:
        transfer_service.register_provider(MockProvider())

    spotify: SpotifyProvider | None = None
    sp = typed.providers.spotify
    if sp.enabled:
        oauth = SpotifyOAuth(
            client_id=sp.client_id,
            client_secret=sp.client_secret,
            redirect_url=sp.redirect_url,
            scopes=sp.scopes,
            timeout=sp.timeout_seconds,
        )
        spotify = SpotifyProvider(oauth, connection_store, user_id=typed.user_id)
        transfer_service.register_provider(spotify)
        logger.info("Spotify provider enabled")
    else:
        logger.info("Spotify not configured; set PLAYPORT__PROVIDERS__SPOTIFY__* to enable it")

    return App(
        config=typed,
        state_store=state_store,
        connection_store=connection_store,
        transfer_service=transfer_service,
        spotify=spotify,
    )


__all__ = ["App", "build_app"]
