"""Playlist transfer between providers.

Resolves a source and a target provider from the service's registry,
authenticates both, exports the playlist from the source and imports it into
the target. Each step has its own named failure so callers can tell which leg
broke. Nothing is staged between export and import: a failed transfer leaves
the target untouched and must be restarted from the beginning.
"""
from __future__ import annotations
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Dict, List, Optional
import logging
import threading

from ..errors import (
    ExportFailed,
    ImportFailed,
    PlayPortError,
    ProviderNotFound,
    SourceAuthFailed,
    TargetAuthFailed,
)
from ..providers.base import Provider, utcnow

logger = logging.getLogger(__name__)


@dataclass
class TransferResult:
    source_provider: str
    target_provider: str
    playlist_id: str
    playlist_name: str
    track_count: int
    imported_playlist_id: str
    started_at: datetime
    finished_at: datetime

    @property
    def duration_seconds(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()


@dataclass
class TransferProgress:
    """Status record of a transfer as shown to users."""
    playlist_id: str
    source_provider: str
    target_provider: str
    playlist_name: str = ""
    status: str = "pending"  # pending | in_progress | completed | failed
    progress: int = 0  # 0-100
    message: str = ""
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, object]:
        data = asdict(self)
        for key in ("started_at", "completed_at"):
            value = data[key]
            data[key] = value.isoformat() if value else None
        return data


class TransferService:
    """Provider registry plus the transfer orchestration."""

    def __init__(self) -> None:
        self._providers: Dict[str, Provider] = {}
        self._lock = threading.Lock()

    def register_provider(self, provider: Provider) -> None:
        """Register a provider under its name (replaces a same-named one)."""
        with self._lock:
            self._providers[provider.name] = provider
        logger.debug(f"Registered provider {provider.name}")

    def get_provider(self, name: str) -> Provider:
        """Look up a provider by name.

        Raises:
            ProviderNotFound: If no provider is registered under ``name``
        """
        with self._lock:
            provider = self._providers.get(name)
        if provider is None:
            raise ProviderNotFound(name)
        return provider

    def list_providers(self) -> List[str]:
        """Names of all registered providers, sorted."""
        with self._lock:
            return sorted(self._providers)

    def transfer_playlist(self, source_provider: str, target_provider: str, playlist_id: str) -> TransferResult:
        """Copy one playlist from the source provider to the target provider.

        Steps: resolve both providers, authenticate source, authenticate
        target, export, import.

        Raises:
            ProviderNotFound: If either name is unregistered (before any authentication)
            SourceAuthFailed: If the source cannot authenticate
            TargetAuthFailed: If the target cannot authenticate
            ExportFailed: If the source cannot export the playlist
            ImportFailed: If the target rejects the import
        """
        source = self.get_provider(source_provider)
        target = self.get_provider(target_provider)
        started = utcnow()
        ctx = (source_provider, target_provider, playlist_id)
        logger.info(f"Transfer {playlist_id}: {source_provider} -> {target_provider}")

        try:
            source.authenticate()
        except PlayPortError as e:
            raise SourceAuthFailed(f"source authentication failed: {e}", *ctx) from e

        try:
            target.authenticate()
        except PlayPortError as e:
            raise TargetAuthFailed(f"target authentication failed: {e}", *ctx) from e

        try:
            playlist = source.export_playlist(playlist_id)
        except PlayPortError as e:
            raise ExportFailed(f"export failed: {e}", *ctx) from e
        logger.debug(f"Exported '{playlist.name}' with {len(playlist.tracks)} tracks")

        try:
            imported = target.import_playlist(playlist)
        except PlayPortError as e:
            raise ImportFailed(f"import failed: {e}", *ctx) from e

        result = TransferResult(
            source_provider=source_provider,
            target_provider=target_provider,
            playlist_id=playlist_id,
            playlist_name=playlist.name,
            track_count=len(playlist.tracks),
            imported_playlist_id=imported.id,
            started_at=started,
            finished_at=utcnow(),
        )
        logger.info(f"Transferred '{result.playlist_name}' ({result.track_count} tracks) as {result.imported_playlist_id}")
        return result


__all__ = ["TransferService", "TransferResult", "TransferProgress"]
