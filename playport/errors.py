"""Error taxonomy shared by stores, providers and the transfer service.

Every error raised by playport derives from :class:`PlayPortError` so callers
at the edge (HTTP front end, CLI) can catch one root type and map subclasses
to user-facing responses. Upstream response bodies are kept on the exception
for diagnostics and never rendered to users.
"""
from __future__ import annotations

__all__ = [
    "PlayPortError",
    "ConfigurationError",
    "NotFound",
    "ConnectionNotFound",
    "PlaylistNotFound",
    "ProviderNotFound",
    "NotAuthenticated",
    "InvalidInput",
    "InvalidConnection",
    "RandomSourceFailure",
    "Unsupported",
    "ProviderError",
    "ExchangeFailed",
    "FetchFailed",
    "WriteFailed",
    "TransferError",
    "SourceAuthFailed",
    "TargetAuthFailed",
    "ExportFailed",
    "ImportFailed",
]


class PlayPortError(Exception):
    """Base error for all playport failures."""


class ConfigurationError(PlayPortError):
    """Raised when settings are present but incomplete or invalid."""


class NotFound(PlayPortError):
    """Raised when a keyed lookup has no entry."""


class ConnectionNotFound(NotFound):
    """Raised when no connection exists for a (provider, user) key."""

    def __init__(self, provider: str, user_id: str):
        super().__init__(f"connection not found for provider {provider} and user {user_id}")
        self.provider = provider
        self.user_id = user_id


class PlaylistNotFound(NotFound):
    """Raised when a provider has no playlist with the requested id."""

    def __init__(self, provider: str, playlist_id: str):
        super().__init__(f"playlist not found on {provider}: {playlist_id}")
        self.provider = provider
        self.playlist_id = playlist_id


class ProviderNotFound(NotFound):
    """Raised when a provider name is not registered."""

    def __init__(self, name: str):
        super().__init__(f"provider not found: {name}")
        self.name = name


class NotAuthenticated(PlayPortError):
    """Raised when no usable credential exists for the current principal."""


class InvalidInput(PlayPortError):
    """Raised for malformed arguments to store operations."""


class InvalidConnection(InvalidInput):
    """Raised when a connection is absent or misses its key fields."""


class RandomSourceFailure(PlayPortError):
    """Raised when the secure random source cannot produce a state token."""


class Unsupported(PlayPortError):
    """Raised when a provider does not implement an operation."""


class ProviderError(PlayPortError):
    """Upstream provider rejected a call.

    Attributes:
        provider: Provider name
        status: HTTP status code (None for transport failures)
        body: Raw upstream response body, retained for logs only
    """

    def __init__(self, provider: str, message: str, status: int | None = None, body: str = ""):
        detail = f"{provider}: {message}"
        if status is not None:
            detail += f" (status {status})"
        super().__init__(detail)
        self.provider = provider
        self.status = status
        self.body = body


class ExchangeFailed(ProviderError):
    """Authorization code could not be traded for tokens."""


class FetchFailed(ProviderError):
    """Read call against the provider API failed."""


class WriteFailed(ProviderError):
    """Write call against the provider API failed."""


class TransferError(PlayPortError):
    """Base for the named failures of a playlist transfer.

    The underlying provider error is available as ``__cause__``.
    """

    def __init__(self, message: str, source: str, target: str, playlist_id: str):
        super().__init__(message)
        self.source = source
        self.target = target
        self.playlist_id = playlist_id


class SourceAuthFailed(TransferError):
    pass


class TargetAuthFailed(TransferError):
    pass


class ExportFailed(TransferError):
    pass


class ImportFailed(TransferError):
    pass
