"""Provider abstraction public API.

Providers are plain instances registered with a TransferService by the
application assembly point (see playport.app); there is no global registry.
"""

from .base import (
    ARTIST_SEPARATOR,
    Track,
    Playlist,
    ProviderCapabilities,
    Provider,
)
from .mock import MockProvider


__all__ = [
    "ARTIST_SEPARATOR",
    "Track",
    "Playlist",
    "ProviderCapabilities",
    "Provider",
    "MockProvider",
]
