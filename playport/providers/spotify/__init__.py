"""Spotify provider package.

This package contains all Spotify-specific logic:
- auth.py: OAuth code exchange, token refresh and the refreshing session
- client.py: API client for fetching data (follows pagination)
- ingestion.py: JSON to domain model conversion
- provider.py: Complete Spotify provider implementation

Other parts of the codebase should use the Provider interface from
playport.providers.base instead of direct imports.
"""

from .auth import SpotifyOAuth, OAuthToken, RefreshingSession
from .client import SpotifyAPIClient
from .provider import SpotifyProvider

__all__ = [
    "SpotifyOAuth",
    "OAuthToken",
    "RefreshingSession",
    "SpotifyAPIClient",
    "SpotifyProvider",
]
