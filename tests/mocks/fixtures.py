from __future__ import annotations
from datetime import datetime, timedelta, timezone

import pytest

from playport.db import Connection, InMemoryConnectionStore
from playport.providers import MockProvider
from playport.providers.spotify import SpotifyOAuth


@pytest.fixture
def connection_store():
    return InMemoryConnectionStore()


@pytest.fixture
def mock_provider():
    return MockProvider()


@pytest.fixture
def oauth():
    return SpotifyOAuth(
        client_id='cid',
        client_secret='secret',
        redirect_url='http://127.0.0.1:8080/auth/spotify/callback',
    )


@pytest.fixture
def spotify_connection():
    return Connection(
        provider='spotify',
        user_id='default',
        external_user_id='spotify-user',
        external_user_name='Spotify User',
        access_token='access-1',
        refresh_token='refresh-1',
        expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
        scopes=['playlist-read-private'],
        connected=True,
    )
