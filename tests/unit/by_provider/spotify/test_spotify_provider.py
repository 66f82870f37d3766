"""Unit tests for SpotifyProvider on top of stored connections."""
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
import requests

from playport.db import Connection
from playport.errors import (
    ConnectionNotFound,
    FetchFailed,
    NotAuthenticated,
    PlaylistNotFound,
    Unsupported,
)
from playport.providers import Playlist
from playport.providers.spotify import OAuthToken, SpotifyProvider
from playport.providers.spotify.client import API_BASE

from tests.mocks.fake_http import FakeResponse, FakeSession

NEXT_PLAYLISTS = f"{API_BASE}/me/playlists?offset=50&limit=50"


def _page(items, next_url=None):
    return FakeResponse(200, {'items': items, 'next': next_url})


def _pl(pid, name, total=0):
    return {'id': pid, 'name': name, 'description': '', 'tracks': {'total': total}}


def _item(tid, name):
    return {'track': {'id': tid, 'name': name, 'artists': [{'name': 'Artist'}], 'duration_ms': 1000}}


class SessionFactory:
    """Hands out FakeSessions and remembers them."""

    def __init__(self, responses, rotate_to=None):
        self.responses = responses
        self.rotate_to = rotate_to
        self.sessions = []

    def __call__(self, token):
        session = FakeSession(token, self.responses, rotate_to=self.rotate_to)
        self.sessions.append(session)
        return session


@pytest.fixture
def connected_store(connection_store, spotify_connection):
    connection_store.save(spotify_connection)
    return connection_store


def _provider(oauth, store, factory=None):
    return SpotifyProvider(oauth, store, user_id='default', session_factory=factory)


class TestSpotifyProvider:

    def test_provider_name_and_capabilities(self, oauth, connection_store):
        provider = _provider(oauth, connection_store)
        assert provider.name == 'spotify'
        assert provider.capabilities.paginated is True
        assert provider.capabilities.import_playlists is False

    def test_auth_url_delegates(self, oauth, connection_store):
        url = _provider(oauth, connection_store).auth_url('abc')
        assert 'state=abc' in url

    def test_authenticate_requires_connection(self, oauth, connection_store):
        with pytest.raises(NotAuthenticated):
            _provider(oauth, connection_store).authenticate()

    def test_authenticate_rejects_inactive_connection(self, oauth, connection_store):
        connection_store.save(Connection(provider='spotify', user_id='default', connected=False))
        with pytest.raises(NotAuthenticated):
            _provider(oauth, connection_store).authenticate()

    def test_authenticate_with_connection(self, oauth, connected_store):
        _provider(oauth, connected_store).authenticate()

    def test_authenticate_is_per_user(self, oauth, connected_store):
        other = SpotifyProvider(oauth, connected_store, user_id='someone-else')
        with pytest.raises(NotAuthenticated):
            other.authenticate()

    def test_save_connection_stores_profile(self, oauth, connection_store):
        factory = SessionFactory([FakeResponse(200, {'id': 'sp-42', 'display_name': 'Alice'})])
        token = OAuthToken('a1', 'r1', expires_at=datetime.now(timezone.utc) + timedelta(hours=1), scopes=[])
        conn = _provider(oauth, connection_store, factory).save_connection(token)

        stored = connection_store.get('spotify', 'default')
        assert stored.connected is True
        assert stored.external_user_id == 'sp-42'
        assert stored.external_user_name == 'Alice'
        assert stored.access_token == 'a1'
        assert stored.refresh_token == 'r1'
        assert stored.scopes == oauth.scopes
        assert stored.id == conn.id
        assert factory.sessions[0].calls == [(f"{API_BASE}/me", None)]
        assert factory.sessions[0].closed

    def test_save_connection_keeps_rotated_token(self, oauth, connection_store):
        rotated = OAuthToken('a2', 'r1', expires_at=datetime.now(timezone.utc) + timedelta(hours=1))
        factory = SessionFactory([FakeResponse(200, {'id': 'sp-42'})], rotate_to=rotated)
        _provider(oauth, connection_store, factory).save_connection(OAuthToken('a1', 'r1'))
        assert connection_store.get('spotify', 'default').access_token == 'a2'

    def test_save_connection_profile_failure(self, oauth, connection_store):
        factory = SessionFactory([FakeResponse(401, {'error': 'bad token'})])
        with pytest.raises(FetchFailed):
            _provider(oauth, connection_store, factory).save_connection(OAuthToken('a1'))
        assert len(connection_store) == 0

    def test_disconnect(self, oauth, connected_store):
        provider = _provider(oauth, connected_store)
        provider.disconnect()
        with pytest.raises(NotAuthenticated):
            provider.authenticate()
        with pytest.raises(ConnectionNotFound):
            provider.disconnect()

    def test_get_playlists_follows_pagination(self, oauth, connected_store):
        factory = SessionFactory([
            _page([_pl('p1', 'One', 3), _pl('p2', 'Two', 5)], NEXT_PLAYLISTS),
            _page([_pl('p3', 'Three', 1)]),
        ])
        playlists = _provider(oauth, connected_store, factory).get_playlists()

        assert [p.id for p in playlists] == ['p1', 'p2', 'p3']
        assert [p.track_count for p in playlists] == [3, 5, 1]
        assert factory.sessions[0].calls == [
            (f"{API_BASE}/me/playlists", {'limit': 50}),
            (NEXT_PLAYLISTS, None),
        ]
        assert factory.sessions[0].token.access_token == 'access-1'

    def test_export_playlist(self, oauth, connected_store):
        factory = SessionFactory([
            FakeResponse(200, _pl('p1', 'Road Trip', 3)),
            _page([_item('t1', 'A'), {'track': None}], f"{API_BASE}/playlists/p1/tracks?offset=100"),
            _page([_item('t2', 'B')]),
        ])
        playlist = _provider(oauth, connected_store, factory).export_playlist('p1')

        assert isinstance(playlist, Playlist)
        assert playlist.name == 'Road Trip'
        assert [t.id for t in playlist.tracks] == ['t1', 't2']
        calls = factory.sessions[0].calls
        assert calls[0] == (f"{API_BASE}/playlists/p1", {'fields': 'id,name,description,tracks.total'})
        assert calls[1] == (f"{API_BASE}/playlists/p1/tracks", {'limit': 100})

    def test_export_unknown_playlist(self, oauth, connected_store):
        factory = SessionFactory([FakeResponse(404, {'error': {'status': 404}})])
        with pytest.raises(PlaylistNotFound):
            _provider(oauth, connected_store, factory).export_playlist('missing')

    def test_upstream_error_keeps_status_and_body(self, oauth, connected_store):
        factory = SessionFactory([FakeResponse(503, text='upstream down', payload=None)])
        with pytest.raises(FetchFailed) as exc:
            _provider(oauth, connected_store, factory).get_playlists()
        assert exc.value.status == 503
        assert exc.value.body == 'upstream down'

    def test_transport_error(self, oauth, connected_store):
        factory = SessionFactory([requests.ConnectionError('reset')])
        with pytest.raises(FetchFailed) as exc:
            _provider(oauth, connected_store, factory).get_playlists()
        assert exc.value.status is None

    def test_import_unsupported(self, oauth, connected_store):
        with pytest.raises(Unsupported):
            _provider(oauth, connected_store).import_playlist(Playlist(id='x', name='x'))


class TestTokenRotation:

    def test_unchanged_token_is_not_written_back(self, oauth, connected_store):
        factory = SessionFactory([_page([_pl('p1', 'One')])])
        provider = _provider(oauth, connected_store, factory)
        with patch.object(connected_store, 'update', wraps=connected_store.update) as update:
            provider.get_playlists()
        update.assert_not_called()

    def test_rotation_persisted_once_across_pages(self, oauth, connected_store):
        rotated = OAuthToken('access-2', '', expires_at=datetime.now(timezone.utc) + timedelta(hours=1))
        factory = SessionFactory([
            _page([_pl('p1', 'One')], NEXT_PLAYLISTS),
            _page([_pl('p2', 'Two')]),
        ], rotate_to=rotated)
        provider = _provider(oauth, connected_store, factory)
        with patch.object(connected_store, 'update', wraps=connected_store.update) as update:
            provider.get_playlists()
        update.assert_called_once()

        stored = connected_store.get('spotify', 'default')
        assert stored.access_token == 'access-2'
        assert stored.refresh_token == 'refresh-1'
        assert stored.expires_at == rotated.expires_at

    def test_rotation_persisted_when_later_page_fails(self, oauth, connected_store):
        rotated = OAuthToken('access-2', 'refresh-2', expires_at=datetime.now(timezone.utc) + timedelta(hours=1))
        factory = SessionFactory([
            _page([_pl('p1', 'One')], NEXT_PLAYLISTS),
            FakeResponse(500, {'error': 'server error'}),
        ], rotate_to=rotated)
        with pytest.raises(FetchFailed):
            _provider(oauth, connected_store, factory).get_playlists()
        stored = connected_store.get('spotify', 'default')
        assert stored.access_token == 'access-2'
        assert stored.refresh_token == 'refresh-2'

    def test_expired_connection_refreshed_through_real_session(self, oauth, connection_store, spotify_connection):
        spotify_connection.expires_at = datetime.now(timezone.utc) - timedelta(minutes=5)
        connection_store.save(spotify_connection)
        provider = _provider(oauth, connection_store)
        refreshed = FakeResponse(200, {'access_token': 'fresh', 'expires_in': 3600})

        with patch('playport.providers.spotify.auth.requests.post', return_value=refreshed) as post, \
                patch.object(requests.Session, 'request', return_value=_page([_pl('p1', 'One')])) as req:
            playlists = provider.get_playlists()

        assert [p.id for p in playlists] == ['p1']
        post.assert_called_once()
        assert req.call_args.kwargs['headers']['Authorization'] == 'Bearer fresh'
        stored = connection_store.get('spotify', 'default')
        assert stored.access_token == 'fresh'
        assert stored.refresh_token == 'refresh-1'

    def test_refresh_rejected_means_not_authenticated(self, oauth, connection_store, spotify_connection):
        spotify_connection.expires_at = datetime.now(timezone.utc) - timedelta(minutes=5)
        connection_store.save(spotify_connection)
        provider = _provider(oauth, connection_store)

        with patch('playport.providers.spotify.auth.requests.post',
                   return_value=FakeResponse(400, {'error': 'invalid_grant'})), \
                patch.object(requests.Session, 'request') as req:
            with pytest.raises(NotAuthenticated):
                provider.get_playlists()
        req.assert_not_called()
        assert connection_store.get('spotify', 'default').access_token == 'access-1'

    def test_upstream_error_wins_over_failed_write_back(self, oauth, connected_store):
        rotated = OAuthToken('access-2', 'refresh-2', expires_at=datetime.now(timezone.utc) + timedelta(hours=1))
        factory = SessionFactory([
            _page([_pl('p1', 'One')], NEXT_PLAYLISTS),
            FakeResponse(502, text='bad gateway', payload=None),
        ], rotate_to=rotated)
        provider = _provider(oauth, connected_store, factory)
        with patch.object(connected_store, 'update', side_effect=ConnectionNotFound('spotify', 'default')):
            with pytest.raises(FetchFailed) as exc:
                provider.get_playlists()
        assert exc.value.status == 502
        assert exc.value.body == 'bad gateway'

    def test_connection_removed_during_successful_call(self, oauth, connected_store):
        rotated = OAuthToken('access-2', '', expires_at=datetime.now(timezone.utc) + timedelta(hours=1))
        factory = SessionFactory([_page([_pl('p1', 'One')])], rotate_to=rotated)
        provider = _provider(oauth, connected_store, factory)
        with patch.object(connected_store, 'update', side_effect=ConnectionNotFound('spotify', 'default')):
            with pytest.raises(NotAuthenticated):
                provider.get_playlists()
        assert factory.sessions[0].closed
