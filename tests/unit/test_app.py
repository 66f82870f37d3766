"""Unit tests for application assembly."""
import pytest

from playport.app import build_app
from playport.config import deep_merge
from playport.errors import ConfigurationError
from playport.providers.spotify import SpotifyProvider


def test_build_app_without_spotify(test_config):
    app = build_app(test_config)
    try:
        assert app.spotify is None
        assert app.spotify_enabled is False
        assert app.transfer_service.list_providers() == ['mock']
    finally:
        app.close()


def test_build_app_with_spotify(spotify_config):
    app = build_app(deep_merge(spotify_config, {'user_id': 'alice'}))
    try:
        assert isinstance(app.spotify, SpotifyProvider)
        assert app.spotify.user_id == 'alice'
        assert app.spotify.connection_store is app.connection_store
        assert app.spotify.oauth.client_id == 'test-client-id'
        assert app.transfer_service.list_providers() == ['mock', 'spotify']
    finally:
        app.close()


def test_partial_spotify_config_fails_startup(test_config):
    cfg = deep_merge(test_config, {'providers': {'spotify': {'client_id': 'only-id'}}})
    with pytest.raises(ConfigurationError):
        build_app(cfg)


def test_mock_provider_can_be_disabled(test_config):
    app = build_app(deep_merge(test_config, {'providers': {'mock': {'enabled': False}}}))
    assert app.transfer_service.list_providers() == []
    app.close()


def test_apps_are_isolated(test_config):
    first = build_app(test_config)
    second = build_app(test_config)
    assert first.connection_store is not second.connection_store
    assert first.state_store is not second.state_store
    state = first.state_store.generate()
    assert second.state_store.validate(state) is False
    assert first.state_store.validate(state) is True
    first.close()
    second.close()


def test_close_stops_sweep_thread(test_config):
    app = build_app(deep_merge(test_config, {'state': {'sweep_interval_seconds': 60}}))
    thread = app.state_store._thread
    assert thread.is_alive()
    app.close()
    assert not thread.is_alive()
