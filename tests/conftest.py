"""Pytest fixtures for test configuration.

Global test safety measures:
 - Strip PLAYPORT__* variables from the environment so a developer's shell
   or .env never leaks real Spotify credentials into a test run
"""
import os
from typing import Any, Dict

import pytest

from playport.config import deep_merge, load_config

from .mocks.fixtures import *  # noqa: F401,F403


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith('PLAYPORT__') or key == 'PLAYPORT_ENABLE_DOTENV':
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def test_config() -> Dict[str, Any]:
    """Provide a minimal test configuration as a dict.

    Spotify is disabled and the state sweep thread is off. Tests override
    individual values with deep_merge (see spotify_config).
    """
    return load_config({
        'log_level': 'DEBUG',
        'state': {'sweep_interval_seconds': 0},
    }, configure_logging=False)


@pytest.fixture
def spotify_config(test_config) -> Dict[str, Any]:
    """Configuration with Spotify fully configured."""
    return deep_merge(test_config, {
        'providers': {
            'spotify': {
                'client_id': 'test-client-id',
                'client_secret': 'test-client-secret',
                'redirect_url': 'http://127.0.0.1:8080/auth/spotify/callback',
            },
        },
    })
