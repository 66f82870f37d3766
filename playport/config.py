from __future__ import annotations
import os
import json
import logging
from typing import Any, Dict
from pathlib import Path
import copy

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

_DEFAULTS: Dict[str, Any] = {
    "log_level": "INFO",
    "user_id": "default",
    "server": {
        "host": "127.0.0.1",
        "port": 8080,
    },
    "state": {
        "ttl_seconds": 600,
        "sweep_interval_seconds": 300,
    },
    "providers": {
        "spotify": {
            "client_id": None,
            "client_secret": None,
            "redirect_url": None,
            "scope": "user-read-private user-read-email playlist-read-private playlist-read-collaborative",
            "timeout_seconds": 30,
        },
        "mock": {
            "enabled": True,
        },
    },
}

# Environment variable name for each required Spotify setting
_SPOTIFY_REQUIRED = (
    ("client_id", "PLAYPORT__PROVIDERS__SPOTIFY__CLIENT_ID"),
    ("client_secret", "PLAYPORT__PROVIDERS__SPOTIFY__CLIENT_SECRET"),
    ("redirect_url", "PLAYPORT__PROVIDERS__SPOTIFY__REDIRECT_URL"),
)


def validate_spotify_config(cfg: Dict[str, Any]) -> bool:
    """Check whether Spotify is enabled by configuration.

    All three OAuth settings absent means Spotify is simply disabled. Setting
    only some of them is a startup error.

    Args:
        cfg: Configuration dictionary

    Returns:
        bool: True if Spotify is fully configured, False if not configured

    Raises:
        ConfigurationError: If Spotify is only partially configured
    """
    spotify = cfg.get('providers', {}).get('spotify') or {}
    present = {key: bool(spotify.get(key)) for key, _ in _SPOTIFY_REQUIRED}
    if not any(present.values()):
        logger.debug("Spotify not configured; provider disabled")
        return False
    for key, env_name in _SPOTIFY_REQUIRED:
        if not present[key]:
            raise ConfigurationError(f"{env_name} is required when Spotify is configured")
    return True


def deep_merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    """Merge dict b into a (shallow copies) returning new dict.
    Nested dicts are merged recursively; other values override.
    """
    result = dict(a)
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = deep_merge(result[k], v)  # type: ignore[arg-type]
        else:
            result[k] = v
    return result


def _load_dotenv(path: Path) -> Dict[str, str]:
    values: Dict[str, str] = {}
    if not path.exists():
        return values
    for line in path.read_text(encoding='utf-8').splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        key, val = line.split('=', 1)
        key = key.strip()
        val = val.strip()
        # Strip inline comments starting with # unless inside quotes
        if '#' in val:
            in_single = False
            in_double = False
            result_chars = []
            for ch in val:
                if ch == "'" and not in_double:
                    in_single = not in_single
                elif ch == '"' and not in_single:
                    in_double = not in_double
                if ch == '#' and not in_single and not in_double:
                    break
                result_chars.append(ch)
            val = ''.join(result_chars).rstrip()
        # Remove wrapping quotes if present
        if (val.startswith('"') and val.endswith('"')) or (val.startswith("'") and val.endswith("'")):
            if len(val) >= 2:
                val = val[1:-1]
        if key:
            values[key] = val
    return values


def load_config(overrides: Dict[str, Any] | None = None, configure_logging: bool = True) -> Dict[str, Any]:
    """Load configuration merging defaults <- .env <- environment <- overrides.

    During test runs (detected via PYTEST_CURRENT_TEST) .env loading is skipped
    unless PLAYPORT_ENABLE_DOTENV=1 is set to allow deterministic defaults.

    Args:
        overrides: Dict of values to deep-merge last (primarily for tests).
        configure_logging: Apply the configured log level to the root logger.

    Returns:
        dict: Configuration dictionary (for typed access use AppConfig.from_dict()).
    """
    dotenv_values: Dict[str, str] = {}
    if os.environ.get('PLAYPORT_ENABLE_DOTENV') or not os.environ.get('PYTEST_CURRENT_TEST'):
        dotenv_values = _load_dotenv(Path('.env'))
    # Deep copy defaults to avoid cross-call mutation of nested dicts
    cfg: Dict[str, Any] = copy.deepcopy(_DEFAULTS)

    prefix = "PLAYPORT__"
    # Merge .env and real environment (real env wins)
    combined = {**{k: v for k, v in dotenv_values.items() if k.startswith(prefix)},
                **{k: v for k, v in os.environ.items() if k.startswith(prefix)}}
    for raw_key, value in combined.items():
        path_parts = raw_key[len(prefix):].split("__")
        cursor: Dict[str, Any] = cfg
        for part in path_parts[:-1]:
            cursor = cursor.setdefault(part.lower(), {})  # type: ignore[assignment]
        cursor[path_parts[-1].lower()] = coerce_scalar(value)
    if overrides:
        cfg = deep_merge(cfg, overrides)

    if configure_logging:
        _configure_logging(cfg.get('log_level', 'INFO'))

    return cfg


def _configure_logging(level_str: str) -> None:
    """Configure Python logging based on configured level."""
    level_str = str(level_str).upper()
    level_map = {
        'DEBUG': logging.DEBUG,
        'INFO': logging.INFO,
        'WARNING': logging.WARNING,
        'ERROR': logging.ERROR,
        'CRITICAL': logging.CRITICAL,
    }
    level = level_map.get(level_str, logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        force=True  # Reconfigure even if already configured
    )


def coerce_scalar(value: str) -> Any:
    txt = value.strip()
    # JSON object or array
    if (txt.startswith('[') and txt.endswith(']')) or (txt.startswith('{') and txt.endswith('}')):
        try:
            return json.loads(txt)
        except ValueError:
            pass  # fall through to scalar heuristics
    lower = txt.lower()
    if lower in {"true", "yes"}:
        return True
    if lower in {"false", "no"}:
        return False
    if txt.isdigit() or (txt.startswith("-") and txt[1:].isdigit()):
        return int(txt)
    try:
        return float(txt)
    except ValueError:
        return txt


__all__ = ["load_config", "deep_merge", "validate_spotify_config", "coerce_scalar"]
