"""Typed configuration dataclasses for playport.

Provides strongly-typed configuration objects that can be used throughout
the application for better type safety and IDE support.
"""
from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List


def _opt_str(value: Any) -> str | None:
    # env coercion may turn numeric-looking secrets into int/float
    if value is None or value == "":
        return None
    return str(value)


@dataclass
class SpotifyConfig:
    """Spotify OAuth configuration."""
    client_id: str | None = None
    client_secret: str | None = None
    redirect_url: str | None = None
    scope: str = "user-read-private user-read-email playlist-read-private playlist-read-collaborative"
    timeout_seconds: int = 30

    @property
    def scopes(self) -> List[str]:
        return self.scope.split()

    @property
    def enabled(self) -> bool:
        return bool(self.client_id and self.client_secret and self.redirect_url)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SpotifyConfig:
        return cls(
            client_id=_opt_str(data.get("client_id")),
            client_secret=_opt_str(data.get("client_secret")),
            redirect_url=_opt_str(data.get("redirect_url")),
            scope=str(data.get("scope") or cls.scope),
            timeout_seconds=int(data.get("timeout_seconds", 30)),
        )


@dataclass
class MockConfig:
    """Built-in mock provider toggle."""
    enabled: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ProvidersConfig:
    """Configuration for all providers."""
    spotify: SpotifyConfig = field(default_factory=SpotifyConfig)
    mock: MockConfig = field(default_factory=MockConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary."""
        return {"spotify": self.spotify.to_dict(), "mock": self.mock.to_dict()}


@dataclass
class ServerConfig:
    """HTTP front end bind address."""
    host: str = "127.0.0.1"
    port: int = 8080

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class StateConfig:
    """OAuth state token lifetime and sweep cadence."""
    ttl_seconds: int = 600
    sweep_interval_seconds: int = 300

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class AppConfig:
    """Root application configuration with all subsections."""
    log_level: str = "INFO"
    user_id: str = "default"
    server: ServerConfig = field(default_factory=ServerConfig)
    state: StateConfig = field(default_factory=StateConfig)
    providers: ProvidersConfig = field(default_factory=ProvidersConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the nested dictionary shape used by load_config.

        Returns:
            Nested dict structure matching config format
        """
        return {
            "log_level": self.log_level,
            "user_id": self.user_id,
            "server": self.server.to_dict(),
            "state": self.state.to_dict(),
            "providers": self.providers.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AppConfig:
        """Create typed config from dictionary.

        Args:
            data: Dictionary config (from load_config)

        Returns:
            Typed AppConfig instance
        """
        providers_data = data.get("providers", {})
        return cls(
            log_level=str(data.get("log_level", "INFO")),
            user_id=str(data.get("user_id") or "default"),
            server=ServerConfig(**data.get("server", {})),
            state=StateConfig(**data.get("state", {})),
            providers=ProvidersConfig(
                spotify=SpotifyConfig.from_dict(providers_data.get("spotify") or {}),
                mock=MockConfig(**(providers_data.get("mock") or {})),
            ),
        )


__all__ = ["AppConfig", "SpotifyConfig", "MockConfig", "ProvidersConfig", "ServerConfig", "StateConfig"]
