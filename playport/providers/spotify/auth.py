"""Spotify OAuth (authorization code flow).

Builds the authorization redirect, trades authorization codes for tokens and
refreshes expiring tokens. Authenticated API calls go through
:class:`RefreshingSession`, which rotates the access token transparently;
the provider compares the session's token with the stored connection after
each outward call and persists any rotation.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urlencode

import requests

from ...errors import ExchangeFailed, NotAuthenticated

logger = logging.getLogger(__name__)

AUTH_URL = "https://accounts.spotify.com/authorize"
TOKEN_URL = "https://accounts.spotify.com/api/token"
DEFAULT_SCOPES = (
    "user-read-private",
    "user-read-email",
    "playlist-read-private",
    "playlist-read-collaborative",
)
DEFAULT_TIMEOUT = 30
# refresh this long before the upstream expiry
REFRESH_MARGIN = timedelta(seconds=60)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class OAuthToken:
    access_token: str
    refresh_token: str = ""
    expires_at: Optional[datetime] = None
    token_type: str = "Bearer"
    scopes: List[str] = field(default_factory=list)

    @classmethod
    def from_response(cls, data: Dict[str, Any], now: datetime | None = None) -> OAuthToken:
        """Build a token from a token-endpoint JSON body."""
        now = now or _utcnow()
        expires_in = data.get('expires_in')
        return cls(
            access_token=data['access_token'],
            refresh_token=data.get('refresh_token') or "",
            expires_at=now + timedelta(seconds=int(expires_in)) if expires_in else None,
            token_type=data.get('token_type') or "Bearer",
            scopes=(data.get('scope') or "").split(),
        )


class SpotifyOAuth:
    """Spotify OAuth client credentials and token endpoint calls."""

    def __init__(self, client_id: str, client_secret: str, redirect_url: str, scopes: Sequence[str] = DEFAULT_SCOPES, timeout: float = DEFAULT_TIMEOUT):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_url = redirect_url
        self.scopes = list(scopes)
        self.timeout = timeout

    def auth_url(self, state: str) -> str:
        """Build the authorization redirect carrying the CSRF state token."""
        params = {
            "client_id": self.client_id,
            "response_type": "code",
            "redirect_uri": self.redirect_url,
            "scope": " ".join(self.scopes),
            "state": state,
            "access_type": "offline",
            "show_dialog": "false",
        }
        return f"{AUTH_URL}?{urlencode(params)}"

    def exchange(self, code: str) -> OAuthToken:
        """Trade an authorization code for tokens.

        Codes are single-use upstream, so this is attempted exactly once.

        Raises:
            ExchangeFailed: On transport errors, non-2xx responses or a body
                without an access token
        """
        data = {
            'grant_type': 'authorization_code',
            'code': code,
            'redirect_uri': self.redirect_url,
        }
        try:
            resp = requests.post(TOKEN_URL, data=data, auth=(self.client_id, self.client_secret), timeout=self.timeout)
        except requests.RequestException as e:
            raise ExchangeFailed("spotify", f"token request failed: {e}") from e
        if not 200 <= resp.status_code < 300:
            raise ExchangeFailed("spotify", "token exchange rejected", status=resp.status_code, body=resp.text)
        try:
            tok = OAuthToken.from_response(resp.json())
        except (ValueError, KeyError) as e:
            raise ExchangeFailed("spotify", "malformed token response", status=resp.status_code, body=resp.text) from e
        if not tok.scopes:
            tok.scopes = list(self.scopes)
        logger.debug(f"Token acquired (expires_at={tok.expires_at})")
        return tok

    def needs_refresh(self, tok: OAuthToken, now: datetime | None = None) -> bool:
        # no expiry means the token never expires
        if tok.expires_at is None:
            return False
        now = now or _utcnow()
        return now + REFRESH_MARGIN >= tok.expires_at

    def refresh(self, tok: OAuthToken) -> OAuthToken:
        """Obtain a new access token with the refresh token.

        The old refresh token is kept when Spotify does not return a new one.

        Raises:
            NotAuthenticated: If there is no refresh token or Spotify rejects it
        """
        if not tok.refresh_token:
            raise NotAuthenticated("spotify: token expired and no refresh token is available")
        data = {
            'grant_type': 'refresh_token',
            'refresh_token': tok.refresh_token,
        }
        try:
            resp = requests.post(TOKEN_URL, data=data, auth=(self.client_id, self.client_secret), timeout=self.timeout)
        except requests.RequestException as e:
            raise NotAuthenticated(f"spotify: token refresh failed: {e}") from e
        if not 200 <= resp.status_code < 300:
            logger.warning(f"Spotify token refresh rejected: {resp.status_code} {resp.text}")
            raise NotAuthenticated(f"spotify: token refresh rejected (status {resp.status_code})")
        try:
            new_tok = OAuthToken.from_response(resp.json())
        except (ValueError, KeyError) as e:
            raise NotAuthenticated("spotify: malformed token refresh response") from e
        if not new_tok.refresh_token:
            new_tok.refresh_token = tok.refresh_token
        if not new_tok.scopes:
            new_tok.scopes = list(tok.scopes)
        logger.info("Spotify access token refreshed")
        return new_tok

    def session(self, tok: OAuthToken) -> RefreshingSession:
        """Create an authenticated session starting from ``tok``."""
        return RefreshingSession(self, tok, timeout=self.timeout)


class RefreshingSession(requests.Session):
    """requests.Session that attaches the bearer token and refreshes it when due.

    ``token`` always holds the latest token; callers compare it with what they
    stored before the call to detect a rotation.
    """

    def __init__(self, oauth: SpotifyOAuth, token: OAuthToken, timeout: float = DEFAULT_TIMEOUT):
        super().__init__()
        self.oauth = oauth
        self.token = token
        self.timeout = timeout

    def request(self, method, url, **kwargs):  # type: ignore[override]
        if self.oauth.needs_refresh(self.token):
            self.token = self.oauth.refresh(self.token)
        headers = dict(kwargs.pop('headers', None) or {})
        headers['Authorization'] = f"Bearer {self.token.access_token}"
        kwargs.setdefault('timeout', self.timeout)
        return super().request(method, url, headers=headers, **kwargs)


__all__ = ["SpotifyOAuth", "OAuthToken", "RefreshingSession", "DEFAULT_SCOPES", "AUTH_URL", "TOKEN_URL"]
