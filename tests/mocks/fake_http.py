"""Minimal stand-ins for requests responses and sessions (no network)."""
from __future__ import annotations
import json
from typing import Any, Dict, List, Tuple


class FakeResponse:
    """Quacks like requests.Response for the attributes our code reads."""

    def __init__(self, status_code: int = 200, payload: Any = None, text: str | None = None):
        self.status_code = status_code
        self._payload = payload
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


class FakeSession:
    """Session stub answering GETs from a queue of responses.

    Records every call as (url, params). Supports an optional token rotation
    on the first request, mimicking RefreshingSession.
    """

    def __init__(self, token, responses: List[Any], rotate_to=None):
        self.token = token
        self.responses = list(responses)
        self.rotate_to = rotate_to
        self.calls: List[Tuple[str, Dict[str, Any] | None]] = []
        self.closed = False

    def get(self, url: str, params: Dict[str, Any] | None = None, **kwargs):
        if self.rotate_to is not None:
            self.token, self.rotate_to = self.rotate_to, None
        self.calls.append((url, params))
        resp = self.responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp

    def close(self) -> None:
        self.closed = True
