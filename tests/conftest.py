"""Shared fixtures for tests."""

from __future__ import annotations

import datetime
from typing import Any, Callable
from unittest.mock import MagicMock, patch

import pytest
import requests

from wug_client.auth.credentials import Credentials
from wug_client.auth.session import Session
from wug_client.auth.session_manager import SessionManager


def _make_response(
    payload: Any = None,
    *,
    status_code: int = 200,
    reason: str = "OK",
) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.reason = reason
    response.json.return_value = payload
    response.content = b"" if payload is None else b"{...}"
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status_code} {reason}", response=response
        )
    return response


@pytest.fixture
def make_response() -> Callable[..., MagicMock]:
    return _make_response


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(username="admin", password="s3cret")


@pytest.fixture
def token_payload() -> dict[str, Any]:
    return {
        "token_type": "Bearer",
        "access_token": "tok-123",
        "expires_in": 3600,
        "refresh_token": "refresh-456",
    }


@pytest.fixture
def http(token_payload: dict[str, Any]) -> MagicMock:
    """Stand-in for ``requests.Session`` whose token POST succeeds."""
    client = MagicMock()
    client.post.return_value = _make_response(token_payload)
    return client


@pytest.fixture
def reachable():
    """Patch DNS and the port probe so connect() reaches the token request."""
    with patch(
        "wug_client.auth.session_manager.resolve_host", return_value="192.0.2.10"
    ) as resolve, patch("wug_client.auth.session_manager.probe_port") as probe:
        yield resolve, probe


@pytest.fixture
def manager(http: MagicMock, reachable) -> SessionManager:
    return SessionManager(http=http)


@pytest.fixture
def connected_manager(manager: SessionManager, credentials: Credentials) -> SessionManager:
    manager.connect("wug.example.com", credentials)
    return manager


@pytest.fixture
def fresh_session() -> Session:
    return Session(
        base_uri="https://wug.example.com:9644",
        token_uri="https://wug.example.com:9644/api/v1/token",
        username="admin",
        headers={"Authorization": "Bearer tok-123", "Content-Type": "application/json"},
        created_at=datetime.datetime.now(datetime.UTC),
        ttl_seconds=3600,
        refresh_token="refresh-456",
    )
