"""Authenticated JSON requests against the monitoring server's REST API.

Every request asks the ``SessionManager`` for a valid bearer header set first
and merges it into its own headers.  Requests go out through the manager's
``requests.Session``, so a disabled TLS check applies here too.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from wug_client.auth.session_manager import SessionManager
from wug_client.errors import ApiRequestError

logger = logging.getLogger(__name__)


class ApiClient:
    """Thin wrapper that signs requests with the manager's current token."""

    def __init__(self, manager: SessionManager) -> None:
        self._manager = manager

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Send *method* to ``base_uri + path`` and return the decoded JSON body.

        Returns ``None`` for an empty body.  Raises ``ApiRequestError`` on a
        transport failure or non-2xx status.
        """
        merged = dict(headers or {})
        merged.update(self._manager.ensure_valid_session())
        url = self._manager.base_uri + path

        logger.debug("%s %s", method, url)
        try:
            response = self._manager.http.request(
                method, url, json=json, params=params, headers=merged
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            reason = exc.response.reason if exc.response is not None else None
            raise ApiRequestError(
                f"{method} {url} failed: {status_code} {reason}",
                status_code=status_code,
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise ApiRequestError(f"{method} {url} failed: {exc}") from exc

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiRequestError(
                f"{method} {url} returned a non-JSON body",
                status_code=response.status_code,
            ) from exc

    def get(self, path: str, **kwargs: Any) -> Any:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> Any:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> Any:
        return self.request("PUT", path, **kwargs)

    def patch(self, path: str, **kwargs: Any) -> Any:
        return self.request("PATCH", path, **kwargs)
