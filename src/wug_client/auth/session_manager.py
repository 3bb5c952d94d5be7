"""Session lifecycle against the monitoring server's OAuth2 token endpoint.

Pattern: Explicit Session Owner
--------------------------------
A ``SessionManager`` is created by the caller and handed to every component
that talks to the API (``ApiClient``, ``DeviceClient``).  It is the only place
that knows how to obtain a bearer token, and the only place that decides when
a token must be replaced.

Lifecycle::

    Disconnected --connect()--> Connected --ensure_valid_session()--> Connected
         ^                                                               |
         +---------------------------disconnect()------------------------+

``ensure_valid_session()`` never connects on its own.  Calling it before
``connect()`` raises ``NotConnectedError``.  Once the token has expired it
re-runs the password grant with the credentials retained from the last
``connect()``; if credentials were not retained it raises
``SessionExpiredError`` and the caller has to connect again.

The refresh token returned by the server is recorded on the ``Session`` but
renewal always performs a full password grant.

Disabling TLS verification only affects this manager's own
``requests.Session``; other HTTP clients in the process are untouched.
"""

from __future__ import annotations

import dataclasses
import datetime
import logging
import threading
import urllib.parse
from typing import Any

import requests

from wug_client.auth.credentials import Credentials
from wug_client.auth.session import Session
from wug_client.errors import (
    IncompleteTokenError,
    NotConnectedError,
    SessionExpiredError,
    TokenRequestError,
)
from wug_client.net.reachability import DEFAULT_PROBE_TIMEOUT, probe_port, resolve_host

logger = logging.getLogger(__name__)

DEFAULT_PROTOCOL = "https"
DEFAULT_PORT = 9644
DEFAULT_TOKEN_PATH = "/api/v1/token"

_PROTOCOLS = ("http", "https")
_REQUIRED_TOKEN_FIELDS = ("token_type", "access_token", "expires_in")


@dataclasses.dataclass(frozen=True)
class ConnectionResult:
    """Outcome of a successful ``connect()``."""

    base_uri: str
    username: str
    expires_at: datetime.datetime

    def __str__(self) -> str:
        return (
            f"Connected to {self.base_uri} as {self.username}. "
            f"Token expires {self.expires_at:%Y-%m-%d %H:%M:%S} UTC."
        )


class SessionManager:
    """Acquires, tracks and renews the bearer token for one server."""

    def __init__(
        self,
        *,
        ignore_ssl_errors: bool = False,
        retain_credentials: bool = True,
        probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
        http: requests.Session | None = None,
    ) -> None:
        self._http = http if http is not None else requests.Session()
        if ignore_ssl_errors:
            self._http.verify = False
            logger.warning("TLS certificate validation is disabled for this session")
        self._retain_credentials = retain_credentials
        self._probe_timeout = probe_timeout
        self._lock = threading.Lock()
        self._session: Session | None = None
        self._credentials: Credentials | None = None

    # -- accessors ------------------------------------------------------------

    @property
    def http(self) -> requests.Session:
        """HTTP client shared with collaborators so TLS settings stay scoped."""
        return self._http

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def is_connected(self) -> bool:
        return self._session is not None

    @property
    def base_uri(self) -> str:
        session = self._session
        if session is None:
            raise NotConnectedError("Not connected; call connect() first")
        return session.base_uri

    # -- lifecycle ------------------------------------------------------------

    def connect(
        self,
        server_address: str,
        credentials: Credentials,
        protocol: str = DEFAULT_PROTOCOL,
        port: int = DEFAULT_PORT,
        token_path: str = DEFAULT_TOKEN_PATH,
    ) -> ConnectionResult:
        """Authenticate against *server_address* and install a new session.

        Raises ``ValueError`` for a bad protocol or port, ``ResolutionError``
        or ``PortUnreachableError`` from the pre-flight checks, and
        ``TokenRequestError`` / ``IncompleteTokenError`` from the token
        exchange.  On any failure the previous session (if any) is kept.
        """
        protocol = protocol.lower()
        if protocol not in _PROTOCOLS:
            raise ValueError(f"Unsupported protocol: {protocol!r} (expected http or https)")
        if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= 65535:
            raise ValueError(f"Port must be an integer between 1 and 65535, got {port!r}")

        resolve_host(server_address)
        probe_port(server_address, port, timeout=self._probe_timeout)

        base_uri = f"{protocol}://{_format_host(server_address)}:{port}"
        token_uri = base_uri + ("" if token_path.startswith("/") else "/") + token_path

        with self._lock:
            session = self._request_token(base_uri, token_uri, credentials)
            self._session = session
            self._credentials = credentials if self._retain_credentials else None

        logger.info(
            "Connected to %s as %s, token expires %s",
            base_uri,
            credentials.username,
            session.expires_at.isoformat(),
        )
        return ConnectionResult(
            base_uri=base_uri,
            username=credentials.username,
            expires_at=session.expires_at,
        )

    def ensure_valid_session(self) -> dict[str, str]:
        """Return the current bearer header set, renewing the token if expired.

        The expiry check and renewal run under a lock, so concurrent callers
        at expiry trigger a single token request between them.
        """
        with self._lock:
            session = self._session
            if session is None:
                raise NotConnectedError("Not connected; call connect() first")

            if session.is_expired:
                if self._credentials is None:
                    raise SessionExpiredError(
                        f"Token for {session.username} expired at "
                        f"{session.expires_at.isoformat()}; connect again"
                    )
                logger.info(
                    "Token for %s expired at %s, renewing",
                    session.username,
                    session.expires_at.isoformat(),
                )
                session = self._request_token(
                    session.base_uri, session.token_uri, self._credentials
                )
                self._session = session

            return session.bearer_headers()

    def disconnect(self) -> None:
        """Forget the current session and retained credentials (local only)."""
        with self._lock:
            if self._session is not None:
                logger.info("Disconnected from %s", self._session.base_uri)
            self._session = None
            self._credentials = None

    def close(self) -> None:
        self.disconnect()
        self._http.close()

    def __enter__(self) -> SessionManager:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    # -- private helpers ------------------------------------------------------

    def _request_token(
        self, base_uri: str, token_uri: str, credentials: Credentials
    ) -> Session:
        body = urllib.parse.urlencode({
            "grant_type": "password",
            "username": credentials.username,
            "password": credentials.password,
        })
        try:
            response = self._http.post(
                token_uri,
                data=body,
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            reason = exc.response.reason if exc.response is not None else None
            logger.error(
                "Token request to %s failed: %s %s", token_uri, status_code, reason
            )
            raise TokenRequestError(
                f"Token request to {token_uri} failed: {status_code} {reason}",
                uri=token_uri,
                status_code=status_code,
                reason=reason,
            ) from exc
        except requests.exceptions.RequestException as exc:
            logger.error("Token request to %s failed: %s", token_uri, exc)
            raise TokenRequestError(
                f"Token request to {token_uri} failed: {exc}",
                uri=token_uri,
            ) from exc

        payload = _parse_token_payload(response, token_uri)
        return Session(
            base_uri=base_uri,
            token_uri=token_uri,
            username=credentials.username,
            headers={
                "Authorization": f"{payload['token_type']} {payload['access_token']}",
                "Content-Type": "application/json",
            },
            created_at=datetime.datetime.now(datetime.UTC),
            ttl_seconds=payload["expires_in"],
            refresh_token=payload.get("refresh_token"),
        )


def _parse_token_payload(response: requests.Response, token_uri: str) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError as exc:
        raise IncompleteTokenError(f"Token response from {token_uri} is not JSON") from exc
    if not isinstance(payload, dict):
        raise IncompleteTokenError(f"Token response from {token_uri} is not a JSON object")

    missing = [name for name in _REQUIRED_TOKEN_FIELDS if payload.get(name) in (None, "")]
    if missing:
        raise IncompleteTokenError(
            f"Token response from {token_uri} is missing: {', '.join(missing)}"
        )

    raw_expires_in = payload["expires_in"]
    if isinstance(raw_expires_in, bool) or (
        isinstance(raw_expires_in, float) and not raw_expires_in.is_integer()
    ):
        raise IncompleteTokenError(
            f"Token response from {token_uri} has a non-integer expires_in: {raw_expires_in!r}"
        )
    try:
        expires_in = int(raw_expires_in)
    except (TypeError, ValueError) as exc:
        raise IncompleteTokenError(
            f"Token response from {token_uri} has a non-integer expires_in: "
            f"{raw_expires_in!r}"
        ) from exc
    if expires_in <= 0:
        raise IncompleteTokenError(
            f"Token response from {token_uri} has a non-positive expires_in: {expires_in}"
        )

    return {**payload, "expires_in": expires_in}


def _format_host(server_address: str) -> str:
    # Bare IPv6 literals need brackets inside a URI.
    if ":" in server_address and not server_address.startswith("["):
        return f"[{server_address}]"
    return server_address
