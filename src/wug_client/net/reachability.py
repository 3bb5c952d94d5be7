"""Pre-flight checks run before the token request.

Both checks are best effort.  A host that resolves and accepts a TCP
connection now may still be gone by the time the real request is sent.
"""

from __future__ import annotations

import logging
import socket

from wug_client.errors import PortUnreachableError, ResolutionError

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 0.5


def resolve_host(host: str) -> str:
    """Return the first address *host* resolves to.

    Raises ``ResolutionError`` if DNS lookup fails.
    """
    try:
        infos = socket.getaddrinfo(host, None, proto=socket.IPPROTO_TCP)
    except (socket.gaierror, UnicodeError) as exc:
        raise ResolutionError(f"Unable to resolve {host}: {exc}") from exc
    if not infos:
        raise ResolutionError(f"Unable to resolve {host}: no addresses returned")

    address = infos[0][4][0]
    logger.debug("Resolved %s -> %s", host, address)
    return address


def probe_port(host: str, port: int, timeout: float = DEFAULT_PROBE_TIMEOUT) -> None:
    """Open and immediately close a TCP connection to *host*:*port*.

    Raises ``PortUnreachableError`` if the connection cannot be made within
    *timeout* seconds.
    """
    try:
        with socket.create_connection((host, port), timeout=timeout):
            pass
    except OSError as exc:
        raise PortUnreachableError(
            f"Port {port} on {host} is not reachable within {timeout}s: {exc}"
        ) from exc
    logger.debug("Port %s on %s is reachable", port, host)
