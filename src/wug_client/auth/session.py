"""Authenticated connection state for a single monitoring server.

A ``Session`` is a snapshot of one successful password-grant exchange: where
the server lives, which headers carry the bearer token, and when that token
stops being valid.  It is owned by a ``SessionManager`` and never shared as
module-level state.

The session is immutable.  Renewal builds a fresh ``Session`` and swaps it in
as a whole, so a reader can never observe a new token paired with the old
expiry.
"""

from __future__ import annotations

import dataclasses
import datetime
import types
from typing import Mapping


@dataclasses.dataclass(frozen=True)
class Session:
    """Immutable snapshot of an authenticated connection.

    Attributes:
        base_uri:      ``protocol://server:port`` of the monitoring server.
        token_uri:     Token endpoint the session was obtained from.
        username:      Identity the token was issued to.
        headers:       Bearer header set (``Authorization`` + ``Content-Type``).
        created_at:    UTC timestamp at which the token response was received.
        ttl_seconds:   ``expires_in`` reported by the server.
        refresh_token: Refresh token if the server sent one.  Never used for
                       renewal; a new password grant is issued instead.
    """

    base_uri: str
    token_uri: str
    username: str
    headers: Mapping[str, str] = dataclasses.field(repr=False)
    created_at: datetime.datetime
    ttl_seconds: int
    refresh_token: str | None = dataclasses.field(default=None, repr=False)

    def __post_init__(self) -> None:
        # Freeze the header mapping too; callers get copies via bearer_headers().
        object.__setattr__(self, "headers", types.MappingProxyType(dict(self.headers)))

    @property
    def expires_at(self) -> datetime.datetime:
        return self.created_at + datetime.timedelta(seconds=self.ttl_seconds)

    @property
    def is_expired(self) -> bool:
        return datetime.datetime.now(datetime.UTC) >= self.expires_at

    def bearer_headers(self) -> dict[str, str]:
        """Return a mutable copy of the header set for merging into a request."""
        return dict(self.headers)

    def __str__(self) -> str:
        return (
            f"Session(user={self.username}, base_uri={self.base_uri}, "
            f"expires_at={self.expires_at.isoformat()}, expired={self.is_expired})"
        )
