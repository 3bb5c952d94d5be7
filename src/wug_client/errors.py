"""Exception taxonomy shared by every part of the client.

All failures on the connect path are terminal for that call: nothing is
retried, and the caller decides whether to connect again.
"""

from __future__ import annotations


class WUGClientError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(WUGClientError):
    """Raised when the settings file is missing or malformed."""


class CredentialError(WUGClientError):
    """Raised when credentials cannot be acquired or are empty."""


class ResolutionError(WUGClientError):
    """Raised when the server address does not resolve via DNS."""


class PortUnreachableError(WUGClientError):
    """Raised when the TCP reachability probe fails within its timeout."""


class TokenRequestError(WUGClientError):
    """Raised when the token POST fails at the transport or HTTP level."""

    def __init__(
        self,
        message: str,
        *,
        uri: str,
        status_code: int | None = None,
        reason: str | None = None,
    ) -> None:
        super().__init__(message)
        self.uri = uri
        self.status_code = status_code
        self.reason = reason


class IncompleteTokenError(WUGClientError):
    """Raised when a successful token response lacks required fields."""


class NotConnectedError(WUGClientError):
    """Raised when an API call is made before a successful connect."""


class SessionExpiredError(WUGClientError):
    """Raised when the token has expired and no credentials were retained."""


class ApiRequestError(WUGClientError):
    """Raised when a regular (non-token) API request fails."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DeviceCreationError(WUGClientError):
    """Raised when the server reports errors for a device template."""
