"""Settings loaded from ``config/settings.yaml``."""

from __future__ import annotations

import dataclasses
import pathlib
from typing import Any

import yaml

from wug_client.auth.session_manager import DEFAULT_PORT, DEFAULT_PROTOCOL, DEFAULT_TOKEN_PATH
from wug_client.errors import ConfigError
from wug_client.net.reachability import DEFAULT_PROBE_TIMEOUT

DEFAULT_CONFIG_PATH = pathlib.Path(__file__).resolve().parents[2] / "config" / "settings.yaml"

CREDENTIAL_SOURCES = ("prompt", "env", "vault")
PROTOCOLS = ("http", "https")


@dataclasses.dataclass(frozen=True)
class Settings:
    """Connection and credential settings.

    Attributes:
        server:            Hostname or IP of the monitoring server (may be empty;
                           the CLI can supply it instead).
        protocol:          ``http`` or ``https``.
        port:              API port.
        token_path:        Path of the OAuth2 token endpoint.
        ignore_ssl_errors: Disable TLS verification for the client's session.
        probe_timeout:     Seconds allowed for the TCP reachability probe.
        credential_source: Where credentials come from when not given on the
                           command line: ``prompt``, ``env`` or ``vault``.
        env_prefix:        Prefix for ``USERNAME`` / ``PASSWORD`` env vars.
        vault_addr:        Vault address for the ``vault`` source.
        vault_mount:       KV v2 mount point holding the secret.
        vault_path:        Secret path under the mount.
    """

    server: str = ""
    protocol: str = DEFAULT_PROTOCOL
    port: int = DEFAULT_PORT
    token_path: str = DEFAULT_TOKEN_PATH
    ignore_ssl_errors: bool = False
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT
    credential_source: str = "prompt"
    env_prefix: str = "WUG_"
    vault_addr: str = "http://127.0.0.1:8200"
    vault_mount: str = "secret"
    vault_path: str = "wug/api"


def load_settings(path: str | pathlib.Path | None = None) -> Settings:
    """Read *path* (default ``config/settings.yaml``) into ``Settings``.

    Raises ``ConfigError`` if the file is missing or malformed.
    """
    config_path = pathlib.Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        raise ConfigError(f"Settings file not found: {config_path}")
    with open(config_path) as fh:
        try:
            data = yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Settings file {config_path} is not valid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError("Settings file must contain a mapping")
    return settings_from_dict(data)


def _section(parent: dict[str, Any], key: str, label: str) -> dict[str, Any]:
    value = parent.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{label}' must be a mapping, got {type(value).__name__}")
    return value


def settings_from_dict(data: dict[str, Any]) -> Settings:
    wug = _section(data, "wug", "wug")
    creds = _section(data, "credentials", "credentials")
    vault = _section(creds, "vault", "credentials.vault")
    defaults = Settings()

    source = creds.get("source", defaults.credential_source)
    if source not in CREDENTIAL_SOURCES:
        raise ConfigError(
            f"Unknown credential source {source!r}; expected one of {CREDENTIAL_SOURCES}"
        )

    protocol = str(wug.get("protocol", defaults.protocol)).lower()
    if protocol not in PROTOCOLS:
        raise ConfigError(f"Unsupported protocol {protocol!r}; expected one of {PROTOCOLS}")

    raw_port = wug.get("port", defaults.port)
    if isinstance(raw_port, bool):
        raise ConfigError(f"Invalid numeric setting: port must be an integer, got {raw_port!r}")
    try:
        port = int(raw_port)
        probe_timeout = float(wug.get("probe_timeout", defaults.probe_timeout))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid numeric setting: {exc}") from exc
    if not 1 <= port <= 65535:
        raise ConfigError(f"Port must be between 1 and 65535, got {port}")

    return Settings(
        server=wug.get("server") or defaults.server,
        protocol=protocol,
        port=port,
        token_path=wug.get("token_path", defaults.token_path),
        ignore_ssl_errors=bool(wug.get("ignore_ssl_errors", defaults.ignore_ssl_errors)),
        probe_timeout=probe_timeout,
        credential_source=source,
        env_prefix=creds.get("env_prefix", defaults.env_prefix),
        vault_addr=vault.get("address", defaults.vault_addr),
        vault_mount=vault.get("mount_point", defaults.vault_mount),
        vault_path=vault.get("path", defaults.vault_path),
    )
