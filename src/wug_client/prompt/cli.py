"""Console front end for connecting and adding devices.

The CLI owns everything interactive: choosing a credential source, prompting
when nothing else supplied credentials, and rendering results with Rich.  The
session manager and API clients never prompt or print.
"""

from __future__ import annotations

import logging
import sys

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from wug_client.api.client import ApiClient
from wug_client.api.devices import DeviceClient, DeviceTemplate
from wug_client.auth.credentials import Credentials, credentials_from_env, resolve_credentials
from wug_client.auth.session_manager import SessionManager
from wug_client.auth.vault_credentials import VaultCredentialSource
from wug_client.config import Settings
from wug_client.errors import WUGClientError

logger = logging.getLogger(__name__)
console = Console()


def _acquire_credentials(
    settings: Settings,
    username: str | None,
    password: str | None,
) -> Credentials:
    """Flags first, then the configured source, then interactive prompts."""
    explicit: Credentials | None = None
    if username and password:
        explicit = Credentials(username=username, password=password)
    elif not username and not password:
        if settings.credential_source == "env":
            explicit = credentials_from_env(settings.env_prefix)
        elif settings.credential_source == "vault":
            explicit = VaultCredentialSource(
                vault_addr=settings.vault_addr,
                mount_point=settings.vault_mount,
                path=settings.vault_path,
            ).fetch()

    if explicit is None:
        console.print("\n[bold yellow]Login[/bold yellow]\n")
    return resolve_credentials(explicit, username=username, password=password)


def _connect(
    manager: SessionManager,
    settings: Settings,
    username: str | None,
    password: str | None,
) -> None:
    if not settings.server:
        raise WUGClientError("No server given; pass --server or set wug.server")
    credentials = _acquire_credentials(settings, username, password)
    result = manager.connect(
        settings.server,
        credentials,
        protocol=settings.protocol,
        port=settings.port,
        token_path=settings.token_path,
    )
    console.print(Panel(str(result), border_style="green"))


def run_connect(settings: Settings, username: str | None = None, password: str | None = None) -> None:
    """Connect once and print the confirmation."""
    with SessionManager(
        ignore_ssl_errors=settings.ignore_ssl_errors,
        probe_timeout=settings.probe_timeout,
    ) as manager:
        try:
            _connect(manager, settings, username, password)
        except (WUGClientError, ValueError) as exc:
            console.print(f"[red]Connection failed:[/red] {exc}")
            sys.exit(1)


def run_add_device(
    settings: Settings,
    template: DeviceTemplate,
    username: str | None = None,
    password: str | None = None,
) -> None:
    """Connect, add *template* as a new device and print the assigned id(s)."""
    with SessionManager(
        ignore_ssl_errors=settings.ignore_ssl_errors,
        probe_timeout=settings.probe_timeout,
    ) as manager:
        try:
            _connect(manager, settings, username, password)
            result = DeviceClient(ApiClient(manager)).add_device(template)
        except (WUGClientError, ValueError) as exc:
            console.print(f"[red]Add device failed:[/red] {exc}")
            sys.exit(1)

    table = Table(title="Device Added")
    table.add_column("Name", style="bold")
    table.add_column("Address", style="cyan")
    table.add_column("Device ID", style="green")
    for device_id in result.device_ids:
        table.add_row(template.display_name, template.ip_address, device_id)
    console.print(table)
