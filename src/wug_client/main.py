"""CLI entry point: parse arguments, load settings, dispatch the command."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys

from rich.console import Console

from wug_client.config import DEFAULT_CONFIG_PATH, load_settings
from wug_client.errors import ConfigError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="WUG client: authenticate against the monitoring REST API and add devices",
    )
    parser.add_argument(
        "--config",
        default=str(DEFAULT_CONFIG_PATH),
        help="Path to settings.yaml",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    connection = argparse.ArgumentParser(add_help=False)
    connection.add_argument("--server", help="Server hostname or IP (overrides settings)")
    connection.add_argument("--protocol", choices=["http", "https"], help="API protocol")
    connection.add_argument("--port", type=int, help="API port")
    connection.add_argument("--username", help="API username")
    connection.add_argument("--password", help="API password")
    connection.add_argument(
        "--ignore-ssl-errors",
        action="store_true",
        default=None,
        help="Skip TLS certificate validation for this run",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("connect", parents=[connection], help="Authenticate and report token expiry")

    add = commands.add_parser("add-device", parents=[connection], help="Add a monitored device")
    add.add_argument("--name", required=True, help="Display name of the device")
    add.add_argument("--ip", required=True, help="IP address of the device")
    add.add_argument("--device-type", default="Workstation", help="Device type")
    add.add_argument("--group", action="append", default=[], help="Device group (repeatable)")
    add.add_argument(
        "--monitor",
        action="append",
        default=None,
        help="Active monitor name (repeatable; first is primary, default Ping)",
    )
    add.add_argument("--note", default="", help="Free-text note")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        settings = load_settings(args.config)
    except ConfigError as exc:
        Console(stderr=True).print(f"[red]Invalid settings:[/red] {exc}")
        sys.exit(1)

    overrides = {
        "server": args.server,
        "protocol": args.protocol,
        "port": args.port,
        "ignore_ssl_errors": args.ignore_ssl_errors,
    }
    settings = dataclasses.replace(
        settings, **{key: value for key, value in overrides.items() if value is not None}
    )

    from wug_client.prompt.cli import run_add_device, run_connect

    if args.command == "connect":
        run_connect(settings, username=args.username, password=args.password)
        return

    from wug_client.api.devices import DeviceTemplate

    try:
        template = DeviceTemplate(
            display_name=args.name,
            ip_address=args.ip,
            device_type=args.device_type,
            groups=args.group,
            active_monitors=args.monitor or ["Ping"],
            note=args.note,
        )
    except ValueError as exc:
        parser.error(str(exc))
    run_add_device(settings, template, username=args.username, password=args.password)


if __name__ == "__main__":
    main()
