"""Device creation through the device template endpoint.

A ``DeviceTemplate`` captures the handful of fields an operator usually sets
when adding a monitored device.  ``to_payload()`` expands it into the full
template body the server expects, filling every list the server requires
with an empty default.
"""

from __future__ import annotations

import dataclasses
import ipaddress
import logging
import uuid
from typing import Any

from wug_client.api.client import ApiClient
from wug_client.errors import DeviceCreationError

logger = logging.getLogger(__name__)

DEVICE_TEMPLATE_PATH = "/api/v1/devices/-/config/template"


def _monitor(name: str) -> dict[str, str]:
    return {"classId": "", "Name": name}


@dataclasses.dataclass
class DeviceTemplate:
    """Description of a device to add to the monitoring server."""

    display_name: str
    ip_address: str
    device_type: str = "Workstation"
    primary_role: str = "Device"
    brand: str = ""
    os: str = ""
    note: str = ""
    groups: list[str] = dataclasses.field(default_factory=list)
    active_monitors: list[str] = dataclasses.field(default_factory=lambda: ["Ping"])
    performance_monitors: list[str] = dataclasses.field(default_factory=list)
    passive_monitors: list[str] = dataclasses.field(default_factory=list)
    credentials: dict[str, str] = dataclasses.field(default_factory=dict)
    attributes: dict[str, str] = dataclasses.field(default_factory=dict)
    poll_interval_seconds: int = 60

    def __post_init__(self) -> None:
        if not self.display_name:
            raise ValueError("display_name is required")
        try:
            ipaddress.ip_address(self.ip_address)
        except ValueError as exc:
            raise ValueError(f"Invalid IP address: {self.ip_address!r}") from exc
        if self.poll_interval_seconds <= 0:
            raise ValueError("poll_interval_seconds must be positive")
        if not self.active_monitors:
            raise ValueError("At least one active monitor is required")

    def to_payload(self, template_id: str | None = None) -> dict[str, Any]:
        """Build the request body for the device template endpoint."""
        template = {
            "templateId": template_id or str(uuid.uuid4()),
            "displayName": self.display_name,
            "deviceType": self.device_type,
            "primaryRole": self.primary_role,
            "subroles": [],
            "snmpOid": "",
            "snmpPort": "",
            "pollIntervalSeconds": self.poll_interval_seconds,
            "primaryActiveMonitor": _monitor(self.active_monitors[0]),
            "activeMonitors": [_monitor(name) for name in self.active_monitors],
            "performanceMonitors": [_monitor(name) for name in self.performance_monitors],
            "passiveMonitors": [_monitor(name) for name in self.passive_monitors],
            "dependencies": [],
            "ncmTasks": [],
            "applicationProfiles": [],
            "layer2Data": "",
            "groups": [{"name": group} for group in self.groups],
            "interfaces": [{
                "defaultInterface": True,
                "pollUsingNetworkName": False,
                "networkAddress": self.ip_address,
                "networkName": self.ip_address,
            }],
            "attributes": [
                {"name": name, "value": value} for name, value in self.attributes.items()
            ],
            "customLinks": [],
            "credentials": [
                {"credentialType": kind, "credential": name}
                for kind, name in self.credentials.items()
            ],
            "actionPolicy": [],
            "brand": self.brand,
            "os": self.os,
            "note": self.note,
            "autoRefresh": True,
        }
        return {"options": ["all"], "templates": [template]}


@dataclasses.dataclass(frozen=True)
class AddDeviceResult:
    """Ids assigned by the server to a newly created device."""

    template_id: str
    device_ids: tuple[str, ...]


class DeviceClient:
    """Device operations built on top of an authenticated ``ApiClient``."""

    def __init__(self, api: ApiClient) -> None:
        self._api = api

    def add_device(self, template: DeviceTemplate) -> AddDeviceResult:
        """Create the device described by *template*.

        Raises ``DeviceCreationError`` when the server reports template errors.
        """
        template_id = str(uuid.uuid4())
        response = self._api.put(DEVICE_TEMPLATE_PATH, json=template.to_payload(template_id))
        if not isinstance(response, dict):
            raise DeviceCreationError(
                f"Unexpected response for device {template.display_name}: {response!r}"
            )
        data = response.get("data") or {}
        if not isinstance(data, dict):
            raise DeviceCreationError(
                f"Unexpected 'data' for device {template.display_name}: {data!r}"
            )

        errors = data.get("errors") or []
        if errors:
            raise DeviceCreationError(
                f"Server rejected device {template.display_name}: {errors}"
            )

        device_ids = tuple(
            str(entry["resultId"])
            for entry in data.get("idMap") or []
            if entry.get("templateId") == template_id and entry.get("resultId") is not None
        )
        if not device_ids:
            raise DeviceCreationError(
                f"Server returned no device id for {template.display_name}"
            )

        logger.info(
            "Added device %s (%s) -> id(s) %s",
            template.display_name,
            template.ip_address,
            ", ".join(device_ids),
        )
        return AddDeviceResult(template_id=template_id, device_ids=device_ids)
