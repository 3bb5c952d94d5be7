"""Tests for device template construction and device creation."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from wug_client.api.devices import DEVICE_TEMPLATE_PATH, DeviceClient, DeviceTemplate
from wug_client.errors import DeviceCreationError


def _template(**overrides: Any) -> DeviceTemplate:
    fields: dict[str, Any] = {"display_name": "core-sw-01", "ip_address": "192.0.2.20"}
    fields.update(overrides)
    return DeviceTemplate(**fields)


class TestDeviceTemplate:
    def test_defaults(self) -> None:
        payload = _template().to_payload("tmpl-1")
        assert payload["options"] == ["all"]
        (template,) = payload["templates"]
        assert template["templateId"] == "tmpl-1"
        assert template["displayName"] == "core-sw-01"
        assert template["deviceType"] == "Workstation"
        assert template["primaryRole"] == "Device"
        assert template["pollIntervalSeconds"] == 60
        assert template["primaryActiveMonitor"] == {"classId": "", "Name": "Ping"}
        assert template["activeMonitors"] == [{"classId": "", "Name": "Ping"}]
        assert template["interfaces"] == [{
            "defaultInterface": True,
            "pollUsingNetworkName": False,
            "networkAddress": "192.0.2.20",
            "networkName": "192.0.2.20",
        }]
        assert template["groups"] == []

    def test_optional_fields_are_mapped(self) -> None:
        template = _template(
            device_type="Switch",
            groups=["Core", "Datacenter"],
            active_monitors=["SNMP", "Ping"],
            performance_monitors=["CPU Utilization"],
            passive_monitors=["Syslog"],
            credentials={"SNMP v2": "public-ro"},
            attributes={"Site": "DC1"},
            brand="Acme",
            os="AcmeOS",
            note="added by script",
            poll_interval_seconds=120,
        ).to_payload("t")["templates"][0]

        assert template["deviceType"] == "Switch"
        assert template["groups"] == [{"name": "Core"}, {"name": "Datacenter"}]
        assert template["primaryActiveMonitor"]["Name"] == "SNMP"
        assert [m["Name"] for m in template["activeMonitors"]] == ["SNMP", "Ping"]
        assert template["performanceMonitors"] == [{"classId": "", "Name": "CPU Utilization"}]
        assert template["passiveMonitors"] == [{"classId": "", "Name": "Syslog"}]
        assert template["credentials"] == [{"credentialType": "SNMP v2", "credential": "public-ro"}]
        assert template["attributes"] == [{"name": "Site", "value": "DC1"}]
        assert (template["brand"], template["os"], template["note"]) == (
            "Acme",
            "AcmeOS",
            "added by script",
        )
        assert template["pollIntervalSeconds"] == 120

    def test_template_id_generated_when_omitted(self) -> None:
        first = _template().to_payload()["templates"][0]["templateId"]
        second = _template().to_payload()["templates"][0]["templateId"]
        assert first and second and first != second

    def test_ipv6_address_accepted(self) -> None:
        assert _template(ip_address="2001:db8::20").ip_address == "2001:db8::20"

    @pytest.mark.parametrize(
        "overrides,message",
        [
            ({"ip_address": "not-an-ip"}, "Invalid IP"),
            ({"ip_address": "300.1.1.1"}, "Invalid IP"),
            ({"display_name": ""}, "display_name"),
            ({"poll_interval_seconds": 0}, "poll_interval_seconds"),
            ({"active_monitors": []}, "active monitor"),
        ],
    )
    def test_validation(self, overrides: dict[str, Any], message: str) -> None:
        with pytest.raises(ValueError, match=message):
            _template(**overrides)


class TestDeviceClient:
    @staticmethod
    def _echo_api(result_id: Any = 1042, errors: list | None = None) -> MagicMock:
        """ApiClient stub that answers with an idMap for the submitted template."""
        api = MagicMock()

        def put(path: str, json: dict[str, Any]) -> dict[str, Any]:
            template_id = json["templates"][0]["templateId"]
            return {
                "data": {
                    "idMap": [{"templateId": template_id, "resultId": result_id}],
                    "errors": errors or [],
                }
            }

        api.put.side_effect = put
        return api

    def test_add_device_returns_new_id(self) -> None:
        api = self._echo_api(result_id=1042)
        result = DeviceClient(api).add_device(_template())

        assert result.device_ids == ("1042",)
        path = api.put.call_args.args[0]
        payload = api.put.call_args.kwargs["json"]
        assert path == DEVICE_TEMPLATE_PATH
        assert payload["templates"][0]["templateId"] == result.template_id

    def test_server_errors_raise(self) -> None:
        api = self._echo_api(errors=[{"templateId": "x", "messages": ["duplicate"]}])
        with pytest.raises(DeviceCreationError, match="duplicate"):
            DeviceClient(api).add_device(_template())

    def test_missing_id_map_raises(self) -> None:
        api = MagicMock()
        api.put.return_value = {"data": {"idMap": [], "errors": []}}
        with pytest.raises(DeviceCreationError, match="no device id"):
            DeviceClient(api).add_device(_template())

    def test_empty_response_raises(self) -> None:
        api = MagicMock()
        api.put.return_value = None
        with pytest.raises(DeviceCreationError):
            DeviceClient(api).add_device(_template())

    @pytest.mark.parametrize(
        "response",
        [[{"data": {}}], "created", 42, {"data": ["not", "a", "mapping"]}],
    )
    def test_non_object_response_raises(self, response: Any) -> None:
        api = MagicMock()
        api.put.return_value = response
        with pytest.raises(DeviceCreationError, match="Unexpected"):
            DeviceClient(api).add_device(_template())

    def test_foreign_template_ids_are_ignored(self) -> None:
        api = MagicMock()
        api.put.return_value = {
            "data": {"idMap": [{"templateId": "someone-else", "resultId": 7}], "errors": []}
        }
        with pytest.raises(DeviceCreationError):
            DeviceClient(api).add_device(_template())
