from __future__ import annotations

from datetime import datetime, timezone

import pytest

from acs_bridge.services.snapshot_extractor import (
    compute_status,
    connection_request_reachable,
    convert_rx_power,
    convert_temperature,
    extract,
    fleet_stats,
    host_from_url,
    parse_timestamp,
    reconstruct_mac,
)

NOW = datetime(2024, 5, 1, 12, 2, 0, tzinfo=timezone.utc)


class TestTelemetry:
    def test_rx_power_fixed_point(self):
        assert convert_rx_power(14000) == pytest.approx(100.0)
        assert convert_rx_power(2150) == pytest.approx(-18.5)

    def test_rx_power_pass_through(self):
        assert convert_rx_power(50) == 50
        assert convert_rx_power("-21.3") == "-21.3"
        assert convert_rx_power("sem sinal") == "sem sinal"
        assert convert_rx_power(None) == "N/A"

    def test_rx_power_numeric_string_is_converted(self):
        assert convert_rx_power("14000") == pytest.approx(100.0)

    def test_temperature(self):
        assert convert_temperature(12800) == pytest.approx(50.0)
        assert convert_temperature(45) == 45
        assert convert_temperature("quente") == "quente"

    def test_bool_is_not_numeric(self):
        assert convert_temperature(True) is True


class TestMacReconstruction:
    def test_from_oui_and_serial(self):
        assert reconstruct_mac("F86CE1", "FHTT00ABC123") == "F8:6C:E1:AB:C1:23"

    def test_lowercase_is_normalized(self):
        assert reconstruct_mac("f86ce1", "xxabc123") == "F8:6C:E1:AB:C1:23"

    @pytest.mark.parametrize("oui,serial", [
        ("F86CE1", "FHTT00XYZ123"),
        ("F86CE1", "AB12"),
        (None, "FHTT00ABC123"),
        ("F86CE1", None),
    ])
    def test_skipped(self, oui, serial):
        assert reconstruct_mac(oui, serial) is None


class TestStatus:
    def test_online(self):
        assert compute_status("2024-05-01T12:00:00.000Z", NOW) == ("online", "2024-05-01 12:00:00")

    def test_offline_after_threshold(self):
        status, last = compute_status("2024-05-01T11:57:00Z", NOW)
        assert status == "offline"
        assert last == "2024-05-01 11:57:00"

    def test_threshold_is_exclusive(self):
        assert compute_status("2024-05-01T11:57:00Z", NOW, online_threshold=301)[0] == "online"
        assert compute_status("2024-05-01T11:57:00Z", NOW, online_threshold=300)[0] == "offline"

    @pytest.mark.parametrize("value", [
        None,
        "",
        "ontem",
        "2024-13-45T99:00:00Z",
        True,
        "0001-01-01T00:00:00+01:00",
        "9999-12-31T23:30:00-01:00",
    ])
    def test_unparsable(self, value):
        assert compute_status(value, NOW) == ("offline", "N/A")

    def test_naive_timestamp_is_utc(self):
        assert parse_timestamp("2024-05-01T12:00:00") == datetime(2024, 5, 1, 12, tzinfo=timezone.utc)

    def test_offset_is_normalized_to_utc(self):
        _, last = compute_status("2024-05-01T09:01:00-03:00", NOW)
        assert last == "2024-05-01 12:01:00"

    def test_epoch_millis(self):
        millis = int(datetime(2024, 5, 1, 12, 1, tzinfo=timezone.utc).timestamp() * 1000)
        assert compute_status(millis, NOW) == ("online", "2024-05-01 12:01:00")


class TestConnectionRequest:
    def test_host_from_url(self):
        assert host_from_url("http://100.64.10.20:7547/tr069") == "100.64.10.20"
        assert host_from_url("https://cpe.example.net/") == "cpe.example.net"
        assert host_from_url("sem url") is None
        assert host_from_url(None) is None

    @pytest.mark.parametrize("url", [
        "http://192.168.1.5:7547/",
        "http://10.0.0.2:7547/",
        "http://172.20.1.1:7547/",
    ])
    def test_private_url_is_unreachable(self, url):
        snapshot = {"InternetGatewayDevice": {"ManagementServer": {"ConnectionRequestURL": {"_value": url}}}}
        assert connection_request_reachable(snapshot) is False

    def test_public_or_missing_url_is_reachable(self, tr098_snapshot):
        assert connection_request_reachable(tr098_snapshot) is True
        assert connection_request_reachable({}) is True
        snapshot = {"Device": {"ManagementServer": {"ConnectionRequestURL": {"_value": "http://172.32.0.1/"}}}}
        assert connection_request_reachable(snapshot) is True


class TestExtract:
    def test_tr098_device(self, tr098_snapshot):
        summary = extract(tr098_snapshot, now=NOW)

        assert summary.device_id == "F86CE1-AN5506-FHTT00ABC123"
        assert summary.serial_number == "FHTT00ABC123"
        assert summary.mac_address == "F8:6C:E1:AB:C1:23"
        assert summary.manufacturer == "FiberHome"
        assert summary.oui == "F86CE1"
        assert summary.product_class == "AN5506"
        assert summary.hardware_version == "WKE2.094.277A01"
        assert summary.software_version == "RP2613"
        assert summary.status == "online"
        assert summary.last_inform == "2024-05-01 12:00:00"
        assert summary.ip_tr069 == "http://100.64.10.20:7547/tr069"
        assert summary.ip_address == "100.64.10.20"
        assert summary.uptime == 3600
        assert summary.wifi_ssid == "Casa"
        assert summary.wifi_password == "senha-antiga"
        assert summary.rx_power == pytest.approx(-18.5)
        assert summary.temperature == pytest.approx(50.0)

        assert len(summary.wan_details) == 1
        wan = summary.wan_details[0]
        assert wan.type == "PPPoE"
        assert wan.name == "INTERNET_R_VID_100"
        assert wan.binding == "LAN Ethernet 1"

    def test_direct_mac_wins_over_reconstruction(self, tr098_snapshot):
        tr098_snapshot["InternetGatewayDevice"]["LANDevice"]["1"]["LANEthernetInterfaceConfig"] = {
            "1": {"MACAddress": {"_value": "AA:BB:CC:DD:EE:FF"}},
        }
        assert extract(tr098_snapshot, now=NOW).mac_address == "AA:BB:CC:DD:EE:FF"

    def test_non_hex_serial_leaves_mac_unavailable(self, tr098_snapshot):
        tr098_snapshot["_deviceId"]["_SerialNumber"] = "FHTT00XYZ123"
        assert extract(tr098_snapshot, now=NOW).mac_address == "N/A"

    def test_ip_falls_back_to_interface_address(self):
        snapshot = {"Device": {"IP": {"Interface": {"1": {"IPv4Address": {"1": {"IPAddress": {"_value": "200.1.2.3"}}}}}}}}
        assert extract(snapshot, now=NOW).ip_address == "200.1.2.3"

    def test_tr181_identity(self):
        snapshot = {
            "Device": {
                "DeviceInfo": {
                    "Manufacturer": {"_value": "Huawei"},
                    "SoftwareVersion": {"_value": "V5R020"},
                },
            },
        }
        summary = extract(snapshot, now=NOW)
        assert summary.manufacturer == "Huawei"
        assert summary.software_version == "V5R020"

    @pytest.mark.parametrize("snapshot", [None, {}, [], "lixo", {"InternetGatewayDevice": "lixo"}])
    def test_never_fails(self, snapshot):
        summary = extract(snapshot, now=NOW)
        assert summary.status == "offline"
        assert summary.serial_number == "N/A"
        assert summary.wan_details == []

    def test_bridge_per_vlan(self, bridge_snapshot):
        summary = extract(bridge_snapshot, now=NOW)

        assert [(w.type, w.name, w.binding) for w in summary.wan_details] == [
            ("Bridge", "Bridge_VLAN_10", "WLAN 1 (Casa)"),
            ("Bridge", "Bridge_VLAN_20", "WLAN 2 (Visitantes)"),
        ]
        assert all(w.status == "Connected" for w in summary.wan_details)

    def test_to_dict(self, tr098_snapshot):
        data = extract(tr098_snapshot, now=NOW).to_dict()
        assert data["status"] == "online"
        assert data["wan_details"][0]["has_credentials"] is True
        assert data["wan_details"][0]["username"] == "cliente@isp"


def test_fleet_stats():
    devices = [
        {"_lastInform": "2024-05-01T12:01:30Z"},
        {"_lastInform": "2024-04-30T12:00:00Z"},
        {"_id": "sem-inform"},
        {"_lastInform": "9999-12-31T23:30:00-01:00"},
    ]
    assert fleet_stats(devices, now=NOW) == {"total": 4, "online": 1, "offline": 3}


@pytest.mark.parametrize("last_inform", ["0001-01-01T00:00:00+01:00", "9999-12-31T23:30:00-01:00"])
def test_extract_with_out_of_range_inform(last_inform):
    summary = extract({"_lastInform": last_inform}, now=NOW)
    assert (summary.status, summary.last_inform) == ("offline", "N/A")
