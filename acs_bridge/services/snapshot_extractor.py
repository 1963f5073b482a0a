# acs_bridge/services/snapshot_extractor.py
"""
Extração do resumo normalizado de um dispositivo a partir do snapshot GenieACS.

Cada campo é resolvido por uma cadeia de caminhos (SUMMARY_PATHS) em que o
primeiro valor não-nulo vence. Campos ausentes ficam como "N/A" para que o
front-end nunca precise testar chaves faltando.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from acs_bridge.services.path_catalog import NOT_AVAILABLE, SUMMARY_PATHS
from acs_bridge.services.snapshot_tree import first_value
from acs_bridge.services.wan_inference import (
    WANConnectionDescriptor,
    detect_active_interfaces,
    discover_connections,
    synthesize_bridges,
)

log = logging.getLogger("acs-bridge.extractor")

ONLINE_THRESHOLD_SECONDS = 300

URL_HOST_RE = re.compile(r"https?://([^:/]+)")
# ConnectionRequestURL em faixa privada: o ACS não alcança o CPE (NAT)
PRIVATE_URL_RE = re.compile(r"https?://(10\.|192\.168\.|172\.(1[6-9]|2[0-9]|3[01])\.)")
HEX6_RE = re.compile(r"^[0-9A-Fa-f]{6}$")


@dataclass
class DeviceSummary:
    """Resumo plano do dispositivo para exibição."""
    # Identificação
    device_id: Any = NOT_AVAILABLE
    serial_number: Any = NOT_AVAILABLE
    mac_address: Any = NOT_AVAILABLE
    manufacturer: Any = NOT_AVAILABLE
    oui: Any = NOT_AVAILABLE
    product_class: Any = NOT_AVAILABLE
    hardware_version: Any = NOT_AVAILABLE
    software_version: Any = NOT_AVAILABLE

    # Status
    status: str = "offline"
    last_inform: str = NOT_AVAILABLE

    # Rede
    ip_tr069: Any = NOT_AVAILABLE
    ip_address: Any = NOT_AVAILABLE
    uptime: Any = NOT_AVAILABLE

    # Wi-Fi
    wifi_ssid: Any = NOT_AVAILABLE
    wifi_password: Any = NOT_AVAILABLE

    # Óptico / temperatura
    rx_power: Any = NOT_AVAILABLE
    temperature: Any = NOT_AVAILABLE

    wan_details: List[WANConnectionDescriptor] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "wan_details"}
        data["wan_details"] = [w.to_dict() for w in self.wan_details]
        return data


# =============================================================================
# HELPERS
# =============================================================================

def _coalesce(snapshot: Any, key: str) -> Any:
    return first_value(snapshot, SUMMARY_PATHS[key])


def _or_na(value: Any) -> Any:
    return NOT_AVAILABLE if value is None else value


def as_number(value: Any) -> Optional[float]:
    """Converte para float apenas valores realmente numéricos."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value) if isinstance(value, (int, float)) else float(str(value).strip())
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def convert_rx_power(raw: Any) -> Any:
    """
    Potência óptica RX em dBm.
    Valores > 100 estão em ponto fixo do fabricante: (raw / 100) - 40.
    """
    number = as_number(raw)
    if number is None:
        return _or_na(raw)
    if number > 100:
        return round((number / 100) - 40, 2)
    return raw


def convert_temperature(raw: Any) -> Any:
    """Temperatura em °C. Valores > 1000 estão em ponto fixo: raw / 256."""
    number = as_number(raw)
    if number is None:
        return _or_na(raw)
    if number > 1000:
        return round(number / 256, 1)
    return raw


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Interpreta o _lastInform do GenieACS (ISO-8601 ou epoch em ms).
    Retorna datetime com timezone UTC ou None se não for possível.
    """
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        if isinstance(value, datetime):
            dt = value
        elif isinstance(value, (int, float)):
            dt = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        else:
            dt = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        # offsets perto de 0001-01-01 / 9999-12-31 saem do intervalo em UTC
        dt = dt.astimezone(timezone.utc)
    except (ValueError, TypeError, OverflowError, OSError) as e:
        log.debug(f"[Extractor] timestamp inválido {value!r}: {e}")
        return None
    return dt


def compute_status(
    last_inform: Any,
    now: Optional[datetime] = None,
    online_threshold: int = ONLINE_THRESHOLD_SECONDS,
) -> Tuple[str, str]:
    """Retorna (status, last_inform formatado). Online se informou há < threshold s."""
    dt = parse_timestamp(last_inform)
    if dt is None:
        return "offline", NOT_AVAILABLE
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    diff = (now - dt).total_seconds()
    status = "online" if diff < online_threshold else "offline"
    return status, dt.strftime("%Y-%m-%d %H:%M:%S")


def host_from_url(url: Any) -> Optional[str]:
    if not isinstance(url, str):
        return None
    match = URL_HOST_RE.search(url)
    return match.group(1) if match else None


def reconstruct_mac(oui: Any, serial: Any) -> Optional[str]:
    """
    Alguns CPEs embutem o final do MAC no número de série.
    OUI "F86CE1" + serial terminando em "ABC123" -> "F8:6C:E1:AB:C1:23".
    """
    if not oui or not serial:
        return None
    oui, serial = str(oui), str(serial)
    if len(serial) < 6:
        return None
    tail = serial[-6:]
    if not HEX6_RE.match(tail):
        return None
    octets = [oui[0:2], oui[2:4], oui[4:6], tail[0:2], tail[2:4], tail[4:6]]
    return ":".join(octets).upper()


def connection_request_reachable(snapshot: Any) -> bool:
    """False se a ConnectionRequestURL estiver em IP privado (CPE atrás de NAT)."""
    url = _coalesce(snapshot, "connection_request_url")
    if not isinstance(url, str) or not url:
        return True
    return PRIVATE_URL_RE.search(url) is None


# =============================================================================
# EXTRAÇÃO
# =============================================================================

def extract(
    snapshot: Optional[Mapping[str, Any]],
    now: Optional[datetime] = None,
    online_threshold: int = ONLINE_THRESHOLD_SECONDS,
) -> DeviceSummary:
    """Monta o DeviceSummary; nunca falha, mesmo com snapshot parcial ou ausente."""
    if not isinstance(snapshot, Mapping):
        snapshot = {}

    summary = DeviceSummary()
    summary.device_id = _or_na(snapshot.get("_id"))
    summary.serial_number = _or_na(_coalesce(snapshot, "serial_number"))

    mac = _coalesce(snapshot, "mac_address")
    if mac in (None, "", NOT_AVAILABLE):
        mac = reconstruct_mac(
            first_value(snapshot, ("_deviceId._OUI",)),
            first_value(snapshot, ("_deviceId._SerialNumber",)),
        ) or mac
    summary.mac_address = mac if mac not in (None, "") else NOT_AVAILABLE

    summary.manufacturer = _or_na(_coalesce(snapshot, "manufacturer"))
    summary.oui = _or_na(_coalesce(snapshot, "oui"))
    summary.product_class = _or_na(_coalesce(snapshot, "product_class"))
    summary.hardware_version = _or_na(_coalesce(snapshot, "hardware_version"))
    summary.software_version = _or_na(_coalesce(snapshot, "software_version"))

    summary.status, summary.last_inform = compute_status(
        snapshot.get("_lastInform"), now, online_threshold
    )

    connection_url = _coalesce(snapshot, "connection_request_url")
    summary.ip_tr069 = _or_na(connection_url)
    summary.ip_address = _or_na(
        host_from_url(connection_url) or _coalesce(snapshot, "ip_address")
    )
    summary.uptime = _or_na(_coalesce(snapshot, "uptime"))

    summary.wifi_ssid = _or_na(_coalesce(snapshot, "wifi_ssid"))
    summary.wifi_password = _or_na(_coalesce(snapshot, "wifi_password"))

    summary.rx_power = convert_rx_power(_coalesce(snapshot, "rx_power"))
    summary.temperature = convert_temperature(_coalesce(snapshot, "temperature"))

    wan = discover_connections(snapshot)
    if not wan:
        wan = synthesize_bridges(
            detect_active_interfaces(snapshot),
            ip_address=summary.ip_address,
            mac_address=summary.mac_address,
            uptime=summary.uptime,
        )
    summary.wan_details = wan

    return summary


def fleet_stats(
    devices: Iterable[Mapping[str, Any]],
    now: Optional[datetime] = None,
    online_threshold: int = ONLINE_THRESHOLD_SECONDS,
) -> Dict[str, int]:
    """Total de dispositivos online/offline pelo _lastInform."""
    total = online = 0
    for device in devices:
        total += 1
        last_inform = device.get("_lastInform") if isinstance(device, Mapping) else None
        status, _ = compute_status(last_inform, now, online_threshold)
        if status == "online":
            online += 1
    return {"total": total, "online": online, "offline": total - online}
