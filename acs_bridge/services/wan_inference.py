# acs_bridge/services/wan_inference.py
"""
Inferência das conexões WAN (PPPoE / IP / Bridge) a partir do snapshot TR-098.

Percorre WANConnectionDevice.1..8, descobre quais objetos de conexão
existem e descreve o vínculo com as interfaces LAN/WLAN. Quando o CPE não
publica nenhuma conexão (ONU em modo bridge, por exemplo), sintetiza uma
conexão "Bridge" por VLAN a partir das interfaces ativas.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Pattern, Tuple

from acs_bridge.services.path_catalog import (
    LAN_ETHERNET,
    LAN_MAX_INTERFACES,
    LAN_WLAN,
    NOT_AVAILABLE,
    VLAN_FIELD,
    WAN_IP_CONNECTION,
    WAN_MAX_CONNECTION_DEVICES,
    WAN_OBJECT_FIELDS,
    WAN_PPP_CONNECTION,
)
from acs_bridge.services.snapshot_tree import get_value, has_any_field

log = logging.getLogger("acs-bridge.wan")


@dataclass
class WANConnectionDescriptor:
    """Conexão WAN descoberta ou inferida."""
    type: str  # "PPPoE", "IP", "Bridge"
    name: str
    status: str = NOT_AVAILABLE
    connection_type: Any = NOT_AVAILABLE
    external_ip: Any = NOT_AVAILABLE
    gateway: Any = NOT_AVAILABLE
    subnet_mask: Any = NOT_AVAILABLE
    dns_servers: Any = NOT_AVAILABLE
    mac_address: Any = NOT_AVAILABLE
    username: Any = NOT_AVAILABLE
    uptime: Any = NOT_AVAILABLE
    last_error: Any = NOT_AVAILABLE
    mru_size: Any = NOT_AVAILABLE
    addressing_type: Any = NOT_AVAILABLE
    binding: str = NOT_AVAILABLE

    @property
    def has_credentials(self) -> bool:
        return self.username not in (None, "", NOT_AVAILABLE)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["has_credentials"] = self.has_credentials
        return data


@dataclass
class ActiveInterface:
    type: str  # "WLAN" ou "LAN Ethernet"
    number: int
    vlan: Any = NOT_AVAILABLE
    ssid: Optional[str] = None

    @property
    def vlan_group(self) -> str:
        if self.vlan in (None, "", NOT_AVAILABLE):
            return "default"
        return str(self.vlan)

    def label(self, with_ssid: bool = False) -> str:
        if self.type == "WLAN" and with_ssid:
            return f"WLAN {self.number} ({self.ssid})"
        return f"{self.type} {self.number}"


# =============================================================================
# VÍNCULO LAN (X_CT-COM_LanInterface) - avaliado em ordem de prioridade
# =============================================================================
BINDING_RULES: Tuple[Tuple[Pattern[str], str], ...] = (
    (re.compile(r"WLANConfiguration\.(\d+)"), "WLAN {0}"),
    (re.compile(r"LANEthernetInterfaceConfig\.(\d+)"), "LAN Ethernet {0}"),
    (re.compile(r"LANHostConfigManagement"), "All LAN Ports"),
)


def describe_binding(reference: Any) -> Optional[str]:
    """
    Traduz a referência de interface em texto legível.
    Ex.: "InternetGatewayDevice.LANDevice.1.WLANConfiguration.1" -> "WLAN 1".
    Sem referência retorna None; referência desconhecida é retornada crua.
    """
    if reference is None or reference == "":
        return None
    text = str(reference)
    for pattern, template in BINDING_RULES:
        match = pattern.search(text)
        if match:
            return template.format(*match.groups())
    return text


def _is_true(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1")


def detect_active_interfaces(snapshot: Any) -> List[ActiveInterface]:
    """
    Interfaces LAN ativas.

    - WLAN: habilitada (ou Status "Up") e com SSID.
    - LAN Ethernet: habilitada ou com Status diferente de "NoLink".
    """
    active: List[ActiveInterface] = []

    for i in range(1, LAN_MAX_INTERFACES + 1):
        base = LAN_WLAN.replace("{idx}", str(i))
        enabled = get_value(snapshot, f"{base}.Enable")
        status = get_value(snapshot, f"{base}.Status")
        ssid = get_value(snapshot, f"{base}.SSID")
        if (_is_true(enabled) or status == "Up") and ssid:
            active.append(ActiveInterface(
                type="WLAN",
                number=i,
                vlan=get_value(snapshot, f"{base}.{VLAN_FIELD}", NOT_AVAILABLE),
                ssid=ssid,
            ))

    for i in range(1, LAN_MAX_INTERFACES + 1):
        base = LAN_ETHERNET.replace("{idx}", str(i))
        enabled = get_value(snapshot, f"{base}.Enable")
        status = get_value(snapshot, f"{base}.Status")
        if _is_true(enabled) or (status and status != "NoLink"):
            active.append(ActiveInterface(
                type="LAN Ethernet",
                number=i,
                vlan=get_value(snapshot, f"{base}.{VLAN_FIELD}", NOT_AVAILABLE),
            ))

    return active


def connection_status(snapshot: Any, base: str) -> str:
    """ConnectionStatus reportado; sem ele, deduz pelo Enable."""
    status = get_value(snapshot, f"{base}.ConnectionStatus")
    if status and status != "Unknown":
        return status
    enabled = get_value(snapshot, f"{base}.Enable")
    if enabled is None:
        return "Unknown"
    return "Connected" if _is_true(enabled) else "Disconnected"


def _wlan_binding(active: List[ActiveInterface]) -> str:
    wlans = [iface.label() for iface in active if iface.type == "WLAN"]
    return ", ".join(wlans) if wlans else NOT_AVAILABLE


# (tipo, caminho base, nome padrão)
CONNECTION_KINDS: Tuple[Tuple[str, str, str], ...] = (
    ("PPPoE", WAN_PPP_CONNECTION, "WAN_PPP_Connection_{i}"),
    ("IP", WAN_IP_CONNECTION, "WAN_IP_Connection_{i}"),
)


def discover_connections(snapshot: Any) -> List[WANConnectionDescriptor]:
    """Conexões WANPPPConnection (1..8) seguidas das WANIPConnection (1..8)."""
    connections: List[WANConnectionDescriptor] = []
    active: Optional[List[ActiveInterface]] = None

    for kind, template, default_name in CONNECTION_KINDS:
        for i in range(1, WAN_MAX_CONNECTION_DEVICES + 1):
            base = template.replace("{idx}", str(i))
            if not has_any_field(snapshot, base, WAN_OBJECT_FIELDS):
                continue

            def param(name: str) -> Any:
                return get_value(snapshot, f"{base}.{name}")

            name = param("Name")
            external_ip = param("ExternalIPAddress")
            service_list = param("X_CT-COM_ServiceList")

            if not (name or external_ip or service_list):
                log.debug(f"[WAN] {base} sem nome, IP ou service list: ignorada")
                continue

            if not name:
                name = f"WAN_{service_list}_{i}" if service_list else default_name.format(i=i)

            binding = describe_binding(param("X_CT-COM_LanInterface"))
            if binding is None:
                if active is None:
                    active = detect_active_interfaces(snapshot)
                binding = _wlan_binding(active)

            descriptor = WANConnectionDescriptor(
                type=kind,
                name=name,
                status=connection_status(snapshot, base),
                connection_type=_or_na(param("ConnectionType")),
                external_ip=_or_na(external_ip),
                subnet_mask=_or_na(param("SubnetMask")),
                dns_servers=_or_na(param("DNSServers")),
                mac_address=_or_na(param("MACAddress")),
                uptime=_or_na(param("Uptime")),
                binding=binding,
            )

            if kind == "PPPoE":
                gateway = param("RemoteIPAddress")
                if gateway is None:
                    gateway = param("DefaultGateway")
                descriptor.gateway = _or_na(gateway)
                descriptor.username = _or_na(param("Username"))
                descriptor.last_error = _or_na(param("LastConnectionError"))
                descriptor.mru_size = _or_na(param("MaxMRUSize"))
            else:
                descriptor.gateway = _or_na(param("DefaultGateway"))
                descriptor.addressing_type = _or_na(param("AddressingType"))

            connections.append(descriptor)

    return connections


def synthesize_bridges(
    active: List[ActiveInterface],
    ip_address: Any = NOT_AVAILABLE,
    mac_address: Any = NOT_AVAILABLE,
    uptime: Any = NOT_AVAILABLE,
) -> List[WANConnectionDescriptor]:
    """Uma conexão Bridge virtual por VLAN das interfaces ativas."""
    groups: Dict[str, List[ActiveInterface]] = {}
    for iface in active:
        groups.setdefault(iface.vlan_group, []).append(iface)

    bridges = []
    for vlan, interfaces in groups.items():
        bridges.append(WANConnectionDescriptor(
            type="Bridge",
            name=f"Bridge_VLAN_{vlan}" if vlan != "default" else "Bridge_Connection",
            status="Connected",
            connection_type="Bridged",
            external_ip=ip_address,
            mac_address=mac_address,
            addressing_type="Bridged",
            uptime=uptime,
            binding=", ".join(iface.label(with_ssid=True) for iface in interfaces),
        ))
    return bridges


def _or_na(value: Any) -> Any:
    return NOT_AVAILABLE if value is None else value
