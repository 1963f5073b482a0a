# acs_bridge/services/path_catalog.py
# Catálogo de caminhos TR-069 (TR-098 / TR-181) usados na escrita de Wi-Fi e na leitura do resumo

from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Tuple

DataModel = Literal["TR-098", "TR-181"]

TR098: DataModel = "TR-098"
TR181: DataModel = "TR-181"

XSD_STRING = "xsd:string"

# Valor exibido quando o dado não está disponível no dispositivo
NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class CandidatePath:
    """Caminho TR-069 (template com {idx}) associado a um data model."""
    template: str
    model: DataModel

    def render(self, idx: int) -> str:
        return self.template.replace("{idx}", str(idx))


@dataclass(frozen=True)
class LogicalSetting:
    """
    Configuração lógica (SSID, modo de segurança, senha...) com seus
    caminhos candidatos e caminhos de fallback.

    A ordem dos candidatos define a ordem final do lote de escrita
    quando mais de um caminho existe no dispositivo.
    """
    name: str
    candidates: Tuple[CandidatePath, ...]
    fallback: Tuple[CandidatePath, ...] = ()

    def candidate_paths(self, idx: int) -> List[str]:
        return [c.render(idx) for c in self.candidates]

    def fallback_paths(self, idx: int, hints=None) -> List[str]:
        """
        Fallbacks filtrados pelos data models presentes no snapshot.

        hints=None significa que não há snapshot (modo otimista): todos os
        fallbacks são oferecidos.
        """
        return [
            f.render(idx) for f in self.fallback
            if hints is None or hints.allows(f.model)
        ]


# =============================================================================
# WI-FI (escrita)
# =============================================================================
WLAN_TR098 = "InternetGatewayDevice.LANDevice.1.WLANConfiguration.{idx}"
AP_TR181 = "Device.WiFi.AccessPoint.{idx}"

WIFI_SSID = LogicalSetting(
    name="wifi.ssid",
    candidates=(
        CandidatePath(f"{WLAN_TR098}.SSID", TR098),
        CandidatePath("Device.WiFi.SSID.{idx}.SSID", TR181),
    ),
    fallback=(
        CandidatePath(f"{WLAN_TR098}.SSID", TR098),
        CandidatePath("Device.WiFi.SSID.{idx}.SSID", TR181),
    ),
)

WIFI_SECURITY_MODE = LogicalSetting(
    name="wifi.security.mode",
    candidates=(
        CandidatePath(f"{WLAN_TR098}.BeaconType", TR098),
        CandidatePath(f"{AP_TR181}.Security.ModeEnabled", TR181),
    ),
    fallback=(
        CandidatePath(f"{WLAN_TR098}.BeaconType", TR098),
        CandidatePath(f"{AP_TR181}.Security.ModeEnabled", TR181),
    ),
)

WIFI_PASSPHRASE = LogicalSetting(
    name="wifi.security.passphrase",
    candidates=(
        CandidatePath(f"{WLAN_TR098}.KeyPassphrase", TR098),
        CandidatePath(f"{WLAN_TR098}.PreSharedKey.1.KeyPassphrase", TR098),
        CandidatePath(f"{WLAN_TR098}.PreSharedKey.1.PreSharedKey", TR098),
        CandidatePath(f"{AP_TR181}.Security.KeyPassphrase", TR181),
        CandidatePath(f"{AP_TR181}.Security.PreSharedKey", TR181),
    ),
    fallback=(
        CandidatePath(f"{WLAN_TR098}.KeyPassphrase", TR098),
        CandidatePath(f"{AP_TR181}.Security.KeyPassphrase", TR181),
    ),
)

# Só existem no TR-098; sem fallback (não são escritos se o device não reportar)
WIFI_AUTH_MODE = LogicalSetting(
    name="wifi.security.auth_mode",
    candidates=(CandidatePath(f"{WLAN_TR098}.WPAAuthenticationMode", TR098),),
)

WIFI_ENCRYPTION = LogicalSetting(
    name="wifi.security.encryption",
    candidates=(CandidatePath(f"{WLAN_TR098}.WPAEncryptionModes", TR098),),
)

LOGICAL_SETTINGS: Dict[str, LogicalSetting] = {
    s.name: s
    for s in (WIFI_SSID, WIFI_SECURITY_MODE, WIFI_PASSPHRASE, WIFI_AUTH_MODE, WIFI_ENCRYPTION)
}


# =============================================================================
# MODOS DE SEGURANÇA
# =============================================================================
SECURITY_MODES: Tuple[str, ...] = ("WPA2PSK", "WPAPSK", "WPA2PSKWPAPSK", "None")
OPEN_SECURITY_MODE = "None"

BEACON_TYPE_MAP: Dict[str, str] = {
    "WPA2PSK": "11i",
    "WPAPSK": "WPA",
    "WPA2PSKWPAPSK": "WPAand11i",
    "None": "Basic",
}
BEACON_TYPE_DEFAULT = "11i"

MODE_ENABLED_MAP: Dict[str, str] = {
    "WPA2PSK": "WPA2-PSK",
    "WPAPSK": "WPA-PSK",
    "WPA2PSKWPAPSK": "WPA-WPA2-PSK",
    "None": "None",
}
MODE_ENABLED_DEFAULT = "WPA2-PSK"

AES_MODES = ("WPA2PSK", "WPA2PSKWPAPSK")

AUTH_MODE_PSK = "PSKAuthentication"

# (trecho do caminho, tabela, valor padrão) - avaliado nesta ordem
SECURITY_ENCODERS: Tuple[Tuple[str, Dict[str, str], str], ...] = (
    ("BeaconType", BEACON_TYPE_MAP, BEACON_TYPE_DEFAULT),
    ("ModeEnabled", MODE_ENABLED_MAP, MODE_ENABLED_DEFAULT),
)


def encode_security_mode(path: str, security_mode: str) -> Optional[str]:
    """
    Valor do modo de segurança no formato do data model do caminho.
    Retorna None se o caminho não for BeaconType nem ModeEnabled.
    """
    for marker, table, default in SECURITY_ENCODERS:
        if marker in path:
            return table.get(security_mode, default)
    return None


def encryption_for(security_mode: str) -> str:
    return "AESEncryption" if security_mode in AES_MODES else "TKIPEncryption"


# =============================================================================
# RESUMO DO DISPOSITIVO (leitura) - ordem = prioridade, primeiro não-nulo vence
# =============================================================================
IGD = "InternetGatewayDevice"
WAN_IP_1 = f"{IGD}.WANDevice.1.WANConnectionDevice.1.WANIPConnection.1"

SUMMARY_PATHS: Dict[str, Tuple[str, ...]] = {
    "serial_number": (
        "_deviceId._SerialNumber",
        f"{IGD}.DeviceInfo.SerialNumber",
        "Device.DeviceInfo.SerialNumber",
    ),
    "mac_address": (
        f"{IGD}.LANDevice.1.LANEthernetInterfaceConfig.1.MACAddress",
        f"{WAN_IP_1}.MACAddress",
        f"{IGD}.LANDevice.1.WLANConfiguration.1.BSSID",
        "Device.Ethernet.Interface.1.MACAddress",
        "_deviceId._MACAddress",
    ),
    "manufacturer": (
        "_deviceId._Manufacturer",
        f"{IGD}.DeviceInfo.Manufacturer",
        "Device.DeviceInfo.Manufacturer",
    ),
    "oui": (
        "_deviceId._OUI",
        f"{IGD}.DeviceInfo.ManufacturerOUI",
        "Device.DeviceInfo.ManufacturerOUI",
    ),
    "product_class": (
        "_deviceId._ProductClass",
        f"{IGD}.DeviceInfo.ProductClass",
        "Device.DeviceInfo.ProductClass",
    ),
    "hardware_version": (
        f"{IGD}.DeviceInfo.HardwareVersion",
        "Device.DeviceInfo.HardwareVersion",
    ),
    "software_version": (
        f"{IGD}.DeviceInfo.SoftwareVersion",
        "Device.DeviceInfo.SoftwareVersion",
    ),
    "connection_request_url": (
        f"{IGD}.ManagementServer.ConnectionRequestURL",
        "Device.ManagementServer.ConnectionRequestURL",
    ),
    "ip_address": (
        f"{WAN_IP_1}.ExternalIPAddress",
        "Device.IP.Interface.1.IPv4Address.1.IPAddress",
    ),
    "uptime": (
        f"{IGD}.DeviceInfo.UpTime",
        "Device.DeviceInfo.UpTime",
    ),
    "wifi_ssid": (
        f"{IGD}.LANDevice.1.WLANConfiguration.1.SSID",
        f"{IGD}.LANDevice.1.WLANConfiguration.2.SSID",
        f"{IGD}.LANDevice.1.WLANConfiguration.3.SSID",
        f"{IGD}.LANDevice.1.WLANConfiguration.4.SSID",
        "Device.WiFi.SSID.1.SSID",
        "Device.WiFi.SSID.2.SSID",
    ),
    "wifi_password": (
        f"{IGD}.LANDevice.1.WLANConfiguration.1.KeyPassphrase",
        f"{IGD}.LANDevice.1.WLANConfiguration.1.PreSharedKey.1.KeyPassphrase",
        f"{IGD}.LANDevice.1.WLANConfiguration.2.KeyPassphrase",
        f"{IGD}.LANDevice.1.WLANConfiguration.3.KeyPassphrase",
        f"{IGD}.LANDevice.1.WLANConfiguration.4.KeyPassphrase",
        "Device.WiFi.AccessPoint.1.Security.KeyPassphrase",
        "Device.WiFi.AccessPoint.2.Security.KeyPassphrase",
    ),
    # EPON (X_CT-COM) e GPON TR-181; VirtualParameters vêm de provisions do GenieACS
    "rx_power": (
        "VirtualParameters.RXPower",
        f"{IGD}.WANDevice.1.X_CT-COM_EponInterfaceConfig.RXPower",
        "Device.Optical.Interface.1.RxPower",
    ),
    "temperature": (
        "VirtualParameters.gettemp",
        f"{IGD}.WANDevice.1.X_CT-COM_EponInterfaceConfig.TransceiverTemperature",
        "VirtualParameters.Temperature",
        f"{IGD}.DeviceInfo.Temperature",
    ),
}


# =============================================================================
# WAN (TR-098) - conexões por WANConnectionDevice
# =============================================================================
WAN_CONNECTION_DEVICE = f"{IGD}.WANDevice.1.WANConnectionDevice.{{idx}}"
WAN_PPP_CONNECTION = f"{WAN_CONNECTION_DEVICE}.WANPPPConnection.1"
WAN_IP_CONNECTION = f"{WAN_CONNECTION_DEVICE}.WANIPConnection.1"
WAN_MAX_CONNECTION_DEVICES = 8

# Campos que identificam um objeto de conexão real
WAN_OBJECT_FIELDS: Tuple[str, ...] = ("_object", "ConnectionStatus", "Enable", "Name")

LAN_WLAN = f"{IGD}.LANDevice.1.WLANConfiguration.{{idx}}"
LAN_ETHERNET = f"{IGD}.LANDevice.1.LANEthernetInterfaceConfig.{{idx}}"
LAN_MAX_INTERFACES = 4
VLAN_FIELD = "X_CT-COM_VLAN"
