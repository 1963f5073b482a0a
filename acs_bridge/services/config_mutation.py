# acs_bridge/services/config_mutation.py
"""
Montagem de lotes setParameterValues.

Cada operação lógica (ex.: configurar Wi-Fi) vira uma lista ordenada de
[path, value, type] pronta para ser enviada ao GenieACS. A ordem importa:
alguns CPEs aplicam os parâmetros sequencialmente.
"""

from typing import Any, Dict, List, Mapping, NamedTuple, Optional
import logging

from acs_bridge.services.path_catalog import (
    AUTH_MODE_PSK,
    OPEN_SECURITY_MODE,
    WIFI_AUTH_MODE,
    WIFI_ENCRYPTION,
    WIFI_PASSPHRASE,
    WIFI_SECURITY_MODE,
    WIFI_SSID,
    XSD_STRING,
    LogicalSetting,
    encode_security_mode,
    encryption_for,
)
from acs_bridge.services.path_resolver import resolve
from acs_bridge.services.snapshot_tree import detect_dialects

logger = logging.getLogger(__name__)


class ParameterWrite(NamedTuple):
    path: str
    value: str
    type: str = XSD_STRING

    def to_list(self) -> List[str]:
        return [self.path, self.value, self.type]


def _resolve_setting(
    setting: LogicalSetting,
    wlan_index: int,
    snapshot: Optional[Dict[str, Any]],
) -> List[str]:
    hints = detect_dialects(snapshot)
    return resolve(
        setting.candidate_paths(wlan_index),
        setting.fallback_paths(wlan_index, hints),
        snapshot,
    )


def build_wifi_write(
    ssid: str,
    password: str = "",
    wlan_index: int = 1,
    security_mode: str = "WPA2PSK",
    snapshot: Optional[Dict[str, Any]] = None,
) -> List[ParameterWrite]:
    """
    Gera o lote para configurar SSID, senha e modo de segurança.

    Ordem: SSID -> modo de segurança -> senha/autenticação/criptografia.

    - Rede protegida com senha: grava a senha em todos os caminhos
      resolvidos, PSKAuthentication e AES/TKIP.
    - Rede aberta ("None"): limpa a senha (string vazia) para o CPE não
      manter a chave antiga.
    - Rede protegida sem senha: nenhum parâmetro de senha é gerado.
    """
    password = password or ""
    writes: List[ParameterWrite] = []

    for path in _resolve_setting(WIFI_SSID, wlan_index, snapshot):
        writes.append(ParameterWrite(path, ssid))

    for path in _resolve_setting(WIFI_SECURITY_MODE, wlan_index, snapshot):
        value = encode_security_mode(path, security_mode)
        if value is not None:
            writes.append(ParameterWrite(path, value))

    passphrase_paths = _resolve_setting(WIFI_PASSPHRASE, wlan_index, snapshot)

    if security_mode != OPEN_SECURITY_MODE and password:
        for path in passphrase_paths:
            writes.append(ParameterWrite(path, password))

        for path in _resolve_setting(WIFI_AUTH_MODE, wlan_index, snapshot):
            writes.append(ParameterWrite(path, AUTH_MODE_PSK))

        encryption = encryption_for(security_mode)
        for path in _resolve_setting(WIFI_ENCRYPTION, wlan_index, snapshot):
            writes.append(ParameterWrite(path, encryption))

    elif security_mode == OPEN_SECURITY_MODE:
        for path in passphrase_paths:
            writes.append(ParameterWrite(path, ""))

    else:
        logger.debug(f"[WiFi] modo {security_mode} sem senha: parâmetros de senha ignorados")

    return writes


# =============================================================================
# SET GENÉRICO
# =============================================================================

def infer_xsd_type(value: Any) -> str:
    """Infere o tipo XSD baseado no valor."""
    if isinstance(value, bool):
        return "xsd:boolean"
    if isinstance(value, int):
        return "xsd:unsignedInt" if value >= 0 else "xsd:int"
    return XSD_STRING


def normalize_value(value: Any) -> str:
    """Converte o valor para o formato textual do TR-069."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def build_parameter_writes(values: Mapping[str, Any]) -> List[ParameterWrite]:
    """Gera o lote para um dict {path: value}, mantendo a ordem recebida."""
    return [
        ParameterWrite(path, normalize_value(value), infer_xsd_type(value))
        for path, value in values.items()
    ]
