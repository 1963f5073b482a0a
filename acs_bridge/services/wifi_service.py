# acs_bridge/services/wifi_service.py
"""
Serviço de configuração Wi-Fi via GenieACS.
Busca o snapshot, monta o lote setParameterValues e interpreta o HTTP code.
"""

from typing import Any, Dict, Optional
import logging

from acs_bridge.services.config_mutation import build_wifi_write
from acs_bridge.services.genieacs_client import (
    DeviceNotFoundError,
    GenieACSClient,
    GenieACSError,
)
from acs_bridge.services.snapshot_extractor import connection_request_reachable

log = logging.getLogger("acs-bridge.wifi")

NAT_ESTIMATED_WAIT = "30-60 minutes or manual reboot"


class WifiService:
    """Aplica SSID/senha/modo de segurança em um CPE."""

    def __init__(self, client: GenieACSClient):
        self.client = client

    async def _fetch_snapshot(self, device_id: str) -> Optional[Dict[str, Any]]:
        # Sem snapshot o lote é montado em modo otimista (todos os caminhos)
        try:
            return await self.client.get_device(device_id)
        except DeviceNotFoundError:
            log.warning(f"[WiFi] {device_id} não encontrado; usando caminhos padrão")
        except GenieACSError as e:
            log.warning(f"[WiFi] falha ao buscar snapshot de {device_id}: {e}")
        return None

    async def update_wifi(
        self,
        device_id: str,
        ssid: str,
        password: str = "",
        security_mode: str = "WPA2PSK",
        wlan_index: int = 1,
    ) -> Dict[str, Any]:
        """
        Returns:
            {"success": bool, "message": str, "data": {...}}

        200 -> aplicado imediatamente; 202 -> enfileirado até o próximo
        inform (com reason="nat" se a ConnectionRequestURL for privada).
        """
        snapshot = await self._fetch_snapshot(device_id)
        writes = build_wifi_write(
            ssid,
            password=password,
            wlan_index=wlan_index,
            security_mode=security_mode,
            snapshot=snapshot,
        )
        log.info(f"[WiFi] {device_id}: {len(writes)} parâmetros para WLAN {wlan_index}")

        result = await self.client.set_parameter_values(
            device_id, [w.to_list() for w in writes]
        )
        http_code = result["http_code"]
        # o lote carrega a senha em texto puro; só os dados da rede voltam ao cliente
        data: Dict[str, Any] = {
            "device_id": device_id,
            "wifi_ssid": ssid,
            "security_mode": security_mode,
            "wlan_index": wlan_index,
        }

        if not result["success"]:
            log.error(f"[WiFi] GenieACS recusou a task para {device_id}: HTTP {http_code}")
            data["http_code"] = http_code
            data["error"] = result["data"]
            return {
                "success": False,
                "message": f"Falha ao enviar configuração (HTTP {http_code})",
                "data": data,
            }

        if http_code == 200:
            data["response_time"] = "immediate"
            message = "Configuração Wi-Fi aplicada"
        elif http_code == 202:
            data["response_time"] = "delayed"
            message = "Configuração enfileirada; será aplicada no próximo inform"
            if snapshot is not None and not connection_request_reachable(snapshot):
                data["reason"] = "nat"
                data["estimated_wait"] = NAT_ESTIMATED_WAIT
                message = "CPE atrás de NAT; configuração será aplicada no próximo inform"
        else:
            data["http_code"] = http_code
            message = "Configuração enviada"

        return {"success": True, "message": message, "data": data}
