# acs_bridge/routers/devices_router.py
# Router de dispositivos: resumo normalizado, parâmetros, Wi-Fi e tasks

from typing import Any, Dict, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field, field_validator, model_validator
from sqlalchemy.orm import Session

from acs_bridge.database import get_db
from acs_bridge.services.config_mutation import build_parameter_writes
from acs_bridge.services.genieacs_client import (
    DeviceNotFoundError,
    GenieACSClient,
    GenieACSError,
    get_genieacs_client,
)
from acs_bridge.services.metadata_service import find_device_metadata
from acs_bridge.services.path_catalog import OPEN_SECURITY_MODE, SECURITY_MODES
from acs_bridge.services.snapshot_extractor import extract
from acs_bridge.services.snapshot_tree import exists, get_value
from acs_bridge.services.wifi_service import WifiService
from acs_bridge.settings import settings

router = APIRouter(prefix="/api/devices", tags=["Dispositivos"])
genieacs_router = APIRouter(prefix="/api/genieacs", tags=["GenieACS"])

log = logging.getLogger("acs-bridge.devices")


# =============================================================================
# MODELOS PYDANTIC
# =============================================================================

class UpdateWifiRequest(BaseModel):
    device_id: str = Field(..., min_length=1)
    wifi_ssid: str
    wifi_password: Optional[str] = ""
    security_mode: str = "WPA2PSK"
    wlan_index: int = Field(1, ge=1)

    @field_validator("wifi_ssid")
    @classmethod
    def validate_ssid(cls, v: str) -> str:
        if not 1 <= len(v) <= 32:
            raise ValueError("SSID deve ter entre 1 e 32 caracteres")
        return v

    @field_validator("security_mode")
    @classmethod
    def validate_security_mode(cls, v: str) -> str:
        if v not in SECURITY_MODES:
            raise ValueError(f"Modo de segurança inválido. Use: {', '.join(SECURITY_MODES)}")
        return v

    @model_validator(mode="after")
    def validate_password(self) -> "UpdateWifiRequest":
        # Rede aberta dispensa senha
        if self.security_mode == OPEN_SECURITY_MODE:
            return self
        password = self.wifi_password or ""
        if not 8 <= len(password) <= 63:
            raise ValueError("Senha Wi-Fi deve ter entre 8 e 63 caracteres")
        return self


class SetParametersRequest(BaseModel):
    parameters: Dict[str, Any]
    timeout_ms: Optional[int] = None

    @field_validator("parameters")
    @classmethod
    def validate_parameters(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        if not v:
            raise ValueError("Informe ao menos um parâmetro")
        return v


def _task_response(result: Dict[str, Any], action: str) -> Dict[str, Any]:
    if not result["success"]:
        raise HTTPException(
            status_code=502,
            detail=f"GenieACS recusou {action} (HTTP {result['http_code']})",
        )
    return {
        "success": True,
        "http_code": result["http_code"],
        "queued": result["http_code"] == 202,
        "data": result["data"],
    }


# =============================================================================
# CONSULTAS
# =============================================================================

@router.get("/stats", summary="Totais de dispositivos online/offline")
async def device_stats(client: GenieACSClient = Depends(get_genieacs_client)):
    try:
        stats = await client.device_stats()
    except GenieACSError as e:
        log.error(f"[Devices] falha ao calcular estatísticas: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    return {"success": True, "data": stats}


@router.get("/{device_id}/summary", summary="Resumo normalizado do dispositivo")
async def device_summary(
    device_id: str,
    client: GenieACSClient = Depends(get_genieacs_client),
):
    """
    Resumo plano (TR-098 ou TR-181): identificação, status, Wi-Fi,
    potência óptica e conexões WAN. Campos ausentes vêm como "N/A".
    """
    try:
        snapshot = await client.get_device(device_id)
    except DeviceNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except GenieACSError as e:
        raise HTTPException(status_code=502, detail=str(e))

    summary = extract(snapshot, online_threshold=settings.ONLINE_THRESHOLD_SECONDS)
    return summary.to_dict()


@router.get("/{device_id}/parameters", summary="Ler um parâmetro do snapshot")
async def get_parameter(
    device_id: str,
    path: str = Query(..., description="Caminho TR-069 completo"),
    client: GenieACSClient = Depends(get_genieacs_client),
):
    try:
        snapshot = await client.get_device(device_id)
    except DeviceNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except GenieACSError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return {
        "path": path,
        "exists": exists(snapshot, path),
        "value": get_value(snapshot, path),
    }


# =============================================================================
# ESCRITA
# =============================================================================

@router.post("/{device_id}/parameters", summary="setParameterValues genérico")
async def set_parameters(
    device_id: str,
    request: SetParametersRequest,
    client: GenieACSClient = Depends(get_genieacs_client),
):
    writes = build_parameter_writes(request.parameters)
    try:
        result = await client.set_parameter_values(
            device_id, [w.to_list() for w in writes], timeout_ms=request.timeout_ms
        )
    except GenieACSError as e:
        raise HTTPException(status_code=502, detail=str(e))

    response = _task_response(result, "setParameterValues")
    response["parameters"] = [w.to_list() for w in writes]
    return response


@router.post("/update-wifi", summary="Configurar SSID, senha e segurança do Wi-Fi")
async def update_wifi(
    request: UpdateWifiRequest,
    client: GenieACSClient = Depends(get_genieacs_client),
    db: Session = Depends(get_db),
):
    try:
        # metadados antes da task setParameterValues
        matched_device = find_device_metadata(db, request.device_id)
        result = await WifiService(client).update_wifi(
            request.device_id,
            request.wifi_ssid,
            password=request.wifi_password or "",
            security_mode=request.security_mode,
            wlan_index=request.wlan_index,
        )
    except GenieACSError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        log.exception(f"[Devices] erro inesperado em update-wifi {request.device_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Erro ao configurar Wi-Fi: {str(e)}")

    result["data"]["matched_device"] = matched_device
    return result


@router.post("/{device_id}/reboot", summary="Reiniciar dispositivo")
async def reboot_device(
    device_id: str,
    client: GenieACSClient = Depends(get_genieacs_client),
):
    try:
        result = await client.reboot_device(device_id)
    except GenieACSError as e:
        raise HTTPException(status_code=502, detail=str(e))
    log.info(f"[Devices] reboot solicitado para {device_id}")
    return _task_response(result, "reboot")


@router.post("/{device_id}/summon", summary="Connection request")
async def summon_device(
    device_id: str,
    client: GenieACSClient = Depends(get_genieacs_client),
):
    try:
        result = await client.summon_device(device_id)
    except GenieACSError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return _task_response(result, "connection request")


# =============================================================================
# GENIEACS
# =============================================================================

@genieacs_router.get("/ping", summary="Testar conexão com o GenieACS")
async def ping_genieacs(client: GenieACSClient = Depends(get_genieacs_client)):
    ok = await client.test_connection()
    return {"success": ok, "genieacs": client.base_url}
