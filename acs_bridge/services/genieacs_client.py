# acs_bridge/services/genieacs_client.py
"""
Cliente da NBI do GenieACS (porta 7557).

Cada chamada é um request/response isolado, sem retry. Erros de transporte
viram GenieACSError; respostas HTTP (qualquer status) são devolvidas como
{"success": bool, "http_code": int, "data": json | None} para que o
chamador interprete 200 (aplicado), 202 (enfileirado) etc.
"""

from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote
import json
import logging

import httpx

from acs_bridge.services.snapshot_extractor import fleet_stats
from acs_bridge.settings import settings

log = logging.getLogger("acs-bridge.genieacs")


class GenieACSError(Exception):
    """Falha ao falar com o GenieACS."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DeviceNotFoundError(GenieACSError):
    """Dispositivo não existe no GenieACS."""


class GenieACSClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.GENIE_NBI).rstrip("/")
        self.username = username if username is not None else settings.GENIE_NBI_USERNAME
        self.password = password if password is not None else settings.GENIE_NBI_PASSWORD
        self.timeout = timeout or settings.GENIE_TIMEOUT
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        auth = None
        if self.username and self.password:
            auth = httpx.BasicAuth(self.username, self.password)
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            auth=auth,
            transport=self._transport,
        )

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        try:
            async with self._client() as client:
                res = await client.request(method, endpoint, params=params, json=payload)
        except httpx.HTTPError as e:
            log.error(f"[GenieACS] {method} {endpoint} falhou: {e}")
            raise GenieACSError(f"Erro ao conectar no GenieACS: {e}") from e

        data = None
        if res.content:
            try:
                data = res.json()
            except ValueError:
                data = res.text

        log.info(f"[GenieACS] {method} {endpoint} -> {res.status_code}")
        return {
            "success": 200 <= res.status_code < 300,
            "http_code": res.status_code,
            "data": data,
        }

    # =========================================================================
    # CONSULTAS
    # =========================================================================

    async def test_connection(self) -> bool:
        try:
            result = await self._request("GET", "/devices", params={"limit": 1})
        except GenieACSError:
            return False
        return result["success"]

    async def get_devices(self, query: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        params = {"query": json.dumps(query)} if query else None
        result = await self._request("GET", "/devices/", params=params)
        if not result["success"]:
            raise GenieACSError(
                f"Falha ao listar dispositivos (HTTP {result['http_code']})",
                status_code=result["http_code"],
            )
        return result["data"] if isinstance(result["data"], list) else []

    async def get_device(self, device_id: str) -> Dict[str, Any]:
        """Primeiro documento com _id == device_id."""
        result = await self._request(
            "GET", "/devices/", params={"query": json.dumps({"_id": device_id})}
        )
        data = result["data"]
        if result["success"] and isinstance(data, list) and data:
            return data[0]
        raise DeviceNotFoundError(f"Dispositivo {device_id} não encontrado", status_code=404)

    async def device_stats(self) -> Dict[str, int]:
        """Total/online/offline pela regra do _lastInform."""
        devices = await self.get_devices()
        return fleet_stats(devices, online_threshold=settings.ONLINE_THRESHOLD_SECONDS)

    # =========================================================================
    # TASKS
    # =========================================================================

    @staticmethod
    def _tasks_endpoint(device_id: str) -> str:
        # _id do GenieACS contém caracteres como '-' e '%'
        return f"/devices/{quote(device_id, safe='')}/tasks"

    async def execute_task(
        self,
        device_id: str,
        task_name: str,
        parameter_values: Optional[Sequence[Sequence[str]]] = None,
    ) -> Dict[str, Any]:
        task: Dict[str, Any] = {"name": task_name}
        if parameter_values:
            task["parameterValues"] = [list(p) for p in parameter_values]
        return await self._request("POST", self._tasks_endpoint(device_id), payload=task)

    async def set_parameter_values(
        self,
        device_id: str,
        parameter_values: Sequence[Sequence[str]],
        timeout_ms: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Envia setParameterValues com connection_request.

        200 = aplicado na hora; 202 = enfileirado (CPE não respondeu ao
        connection request); outros 2xx = aceito sem confirmação.
        """
        timeout_ms = timeout_ms or settings.GENIE_TASK_TIMEOUT_MS
        endpoint = f"{self._tasks_endpoint(device_id)}?timeout={timeout_ms}&connection_request"
        task = {
            "name": "setParameterValues",
            "parameterValues": [list(p) for p in parameter_values],
        }
        log.info(f"[GenieACS] setParameterValues {device_id}: {len(task['parameterValues'])} parâmetros")
        return await self._request("POST", endpoint, payload=task)

    async def reboot_device(self, device_id: str) -> Dict[str, Any]:
        return await self.execute_task(device_id, "reboot")

    async def summon_device(self, device_id: str) -> Dict[str, Any]:
        """Connection request sem task (força o CPE a contatar o ACS)."""
        return await self._request("POST", f"{self._tasks_endpoint(device_id)}?connection_request")


# Singleton
genieacs_client = GenieACSClient()


def get_genieacs_client() -> GenieACSClient:
    """Dependency FastAPI (permite override nos testes)."""
    return genieacs_client
