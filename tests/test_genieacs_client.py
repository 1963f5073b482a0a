from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Callable, List

import httpx
import pytest

from acs_bridge.services.genieacs_client import (
    DeviceNotFoundError,
    GenieACSClient,
    GenieACSError,
)

DEVICE_ID = "F86CE1-AN5506-FHTT00ABC123"


def _client(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> GenieACSClient:
    kwargs.setdefault("username", "")
    kwargs.setdefault("password", "")
    return GenieACSClient(
        base_url="http://genie.test:7557/",
        timeout=5,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


class _Recorder:
    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response


@pytest.mark.asyncio
async def test_get_device_returns_first_document():
    recorder = _Recorder(httpx.Response(200, json=[{"_id": DEVICE_ID}, {"_id": "outro"}]))

    device = await _client(recorder).get_device(DEVICE_ID)

    assert device == {"_id": DEVICE_ID}
    request = recorder.requests[0]
    assert request.method == "GET"
    assert request.url.path == "/devices/"
    assert json.loads(request.url.params["query"]) == {"_id": DEVICE_ID}


@pytest.mark.asyncio
async def test_get_device_not_found():
    client = _client(_Recorder(httpx.Response(200, json=[])))
    with pytest.raises(DeviceNotFoundError) as exc:
        await client.get_device(DEVICE_ID)
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_set_parameter_values_endpoint_and_body():
    recorder = _Recorder(httpx.Response(202, json={"_id": "task-1"}))
    writes = [("InternetGatewayDevice.LANDevice.1.WLANConfiguration.1.SSID", "Casa", "xsd:string")]

    result = await _client(recorder).set_parameter_values(DEVICE_ID, writes, timeout_ms=3000)

    assert result == {"success": True, "http_code": 202, "data": {"_id": "task-1"}}
    request = recorder.requests[0]
    assert request.method == "POST"
    assert request.url.raw_path == f"/devices/{DEVICE_ID}/tasks?timeout=3000&connection_request".encode()
    assert json.loads(request.content) == {
        "name": "setParameterValues",
        "parameterValues": [["InternetGatewayDevice.LANDevice.1.WLANConfiguration.1.SSID", "Casa", "xsd:string"]],
    }


def test_tasks_endpoint_quotes_device_id():
    assert GenieACSClient._tasks_endpoint("00259E-HG8145V5-4857%2D01") == "/devices/00259E-HG8145V5-4857%252D01/tasks"
    assert GenieACSClient._tasks_endpoint("a/b c") == "/devices/a%2Fb%20c/tasks"


@pytest.mark.asyncio
async def test_error_status_is_returned_not_raised():
    recorder = _Recorder(httpx.Response(500, text="erro interno"))
    result = await _client(recorder).set_parameter_values(DEVICE_ID, [("a", "b", "xsd:string")])
    assert result == {"success": False, "http_code": 500, "data": "erro interno"}


@pytest.mark.asyncio
async def test_transport_failure_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(GenieACSError):
        await _client(handler).reboot_device(DEVICE_ID)


@pytest.mark.asyncio
async def test_reboot_and_summon():
    recorder = _Recorder(httpx.Response(200, json={}))
    client = _client(recorder)

    await client.reboot_device(DEVICE_ID)
    await client.summon_device(DEVICE_ID)

    reboot, summon = recorder.requests
    assert json.loads(reboot.content) == {"name": "reboot"}
    assert reboot.url.raw_path == f"/devices/{DEVICE_ID}/tasks".encode()
    assert summon.url.raw_path == f"/devices/{DEVICE_ID}/tasks?connection_request".encode()


@pytest.mark.asyncio
async def test_test_connection():
    recorder = _Recorder(httpx.Response(200, json=[]))
    assert await _client(recorder).test_connection() is True
    assert recorder.requests[0].url.params["limit"] == "1"

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timeout", request=request)

    assert await _client(handler).test_connection() is False


@pytest.mark.asyncio
async def test_basic_auth_header():
    recorder = _Recorder(httpx.Response(200, json=[]))
    await _client(recorder, username="admin", password="admin").get_devices()
    assert recorder.requests[0].headers["authorization"].startswith("Basic ")


@pytest.mark.asyncio
async def test_device_stats():
    recent = datetime.now(timezone.utc).isoformat()
    recorder = _Recorder(httpx.Response(200, json=[
        {"_id": "a", "_lastInform": recent},
        {"_id": "b", "_lastInform": "2020-01-01T00:00:00Z"},
    ]))

    stats = await _client(recorder).device_stats()

    assert stats == {"total": 2, "online": 1, "offline": 1}


@pytest.mark.asyncio
async def test_get_devices_failure_raises():
    client = _client(_Recorder(httpx.Response(503)))
    with pytest.raises(GenieACSError) as exc:
        await client.get_devices()
    assert exc.value.status_code == 503
