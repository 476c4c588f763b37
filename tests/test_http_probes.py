"""
Test the HTTP probes against local aiohttp servers.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from aiohttp import test_utils, web

sys.path.insert(0, str(Path(__file__).parent.parent))

from homewatch.probes.external import ExternalProbes
from homewatch.probes.local import LocalProbes
from homewatch.sentinel.models import ServiceStatus
from homewatch.sentinel.runner import ProbeRunner
from homewatch.shared.errors import ProbeError


def _app(routes: dict[str, dict | int]) -> web.Application:
    """Serve each path with a fixed JSON body (dict) or bare status code (int)."""
    app = web.Application()
    for path, answer in routes.items():
        async def handler(request: web.Request, answer=answer) -> web.Response:
            if isinstance(answer, int):
                return web.Response(status=answer)
            return web.json_response(answer)

        app.router.add_get(path, handler)
    return app


@pytest.mark.asyncio
async def test_plex_identity_up():
    async with test_utils.TestServer(_app({"/identity": {"MediaContainer": {}}})) as server:
        probes = LocalProbes(proxmox_host="", plex_host=server.host, plex_port=server.port)
        result = await probes.check_plex()
    assert result.status is ServiceStatus.UP
    assert result.response_ms is not None


@pytest.mark.asyncio
async def test_dsm_error_status_is_down_through_runner():
    async with test_utils.TestServer(_app({"/": 500})) as server:
        probes = LocalProbes(proxmox_host="", dsm_host=server.host, dsm_port=server.port)
        result = await ProbeRunner().run("dsm", probes.check_dsm)
    assert result.status is ServiceStatus.DOWN
    assert "500" in result.error


@pytest.mark.asyncio
async def test_unreachable_host_is_down_through_runner():
    probes = LocalProbes(proxmox_host="", plex_host="127.0.0.1", plex_port=1)
    result = await ProbeRunner().run("plex", probes.check_plex)
    assert result.status is ServiceStatus.DOWN
    assert result.error


@pytest.mark.asyncio
async def test_calendar_gpt_health():
    async with test_utils.TestServer(_app({"/health": {"status": "ok"}})) as server:
        probes = ExternalProbes(calendar_gpt_url=str(server.make_url("/")))
        result = await probes.check_calendar_gpt()
    assert result.status is ServiceStatus.UP
    assert "note" not in result.details


@pytest.mark.asyncio
async def test_calendar_gpt_openapi_fallback():
    async with test_utils.TestServer(_app({"/openapi.json": {"openapi": "3.1.0"}})) as server:
        probes = ExternalProbes(calendar_gpt_url=str(server.make_url("/")))
        result = await probes.check_calendar_gpt()
    assert result.status is ServiceStatus.UP
    assert result.details["note"] == "health endpoint missing, used openapi fallback"


@pytest.mark.asyncio
async def test_calendar_gpt_both_endpoints_failing():
    async with test_utils.TestServer(_app({"/other": 200})) as server:
        probes = ExternalProbes(calendar_gpt_url=str(server.make_url("/")))
        result = await ProbeRunner().run("calendar_gpt", probes.check_calendar_gpt)
    assert result.status is ServiceStatus.DOWN
    assert "404" in result.error


@pytest.mark.asyncio
async def test_calendar_gpt_unconfigured():
    result = await ExternalProbes().check_calendar_gpt()
    assert result.status is ServiceStatus.DOWN
    assert result.reason == "no Calendar GPT URL"


@pytest.mark.asyncio
async def test_whatsapp_all_open_is_up():
    routes = {
        "/instance/connectionState/personal": {"instance": {"state": "open"}},
        "/instance/connectionState/business": {"state": "open"},
    }
    async with test_utils.TestServer(_app(routes)) as server:
        probes = ExternalProbes(
            evolution_url=str(server.make_url("/")),
            evolution_api_key="key",
            whatsapp_instances=["personal", "business"],
        )
        result = await probes.check_whatsapp()
    assert result.status is ServiceStatus.UP
    assert result.details["instances"] == {"personal": "open", "business": "open"}


@pytest.mark.asyncio
async def test_whatsapp_closed_or_failing_instance_is_degraded():
    routes = {
        "/instance/connectionState/personal": {"instance": {"state": "close"}},
        "/instance/connectionState/business": 500,
    }
    async with test_utils.TestServer(_app(routes)) as server:
        probes = ExternalProbes(
            evolution_url=str(server.make_url("/")),
            evolution_api_key="key",
            whatsapp_instances=["personal", "business"],
        )
        result = await probes.check_whatsapp()
    assert result.status is ServiceStatus.DEGRADED
    assert result.details["instances"] == {"personal": "close", "business": "error"}


@pytest.mark.asyncio
async def test_whatsapp_unconfigured():
    result = await ExternalProbes().check_whatsapp()
    assert result.status is ServiceStatus.DOWN
    assert result.reason == "no Evolution API config"


@pytest.mark.asyncio
async def test_home_assistant_up():
    async with test_utils.TestServer(_app({"/api/": {"message": "API running."}})) as server:
        probes = LocalProbes(proxmox_host="", ha_host=server.host, ha_port=server.port)
        result = await probes.check_home_assistant()
    assert result.status is ServiceStatus.UP
    assert result.details["ha_message"] == "API running."


@pytest.mark.asyncio
async def test_home_assistant_unexpected_payload_is_down():
    app = web.Application()

    async def handler(request: web.Request) -> web.Response:
        return web.json_response(["not", "an", "object"])

    app.router.add_get("/api/", handler)
    async with test_utils.TestServer(app) as server:
        probes = LocalProbes(proxmox_host="", ha_host=server.host, ha_port=server.port)
        with pytest.raises(ProbeError) as exc_info:
            await probes.check_home_assistant()
        result = await ProbeRunner().run("homeassistant", probes.check_home_assistant)

    assert exc_info.value.service == "homeassistant"
    assert result.status is ServiceStatus.DOWN
    assert result.error == "unexpected API response"
