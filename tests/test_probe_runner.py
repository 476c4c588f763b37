"""
Test ProbeRunner — failure isolation and result coercion.
"""

from __future__ import annotations

import asyncio
import sys
import time
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from homewatch.sentinel.models import ServiceResult, ServiceStatus
from homewatch.sentinel.runner import ProbeRunner, describe_error


@pytest.mark.asyncio
async def test_async_probe_result_passes_through():
    async def probe():
        return ServiceResult.up(response_ms=3.0)

    result = await ProbeRunner().run("svc", probe)
    assert result.status is ServiceStatus.UP
    assert result.response_ms == 3.0


@pytest.mark.asyncio
async def test_mapping_result_is_coerced():
    async def probe():
        return {"status": "degraded", "instances": {"a": "open", "b": "close"}}

    result = await ProbeRunner().run("svc", probe)
    assert result.status is ServiceStatus.DEGRADED
    assert result.details == {"instances": {"a": "open", "b": "close"}}


@pytest.mark.asyncio
async def test_raising_probe_becomes_down_with_error():
    async def probe():
        raise ConnectionError("connection refused")

    result = await ProbeRunner().run("svc", probe)
    assert result.status is ServiceStatus.DOWN
    assert result.error == "connection refused"


@pytest.mark.asyncio
async def test_error_without_message_uses_exception_name():
    async def probe():
        raise asyncio.TimeoutError()

    result = await ProbeRunner().run("svc", probe)
    assert result.status is ServiceStatus.DOWN
    assert result.error == "TimeoutError"


@pytest.mark.asyncio
async def test_sync_probe_runs_off_the_event_loop():
    def blocking_probe():
        time.sleep(0.2)
        return {"status": "up"}

    async def fast_probe():
        return {"status": "up"}

    runner = ProbeRunner()
    start = time.monotonic()
    slow_task = asyncio.create_task(runner.run("slow", blocking_probe))
    fast = await runner.run("fast", fast_probe)
    fast_elapsed = time.monotonic() - start
    slow = await slow_task

    assert fast.status is ServiceStatus.UP
    assert slow.status is ServiceStatus.UP
    assert fast_elapsed < 0.15


@pytest.mark.asyncio
async def test_sync_probe_raising_is_isolated():
    def probe():
        raise ValueError("bad config")

    result = await ProbeRunner().run("svc", probe)
    assert result.status is ServiceStatus.DOWN
    assert result.error == "bad config"


@pytest.mark.asyncio
async def test_invalid_status_becomes_down():
    async def probe():
        return {"status": "sideways"}

    result = await ProbeRunner().run("svc", probe)
    assert result.status is ServiceStatus.DOWN
    assert "sideways" in result.error


@pytest.mark.asyncio
async def test_missing_status_becomes_down():
    async def probe():
        return {"reason": "forgot status"}

    result = await ProbeRunner().run("svc", probe)
    assert result.status is ServiceStatus.DOWN
    assert result.reason == "forgot status"
    assert result.error


@pytest.mark.asyncio
async def test_unexpected_return_type_becomes_down():
    async def probe():
        return 42

    result = await ProbeRunner().run("svc", probe)
    assert result.status is ServiceStatus.DOWN
    assert "int" in result.error


@pytest.mark.asyncio
async def test_probe_arguments_are_forwarded():
    async def probe(handle):
        return ServiceResult.up(handle=handle)

    result = await ProbeRunner().run("svc", probe, "db-handle")
    assert result.details == {"handle": "db-handle"}


@pytest.mark.asyncio
async def test_no_timeout_by_default():
    assert ProbeRunner().timeout_seconds is None
    assert ProbeRunner(timeout_seconds=0).timeout_seconds is None


@pytest.mark.asyncio
async def test_orchestrator_timeout_marks_probe_down():
    async def hanging_probe():
        await asyncio.sleep(5)
        return {"status": "up"}

    result = await ProbeRunner(timeout_seconds=0.05).run("svc", hanging_probe)
    assert result.status is ServiceStatus.DOWN
    assert "timed out" in result.error


def test_describe_error():
    assert describe_error(RuntimeError("boom")) == "boom"
    assert describe_error(RuntimeError()) == "RuntimeError"


@pytest.mark.asyncio
async def test_non_numeric_response_time_becomes_down():
    async def probe():
        return {"status": "up", "response_ms": "n/a"}

    result = await ProbeRunner().run("svc", probe)
    assert result.status is ServiceStatus.DOWN
    assert result.error.startswith("invalid probe result:")


@pytest.mark.asyncio
async def test_non_mapping_details_becomes_down():
    async def probe():
        return {"status": "down", "details": "timeout"}

    result = await ProbeRunner().run("svc", probe)
    assert result.status is ServiceStatus.DOWN
    assert result.error.startswith("invalid probe result:")
