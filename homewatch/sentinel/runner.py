"""
Homewatch Sentinel — Probe Runner

Executes one probe with failure isolation. Whatever the probe raises is
turned into a ``down`` result so a single broken service can never abort
a cycle for the others.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Mapping
from typing import Any

from homewatch.probes.base import ProbeFn
from homewatch.sentinel.models import ServiceResult, ServiceStatus
from homewatch.shared.errors import ProbeTimeoutError

logger = logging.getLogger("homewatch.runner")


def describe_error(exc: BaseException) -> str:
    """Non-empty diagnostic text for an exception."""
    text = str(exc).strip()
    return text or type(exc).__name__


class ProbeRunner:
    """
    Runs probes exactly once per call.

    Coroutine probes are awaited; plain functions run in a worker thread so
    a blocking probe does not hold up its siblings. There are no retries:
    the polling interval is the retry cadence.

    ``timeout_seconds`` adds an orchestrator-level deadline on top of the
    probe's own I/O timeouts. It is ``None`` (off) by default.
    """

    def __init__(self, timeout_seconds: float | None = None):
        self.timeout_seconds = timeout_seconds if timeout_seconds and timeout_seconds > 0 else None

    async def run(self, name: str, probe: ProbeFn, *args: Any) -> ServiceResult:
        try:
            if self.timeout_seconds is None:
                outcome = await self._invoke(probe, *args)
            else:
                try:
                    outcome = await asyncio.wait_for(
                        self._invoke(probe, *args), timeout=self.timeout_seconds
                    )
                except asyncio.TimeoutError:
                    raise ProbeTimeoutError(name, self.timeout_seconds) from None
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("Probe %s failed: %s", name, describe_error(exc))
            return ServiceResult(status=ServiceStatus.DOWN, error=describe_error(exc))

        try:
            return self._coerce(name, outcome)
        except (TypeError, ValueError) as exc:
            logger.warning("Probe %s returned an invalid result: %s", name, describe_error(exc))
            return ServiceResult(
                status=ServiceStatus.DOWN,
                error=f"invalid probe result: {describe_error(exc)}",
            )

    @staticmethod
    async def _invoke(probe: ProbeFn, *args: Any) -> Any:
        if inspect.iscoroutinefunction(probe):
            return await probe(*args)
        result = await asyncio.to_thread(probe, *args)
        if inspect.isawaitable(result):
            result = await result
        return result

    @staticmethod
    def _coerce(name: str, outcome: Any) -> ServiceResult:
        if isinstance(outcome, ServiceResult):
            return outcome
        if isinstance(outcome, Mapping):
            return ServiceResult.from_dict(outcome)
        logger.warning("Probe %s returned unexpected %s", name, type(outcome).__name__)
        return ServiceResult(
            status=ServiceStatus.DOWN,
            error=f"unexpected probe result: {type(outcome).__name__}",
        )
