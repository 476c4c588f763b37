"""
Homewatch Probes — External APIs

Credentialed checks against hosted services: the Evolution API bridging
the WhatsApp instances, and the Calendar GPT service (which also relays
our push notifications).
"""

from __future__ import annotations

import asyncio
import logging
import time

import aiohttp

from homewatch.probes.base import elapsed_ms
from homewatch.sentinel.models import ServiceResult, ServiceStatus

logger = logging.getLogger("homewatch.probes.external")


class ExternalProbes:
    def __init__(
        self,
        evolution_url: str = "",
        evolution_api_key: str = "",
        whatsapp_instances: list[str] | None = None,
        calendar_gpt_url: str = "",
        calendar_gpt_api_key: str = "",
    ):
        self.evolution_url = evolution_url.rstrip("/")
        self.evolution_api_key = evolution_api_key
        self.whatsapp_instances = whatsapp_instances or ["personal-whatsapp", "business-whatsapp"]
        self.calendar_gpt_url = calendar_gpt_url.rstrip("/")
        self.calendar_gpt_api_key = calendar_gpt_api_key

    async def check_whatsapp(self) -> ServiceResult:
        """
        Connection state of every WhatsApp instance.

        ``up`` when all are open, ``degraded`` otherwise. A failed instance
        lookup marks that instance as ``error`` instead of failing the probe.
        """
        if not (self.evolution_url and self.evolution_api_key):
            return ServiceResult.down(reason="no Evolution API config")

        headers = {"apikey": self.evolution_api_key}
        timeout = aiohttp.ClientTimeout(total=8)
        instances: dict[str, str] = {}
        async with aiohttp.ClientSession(timeout=timeout, headers=headers) as session:
            for instance in self.whatsapp_instances:
                url = f"{self.evolution_url}/instance/connectionState/{instance}"
                try:
                    async with session.get(url) as resp:
                        resp.raise_for_status()
                        data = await resp.json(content_type=None)
                    state = (data.get("instance") or {}).get("state") or data.get("state") or "unknown"
                except (aiohttp.ClientError, asyncio.TimeoutError, ValueError, AttributeError) as exc:
                    logger.debug("WhatsApp instance %s lookup failed: %s", instance, exc)
                    state = "error"
                instances[instance] = state

        all_open = all(state == "open" for state in instances.values())
        return ServiceResult(
            status=ServiceStatus.UP if all_open else ServiceStatus.DEGRADED,
            details={"instances": instances},
        )

    async def check_calendar_gpt(self) -> ServiceResult:
        """``/health``, falling back to ``/openapi.json`` on deployments without it."""
        if not self.calendar_gpt_url:
            return ServiceResult.down(reason="no Calendar GPT URL")

        start = time.monotonic()
        headers = {"X-API-Key": self.calendar_gpt_api_key} if self.calendar_gpt_api_key else {}
        timeout = aiohttp.ClientTimeout(total=8)
        async with aiohttp.ClientSession(timeout=timeout, headers=headers) as session:
            try:
                await self._get(session, f"{self.calendar_gpt_url}/health")
                return ServiceResult.up(response_ms=elapsed_ms(start))
            except (aiohttp.ClientError, asyncio.TimeoutError) as health_exc:
                try:
                    await self._get(session, f"{self.calendar_gpt_url}/openapi.json")
                except (aiohttp.ClientError, asyncio.TimeoutError):
                    raise health_exc from None
                return ServiceResult.up(
                    response_ms=elapsed_ms(start),
                    note="health endpoint missing, used openapi fallback",
                )

    @staticmethod
    async def _get(session: aiohttp.ClientSession, url: str) -> None:
        async with session.get(url) as resp:
            resp.raise_for_status()
