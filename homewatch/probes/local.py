"""
Homewatch Probes — Local Infrastructure

Reachability checks for the LAN hosts: hypervisor, home automation,
media server, NAS and the internet uplink. Each check makes one attempt
with its own aiohttp timeout and raises on failure; the probe runner turns
the exception into a ``down`` result.
"""

from __future__ import annotations

import asyncio
import logging
import socket
import time
from typing import Any

import aiohttp

from homewatch.probes.base import elapsed_ms
from homewatch.sentinel.models import ServiceResult
from homewatch.shared.errors import ProbeError

logger = logging.getLogger("homewatch.probes.local")


class LocalProbes:
    """Checks for hosts on the home network."""

    def __init__(
        self,
        proxmox_host: str,
        proxmox_node: str = "pve",
        proxmox_token_id: str = "",
        proxmox_token_secret: str = "",
        ha_host: str = "",
        ha_token: str = "",
        ha_port: int = 8123,
        plex_host: str = "",
        plex_port: int = 32400,
        dsm_host: str = "",
        dsm_port: int = 5000,
        internet_dns_name: str = "google.com",
        internet_url: str = "https://www.google.com/generate_204",
    ):
        self.proxmox_host = proxmox_host
        self.proxmox_node = proxmox_node
        self.proxmox_token_id = proxmox_token_id
        self.proxmox_token_secret = proxmox_token_secret
        self.ha_host = ha_host
        self.ha_token = ha_token
        self.ha_port = ha_port
        self.plex_host = plex_host
        self.plex_port = plex_port
        self.dsm_host = dsm_host
        self.dsm_port = dsm_port
        self.internet_dns_name = internet_dns_name
        self.internet_url = internet_url

    @property
    def proxmox_base(self) -> str:
        return f"https://{self.proxmox_host}:8006/api2/json"

    async def check_proxmox(self) -> ServiceResult:
        """Node load and VM list via the API token, or a bare UI reachability check."""
        if not (self.proxmox_token_id and self.proxmox_token_secret):
            return await self._check_proxmox_ui()

        start = time.monotonic()
        headers = {
            "Authorization": f"PVEAPIToken={self.proxmox_token_id}={self.proxmox_token_secret}"
        }
        timeout = aiohttp.ClientTimeout(total=8)
        async with aiohttp.ClientSession(timeout=timeout, headers=headers) as session:
            nodes, vms = await asyncio.gather(
                self._get_json(session, f"{self.proxmox_base}/nodes"),
                self._get_json_or_none(
                    session, f"{self.proxmox_base}/nodes/{self.proxmox_node}/qemu"
                ),
            )

        node_list = nodes.get("data") if isinstance(nodes, dict) else None
        if not node_list:
            raise ProbeError("proxmox", "no nodes in API response")
        node = node_list[0]
        details: dict[str, Any] = {
            "cpu": round((node.get("cpu") or 0) * 100),
            "ram_pct": round((node.get("mem") or 0) / (node.get("maxmem") or 1) * 100),
        }
        if vms and vms.get("data"):
            details["vms"] = [{"name": v.get("name"), "status": v.get("status")} for v in vms["data"]]
        return ServiceResult.up(response_ms=elapsed_ms(start), **details)

    async def _check_proxmox_ui(self) -> ServiceResult:
        start = time.monotonic()
        timeout = aiohttp.ClientTimeout(total=5)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(self.proxmox_base, ssl=False) as resp:
                if resp.status == 401:
                    # The API refuses us without a token, which still proves it is serving.
                    return ServiceResult.up(
                        response_ms=elapsed_ms(start),
                        note="no API token - 401 means server responding",
                    )
                resp.raise_for_status()
        return ServiceResult.up(response_ms=elapsed_ms(start), note="no API token - UI check only")

    async def check_home_assistant(self) -> ServiceResult:
        start = time.monotonic()
        headers = {"Authorization": f"Bearer {self.ha_token}"} if self.ha_token else {}
        timeout = aiohttp.ClientTimeout(total=5)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(
                f"http://{self.ha_host}:{self.ha_port}/api/", headers=headers
            ) as resp:
                resp.raise_for_status()
                data = await resp.json(content_type=None)
        if not isinstance(data, dict):
            raise ProbeError("homeassistant", "unexpected API response")
        return ServiceResult.up(response_ms=elapsed_ms(start), ha_message=data.get("message"))

    async def check_plex(self) -> ServiceResult:
        start = time.monotonic()
        timeout = aiohttp.ClientTimeout(total=5)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(f"http://{self.plex_host}:{self.plex_port}/identity") as resp:
                resp.raise_for_status()
        return ServiceResult.up(response_ms=elapsed_ms(start))

    async def check_dsm(self) -> ServiceResult:
        start = time.monotonic()
        timeout = aiohttp.ClientTimeout(total=5)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(
                f"http://{self.dsm_host}:{self.dsm_port}", max_redirects=3
            ) as resp:
                resp.raise_for_status()
        return ServiceResult.up(response_ms=elapsed_ms(start))

    async def check_internet(self) -> ServiceResult:
        """DNS resolution followed by a tiny HTTPS fetch."""
        start = time.monotonic()
        loop = asyncio.get_running_loop()
        await loop.getaddrinfo(self.internet_dns_name, 443, type=socket.SOCK_STREAM)
        timeout = aiohttp.ClientTimeout(total=5)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(self.internet_url) as resp:
                resp.raise_for_status()
        return ServiceResult.up(response_ms=elapsed_ms(start))

    @staticmethod
    async def _get_json(session: aiohttp.ClientSession, url: str) -> dict[str, Any]:
        # Self-signed certificate on the hypervisor.
        async with session.get(url, ssl=False) as resp:
            resp.raise_for_status()
            return await resp.json(content_type=None)

    @classmethod
    async def _get_json_or_none(
        cls, session: aiohttp.ClientSession, url: str
    ) -> dict[str, Any] | None:
        try:
            return await cls._get_json(session, url)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.debug("Optional Proxmox request failed (%s): %s", url, exc)
            return None
