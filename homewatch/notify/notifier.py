"""
Homewatch — Alert Notifiers

Delivers alert titles/messages to a human-facing channel. The production
channel is a Pushover relay endpoint exposed by the Calendar GPT service;
when it is not configured alerts are written to the log instead of being
dropped.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

import aiohttp

from homewatch.sentinel.models import NotificationPriority
from homewatch.shared.errors import NotificationError

logger = logging.getLogger("homewatch.notify")


class Notifier(Protocol):
    async def notify(
        self, title: str, message: str, priority: int = NotificationPriority.NORMAL
    ) -> None: ...


class LogNotifier:
    """Writes alerts to the log. Used when no push channel is configured."""

    def __init__(self, reason: str = "no pushover config"):
        self.reason = reason

    async def notify(
        self, title: str, message: str, priority: int = NotificationPriority.NORMAL
    ) -> None:
        level = logging.WARNING if priority >= NotificationPriority.ELEVATED else logging.INFO
        logger.log(level, "[ALERT] (%s) %s: %s", self.reason, title, message)


class PushoverRelayNotifier:
    """POSTs ``{title, message, priority}`` to ``{base_url}/pushover/send``."""

    def __init__(self, base_url: str, api_key: str, timeout_seconds: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self._fallback = LogNotifier()

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    async def notify(
        self, title: str, message: str, priority: int = NotificationPriority.NORMAL
    ) -> None:
        if not self.configured:
            await self._fallback.notify(title, message, priority)
            return

        payload = {"title": title, "message": message, "priority": int(priority)}
        headers = {"X-API-Key": self.api_key, "Content-Type": "application/json"}
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(
                    f"{self.base_url}/pushover/send", json=payload, headers=headers
                ) as resp:
                    resp.raise_for_status()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise NotificationError(title, str(exc) or type(exc).__name__) from exc
        logger.info("[PUSHOVER] Sent: %s", title)


def build_notifier(base_url: str, api_key: str, timeout_seconds: float = 10.0) -> Notifier:
    """Pick the relay notifier when configured, otherwise log alerts."""
    if base_url and api_key:
        return PushoverRelayNotifier(base_url, api_key, timeout_seconds)
    logger.warning("Pushover relay not configured; alerts will only be logged")
    return LogNotifier()
