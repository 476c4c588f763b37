"""
Homewatch Probes — Coordination Heartbeats

Checks the agents that publish heartbeat documents into the shared
database (``coordination`` table) and the database itself. These probes
receive the database handle resolved once per cycle by the orchestrator.
"""

from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone
from typing import Any

import aiosqlite

from homewatch.probes.base import elapsed_ms
from homewatch.sentinel.models import ServiceResult, ServiceStatus

QUEEN_DOC_ID = "queen_jarvis_active"
HIVE_MONITOR_DOC_ID = "hive_monitor_active"
WORKER_DOC_TYPE = "borg_worker_active"


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 heartbeat; naive values are taken as UTC."""
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class HiveProbes:
    """Heartbeat freshness checks against the coordination table."""

    def __init__(self, max_heartbeat_age_minutes: float = 10.0):
        self.max_heartbeat_age_minutes = max_heartbeat_age_minutes

    async def check_queen(self, db: aiosqlite.Connection) -> ServiceResult:
        doc = await self._fetch_doc(db, QUEEN_DOC_ID)
        if doc is None:
            return ServiceResult.down(reason="no queen doc found")
        result = self._heartbeat_result(doc)
        result.details["queen_status"] = doc["status"]
        return result

    async def check_hive_monitor(self, db: aiosqlite.Connection) -> ServiceResult:
        doc = await self._fetch_doc(db, HIVE_MONITOR_DOC_ID)
        if doc is None:
            return ServiceResult.down(reason="no hive monitor doc found")
        return self._heartbeat_result(doc)

    async def check_workers(self, db: aiosqlite.Connection) -> ServiceResult:
        """Up while at least one active worker has a fresh heartbeat."""
        cutoff = datetime.now(timezone.utc) - timedelta(minutes=self.max_heartbeat_age_minutes)
        async with db.execute(
            "SELECT id, task, last_heartbeat FROM coordination WHERE type = ? AND status = 'active'",
            (WORKER_DOC_TYPE,),
        ) as cur:
            rows = await cur.fetchall()

        workers = []
        for row in rows:
            heartbeat = parse_timestamp(row["last_heartbeat"])
            if heartbeat is not None and heartbeat >= cutoff:
                workers.append({"id": row["id"], "task": row["task"]})

        return ServiceResult(
            status=ServiceStatus.UP if workers else ServiceStatus.DOWN,
            details={"count": len(workers), "workers": workers},
        )

    async def check_database(self, db: aiosqlite.Connection) -> ServiceResult:
        start = time.monotonic()
        async with db.execute("SELECT 1") as cur:
            await cur.fetchone()
        return ServiceResult.up(response_ms=elapsed_ms(start))

    @staticmethod
    async def _fetch_doc(db: aiosqlite.Connection, doc_id: str) -> aiosqlite.Row | None:
        async with db.execute(
            "SELECT id, status, last_heartbeat, timestamp FROM coordination WHERE id = ?",
            (doc_id,),
        ) as cur:
            return await cur.fetchone()

    def _heartbeat_result(self, doc: aiosqlite.Row) -> ServiceResult:
        heartbeat = parse_timestamp(doc["last_heartbeat"] or doc["timestamp"])
        if heartbeat is None:
            return ServiceResult.down(reason="no heartbeat timestamp")

        age_min = (datetime.now(timezone.utc) - heartbeat).total_seconds() / 60
        fresh = age_min < self.max_heartbeat_age_minutes
        return ServiceResult(
            status=ServiceStatus.UP if fresh else ServiceStatus.DOWN,
            details={"heartbeat_age_min": round(age_min)},
        )
