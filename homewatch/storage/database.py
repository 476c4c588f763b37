"""
Shared database handle.

Resolved lazily and cached; a failed resolution is retried on the next
cycle rather than at import or startup.
"""

from __future__ import annotations

import logging

import aiosqlite

from homewatch.shared.errors import DependencyUnavailableError
from homewatch.storage.schema import init_db

logger = logging.getLogger("homewatch.storage")


class Database:
    """Lazily-connected aiosqlite handle shared by probes and the snapshot store."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._conn: aiosqlite.Connection | None = None

    @property
    def connected(self) -> bool:
        return self._conn is not None

    async def get(self) -> aiosqlite.Connection:
        if self._conn is not None:
            return self._conn
        try:
            self._conn = await init_db(self.db_path)
        except Exception as exc:
            raise DependencyUnavailableError("database", str(exc)) from exc
        logger.info("Database connected: %s", self.db_path)
        return self._conn

    async def close(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
