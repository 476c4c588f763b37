"""
Snapshot store.

Upserts the latest aggregate snapshot as one named document. The read path
belongs to whoever consumes the database; the sentinel only writes.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Protocol

from homewatch.sentinel.models import AggregateSnapshot
from homewatch.shared.errors import PersistenceError
from homewatch.storage.database import Database

logger = logging.getLogger("homewatch.storage")

UPSERT_SQL = """
INSERT INTO system_documents (id, payload, updated_at)
VALUES (?, ?, ?)
ON CONFLICT(id) DO UPDATE SET payload = excluded.payload, updated_at = excluded.updated_at
"""


class SnapshotStore(Protocol):
    async def save(self, snapshot: AggregateSnapshot) -> None: ...


class SqliteSnapshotStore:
    """Writes snapshots into ``system_documents`` under a fixed id."""

    def __init__(self, database: Database, document_id: str = "homewatch_latest"):
        self.database = database
        self.document_id = document_id

    async def save(self, snapshot: AggregateSnapshot) -> None:
        payload = json.dumps(snapshot.to_dict(), default=str)
        updated_at = datetime.now(timezone.utc).isoformat()
        try:
            db = await self.database.get()
            await db.execute(UPSERT_SQL, (self.document_id, payload, updated_at))
            await db.commit()
        except Exception as exc:
            raise PersistenceError(self.document_id, str(exc)) from exc

    async def load(self) -> dict[str, Any] | None:
        """Read the stored document back (used by tooling and tests)."""
        db = await self.database.get()
        async with db.execute(
            "SELECT payload, updated_at FROM system_documents WHERE id = ?",
            (self.document_id,),
        ) as cur:
            row = await cur.fetchone()
        if row is None:
            return None
        document = json.loads(row["payload"])
        document["updated_at"] = row["updated_at"]
        return document
