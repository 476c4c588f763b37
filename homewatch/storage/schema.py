"""
Homewatch storage schema.

- system_documents (single named records, e.g. the latest snapshot)
- coordination (heartbeat documents written by the monitored agents)
"""

from __future__ import annotations

from pathlib import Path

import aiosqlite


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS system_documents (
    id              TEXT PRIMARY KEY,
    payload         TEXT NOT NULL DEFAULT '{}',
    updated_at      TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS coordination (
    id              TEXT PRIMARY KEY,
    type            TEXT NOT NULL DEFAULT '',
    status          TEXT NOT NULL DEFAULT '',
    task            TEXT,
    last_heartbeat  TEXT,
    timestamp       TEXT,
    payload         TEXT NOT NULL DEFAULT '{}'
);

CREATE INDEX IF NOT EXISTS idx_coordination_type ON coordination(type, status);
CREATE INDEX IF NOT EXISTS idx_coordination_heartbeat ON coordination(last_heartbeat);
"""


async def init_db(db_path: str) -> aiosqlite.Connection:
    """Open (or create) the database and ensure tables exist."""
    if db_path != ":memory:":
        Path(db_path).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)

    db = await aiosqlite.connect(db_path)
    db.row_factory = aiosqlite.Row
    await db.executescript(SCHEMA_SQL)
    await db.commit()
    return db
