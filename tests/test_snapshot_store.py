"""
Test Database resolution and SqliteSnapshotStore persistence.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from homewatch.sentinel.models import AggregateSnapshot, OverallStatus, ServiceResult
from homewatch.shared.errors import DependencyUnavailableError, PersistenceError
from homewatch.storage import Database, SqliteSnapshotStore


def _snapshot(overall: OverallStatus = OverallStatus.HEALTHY, **services: ServiceResult) -> AggregateSnapshot:
    return AggregateSnapshot(
        overall=overall,
        last_check="2026-03-01T12:00:00+00:00",
        check_duration_ms=250.0,
        services=services or {"plex": ServiceResult.up(response_ms=10.0)},
        alerts_active=0,
    )


class BrokenResolver:
    async def get(self):
        raise DependencyUnavailableError("database", "connection refused")


@pytest.mark.asyncio
async def test_save_and_load(tmp_path):
    database = Database(str(tmp_path / "homewatch.db"))
    store = SqliteSnapshotStore(database, document_id="homewatch_latest")
    try:
        assert await store.load() is None
        await store.save(_snapshot())
        document = await store.load()
    finally:
        await database.close()

    assert document["overall"] == "healthy"
    assert document["services"] == {"plex": {"status": "up", "response_ms": 10.0}}
    assert document["updated_at"]


@pytest.mark.asyncio
async def test_save_overwrites_single_document():
    database = Database(":memory:")
    store = SqliteSnapshotStore(database)
    try:
        await store.save(_snapshot())
        await store.save(_snapshot(OverallStatus.DEGRADED, queen=ServiceResult.down(reason="no queen doc found")))
        document = await store.load()

        db = await database.get()
        async with db.execute("SELECT COUNT(*) FROM system_documents") as cur:
            (count,) = await cur.fetchone()
    finally:
        await database.close()

    assert count == 1
    assert document["overall"] == "degraded"
    assert document["services"]["queen"]["reason"] == "no queen doc found"


@pytest.mark.asyncio
async def test_save_wraps_failures_in_persistence_error():
    store = SqliteSnapshotStore(BrokenResolver(), document_id="doc")
    with pytest.raises(PersistenceError) as exc_info:
        await store.save(_snapshot())
    assert exc_info.value.document_id == "doc"
    assert "connection refused" in exc_info.value.reason


@pytest.mark.asyncio
async def test_database_handle_is_cached():
    database = Database(":memory:")
    try:
        first = await database.get()
        second = await database.get()
        assert first is second
        assert database.connected
    finally:
        await database.close()
    assert not database.connected


@pytest.mark.asyncio
async def test_unreachable_database_raises_dependency_error(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")
    database = Database(str(blocker / "homewatch.db"))

    with pytest.raises(DependencyUnavailableError) as exc_info:
        await database.get()
    assert exc_info.value.dependency == "database"
    assert not database.connected
