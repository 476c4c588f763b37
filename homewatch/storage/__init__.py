"""Persistence: shared database handle and snapshot store."""

from homewatch.storage.database import Database
from homewatch.storage.schema import init_db
from homewatch.storage.snapshot_store import SnapshotStore, SqliteSnapshotStore

__all__ = ["Database", "SnapshotStore", "SqliteSnapshotStore", "init_db"]
