"""Local snapshot store.

Append-only SQLite log of snapshots. Each sub-entity is serialized to its
own JSON column so a damaged column does not prevent reading the others.
"""

from __future__ import annotations

import logging
import os
import sqlite3
import threading
from typing import List

from hoststat.core.constants import STATS_TABLE
from hoststat.core.exceptions import PersistenceError, StartupError
from hoststat.core.models import StoredRecord, SystemSnapshot, encode_json

logger = logging.getLogger(__name__)

SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {STATS_TABLE} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp DATETIME DEFAULT CURRENT_TIMESTAMP,
    memory_info TEXT,
    swap_info TEXT,
    storage_info TEXT,
    cpu_info TEXT,
    gpu_usage REAL,
    lscpu_json TEXT
)
"""

INSERT = f"""
INSERT INTO {STATS_TABLE}
    (memory_info, swap_info, storage_info, cpu_info, gpu_usage, lscpu_json)
VALUES (?, ?, ?, ?, ?, ?)
"""

SELECT_RECENT = f"""
SELECT id, timestamp, memory_info, swap_info, storage_info, cpu_info, gpu_usage, lscpu_json
FROM {STATS_TABLE}
ORDER BY id DESC
LIMIT ?
"""


def snapshot_columns(snapshot: SystemSnapshot) -> tuple:
    """Encode a snapshot into the store's column values."""
    return (
        snapshot.memory.to_json(),
        snapshot.swap.to_json(),
        encode_json(snapshot.storage_document()),
        snapshot.cpu.to_json(),
        snapshot.gpu_usage,
        encode_json(snapshot.architecture),
    )


class SnapshotStore:
    """Process-wide handle to the snapshot database."""

    def __init__(self, conn: sqlite3.Connection, path: str = ":memory:") -> None:
        self.conn = conn
        self.path = path
        self._lock = threading.Lock()

    @classmethod
    def open(cls, path: str) -> "SnapshotStore":
        """Open (creating if needed) the database at ``path``.

        Raises:
            StartupError: If the database cannot be opened
        """
        try:
            directory = os.path.dirname(path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            conn = sqlite3.connect(path)
        except (OSError, sqlite3.Error) as e:
            raise StartupError(f"Cannot open store at {path}: {e}") from e
        logger.info(f"Opened snapshot store at {path}")
        return cls(conn, path)

    def ensure_schema(self) -> None:
        """Create the stats table if absent. Safe to call on every startup.

        Raises:
            StartupError: If the schema cannot be created
        """
        try:
            with self._lock, self.conn:
                self.conn.execute(SCHEMA)
        except sqlite3.Error as e:
            raise StartupError(f"Cannot create {STATS_TABLE} table: {e}") from e

    def append(self, snapshot: SystemSnapshot) -> int:
        """Insert one snapshot row.

        Args:
            snapshot: Snapshot to record

        Returns:
            Row id of the new record

        Raises:
            PersistenceError: If the insert fails
        """
        try:
            values = snapshot_columns(snapshot)
            with self._lock, self.conn:
                cursor = self.conn.execute(INSERT, values)
        except (sqlite3.Error, TypeError, ValueError) as e:
            raise PersistenceError(f"Error inserting into database: {e}") from e
        return cursor.lastrowid

    def recent(self, limit: int = 10) -> List[StoredRecord]:
        """Get the most recent rows, newest first."""
        with self._lock:
            rows = self.conn.execute(SELECT_RECENT, (limit,)).fetchall()
        return [
            StoredRecord(
                id=row[0],
                recorded_at=str(row[1]),
                memory_info=row[2],
                swap_info=row[3],
                storage_info=row[4],
                cpu_info=row[5],
                gpu_usage=row[6],
                lscpu_json=row[7],
            )
            for row in rows
        ]

    def count(self) -> int:
        with self._lock:
            (n,) = self.conn.execute(f"SELECT COUNT(*) FROM {STATS_TABLE}").fetchone()
        return n

    def close(self) -> None:
        """Close the database connection."""
        self.conn.close()

    def __enter__(self) -> "SnapshotStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def open_store(path: str) -> SnapshotStore:
    """Open the store and make sure its schema exists."""
    store = SnapshotStore.open(path)
    try:
        store.ensure_schema()
    except StartupError:
        store.close()
        raise
    return store
