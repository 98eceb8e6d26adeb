"""Storage module for the local snapshot log."""

from hoststat.storage.store import SnapshotStore, open_store

__all__ = [
    "SnapshotStore",
    "open_store",
]
