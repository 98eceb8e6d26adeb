"""Monitoring module for snapshot collection."""

from hoststat.monitoring.collector import SnapshotCollector

__all__ = [
    "SnapshotCollector",
]
