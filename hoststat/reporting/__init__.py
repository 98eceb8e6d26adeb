"""Reporting module for delivering snapshots to the remote collector."""

from hoststat.reporting.reporter import RemoteReporter, ReportResult

__all__ = [
    "RemoteReporter",
    "ReportResult",
]
