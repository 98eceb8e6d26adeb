"""Sources module for the host telemetry agent.

This module reads resource counters from the local host.
"""

from hoststat.sources.system import NvmlSession, SystemMetricsSource

__all__ = [
    "NvmlSession",
    "SystemMetricsSource",
]
