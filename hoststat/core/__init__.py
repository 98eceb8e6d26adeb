"""Core module for the host telemetry agent.

This module contains domain models, configuration, constants, the metrics
source interface and the exception hierarchy.
"""

from hoststat.core.config import AgentSettings, ReportingConfig, StoreConfig
from hoststat.core.models import (
    MemoryInfo,
    SwapInfo,
    StorageInfo,
    Partition,
    CPUInfo,
    SystemSnapshot,
    StoredRecord,
)
from hoststat.core.constants import (
    DEFAULT_FREQ_MINUTES,
    DEFAULT_DB_PATH,
    CPU_SAMPLE_INTERVAL_SECONDS,
    GPU_UNAVAILABLE,
)
from hoststat.core.exceptions import (
    HoststatError,
    StartupError,
    CollectionError,
    PersistenceError,
    ReportError,
)

__all__ = [
    "AgentSettings",
    "ReportingConfig",
    "StoreConfig",
    "MemoryInfo",
    "SwapInfo",
    "StorageInfo",
    "Partition",
    "CPUInfo",
    "SystemSnapshot",
    "StoredRecord",
    "DEFAULT_FREQ_MINUTES",
    "DEFAULT_DB_PATH",
    "CPU_SAMPLE_INTERVAL_SECONDS",
    "GPU_UNAVAILABLE",
    "HoststatError",
    "StartupError",
    "CollectionError",
    "PersistenceError",
    "ReportError",
]
