"""Metrics source interface.

This module defines the metric readers the snapshot collector calls
through. The production implementation reads the local host; tests supply
fakes. Every reader may raise independently.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any

from hoststat.core.models import MemoryInfo, Partition, StorageInfo, SwapInfo


class IGpuSession(ABC):
    """An acquired GPU vendor session, valid until released."""

    @abstractmethod
    def device_count(self) -> int:
        """Get number of installed GPU devices."""

    @abstractmethod
    def utilization(self, index: int) -> float:
        """Get utilization percentage of one device.

        Args:
            index: Device index

        Returns:
            Utilization in percent
        """


class IMetricsSource(ABC):
    """Interface for metrics sources (real host or fake)."""

    @abstractmethod
    def memory(self) -> MemoryInfo:
        """Get physical memory usage."""

    @abstractmethod
    def swap(self) -> SwapInfo:
        """Get swap usage."""

    @abstractmethod
    def partitions(self) -> list[Partition]:
        """Enumerate mounted physical partitions."""

    @abstractmethod
    def partition_usage(self, partition: Partition) -> StorageInfo:
        """Get usage for one partition.

        Args:
            partition: Partition returned by partitions()

        Returns:
            Storage usage for the partition
        """

    @abstractmethod
    def cpu_count(self) -> int:
        """Get logical core count."""

    @abstractmethod
    def cpu_percent_per_core(self, interval: float) -> list[float]:
        """Sample per-core utilization, blocking for ``interval`` seconds."""

    @abstractmethod
    def gpu(self) -> AbstractContextManager[IGpuSession]:
        """Acquire a GPU session.

        The session is released when the returned context manager exits,
        on every path. Acquisition failures raise on entry.
        """

    @abstractmethod
    def architecture(self) -> dict[str, Any]:
        """Get architecture metadata as an opaque mapping."""

