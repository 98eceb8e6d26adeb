"""Snapshot collection.

This module reads every metric once per cycle and assembles one
immutable SystemSnapshot. A failing read is logged and degrades to its
zero value or sentinel; collect() itself never raises.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from hoststat.core.constants import (
    CPU_SAMPLE_INTERVAL_SECONDS,
    GPU_UNAVAILABLE,
    GPU_USAGE_MAX,
    GPU_USAGE_MIN,
)
from hoststat.core.models import CPUInfo, MemoryInfo, StorageInfo, SwapInfo, SystemSnapshot
from hoststat.core.source import IMetricsSource

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SnapshotCollector:
    """Builds system snapshots from a metrics source."""

    def __init__(
        self,
        source: IMetricsSource,
        cpu_interval: float = CPU_SAMPLE_INTERVAL_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize snapshot collector.

        Args:
            source: Metrics source to read from
            cpu_interval: Blocking CPU sampling window in seconds
            clock: Wall-clock source for snapshot timestamps
        """
        self.source = source
        self.cpu_interval = cpu_interval
        self.clock = clock
        self._last_timestamp: Optional[datetime] = None

    def collect(self) -> SystemSnapshot:
        """Collect one snapshot.

        Returns:
            Fully built snapshot
        """
        timestamp = self._next_timestamp()
        return SystemSnapshot(
            timestamp=timestamp,
            memory=self.collect_memory(),
            swap=self.collect_swap(),
            storage=tuple(self.collect_storage()),
            cpu=self.collect_cpu(),
            gpu_usage=self.collect_gpu_usage(),
            architecture=self.collect_architecture(),
        )

    def _next_timestamp(self) -> datetime:
        # Wall clock may step backwards (NTP); timestamps must not.
        now = self.clock()
        if self._last_timestamp is not None and now < self._last_timestamp:
            logger.warning(f"Clock went backwards by {self._last_timestamp - now}; reusing last timestamp")
            now = self._last_timestamp
        self._last_timestamp = now
        return now

    def collect_memory(self) -> MemoryInfo:
        try:
            return self.source.memory()
        except Exception as e:
            logger.warning(f"Memory read failed: {e}")
            return MemoryInfo()

    def collect_swap(self) -> SwapInfo:
        try:
            return self.source.swap()
        except Exception as e:
            logger.warning(f"Swap read failed: {e}")
            return SwapInfo()

    def collect_storage(self) -> list[StorageInfo]:
        """Get usage for every partition that can be queried.

        Returns:
            One entry per partition queried successfully
        """
        try:
            partitions = self.source.partitions()
        except Exception as e:
            logger.warning(f"Partition enumeration failed: {e}")
            return []

        storage = []
        for partition in partitions:
            try:
                storage.append(self.source.partition_usage(partition))
            except Exception as e:
                logger.warning(f"Skipping partition {partition.mountpoint}: {e}")
                continue
        return storage

    def collect_cpu(self) -> CPUInfo:
        """Get core count and per-core utilization.

        Per-core sampling blocks for the configured interval.
        """
        try:
            cores = self.source.cpu_count()
        except Exception as e:
            logger.warning(f"CPU core count read failed: {e}")
            cores = 0

        try:
            per_core = self.source.cpu_percent_per_core(self.cpu_interval)
        except Exception as e:
            logger.warning(f"CPU usage read failed: {e}")
            return CPUInfo(total_cores=cores)

        return CPUInfo(total_cores=cores, usage_per_core=tuple(per_core))

    def collect_gpu_usage(self) -> float:
        """Get average GPU utilization across devices.

        Devices that fail to report are left out of the average, and -1 is
        returned when none reports. The original agent divided by the total
        device count instead, so a failed device read as 0% there.

        Returns:
            Average percentage, or -1 if no GPU is present or the read failed
        """
        try:
            with self.source.gpu() as gpu:
                count = gpu.device_count()
                if count <= 0:
                    logger.debug("No GPUs found")
                    return GPU_UNAVAILABLE

                readings = []
                for index in range(count):
                    try:
                        readings.append(gpu.utilization(index))
                    except Exception as e:
                        logger.warning(f"GPU {index} utilization failed: {e}")
                        continue
        except Exception as e:
            logger.warning(f"GPU read failed: {e}")
            return GPU_UNAVAILABLE

        if not readings:
            return GPU_UNAVAILABLE
        average = sum(readings) / len(readings)
        return min(max(average, GPU_USAGE_MIN), GPU_USAGE_MAX)

    def collect_architecture(self) -> Optional[dict]:
        try:
            return self.source.architecture()
        except Exception as e:
            logger.warning(f"Architecture read failed: {e}")
            return None
