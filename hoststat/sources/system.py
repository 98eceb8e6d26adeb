"""Metrics source for the local host.

Reads memory, swap, disk and CPU counters through psutil, GPU utilization
through NVML (pynvml) and architecture metadata from ``lscpu --json``.
Every reader wraps the underlying failure in CollectionError.
"""

import json
import logging
import subprocess
from typing import Any, Optional, Sequence

import psutil
import pynvml

from hoststat.core.constants import LSCPU_COMMAND, LSCPU_TIMEOUT_SECONDS
from hoststat.core.exceptions import CollectionError
from hoststat.core.models import MemoryInfo, Partition, StorageInfo, SwapInfo
from hoststat.core.source import IGpuSession, IMetricsSource

logger = logging.getLogger(__name__)


class NvmlSession(IGpuSession):
    """NVML session scoped to one GPU reading.

    Entering initializes the library, exiting shuts it down whatever
    happened in between.
    """

    def __init__(self):
        self._active = False

    def __enter__(self) -> "NvmlSession":
        try:
            pynvml.nvmlInit()
        except pynvml.NVMLError as e:
            raise CollectionError(f"Failed to initialize NVML: {e}") from e
        self._active = True
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if not self._active:
            return
        self._active = False
        try:
            pynvml.nvmlShutdown()
        except pynvml.NVMLError as e:
            logger.warning(f"NVML shutdown failed: {e}")

    def device_count(self) -> int:
        try:
            return int(pynvml.nvmlDeviceGetCount())
        except pynvml.NVMLError as e:
            raise CollectionError(f"Error getting GPU count: {e}") from e

    def utilization(self, index: int) -> float:
        try:
            handle = pynvml.nvmlDeviceGetHandleByIndex(index)
            rates = pynvml.nvmlDeviceGetUtilizationRates(handle)
        except pynvml.NVMLError as e:
            raise CollectionError(f"Error getting utilization for GPU {index}: {e}") from e
        return float(rates.gpu)


class SystemMetricsSource(IMetricsSource):
    """Reads metrics from the host this process runs on."""

    def __init__(
        self,
        lscpu_command: Sequence[str] = LSCPU_COMMAND,
        lscpu_timeout: Optional[float] = LSCPU_TIMEOUT_SECONDS,
    ):
        """Initialize the source.

        Args:
            lscpu_command: Command producing architecture JSON
            lscpu_timeout: Seconds to wait for the command
        """
        self.lscpu_command = list(lscpu_command)
        self.lscpu_timeout = lscpu_timeout

    def memory(self) -> MemoryInfo:
        try:
            vm = psutil.virtual_memory()
        except (OSError, psutil.Error) as e:
            raise CollectionError(f"Error getting memory stats: {e}") from e
        return MemoryInfo(total=vm.total, available=vm.available, used=vm.used)

    def swap(self) -> SwapInfo:
        try:
            sm = psutil.swap_memory()
        except (OSError, psutil.Error) as e:
            raise CollectionError(f"Error getting swap stats: {e}") from e
        return SwapInfo(total=sm.total, used=sm.used, free=sm.free)

    def partitions(self) -> list[Partition]:
        try:
            parts = psutil.disk_partitions(all=False)
        except (OSError, psutil.Error) as e:
            raise CollectionError(f"Error getting disk partitions: {e}") from e
        return [Partition(device=p.device, mountpoint=p.mountpoint, fstype=p.fstype) for p in parts]

    def partition_usage(self, partition: Partition) -> StorageInfo:
        try:
            usage = psutil.disk_usage(partition.mountpoint)
        except (OSError, psutil.Error) as e:
            raise CollectionError(f"Error getting disk usage for {partition.mountpoint}: {e}") from e
        return StorageInfo(device=partition.device, total=usage.total, used=usage.used, free=usage.free)

    def cpu_count(self) -> int:
        try:
            cores = psutil.cpu_count(logical=True)
        except (OSError, psutil.Error) as e:
            raise CollectionError(f"Error getting CPU core count: {e}") from e
        if cores is None:
            raise CollectionError("CPU core count is undetermined")
        return cores

    def cpu_percent_per_core(self, interval: float) -> list[float]:
        try:
            return [float(p) for p in psutil.cpu_percent(interval=interval, percpu=True)]
        except (OSError, psutil.Error) as e:
            raise CollectionError(f"Error getting CPU usage: {e}") from e

    def gpu(self) -> NvmlSession:
        return NvmlSession()

    def architecture(self) -> dict[str, Any]:
        try:
            result = subprocess.run(
                self.lscpu_command,
                capture_output=True,
                check=True,
                timeout=self.lscpu_timeout,
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise CollectionError(f"Error executing lscpu command: {e}") from e

        try:
            document = json.loads(result.stdout)
        except ValueError as e:
            raise CollectionError(f"Error parsing lscpu JSON output: {e}") from e

        if not isinstance(document, dict):
            raise CollectionError(f"lscpu output is not a JSON object: {type(document).__name__}")
        return document
