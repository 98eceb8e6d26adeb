"""Shared fixtures: a scriptable metrics source and snapshot builders."""

from datetime import datetime, timedelta, timezone

import pytest

from hoststat.core.exceptions import CollectionError
from hoststat.core.models import (
    CPUInfo,
    MemoryInfo,
    Partition,
    StorageInfo,
    SwapInfo,
    SystemSnapshot,
)
from hoststat.core.source import IGpuSession, IMetricsSource


class FakeGpuSession(IGpuSession):
    """GPU session over a fixed list of readings (None = device fails)."""

    def __init__(self, source):
        self.source = source

    def __enter__(self):
        if self.source.gpu_init_error:
            raise CollectionError("Failed to initialize NVML: driver not loaded")
        self.source.gpu_acquired += 1
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.source.gpu_released += 1

    def device_count(self) -> int:
        if self.source.gpu_count_error:
            raise CollectionError("Error getting GPU count")
        return len(self.source.gpu_readings)

    def utilization(self, index: int) -> float:
        reading = self.source.gpu_readings[index]
        if reading is None:
            raise CollectionError(f"Error getting utilization for GPU {index}")
        return reading


class FakeMetricsSource(IMetricsSource):
    """Metrics source with per-metric failure switches."""

    def __init__(self):
        self.fail = set()
        self.failing_mounts = set()
        self.partition_list = [
            Partition(device="/dev/sda1", mountpoint="/", fstype="ext4"),
            Partition(device="/dev/sdb1", mountpoint="/data", fstype="xfs"),
            Partition(device="/dev/sdc1", mountpoint="/backup", fstype="ext4"),
        ]
        self.gpu_readings = [40.0, 60.0]
        self.gpu_init_error = False
        self.gpu_count_error = False
        self.gpu_acquired = 0
        self.gpu_released = 0
        self.cpu_intervals = []
        self.arch = {"lscpu": [{"field": "Architecture:", "data": "x86_64"}]}

    def _check(self, metric):
        if metric in self.fail:
            raise CollectionError(f"{metric} read failed")

    def memory(self) -> MemoryInfo:
        self._check("memory")
        return MemoryInfo(total=16_000, available=8_000, used=7_000)

    def swap(self) -> SwapInfo:
        self._check("swap")
        return SwapInfo(total=4_000, used=1_000, free=3_000)

    def partitions(self) -> list[Partition]:
        self._check("partitions")
        return list(self.partition_list)

    def partition_usage(self, partition: Partition) -> StorageInfo:
        if partition.mountpoint in self.failing_mounts:
            raise CollectionError(f"Error getting disk usage for {partition.mountpoint}")
        return StorageInfo(device=partition.device, total=1_000, used=400, free=600)

    def cpu_count(self) -> int:
        self._check("cpu_count")
        return 4

    def cpu_percent_per_core(self, interval: float) -> list[float]:
        self.cpu_intervals.append(interval)
        self._check("cpu_percent")
        return [10.0, 20.0, 30.0, 40.0]

    def gpu(self) -> FakeGpuSession:
        return FakeGpuSession(self)

    def architecture(self) -> dict:
        self._check("architecture")
        return self.arch


class SteppingClock:
    """Clock returning scripted instants."""

    def __init__(self, *instants):
        self.instants = list(instants)

    def __call__(self):
        return self.instants.pop(0)


@pytest.fixture
def source():
    return FakeMetricsSource()


@pytest.fixture
def base_time():
    return datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def snapshot(base_time):
    return SystemSnapshot(
        timestamp=base_time,
        memory=MemoryInfo(total=16_000, available=8_000, used=7_000),
        swap=SwapInfo(total=4_000, used=1_000, free=3_000),
        storage=(
            StorageInfo(device="/dev/sda1", total=1_000, used=400, free=600),
            StorageInfo(device="/dev/sdb1", total=2_000, used=500, free=1_500),
        ),
        cpu=CPUInfo(total_cores=2, usage_per_core=(12.5, 50.0)),
        gpu_usage=-1,
        architecture={"lscpu": [{"field": "Model name:", "data": "Ryzen é"}], "cores": 2},
    )


@pytest.fixture
def clock_times(base_time):
    return [base_time + timedelta(minutes=i) for i in range(10)]
