"""Domain models for host telemetry snapshots.

All models use Pydantic for validation and are frozen once built. Python
attributes are snake_case; the JSON documents sent to the collector and
written to the local store use camelCase keys.
"""

import json
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from hoststat.core.constants import GPU_UNAVAILABLE, GPU_USAGE_MAX, GPU_USAGE_MIN


def encode_json(document: Any) -> str:
    """Encode a JSON-ready document the same way for the store and the wire."""
    return json.dumps(document, separators=(",", ":"), ensure_ascii=False)


class SnapshotModel(BaseModel):
    """Base model for snapshot sub-entities."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_document(self) -> dict:
        """Return the JSON-ready document (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self) -> str:
        return encode_json(self.to_document())


class MemoryInfo(SnapshotModel):
    """Physical memory usage in bytes."""

    total: int = Field(0, ge=0, description="Total physical memory")
    available: int = Field(0, ge=0, description="Memory available without swapping")
    used: int = Field(0, ge=0, description="Memory in use")


class SwapInfo(SnapshotModel):
    """Swap usage in bytes."""

    total: int = Field(0, ge=0, description="Total swap")
    used: int = Field(0, ge=0, description="Swap in use")
    free: int = Field(0, ge=0, description="Free swap")


class StorageInfo(SnapshotModel):
    """Usage of one mounted partition in bytes."""

    device: str = Field(..., description="Device backing the partition")
    total: int = Field(0, ge=0, description="Total partition size")
    used: int = Field(0, ge=0, description="Used bytes")
    free: int = Field(0, ge=0, description="Free bytes")


class Partition(SnapshotModel):
    """A mounted partition as reported by partition enumeration."""

    device: str = Field(..., description="Device path")
    mountpoint: str = Field(..., description="Mount point")
    fstype: str = Field("", description="Filesystem type")


class CPUInfo(SnapshotModel):
    """CPU core count and per-core utilization."""

    total_cores: int = Field(0, ge=0, description="Logical core count")
    usage_per_core: tuple[float, ...] = Field(
        default_factory=tuple, description="Utilization percentage per logical core"
    )


class SystemSnapshot(SnapshotModel):
    """One immutable capture of all monitored sub-metrics."""

    timestamp: datetime = Field(..., description="Capture instant")
    memory: MemoryInfo = Field(default_factory=MemoryInfo, description="Memory usage")
    swap: SwapInfo = Field(default_factory=SwapInfo, description="Swap usage")
    storage: tuple[StorageInfo, ...] = Field(default_factory=tuple, description="Per-partition usage")
    cpu: CPUInfo = Field(default_factory=CPUInfo, description="CPU details")
    gpu_usage: float = Field(GPU_UNAVAILABLE, description="Average GPU utilization or -1")
    architecture: Optional[dict[str, Any]] = Field(None, description="lscpu output, opaque")

    @field_validator("gpu_usage")
    @classmethod
    def check_gpu_usage(cls, v: float) -> float:
        """GPU usage is either the sentinel or a percentage."""
        if v == GPU_UNAVAILABLE or GPU_USAGE_MIN <= v <= GPU_USAGE_MAX:
            return v
        raise ValueError(f"gpu_usage must be -1 or within [0, 100], got {v}")

    @property
    def has_gpu(self) -> bool:
        """Check if a real GPU reading is present."""
        return self.gpu_usage != GPU_UNAVAILABLE

    def storage_document(self) -> list:
        return [entry.to_document() for entry in self.storage]


class StoredRecord(BaseModel):
    """One row of the local store, columns kept as raw JSON text."""

    id: int = Field(..., description="Row id")
    recorded_at: str = Field(..., description="Store-assigned insertion time")
    memory_info: str = Field(..., description="Memory JSON")
    swap_info: str = Field(..., description="Swap JSON")
    storage_info: str = Field(..., description="Storage JSON")
    cpu_info: str = Field(..., description="CPU JSON")
    gpu_usage: float = Field(..., description="GPU usage or -1")
    lscpu_json: str = Field(..., description="Architecture JSON")

    @property
    def memory(self) -> MemoryInfo:
        return MemoryInfo.model_validate_json(self.memory_info)

    @property
    def swap(self) -> SwapInfo:
        return SwapInfo.model_validate_json(self.swap_info)

    @property
    def storage(self) -> list[StorageInfo]:
        return [StorageInfo.model_validate(entry) for entry in json.loads(self.storage_info)]

    @property
    def cpu(self) -> CPUInfo:
        return CPUInfo.model_validate_json(self.cpu_info)

    @property
    def architecture(self) -> Optional[dict]:
        return json.loads(self.lscpu_json)
