"""Data models for sysinfo."""

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

# Sentinel for byte counts and durations the source reports as unset or unlimited.
UNKNOWN = -1


@dataclass(slots=True, frozen=True)
class MemoryUsage:
    """Usage of one memory area, in bytes."""

    init: int
    used: int
    committed: int
    max: int


@dataclass(slots=True, frozen=True)
class CollectorStat:
    """Activity of one garbage collector generation."""

    count: int
    time: int  # Milliseconds, UNKNOWN when not measured
    collected: int = 0
    uncollectable: int = 0


@dataclass(slots=True, frozen=True)
class HeapStat:
    """One introspection pass over the interpreter's memory subsystem."""

    heap_usage: MemoryUsage
    non_heap_usage: MemoryUsage
    pool: Mapping[str, MemoryUsage]  # Read-only, built as MappingProxyType
    gc: Mapping[str, CollectorStat]


@dataclass(slots=True, frozen=True)
class MemInfoStat:
    """Host memory counters in bytes. None means the kernel did not report it."""

    mem_total: int | None = None
    mem_free: int | None = None
    mem_available: int | None = None
    buffers: int | None = None
    cached: int | None = None
    swap_total: int | None = None
    swap_free: int | None = None


@dataclass(slots=True, frozen=True)
class ProcStat:
    """CPU and resident memory of a single process."""

    pid: int
    rss_kib: int
    user_cpu_seconds: float
    system_cpu_seconds: float
    total_cpu_seconds: float


@dataclass(slots=True, frozen=True)
class RuntimeStat:
    """Limits reported by the running interpreter."""

    cpu_count: int
    free_memory: int
    max_memory: int
    total_memory: int
    version: str
    implementation: str = ""


@dataclass(slots=True, frozen=True)
class SysStat:
    """Full raw snapshot."""

    heap: HeapStat
    meminfo: MemInfoStat
    process: ProcStat
    runtime: RuntimeStat


@dataclass(slots=True, frozen=True)
class HeapSummary:
    """Heap figures in KiB. None marks a value that is unavailable."""

    size_kib: int | None
    used_kib: int | None
    utilization_percent: int | None


@dataclass(slots=True, frozen=True)
class SysSummary:
    """Reduced snapshot handed to callers for logging or export."""

    process_id: int
    non_heap_kib: int | None
    heap: HeapSummary
    cpu_seconds: float
    mem_available_mib: float | None
    process_rss_mib: float


def as_dict(record: Any) -> dict[str, Any]:
    """Convert a record into plain nested dicts for serialization."""
    return _plain(record)


def _plain(value: Any) -> Any:
    # dataclasses.asdict cannot copy the read-only mappings, so recurse by hand
    if dataclasses.is_dataclass(value):
        return {field.name: _plain(getattr(value, field.name)) for field in dataclasses.fields(value)}
    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    return value
