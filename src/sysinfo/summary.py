"""Reduction of a raw snapshot into the caller-facing summary."""

import logging

from sysinfo.errors import UnavailableMetric
from sysinfo.models import UNKNOWN, HeapSummary, SysStat, SysSummary
from sysinfo.units import BYTES_PER_KIB, BYTES_PER_MIB, bytes_to_kib

LOGGER = logging.getLogger(__name__)


def _kib_or_none(value: int) -> int | None:
    if value == UNKNOWN:
        return None
    return bytes_to_kib(value)


def utilization_percent(used_kib: int | None, size_kib: int | None) -> int:
    """
    Return used/size as a percentage, rounded up.

    Raises:
        UnavailableMetric: If either figure is unknown or the size is not positive.
    """
    if used_kib is None or size_kib is None or size_kib <= 0:
        raise UnavailableMetric(f"Heap utilization undefined for size {size_kib!r} KiB")
    return -(-used_kib * 100 // size_kib)


def summarize(stat: SysStat) -> SysSummary:
    """Derive the summary record from a raw snapshot. Pure; never mutates stat."""
    heap_usage = stat.heap.heap_usage
    size_kib = _kib_or_none(heap_usage.max)
    used_kib = _kib_or_none(heap_usage.used)

    utilization: int | None
    try:
        utilization = utilization_percent(used_kib, size_kib)
    except UnavailableMetric as exc:
        LOGGER.debug("Utilization unavailable: %s", exc)
        utilization = None

    mem_available = stat.meminfo.mem_available
    return SysSummary(
        process_id=stat.process.pid,
        non_heap_kib=_kib_or_none(stat.heap.non_heap_usage.used),
        heap=HeapSummary(
            size_kib=size_kib,
            used_kib=used_kib,
            utilization_percent=utilization,
        ),
        cpu_seconds=stat.process.total_cpu_seconds,
        mem_available_mib=mem_available / float(BYTES_PER_MIB) if mem_available is not None else None,
        process_rss_mib=stat.process.rss_kib / float(BYTES_PER_KIB),
    )
