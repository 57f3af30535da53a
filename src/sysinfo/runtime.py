"""Introspection of the running Python interpreter."""

import gc
import logging
import platform
import resource
from types import MappingProxyType

import psutil

from sysinfo.models import UNKNOWN, CollectorStat, HeapStat, MemoryUsage, RuntimeStat
from sysinfo.names import pool_name

LOGGER = logging.getLogger(__name__)


def _soft_limit(which: int) -> int:
    """Return the soft resource limit in bytes, or UNKNOWN when unlimited."""
    soft, _hard = resource.getrlimit(which)
    if soft == resource.RLIM_INFINITY:
        return UNKNOWN
    return soft


class CPythonRuntime:
    """
    Adapter over the interpreter's memory and collector introspection.

    Memory figures come from psutil's view of the interpreter's own process:
    the data segment stands in for the heap and the text segment for
    non-heap (code) memory. Each grouped memory mapping is reported as a
    pool and each gc generation as a collector. CPython does not time its
    collections, so collector time is UNKNOWN.
    """

    def __init__(self, process: psutil.Process | None = None) -> None:
        """
        Initialize the adapter.

        Args:
            process: Process to inspect. Defaults to the current process.
        """
        self._process = process if process is not None else psutil.Process()

    def heap_stat(self) -> HeapStat:
        """Collect heap, non-heap, pool and collector figures."""
        mem = self._process.memory_info()

        heap_usage = MemoryUsage(
            init=UNKNOWN,
            used=mem.data,
            committed=mem.vms,
            max=_soft_limit(resource.RLIMIT_DATA),
        )
        non_heap_usage = MemoryUsage(
            init=UNKNOWN,
            used=mem.text,
            committed=mem.text,
            max=UNKNOWN,
        )

        pool = MappingProxyType({
            pool_name(region.path): MemoryUsage(
                init=UNKNOWN,
                used=region.rss,
                committed=region.size,
                max=UNKNOWN,
            )
            for region in self._process.memory_maps(grouped=True)
        })

        collectors = MappingProxyType({
            pool_name(f"gen{generation}"): CollectorStat(
                count=stats["collections"],
                time=UNKNOWN,
                collected=stats["collected"],
                uncollectable=stats["uncollectable"],
            )
            for generation, stats in enumerate(gc.get_stats())
        })

        LOGGER.debug("Collected %d pools and %d collectors", len(pool), len(collectors))
        return HeapStat(
            heap_usage=heap_usage,
            non_heap_usage=non_heap_usage,
            pool=pool,
            gc=collectors,
        )

    def runtime_stat(self) -> RuntimeStat:
        """Collect interpreter-wide limits."""
        total_memory = self._process.memory_info().vms
        max_memory = _soft_limit(resource.RLIMIT_AS)
        free_memory = max(max_memory - total_memory, 0) if max_memory != UNKNOWN else UNKNOWN

        return RuntimeStat(
            cpu_count=len(self._process.cpu_affinity()),
            free_memory=free_memory,
            max_memory=max_memory,
            total_memory=total_memory,
            version=platform.python_version(),
            implementation=platform.python_implementation(),
        )
