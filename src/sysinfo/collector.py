"""Snapshot aggregation across the kernel and the interpreter."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from sysinfo.models import HeapStat, RuntimeStat, SysStat, SysSummary
from sysinfo.procfs import read_meminfo, read_proc_stat
from sysinfo.runtime import CPythonRuntime
from sysinfo.summary import summarize

LOGGER = logging.getLogger(__name__)


class RuntimeIntrospector(Protocol):
    """Source of interpreter memory and limit figures."""

    def heap_stat(self) -> HeapStat: ...

    def runtime_stat(self) -> RuntimeStat: ...


@dataclass(slots=True, frozen=True)
class SnapshotContext:
    """
    Where a snapshot reads its data from.

    The runtime always describes the calling interpreter, so pid must name
    that same process: "self" or the value of os.getpid().
    """

    proc_root: Path = Path("/proc")
    pid: int | str = "self"
    runtime: RuntimeIntrospector = field(default_factory=CPythonRuntime)

    def __post_init__(self) -> None:
        if str(self.pid) not in ("self", str(os.getpid())):
            raise ValueError(f"Snapshot pid must be 'self' or {os.getpid()}, got {self.pid!r}")


def collect_snapshot(context: SnapshotContext | None = None) -> SysStat:
    """
    Collect one raw snapshot.

    Any failure in a source propagates, so a partially filled snapshot is
    never returned.
    """
    if context is None:
        context = SnapshotContext()

    stat = SysStat(
        heap=context.runtime.heap_stat(),
        meminfo=read_meminfo(context.proc_root),
        process=read_proc_stat(context.proc_root, context.pid),
        runtime=context.runtime.runtime_stat(),
    )
    LOGGER.debug("Collected snapshot for pid %d", stat.process.pid)
    return stat


def collect_summary(context: SnapshotContext | None = None) -> SysSummary:
    """Collect a snapshot and reduce it to a summary."""
    return summarize(collect_snapshot(context))
