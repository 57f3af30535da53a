"""Shared fixtures: fake /proc trees and a fake interpreter runtime."""

from pathlib import Path
from types import MappingProxyType

import pytest

from sysinfo.models import UNKNOWN, CollectorStat, HeapStat, MemoryUsage, RuntimeStat

MEMINFO_TEXT = """\
MemTotal:       16384000 kB
MemFree:         1024000 kB
MemAvailable:    1048576 kB
Buffers:          204800 kB
Cached:          4096000 kB
SwapCached:            0 kB
Active:          8192000 kB
SwapTotal:       2097152 kB
SwapFree:        2097152 kB
HugePages_Total:       0
"""


def make_stat_line(
    comm: str = "(python3)",
    pid: str = "4242",
    utime: str = "250",
    stime: str = "125",
    rss: str = "12800",
) -> str:
    """Build a /proc/<pid>/stat line with the given values at their offsets."""
    fields = [
        pid, comm, "S", "1", pid, pid, "0", "-1", "4194304", "1000", "0", "0", "0",
        utime, stime, "0", "0", "20", "0", "1", "0", "100", "12345678", rss,
        "18446744073709551615", "1", "1", "0", "0", "0", "0", "0", "16781312", "2", "0",
        "0", "17", "3", "0", "0", "0", "0", "0",
    ]
    return " ".join(fields) + "\n"


def write_proc_tree(root: Path, meminfo: str = MEMINFO_TEXT, stat: str | None = None) -> Path:
    """Write meminfo and self/stat under root and return root."""
    (root / "self").mkdir(parents=True, exist_ok=True)
    (root / "meminfo").write_text(meminfo)
    (root / "self" / "stat").write_text(stat if stat is not None else make_stat_line())
    return root


class FakeRuntime:
    """Runtime introspector returning fixed figures."""

    def __init__(self, heap_max: int = 209715200, heap_used: int = 104857600) -> None:
        self.heap_max = heap_max
        self.heap_used = heap_used
        self.calls = 0

    def heap_stat(self) -> HeapStat:
        self.calls += 1
        return HeapStat(
            heap_usage=MemoryUsage(init=UNKNOWN, used=self.heap_used, committed=self.heap_max, max=self.heap_max),
            non_heap_usage=MemoryUsage(init=UNKNOWN, used=8 * 1024 * 1024, committed=8 * 1024 * 1024, max=UNKNOWN),
            pool=MappingProxyType({
                "heap": MemoryUsage(init=UNKNOWN, used=4096, committed=8192, max=UNKNOWN),
                "/usr/lib/libc.so.6": MemoryUsage(init=UNKNOWN, used=2048, committed=16384, max=UNKNOWN),
            }),
            gc=MappingProxyType({
                "young-generation": CollectorStat(count=12, time=UNKNOWN, collected=340, uncollectable=0),
                "old-generation": CollectorStat(count=1, time=UNKNOWN, collected=5, uncollectable=1),
            }),
        )

    def runtime_stat(self) -> RuntimeStat:
        return RuntimeStat(
            cpu_count=4,
            free_memory=UNKNOWN,
            max_memory=UNKNOWN,
            total_memory=300 * 1024 * 1024,
            version="3.12.1",
            implementation="CPython",
        )


@pytest.fixture
def proc_root(tmp_path: Path) -> Path:
    """A fake /proc tree with meminfo and self/stat."""
    return write_proc_tree(tmp_path / "proc")


@pytest.fixture
def fake_runtime() -> FakeRuntime:
    """A runtime introspector with a 200 MiB heap, half used."""
    return FakeRuntime()
