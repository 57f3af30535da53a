"""Tests for the interpreter introspection adapter."""

import resource
import sys
from collections import namedtuple
from unittest import mock

import pytest

from sysinfo.models import UNKNOWN, CollectorStat, HeapStat, MemoryUsage, RuntimeStat
from sysinfo.runtime import CPythonRuntime

pmem = namedtuple("pmem", "rss vms shared text lib data dirty")
pmmap = namedtuple("pmmap", "path rss size")


class FakeProcess:
    """Stand-in for psutil.Process with fixed figures."""

    def memory_info(self):
        return pmem(rss=50 * 1024**2, vms=400 * 1024**2, shared=0, text=2 * 1024**2, lib=0, data=120 * 1024**2, dirty=0)

    def memory_maps(self, grouped=True):
        return [
            pmmap(path="[heap]", rss=30 * 1024**2, size=32 * 1024**2),
            pmmap(path="[stack]", rss=128 * 1024, size=132 * 1024),
            pmmap(path="/usr/lib/libpython3.12.so.1.0", rss=4 * 1024**2, size=6 * 1024**2),
        ]

    def cpu_affinity(self):
        return [0, 1, 2]


GC_STATS = [
    {"collections": 40, "collected": 900, "uncollectable": 0},
    {"collections": 3, "collected": 50, "uncollectable": 0},
    {"collections": 1, "collected": 7, "uncollectable": 2},
]


def unlimited(_which):
    return (resource.RLIM_INFINITY, resource.RLIM_INFINITY)


class TestHeapStat:
    """Tests for CPythonRuntime.heap_stat with a fake process."""

    def test_heap_and_non_heap(self):
        """Test heap comes from the data segment and non-heap from text."""
        with mock.patch("sysinfo.runtime.resource.getrlimit", side_effect=unlimited):
            stat = CPythonRuntime(FakeProcess()).heap_stat()
        assert stat.heap_usage == MemoryUsage(init=UNKNOWN, used=120 * 1024**2, committed=400 * 1024**2, max=UNKNOWN)
        assert stat.non_heap_usage.used == 2 * 1024**2
        assert stat.non_heap_usage.max == UNKNOWN

    def test_heap_max_from_data_limit(self):
        """Test a finite data limit becomes the heap max."""
        with mock.patch("sysinfo.runtime.resource.getrlimit", return_value=(1024**3, resource.RLIM_INFINITY)):
            stat = CPythonRuntime(FakeProcess()).heap_stat()
        assert stat.heap_usage.max == 1024**3

    def test_mappings_are_read_only(self):
        """Test the pools and collectors of a built stat cannot be changed."""
        with mock.patch("sysinfo.runtime.gc.get_stats", return_value=GC_STATS):
            stat = CPythonRuntime(FakeProcess()).heap_stat()
        with pytest.raises(TypeError):
            stat.pool["injected"] = stat.pool["heap"]
        with pytest.raises(TypeError):
            del stat.gc["young-generation"]

    def test_pools_are_normalized(self):
        """Test region names are normalized and unknown paths kept verbatim."""
        stat = CPythonRuntime(FakeProcess()).heap_stat()
        assert set(stat.pool) == {"heap", "stack", "/usr/lib/libpython3.12.so.1.0"}
        assert stat.pool["heap"] == MemoryUsage(init=UNKNOWN, used=30 * 1024**2, committed=32 * 1024**2, max=UNKNOWN)

    def test_collectors(self):
        """Test each gc generation becomes a collector with unknown time."""
        with mock.patch("sysinfo.runtime.gc.get_stats", return_value=GC_STATS):
            stat = CPythonRuntime(FakeProcess()).heap_stat()
        assert stat.gc == {
            "young-generation": CollectorStat(count=40, time=UNKNOWN, collected=900, uncollectable=0),
            "middle-generation": CollectorStat(count=3, time=UNKNOWN, collected=50, uncollectable=0),
            "old-generation": CollectorStat(count=1, time=UNKNOWN, collected=7, uncollectable=2),
        }


class TestRuntimeStat:
    """Tests for CPythonRuntime.runtime_stat with a fake process."""

    def test_unlimited_address_space(self):
        """Test an unlimited address space leaves max and free unknown."""
        with mock.patch("sysinfo.runtime.resource.getrlimit", side_effect=unlimited):
            stat = CPythonRuntime(FakeProcess()).runtime_stat()
        assert stat.cpu_count == 3
        assert stat.max_memory == UNKNOWN
        assert stat.free_memory == UNKNOWN
        assert stat.total_memory == 400 * 1024**2

    def test_limited_address_space(self):
        """Test free memory is the headroom under the address space limit."""
        with mock.patch("sysinfo.runtime.resource.getrlimit", return_value=(1024**3, 1024**3)):
            stat = CPythonRuntime(FakeProcess()).runtime_stat()
        assert stat.max_memory == 1024**3
        assert stat.free_memory == 1024**3 - 400 * 1024**2

    def test_version(self):
        """Test the interpreter version and implementation are reported."""
        stat = CPythonRuntime(FakeProcess()).runtime_stat()
        assert stat.version.startswith(f"{sys.version_info.major}.{sys.version_info.minor}")
        assert stat.implementation


@pytest.mark.skipif(not sys.platform.startswith("linux"), reason="requires Linux")
class TestLiveRuntime:
    """Tests against the running interpreter."""

    def test_live_heap_stat(self):
        """Test the live heap stat has the canonical shape."""
        stat = CPythonRuntime().heap_stat()
        assert isinstance(stat, HeapStat)
        assert stat.heap_usage.used > 0
        assert "young-generation" in stat.gc
        assert all(isinstance(usage, MemoryUsage) for usage in stat.pool.values())

    def test_live_runtime_stat(self):
        """Test the live runtime stat reports at least one CPU."""
        stat = CPythonRuntime().runtime_stat()
        assert isinstance(stat, RuntimeStat)
        assert stat.cpu_count >= 1
        assert stat.total_memory > 0
