"""sysinfo - Textual snapshot viewer."""

import logging
from collections.abc import Mapping
from enum import Enum

import psutil
from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.logging import TextualHandler
from textual.widgets import DataTable, Footer, Static

from sysinfo.collector import SnapshotContext, collect_snapshot
from sysinfo.errors import SysInfoError
from sysinfo.models import UNKNOWN, CollectorStat, MemoryUsage, SysStat, SysSummary, as_dict
from sysinfo.summary import summarize

LOGGER = logging.getLogger(__name__)


class SortKey(Enum):
    """Sort keys for the pool table."""

    USED = "used"
    COMMITTED = "committed"
    NAME = "name"


def format_bytes(size: int) -> str:
    """Format bytes as human-readable string."""
    if size == UNKNOWN:
        return "    -"
    for unit in ["B", "K", "M", "G", "T"]:
        if size < 1024:
            return f"{size:5.1f}{unit}" if unit != "B" else f"{size:5d}{unit}"
        size = size / 1024
    return f"{size:.1f}P"


def format_optional(value: float | None, fmt: str = "") -> str:
    """Format a summary value, showing n/a for unavailable ones."""
    if value is None:
        return "n/a"
    return format(value, fmt)


def render_summary(summary: SysSummary, version: str = "") -> str:
    """Render the summary record as header text."""
    heap = summary.heap
    utilization = format_optional(heap.utilization_percent)
    if heap.utilization_percent is not None:
        utilization += "%"
    return (
        f"PID {summary.process_id}  {version}\n"
        f"Heap: {format_optional(heap.used_kib)} / {format_optional(heap.size_kib)} KiB"
        f" ({utilization})  Non-heap: {format_optional(summary.non_heap_kib)} KiB\n"
        f"RSS: {summary.process_rss_mib:.1f} MiB  CPU: {summary.cpu_seconds:.2f}s\n"
        f"Host available: {format_optional(summary.mem_available_mib, '.1f')} MiB"
    )


class SummaryStats(Static):
    """Header widget showing the summary figures."""

    DEFAULT_CSS = """
    SummaryStats {
        height: auto;
        min-height: 4;
        padding: 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize SummaryStats."""
        super().__init__("Collecting snapshot...", *args, **kwargs)
        self._summary: SysSummary | None = None

    @property
    def summary(self) -> SysSummary | None:
        """Get the summary currently shown."""
        return self._summary

    def update_summary(self, summary: SysSummary, version: str = "") -> None:
        """Show a new summary."""
        self._summary = summary
        self.update(render_summary(summary, version))


class PoolTable(Container):
    """Container for the memory pool table."""

    DEFAULT_CSS = """
    PoolTable {
        width: 2fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize PoolTable."""
        super().__init__(*args, **kwargs)
        self._pools: Mapping[str, MemoryUsage] = {}
        self._sort_key: SortKey = SortKey.USED

    @property
    def sort_key(self) -> SortKey:
        """Get current sort key."""
        return self._sort_key

    def cycle_sort(self) -> SortKey:
        """Cycle to the next sort key, redraw and return it."""
        keys = list(SortKey)
        self._sort_key = keys[(keys.index(self._sort_key) + 1) % len(keys)]
        self._redraw()
        return self._sort_key

    def compose(self) -> ComposeResult:
        """Compose the pool table."""
        yield DataTable(id="pool-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#pool-table", DataTable)
        table.cursor_type = "row"
        self._ensure_columns(table)

    def _ensure_columns(self, table: DataTable) -> None:
        if not table.columns:
            table.add_column("Pool", key="name")
            table.add_column("USED", key="used", width=8)
            table.add_column("COMMIT", key="committed", width=8)

    def update_pools(self, pools: Mapping[str, MemoryUsage]) -> None:
        """Replace the table contents with the pools of a new snapshot."""
        self._pools = pools
        self._redraw()

    def _sorted_pools(self) -> list[tuple[str, MemoryUsage]]:
        key_func = {
            SortKey.USED: lambda item: item[1].used,
            SortKey.COMMITTED: lambda item: item[1].committed,
            SortKey.NAME: lambda item: item[0].lower(),
        }
        reverse = self._sort_key is not SortKey.NAME
        return sorted(self._pools.items(), key=key_func[self._sort_key], reverse=reverse)

    def _redraw(self) -> None:
        table = self.query_one("#pool-table", DataTable)
        self._ensure_columns(table)
        table.clear()
        for name, usage in self._sorted_pools():
            table.add_row(name, format_bytes(usage.used), format_bytes(usage.committed), key=name)


class CollectorTable(Container):
    """Container for the garbage collector table."""

    DEFAULT_CSS = """
    CollectorTable {
        width: 1fr;
        border: solid $secondary;
    }
    """

    def compose(self) -> ComposeResult:
        """Compose the collector table."""
        yield DataTable(id="gc-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        self._ensure_columns(self.query_one("#gc-table", DataTable))

    def _ensure_columns(self, table: DataTable) -> None:
        if table.columns:
            return
        table.add_column("Collector", key="name")
        table.add_column("COUNT", key="count", width=8)
        table.add_column("FREED", key="collected", width=8)
        table.add_column("UNCOLL", key="uncollectable", width=8)
        table.add_column("TIME", key="time", width=8)

    def update_collectors(self, collectors: Mapping[str, CollectorStat]) -> None:
        """Replace the table contents with the collectors of a new snapshot."""
        table = self.query_one("#gc-table", DataTable)
        self._ensure_columns(table)
        table.clear()
        for name, stat in collectors.items():
            time = "-" if stat.time == UNKNOWN else f"{stat.time}ms"
            table.add_row(
                name,
                str(stat.count),
                str(stat.collected),
                str(stat.uncollectable),
                time,
                key=name,
            )


class SysInfoApp(App):
    """Snapshot viewer application."""

    TITLE = "sysinfo"
    SUB_TITLE = "Process and Host Snapshot"

    CSS = """
    Screen {
        layout: vertical;
    }

    #summary-stats {
        dock: top;
    }

    #tables {
        height: 1fr;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("r", "snapshot", "Snapshot"),
        ("s", "sort", "Sort"),
    ]

    def __init__(self, context: SnapshotContext | None = None) -> None:
        """
        Initialize the SysInfoApp.

        Args:
            context: Where snapshots read their data from. Defaults to the
                current process and the host's /proc.
        """
        super().__init__()
        self._snapshot_context = context if context is not None else SnapshotContext()
        self._stat: SysStat | None = None

    @property
    def stat(self) -> SysStat | None:
        """Get the snapshot currently shown."""
        return self._stat

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield SummaryStats(id="summary-stats")
        yield Horizontal(PoolTable(), CollectorTable(), id="tables")
        yield Footer()

    def on_mount(self) -> None:
        """Take the first snapshot once the widgets exist."""
        self.action_snapshot()

    def action_snapshot(self) -> None:
        """Take a fresh snapshot and show it, keeping the old one on failure."""
        try:
            stat = collect_snapshot(self._snapshot_context)
        except (SysInfoError, psutil.Error) as exc:
            LOGGER.warning("Snapshot failed: %s", exc)
            self.notify(f"Snapshot failed: {exc}", severity="error")
            return

        summary = summarize(stat)
        LOGGER.info("Snapshot summary: %s", as_dict(summary))
        self._stat = stat
        self.query_one(SummaryStats).update_summary(
            summary, f"{stat.runtime.implementation} {stat.runtime.version}"
        )
        self.query_one(PoolTable).update_pools(stat.heap.pool)
        self.query_one(CollectorTable).update_collectors(stat.heap.gc)

    def action_sort(self) -> None:
        """Handle sort action - cycle the pool table sort key."""
        new_sort_key = self.query_one(PoolTable).cycle_sort()
        self.notify(f"Sort: {new_sort_key.value.upper()}")


def main() -> None:
    """Entry point for the sysinfo application."""
    logging.basicConfig(level=logging.INFO, handlers=[TextualHandler()])
    app = SysInfoApp()
    app.run()


if __name__ == "__main__":
    main()
