"""Readers and parsers for kernel pseudo-files under /proc."""

import logging
import re
from collections.abc import Mapping
from pathlib import Path

from sysinfo.errors import ParseError, PseudoFileError
from sysinfo.models import MemInfoStat, ProcStat
from sysinfo.units import cpu_ticks_to_seconds, kib_text_to_bytes, pages_to_kib, parse_int

LOGGER = logging.getLogger(__name__)

READ_CHUNK_SIZE = 4096

_COLON_SEPARATOR = re.compile(r":\s*")

MEMINFO_FIELDS = {
    "mem_total": "MemTotal",
    "mem_free": "MemFree",
    "mem_available": "MemAvailable",
    "buffers": "Buffers",
    "cached": "Cached",
    "swap_total": "SwapTotal",
    "swap_free": "SwapFree",
}

# Zero-based positions in /proc/<pid>/stat, see proc(5). These follow the
# kernel's field layout; a layout change only needs this table updated.
STAT_FIELDS = {
    "pid": 0,
    "comm": 1,
    "utime": 13,
    "stime": 14,
    "rss": 23,
}


def read_pseudo_file(path: str | Path) -> str:
    """
    Read a pseudo-file in full and decode it as text.

    Procfs files usually report a size of zero, so the file is drained in
    chunks until end of stream instead of trusting its declared length.
    """
    chunks: list[bytes] = []
    try:
        with open(path, "rb", buffering=0) as f:
            while True:
                chunk = f.read(READ_CHUNK_SIZE)
                if not chunk:
                    break
                chunks.append(chunk)
    except OSError as exc:
        raise PseudoFileError(f"Cannot read {path}: {exc}") from exc
    return b"".join(chunks).decode("utf-8", errors="replace")


def parse_colon_table(text: str) -> dict[str, str]:
    """Parse "KEY: value" lines (the /proc/meminfo format) into a dict."""
    table: dict[str, str] = {}
    for line in text.splitlines():
        if not line.strip():
            continue
        parts = _COLON_SEPARATOR.split(line, maxsplit=1)
        if len(parts) != 2:
            raise ParseError(f"Malformed table line: {line!r}")
        key, value = parts
        table[key] = value.rstrip()
    return table


def project_keys(mapping: Mapping[str, str], key_map: Mapping[str, str]) -> dict[str, str | None]:
    """
    Pick the requested keys out of a mapping under new names.

    Keys absent from the mapping yield None; older kernels legitimately omit
    some fields (MemAvailable appeared in 3.14).
    """
    return {out_key: mapping.get(in_key) for out_key, in_key in key_map.items()}


def parse_meminfo(text: str) -> MemInfoStat:
    """Build a MemInfoStat from the contents of /proc/meminfo."""
    projected = project_keys(parse_colon_table(text), MEMINFO_FIELDS)
    values = {
        key: kib_text_to_bytes(raw) if raw is not None else None
        for key, raw in projected.items()
    }
    return MemInfoStat(**values)


def read_meminfo(proc_root: str | Path = "/proc") -> MemInfoStat:
    """Read host memory counters."""
    path = Path(proc_root) / "meminfo"
    meminfo = parse_meminfo(read_pseudo_file(path))
    LOGGER.debug("Read %s: %s", path, meminfo)
    return meminfo


def split_stat_fields(text: str) -> list[str]:
    """
    Split a /proc/<pid>/stat line into positional fields.

    The command name (field 1) is wrapped in parentheses and may itself hold
    spaces or parentheses, so it is taken as everything up to the last ")"
    and only the rest of the line is split on whitespace.
    """
    line = text.strip()
    open_paren = line.find("(")
    close_paren = line.rfind(")")
    if open_paren <= 0 or close_paren < open_paren:
        raise ParseError(f"Malformed stat line: {line[:64]!r}")
    pid = line[:open_paren].strip()
    comm = line[open_paren : close_paren + 1]
    return [pid, comm, *line[close_paren + 1 :].split()]


def stat_field(fields: list[str], name: str) -> str:
    """Return a named field of a split stat line."""
    index = STAT_FIELDS[name]
    try:
        return fields[index]
    except IndexError as exc:
        raise ParseError(f"Stat line has {len(fields)} fields, no {name!r} at {index}") from exc


def parse_proc_stat(text: str) -> ProcStat:
    """Build a ProcStat from the contents of /proc/<pid>/stat."""
    fields = split_stat_fields(text)
    user = cpu_ticks_to_seconds(stat_field(fields, "utime"))
    system = cpu_ticks_to_seconds(stat_field(fields, "stime"))
    return ProcStat(
        pid=parse_int(stat_field(fields, "pid")),
        rss_kib=pages_to_kib(stat_field(fields, "rss")),
        user_cpu_seconds=user,
        system_cpu_seconds=system,
        total_cpu_seconds=user + system,
    )


def read_proc_stat(proc_root: str | Path = "/proc", pid: int | str = "self") -> ProcStat:
    """Read CPU and RSS figures for one process ("self" is the caller)."""
    path = Path(proc_root) / str(pid) / "stat"
    stat = parse_proc_stat(read_pseudo_file(path))
    LOGGER.debug("Read %s: %s", path, stat)
    return stat
