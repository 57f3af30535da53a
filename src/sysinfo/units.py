"""Conversions from kernel and interpreter units to canonical units."""

from sysinfo.errors import ParseError

# The kernel reports process CPU time in clock ticks (USER_HZ) and RSS in pages.
CLOCK_TICKS_PER_SECOND = 100
PAGE_SIZE_KIB = 4

BYTES_PER_KIB = 1024
BYTES_PER_MIB = 1024 * 1024

MEMINFO_SUFFIX = " kB"


def parse_int(raw: str) -> int:
    """Parse an unsigned decimal field, raising ParseError on anything else."""
    if not isinstance(raw, str) or not (raw.isascii() and raw.isdigit()):
        raise ParseError(f"Not an unsigned integer: {raw!r}")
    return int(raw)


def bytes_to_kib(value: int) -> int:
    """Convert bytes to whole KiB, truncating."""
    return value // BYTES_PER_KIB


def cpu_ticks_to_seconds(raw: str) -> float:
    """Convert a clock tick count field to seconds."""
    return parse_int(raw) / float(CLOCK_TICKS_PER_SECOND)


def pages_to_kib(raw: str) -> int:
    """Convert a page count field to KiB."""
    return parse_int(raw) * PAGE_SIZE_KIB


def kib_text_to_bytes(text: str) -> int | None:
    """
    Convert a meminfo value such as "2048 kB" to bytes.

    Returns None when the value does not carry the " kB" suffix.
    """
    if not text.endswith(MEMINFO_SUFFIX):
        return None
    return parse_int(text[: -len(MEMINFO_SUFFIX)]) * BYTES_PER_KIB
