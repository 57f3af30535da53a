"""Canonical identifiers for memory regions and collector generations."""

from dataclasses import dataclass
from types import MappingProxyType

POOL_NAMES = MappingProxyType(
    {
        # Kernel pseudo-paths of the interpreter's memory mappings
        "[heap]": "heap",
        "[stack]": "stack",
        "[anon]": "anonymous",
        "[vdso]": "vdso",
        "[vvar]": "vvar",
        "[vsyscall]": "vsyscall",
        # CPython collector generations
        "gen0": "young-generation",
        "gen1": "middle-generation",
        "gen2": "old-generation",
        # Pool and collector names reported by JVM runtimes
        "CodeHeap 'non-profiled nmethods'": "codeheap-non-profiled-nmethods",
        "CodeHeap 'profiled nmethods'": "codeheap-profiled-nmethods",
        "CodeHeap 'non-nmethods'": "codeheap-non-nmethods",
        "Metaspace": "metaspace",
        "Compressed Class Space": "compressed-class-space",
        "G1 Eden Space": "g1-eden-space",
        "G1 Old Gen": "g1-old-gen",
        "G1 Survivor Space": "g1-survivor-space",
        "G1 Old Generation": "g1-old-generation",
        "G1 Young Generation": "g1-young-generation",
        "Copy": "copy",
        "MarkSweepCompact": "mark-sweep-compact",
        "Tenured Gen": "tenured-gen",
        "Eden Space": "eden-space",
        "Survivor Space": "survivor-space",
    }
)


@dataclass(slots=True, frozen=True)
class Known:
    """A raw name found in the table."""

    identifier: str


@dataclass(slots=True, frozen=True)
class Unknown:
    """A raw name not in the table, kept verbatim."""

    raw_name: str

    @property
    def identifier(self) -> str:
        return self.raw_name


def lookup(raw_name: str) -> Known | Unknown:
    """Look up a raw name with exact, case-sensitive matching."""
    canonical = POOL_NAMES.get(raw_name)
    if canonical is None:
        return Unknown(raw_name)
    return Known(canonical)


def pool_name(raw_name: str) -> str:
    """
    Return the canonical identifier for a pool or collector name.

    Names missing from the table pass through unchanged so that regions and
    collectors introduced by newer kernels or interpreters are still reported.
    """
    return lookup(raw_name).identifier
