"""Exceptions raised while collecting a snapshot."""


class SysInfoError(Exception):
    """Base class for all sysinfo errors."""


class PseudoFileError(SysInfoError, OSError):
    """A pseudo-file could not be opened or read."""


class ParseError(SysInfoError, ValueError):
    """Text did not match the expected table or field format."""


class UnavailableMetric(SysInfoError):
    """A derived value cannot be meaningfully computed from the snapshot."""
