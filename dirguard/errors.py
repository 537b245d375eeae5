"""Exception types raised by the scanner."""

from __future__ import annotations


class ScanError(Exception):
    """Base class for errors that abort a scan."""


class RootEnumerationError(ScanError):
    """A scan root could not be listed at all."""

    def __init__(self, root: str, reason: str) -> None:
        super().__init__(f"Unable to enumerate root {root}: {reason}")
        self.root = root
        self.reason = reason


class DirectoryEnumerationError(OSError):
    """A directory handed to the flatten helpers could not be listed."""


class ConfigError(ValueError):
    """The configuration file is malformed."""
