"""Severity definitions for policy findings."""

from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    """Enumerate the supported severity levels for findings."""

    FAIL = "fail"
    WARN = "warn"
    INFO = "info"

    @property
    def exit_priority(self) -> int:
        """Return an integer ranking to drive exit code decisions."""

        ordering = {
            Severity.FAIL: 1,
            Severity.WARN: 0,
            Severity.INFO: 0,
        }
        return ordering[self]
