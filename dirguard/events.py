"""Events emitted to an optional sink while a scan runs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union

from .result import ScanResult, Violation

PROGRESS_INTERVAL = 500


@dataclass(frozen=True)
class ScanStarted:
    root: str


@dataclass(frozen=True)
class ScanProgress:
    files: int
    directories: int


@dataclass(frozen=True)
class ViolationFound:
    violation: Violation


@dataclass(frozen=True)
class EmptyDirectoryFound:
    path: str


@dataclass(frozen=True)
class ScanFinished:
    """Terminal event; always the last one delivered for a scan."""

    result: ScanResult
    cancelled: bool = False


ScanEvent = Union[ScanStarted, ScanProgress, ViolationFound, EmptyDirectoryFound, ScanFinished]
EventSink = Callable[[ScanEvent], None]
