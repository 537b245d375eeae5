"""Filesystem traversal that drives a rule set and produces a scan result."""

from __future__ import annotations

import logging
import os
import stat
import threading
import time
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol, Set, Tuple

from .errors import RootEnumerationError
from .events import (
    PROGRESS_INTERVAL,
    EmptyDirectoryFound,
    EventSink,
    ScanFinished,
    ScanProgress,
    ScanEvent,
    ScanStarted,
    ViolationFound,
)
from .options import DOCC_MARKER, ScanOptions, ScanScope, matches_ignore
from .result import ScanMetrics, ScanResult, Violation
from .rules import RuleSet

logger = logging.getLogger(__name__)


class ScanAdapter(Protocol):
    """Strategy that walks the roots in ``options`` and applies ``rules``."""

    def run(
        self,
        rules: RuleSet,
        options: ScanOptions,
        sink: Optional[EventSink] = None,
        cancel: Optional[threading.Event] = None,
    ) -> ScanResult:
        """Scan every root and return the aggregated result."""


class _Cancelled(Exception):
    pass


class _RootWalk:
    """State for traversing a single root."""

    def __init__(self, adapter_state: "_ScanState", root: str) -> None:
        self.state = adapter_state
        self.root = os.path.normpath(root)
        # Keyed by normalized directory path; insertion order is traversal order.
        self.child_counts: Dict[str, int] = {}
        self.entered: Set[Tuple[int, int]] = set()

    def run(self) -> None:
        try:
            entries = self._list(self.root)
        except OSError as exc:
            raise RootEnumerationError(self.root, exc.strerror or str(exc)) from exc
        if self.state.options.follow_symlinks:
            self._mark_entered(self.root)
        self._walk_entries(self.root, entries, ())
        self._finalize()

    def _list(self, directory: str) -> List[os.DirEntry]:
        self.state.check_cancel()
        with os.scandir(directory) as iterator:
            return sorted(iterator, key=lambda entry: entry.name)

    def _mark_entered(self, directory: str) -> bool:
        """Record ``directory``'s identity; False if it was entered before."""

        try:
            info = os.stat(directory)
        except OSError:
            return False
        key = (info.st_dev, info.st_ino)
        if key in self.entered:
            return False
        self.entered.add(key)
        return True

    def _walk(self, directory: str, relative: Tuple[str, ...]) -> None:
        try:
            entries = self._list(directory)
        except OSError as exc:
            logger.debug("skip unreadable directory %s: %s", directory, exc)
            self.child_counts.pop(os.path.normpath(directory), None)
            return
        self._walk_entries(directory, entries, relative)

    def _walk_entries(self, directory: str, entries: List[os.DirEntry], relative: Tuple[str, ...]) -> None:
        options = self.state.options
        for entry in entries:
            parts = relative + (entry.name,)
            if any(matches_ignore(part, options.ignore_prefixes) for part in parts):
                continue

            self.state.check_cancel()
            try:
                is_link = entry.is_symlink()
                if is_link and not options.follow_symlinks:
                    continue
                info = entry.stat(follow_symlinks=is_link)
            except OSError as exc:
                logger.debug("skip unreadable entry %s: %s", entry.path, exc)
                continue

            path = entry.path
            is_dir = stat.S_ISDIR(info.st_mode)
            # A followed link to a directory we already entered would loop.
            if is_dir and is_link and not self._mark_entered(path):
                continue

            if options.scope == ScanScope.DOCC and DOCC_MARKER not in path:
                if is_dir:
                    self._descend(path, parts, is_link)
                continue

            if is_dir:
                self.state.directories_visited += 1
                self.child_counts.setdefault(os.path.normpath(path), 0)
                self._count_child(directory)
                if self.state.rules.accept(path):
                    self._descend(path, parts, is_link)
                continue

            if stat.S_ISREG(info.st_mode):
                self.state.visit_file(path)
                self._count_child(directory)

    def _descend(self, path: str, parts: Tuple[str, ...], is_link: bool) -> None:
        if self.state.options.follow_symlinks and not is_link and not self._mark_entered(path):
            # Already walked through a followed link.
            self.child_counts.pop(os.path.normpath(path), None)
            return
        self._walk(path, parts)

    def _count_child(self, directory: str) -> None:
        parent = os.path.normpath(directory)
        self.child_counts[parent] = self.child_counts.get(parent, 0) + 1

    def _finalize(self) -> None:
        for directory, count in self.child_counts.items():
            if count != 0:
                continue
            recorded = self.state.rules.finalize(directory, count)
            if recorded is not None:
                self.state.empty_directories.append(recorded)
                self.state.emit(EmptyDirectoryFound(path=recorded))


class _ScanState:
    """Counters owned by one scan invocation."""

    def __init__(
        self,
        rules: RuleSet,
        options: ScanOptions,
        sink: Optional[EventSink],
        cancel: Optional[threading.Event],
    ) -> None:
        self.rules = rules
        self.options = options
        self.sink = sink
        self.cancel = cancel
        self.files_visited = 0
        self.directories_visited = 0
        self.violations: List[Violation] = []
        self.empty_directories: List[str] = []

    def emit(self, event: ScanEvent) -> None:
        if self.sink is not None:
            self.sink(event)

    def check_cancel(self) -> None:
        if self.cancel is not None and self.cancel.is_set():
            raise _Cancelled()

    def visit_file(self, path: str) -> None:
        self.files_visited += 1
        violation = self.rules.apply(path)
        if violation is not None:
            self.violations.append(violation)
            self.emit(ViolationFound(violation=violation))
        if self.files_visited % PROGRESS_INTERVAL == 0:
            self.emit(ScanProgress(files=self.files_visited, directories=self.directories_visited))


class InProcessAdapter:
    """Single-threaded, synchronous walker.

    ``options.concurrency`` is accepted but ignored. Events reach ``sink`` on
    the calling thread in traversal order and ``ScanFinished`` is always the
    last one, including when ``cancel`` is set mid-scan.
    """

    def run(
        self,
        rules: RuleSet,
        options: ScanOptions,
        sink: Optional[EventSink] = None,
        cancel: Optional[threading.Event] = None,
    ) -> ScanResult:
        start = datetime.now(timezone.utc)
        started = time.monotonic()
        state = _ScanState(rules, options, sink, cancel)
        cancelled = False

        for root in options.roots:
            state.emit(ScanStarted(root=root))
            try:
                _RootWalk(state, root).run()
            except _Cancelled:
                logger.info("scan cancelled while walking %s", root)
                cancelled = True
                break

        end = datetime.now(timezone.utc)
        metrics = ScanMetrics(
            files_visited=state.files_visited,
            directories_visited=state.directories_visited,
            duration=time.monotonic() - started,
            start=start,
            end=end,
        )
        result = ScanResult.create(state.violations, state.empty_directories, metrics)
        state.emit(ScanFinished(result=result, cancelled=cancelled))
        return result
