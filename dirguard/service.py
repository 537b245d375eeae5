"""Entry point that binds an adapter, a rule set and scan options."""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional

from .events import EventSink
from .options import ScanOptions
from .result import ScanResult
from .rules import Rule, RuleSet, default_rules
from .walker import InProcessAdapter, ScanAdapter

logger = logging.getLogger(__name__)


class ScanService:
    """Run one configured scan, optionally streaming events to a handler."""

    def __init__(
        self,
        options: ScanOptions,
        rules: Optional[Iterable[Rule]] = None,
        adapter: Optional[ScanAdapter] = None,
    ) -> None:
        self.options = options
        self.rules = RuleSet(default_rules() if rules is None else rules)
        self.adapter: ScanAdapter = adapter or InProcessAdapter()
        self._sink: Optional[EventSink] = None

    def stream(self, handler: EventSink) -> None:
        """Deliver scan events to ``handler`` on the scanning thread."""

        self._sink = handler

    def run(self, cancel: Optional[threading.Event] = None) -> ScanResult:
        logger.debug(
            "scan.begin roots=%s scope=%s",
            list(self.options.roots),
            self.options.scope.value,
        )
        result = self.adapter.run(self.rules, self.options, sink=self._sink, cancel=cancel)
        logger.debug(
            "scan.end files=%d dirs=%d viol=%d empty=%d",
            result.metrics.files_visited,
            result.metrics.directories_visited,
            len(result.violations),
            len(result.empty_directories),
        )
        return result


def run_scan(options: ScanOptions, rules: Optional[Iterable[Rule]] = None) -> ScanResult:
    return ScanService(options, rules=rules).run()
