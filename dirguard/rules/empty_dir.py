"""Report directories that end the scan with no children."""

from __future__ import annotations

from typing import Optional

from dirguard.result import Violation

from . import Rule


class EmptyDirectoryRule(Rule):
    """Detect empty directories and recommend deletion."""

    id = "empty-dir"
    description = "Detect empty directories and recommend deletion."

    def apply(self, path: str) -> Optional[Violation]:
        return None

    def finalize(self, directory: str, child_count: int) -> Optional[str]:
        return directory if child_count == 0 else None
