"""Fail when directories under the configured roots are empty.

Unlike the other policies this one does not read ``ScanResult.empty_directories``:
it lists the roots itself at evaluation time, so its answer reflects the
filesystem as it is when the policy runs.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Tuple

from dirguard.options import DEFAULT_IGNORE_PREFIXES
from dirguard.result import ScanResult
from dirguard.severity import Severity

from . import Finding

logger = logging.getLogger(__name__)

POLICY_ID = "no-empty-dirs"


class NoEmptyDirsMode(str, Enum):
    """How child entries are classified when deciding emptiness."""

    # Count everything; only truly childless directories are empty.
    STRICT_ZERO = "strict-zero"
    # Treat the default ignore list (.DS_Store, .git, ...) as noise.
    IGNORE_NOISE = "ignore-noise"
    # Caller-provided ignore prefixes and keep names.
    CUSTOM = "custom"


@dataclass(frozen=True)
class NoEmptyDirsPayload:
    mode: str
    count: int
    directories: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"mode": self.mode, "count": self.count, "directories": list(self.directories)}


class NoEmptyDirsPolicy:
    """Report every empty directory under ``roots``, the roots included."""

    id = POLICY_ID

    def __init__(
        self,
        mode: NoEmptyDirsMode | str,
        roots: Iterable[str],
        ignore: Iterable[str] = (),
        keep: Iterable[str] = (),
        severity: Severity = Severity.FAIL,
    ) -> None:
        self.mode = NoEmptyDirsMode(mode)
        self.roots: Tuple[str, ...] = tuple(os.fspath(root) for root in roots)
        self.ignore: Tuple[str, ...] = tuple(ignore)
        self.keep: FrozenSet[str] = frozenset(keep)
        self.severity = Severity(severity)

    def _classifiers(self) -> Tuple[Tuple[str, ...], FrozenSet[str]]:
        if self.mode == NoEmptyDirsMode.STRICT_ZERO:
            return (), frozenset()
        if self.mode == NoEmptyDirsMode.IGNORE_NOISE:
            return DEFAULT_IGNORE_PREFIXES, frozenset()
        return self.ignore, self.keep

    def evaluate(self, result: ScanResult) -> List[Finding]:
        ignores, keepers = self._classifiers()
        empties: List[str] = []
        for root in self.roots:
            if not os.path.isdir(root):
                logger.debug("no-empty-dirs: skipping root %s", root)
                continue
            for directory in _iter_directories(root):
                if _is_empty(directory, ignores, keepers):
                    empties.append(directory)
            if _is_empty(root, ignores, keepers):
                empties.append(root)

        if not empties:
            return []
        return [
            Finding(
                policy_id=self.id,
                message=f"empty directories found (count={len(empties)})",
                severity=self.severity,
                payload=NoEmptyDirsPayload(
                    mode=self.mode.value,
                    count=len(empties),
                    directories=tuple(empties),
                ),
            )
        ]


def _iter_directories(root: str) -> Iterator[str]:
    """Yield real (non-symlink) directories below ``root`` in pre-order."""

    try:
        with os.scandir(root) as iterator:
            entries = sorted(iterator, key=lambda entry: entry.name)
    except OSError:
        return
    for entry in entries:
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError:
            continue
        if is_dir:
            yield entry.path
            yield from _iter_directories(entry.path)


def _is_empty(directory: str, ignores: Tuple[str, ...], keepers: FrozenSet[str]) -> bool:
    try:
        names = os.listdir(directory)
    except OSError:
        return False
    for name in names:
        if name in (".", ".."):
            continue
        if any(name.startswith(prefix) for prefix in ignores):
            continue
        if name in keepers:
            continue
        return False
    return True
