"""Scan options and the default ignore list."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence, Tuple

# Build artifacts, version control, package manager caches, OS metadata and
# project configuration files.
DEFAULT_IGNORE_PREFIXES: Tuple[str, ...] = (
    ".build",
    ".DS_Store",
    ".flf",  # figlet fonts
    ".flf2a",
    ".git",
    ".github",
    ".gitignore",
    ".json",
    ".spi",
    ".swiftpm",
    ".tulsiconf",
    ".tulsiproj",
    "BUILD",
    "LICENSE",
    "Package.resolved",
)

DOCC_MARKER = ".docc" + os.sep


class ScanScope(str, Enum):
    """Which part of the tree a scan considers."""

    DOCC = "docc"
    ALL = "all"


@dataclass(frozen=True)
class ScanOptions:
    """Inputs for a single scan."""

    roots: Tuple[str, ...]
    scope: ScanScope = ScanScope.ALL
    ignore_prefixes: Tuple[str, ...] = DEFAULT_IGNORE_PREFIXES
    # Advisory only; the in-process adapter is single-threaded.
    concurrency: Optional[int] = None
    follow_symlinks: bool = False

    @classmethod
    def create(
        cls,
        roots: Iterable[str],
        scope: ScanScope | str = ScanScope.ALL,
        ignore_prefixes: Sequence[str] | None = None,
        concurrency: Optional[int] = None,
        follow_symlinks: bool = False,
    ) -> "ScanOptions":
        """Normalize loosely typed inputs (strings, Paths, lists) into options."""

        return cls(
            roots=tuple(os.fspath(root) for root in roots),
            scope=ScanScope(scope),
            ignore_prefixes=DEFAULT_IGNORE_PREFIXES if ignore_prefixes is None else tuple(ignore_prefixes),
            concurrency=concurrency,
            follow_symlinks=follow_symlinks,
        )


def matches_ignore(component: str, ignore_prefixes: Iterable[str]) -> bool:
    """Return True when ``component`` starts or ends with any ignore string."""

    return any(component.startswith(item) or component.endswith(item) for item in ignore_prefixes)
