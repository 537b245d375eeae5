"""Shared test fixtures for dirguard tests."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable

import pytest

from dirguard.result import ScanMetrics, ScanResult, Violation


def _make_result(violations: Iterable[Violation] = (), empty_dirs: Iterable[str] = ()) -> ScanResult:
    now = datetime.now(timezone.utc)
    metrics = ScanMetrics(files_visited=0, directories_visited=0, duration=0.0, start=now, end=now)
    return ScanResult.create(violations, empty_dirs, metrics)


@pytest.fixture
def make_result() -> Callable[..., ScanResult]:
    """Build a ScanResult without touching the filesystem."""
    return _make_result


@pytest.fixture
def kebab_violation() -> Violation:
    return Violation(path="BadName.swift", reason="not kebab-case", rule_id="kebab-case")


@pytest.fixture
def build_tree(tmp_path: Path) -> Callable[[Iterable[str]], Path]:
    """Create entries under ``tmp_path``; names ending in ``/`` are directories."""

    def build(entries: Iterable[str]) -> Path:
        for entry in entries:
            target = tmp_path / entry
            if entry.endswith("/"):
                target.mkdir(parents=True, exist_ok=True)
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text("x", encoding="utf-8")
        return tmp_path

    return build
