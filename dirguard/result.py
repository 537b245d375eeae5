"""Core result data structures for the scanner."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Sequence, Tuple

from .severity import Severity

if TYPE_CHECKING:
    from .policies import Finding

SCHEMA_VERSION = 1

SEVERITY_ORDER: Sequence[Severity] = (
    Severity.FAIL,
    Severity.WARN,
    Severity.INFO,
)


@dataclass(frozen=True)
class Violation:
    """A single rule failure recorded against one file path."""

    path: str
    reason: str
    rule_id: str

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "reason": self.reason, "ruleID": self.rule_id}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Violation":
        return cls(path=str(data["path"]), reason=str(data["reason"]), rule_id=str(data["ruleID"]))


@dataclass(frozen=True)
class ScanMetrics:
    """Counters and timing for one scan."""

    files_visited: int
    directories_visited: int
    duration: float
    start: datetime
    end: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filesVisited": self.files_visited,
            "directoriesVisited": self.directories_visited,
            "duration": self.duration,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScanMetrics":
        return cls(
            files_visited=int(data["filesVisited"]),
            directories_visited=int(data["directoriesVisited"]),
            duration=float(data["duration"]),
            start=datetime.fromisoformat(data["start"]),
            end=datetime.fromisoformat(data["end"]),
        )


@dataclass(frozen=True)
class ScanResult:
    """Bundle violations, empty directories and metrics from one scan."""

    violations: Tuple[Violation, ...]
    empty_directories: Tuple[str, ...]
    metrics: ScanMetrics
    version: int = field(default=SCHEMA_VERSION)

    @classmethod
    def create(
        cls,
        violations: Iterable[Violation],
        empty_directories: Iterable[str],
        metrics: ScanMetrics,
    ) -> "ScanResult":
        return cls(
            violations=tuple(violations),
            empty_directories=tuple(empty_directories),
            metrics=metrics,
        )

    def violations_for(self, rule_id: str) -> List[Violation]:
        return [violation for violation in self.violations if violation.rule_id == rule_id]

    def to_dict(self) -> Dict[str, object]:
        return {
            "violations": [violation.to_dict() for violation in self.violations],
            "emptyDirectories": list(self.empty_directories),
            "metrics": self.metrics.to_dict(),
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScanResult":
        """Rebuild a result from :meth:`to_dict` output."""

        version = data.get("version", SCHEMA_VERSION)
        if version != SCHEMA_VERSION:
            raise ValueError(f"Unsupported scan result version: {version}")
        return cls(
            violations=tuple(Violation.from_dict(item) for item in data.get("violations", [])),
            empty_directories=tuple(str(path) for path in data.get("emptyDirectories", [])),
            metrics=ScanMetrics.from_dict(data["metrics"]),
            version=version,
        )


def format_summary_table(
    result: ScanResult,
    findings: Sequence["Finding"] = (),
    max_violations: int = 5,
) -> str:
    """Create a human-readable summary table for console output."""

    lines: List[str] = []
    lines.append("Scan Summary")
    lines.append("=" * 40)
    metrics = result.metrics
    lines.append(f"Files       : {metrics.files_visited}")
    lines.append(f"Directories : {metrics.directories_visited}")
    lines.append(f"Violations  : {len(result.violations)}")
    lines.append(f"Empty dirs  : {len(result.empty_directories)}")
    lines.append(f"Duration    : {metrics.duration:.3f}s")

    if result.violations:
        lines.append("")
        lines.append("Top Violations")
        lines.append("-" * 40)
        for violation in result.violations[:max_violations]:
            lines.append(f"[{violation.rule_id}] {violation.path} ({violation.reason})")
        remaining = len(result.violations) - max_violations
        if remaining > 0:
            lines.append(f"... and {remaining} more")

    header = f"{'Severity':<10} | {'Count':>5}"
    lines.append("")
    lines.append(header)
    lines.append("-" * len(header))
    for severity in SEVERITY_ORDER:
        count = sum(1 for finding in findings if finding.severity == severity)
        lines.append(f"{severity.value:<10} | {count:>5}")
    lines.append("-" * len(header))
    failed = any(finding.severity == Severity.FAIL for finding in findings)
    lines.append(f"Status    : {'FAIL' if failed else 'PASS'}")

    if findings:
        lines.append("")
        lines.append("Findings")
        lines.append("-" * 40)
        for finding in findings:
            lines.append(f"[{finding.severity.value}] {finding.policy_id}: {finding.message}")
    return "\n".join(lines)
