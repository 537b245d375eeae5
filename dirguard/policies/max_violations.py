"""Fail when a scan recorded more violations than allowed."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from dirguard.result import ScanResult
from dirguard.severity import Severity

from . import Finding

POLICY_ID = "max-violations"


@dataclass(frozen=True)
class MaxViolationsPayload:
    rule_ids: Optional[FrozenSet[str]]
    limit: int
    actual: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ruleIDs": sorted(self.rule_ids) if self.rule_ids is not None else None,
            "limit": self.limit,
            "actual": self.actual,
        }


class MaxViolationsPolicy:
    """Count violations (optionally only for ``rule_ids``) against ``limit``."""

    id = POLICY_ID

    def __init__(
        self,
        limit: int,
        rule_ids: Optional[Iterable[str]] = None,
        severity: Severity = Severity.FAIL,
    ) -> None:
        self.limit = limit
        self.rule_ids: Optional[FrozenSet[str]] = frozenset(rule_ids) if rule_ids is not None else None
        self.severity = Severity(severity)

    def evaluate(self, result: ScanResult) -> List[Finding]:
        actual = sum(
            1
            for violation in result.violations
            if self.rule_ids is None or violation.rule_id in self.rule_ids
        )
        if actual <= self.limit:
            return []
        return [
            Finding(
                policy_id=self.id,
                message=f"violations exceeded limit ({actual} > {self.limit})",
                severity=self.severity,
                payload=MaxViolationsPayload(rule_ids=self.rule_ids, limit=self.limit, actual=actual),
            )
        ]
