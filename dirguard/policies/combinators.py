"""Boolean-like composition of policies.

A child passes when its findings contain no fail-severity entry. Warn and
info findings never change the outcome but are still carried in the
aggregate finding's ``child_findings``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Tuple

from dirguard.result import ScanResult
from dirguard.severity import Severity

from . import AnyPolicy, Finding, PolicyLike, is_passing


@dataclass(frozen=True)
class CombinatorPayload:
    passing_count: int
    failing_count: int
    child_findings: Tuple[Finding, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passingCount": self.passing_count,
            "failingCount": self.failing_count,
            "childFindings": [finding.to_dict() for finding in self.child_findings],
        }


@dataclass(frozen=True)
class ThresholdPayload:
    required: int
    passing_count: int
    failing_count: int
    child_findings: Tuple[Finding, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "required": self.required,
            "passingCount": self.passing_count,
            "failingCount": self.failing_count,
            "childFindings": [finding.to_dict() for finding in self.child_findings],
        }


@dataclass(frozen=True)
class NotPayload:
    child_findings: Tuple[Finding, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"childFindings": [finding.to_dict() for finding in self.child_findings]}


class _Combinator:
    id = ""

    def __init__(self, children: Iterable[PolicyLike], severity: Severity = Severity.FAIL) -> None:
        self.children: Tuple[AnyPolicy, ...] = tuple(AnyPolicy.wrap(child) for child in children)
        self.severity = Severity(severity)

    def _evaluate_children(self, result: ScanResult) -> Tuple[int, Tuple[Finding, ...]]:
        """Return the passing child count and all child findings, flattened in order."""

        passing = 0
        flattened: List[Finding] = []
        for child in self.children:
            findings = child.evaluate(result)
            if is_passing(findings):
                passing += 1
            flattened.extend(findings)
        return passing, tuple(flattened)


class AllOfPolicy(_Combinator):
    """Passes when every child passes; no children is a pass."""

    id = "all-of"

    def evaluate(self, result: ScanResult) -> List[Finding]:
        if not self.children:
            return []
        passing, child_findings = self._evaluate_children(result)
        total = len(self.children)
        if passing == total:
            return []
        return [
            Finding(
                policy_id=self.id,
                message=f"all-of requirement failed (passing={passing} < total={total})",
                severity=self.severity,
                payload=CombinatorPayload(
                    passing_count=passing,
                    failing_count=total - passing,
                    child_findings=child_findings,
                ),
            )
        ]


class AnyOfPolicy(_Combinator):
    """Passes when at least one child passes; no children is a failure."""

    id = "any-of"

    def evaluate(self, result: ScanResult) -> List[Finding]:
        passing, child_findings = self._evaluate_children(result)
        if passing > 0:
            return []
        return [
            Finding(
                policy_id=self.id,
                message="any-of requirement failed (no passing children)",
                severity=self.severity,
                payload=CombinatorPayload(
                    passing_count=0,
                    failing_count=len(self.children),
                    child_findings=child_findings,
                ),
            )
        ]


class NOfPolicy(_Combinator):
    """Passes when at least ``required`` children pass.

    ``required <= 0`` is always satisfied, without evaluating children. With
    no children and a positive ``required`` the policy always fails.
    """

    id = "n-of"

    def __init__(
        self,
        children: Iterable[PolicyLike],
        required: int,
        severity: Severity = Severity.FAIL,
    ) -> None:
        super().__init__(children, severity)
        self.required = required

    def evaluate(self, result: ScanResult) -> List[Finding]:
        if self.required <= 0:
            return []
        if not self.children:
            return [
                self._finding(
                    f"n-of requirement failed (required={self.required}, total=0)",
                    passing=0,
                    child_findings=(),
                )
            ]
        passing, child_findings = self._evaluate_children(result)
        if passing >= self.required:
            return []
        return [
            self._finding(
                f"n-of requirement failed (passing={passing} < required={self.required})",
                passing=passing,
                child_findings=child_findings,
            )
        ]

    def _finding(self, message: str, passing: int, child_findings: Tuple[Finding, ...]) -> Finding:
        return Finding(
            policy_id=self.id,
            message=message,
            severity=self.severity,
            payload=ThresholdPayload(
                required=self.required,
                passing_count=passing,
                failing_count=len(self.children) - passing,
                child_findings=child_findings,
            ),
        )


class NotPolicy:
    """Wraps a single child; fails when the child produced fail findings."""

    id = "not"

    def __init__(self, child: PolicyLike, severity: Severity = Severity.FAIL) -> None:
        self.child = AnyPolicy.wrap(child)
        self.severity = Severity(severity)

    def evaluate(self, result: ScanResult) -> List[Finding]:
        child_findings = self.child.evaluate(result)
        if is_passing(child_findings):
            return []
        return [
            Finding(
                policy_id=self.id,
                message="not requirement failed (child produced failures)",
                severity=self.severity,
                payload=NotPayload(child_findings=tuple(child_findings)),
            )
        ]
