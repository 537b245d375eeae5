"""Policy interface, findings and the evaluator."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Sequence, Union

from dirguard.result import ScanResult
from dirguard.severity import Severity


class Payload(Protocol):
    """Policy-specific structured data attached to a finding."""

    def to_dict(self) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class Finding:
    """Severity-tagged outcome of evaluating one policy."""

    message: str
    severity: Severity
    payload: Optional[Payload] = None
    policy_id: str = ""

    @property
    def failed(self) -> bool:
        return self.severity == Severity.FAIL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "policyID": self.policy_id,
            "message": self.message,
            "severity": self.severity.value,
            "payload": self.payload.to_dict() if self.payload is not None else None,
        }


class Policy(Protocol):
    """Protocol implemented by leaf policies and combinators."""

    id: str

    def evaluate(self, result: ScanResult) -> List[Finding]:
        """Return findings for ``result``; an empty list means the policy passed."""


class AnyPolicy:
    """Uniform (identifier, evaluate function) wrapper for heterogeneous lists.

    Findings that come back without a ``policy_id`` are tagged with the
    wrapper's identifier, which lets plain functions act as policies::

        AnyPolicy("no-violations", lambda result: [...])
    """

    def __init__(self, policy_id: str, evaluate: Callable[[ScanResult], Iterable[Finding]]) -> None:
        self.id = policy_id
        self._evaluate = evaluate

    @classmethod
    def wrap(cls, policy: Union["AnyPolicy", Policy]) -> "AnyPolicy":
        if isinstance(policy, AnyPolicy):
            return policy
        return cls(policy.id, policy.evaluate)

    def evaluate(self, result: ScanResult) -> List[Finding]:
        return [
            finding if finding.policy_id else replace(finding, policy_id=self.id)
            for finding in self._evaluate(result)
        ]

    def __repr__(self) -> str:
        return f"AnyPolicy({self.id!r})"


PolicyLike = Union[AnyPolicy, Policy]


def is_passing(findings: Iterable[Finding]) -> bool:
    """A policy passes when none of its findings has fail severity."""

    return not any(finding.failed for finding in findings)


def has_failures(findings: Iterable[Finding]) -> bool:
    return not is_passing(findings)


class PolicyEvaluator:
    """Apply an ordered list of policies to one scan result."""

    def evaluate(self, result: ScanResult, policies: Sequence[PolicyLike]) -> List[Finding]:
        findings: List[Finding] = []
        for policy in policies:
            findings.extend(AnyPolicy.wrap(policy).evaluate(result))
        return findings


def evaluate_policies(result: ScanResult, policies: Sequence[PolicyLike]) -> List[Finding]:
    return PolicyEvaluator().evaluate(result, policies)


__all__ = [
    "AnyPolicy",
    "Finding",
    "Payload",
    "Policy",
    "PolicyEvaluator",
    "PolicyLike",
    "evaluate_policies",
    "has_failures",
    "is_passing",
]
