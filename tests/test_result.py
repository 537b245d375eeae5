import dataclasses
import json

import pytest

from dirguard.policies import Finding
from dirguard.result import ScanResult, Violation, format_summary_table
from dirguard.severity import Severity
from dirguard.walker import InProcessAdapter
from dirguard.options import ScanOptions
from dirguard.rules import RuleSet, default_rules


def test_scan_result_survives_json_round_trip(build_tree):
    root = build_tree(["BadName.swift", "Another_Bad.md", "empty/", "nested/deeper/"])
    result = InProcessAdapter().run(RuleSet(default_rules()), ScanOptions.create(roots=[root]))

    restored = ScanResult.from_dict(json.loads(json.dumps(result.to_dict())))

    assert restored == result
    assert restored.metrics.start == result.metrics.start
    assert len(restored.violations) == 2


def test_scan_result_wire_shape(make_result, kebab_violation):
    data = make_result(violations=[kebab_violation], empty_dirs=["/tmp/empty"]).to_dict()

    assert set(data) == {"violations", "emptyDirectories", "metrics", "version"}
    assert data["violations"] == [{"path": "BadName.swift", "reason": "not kebab-case", "ruleID": "kebab-case"}]
    assert data["emptyDirectories"] == ["/tmp/empty"]
    assert set(data["metrics"]) == {"filesVisited", "directoriesVisited", "duration", "start", "end"}
    assert data["version"] == 1


def test_unknown_version_is_rejected(make_result):
    data = make_result().to_dict()
    data["version"] = 2

    with pytest.raises(ValueError):
        ScanResult.from_dict(data)


def test_scan_result_is_immutable(make_result, kebab_violation):
    result = make_result(violations=[kebab_violation])

    with pytest.raises(dataclasses.FrozenInstanceError):
        result.violations = ()  # type: ignore[misc]
    with pytest.raises(dataclasses.FrozenInstanceError):
        result.violations[0].path = "other"  # type: ignore[misc]
    assert isinstance(result.violations, tuple)


def test_violations_for_filters_by_rule(make_result, kebab_violation):
    other = Violation(path="x", reason="r", rule_id="other")
    result = make_result(violations=[kebab_violation, other])

    assert result.violations_for("kebab-case") == [kebab_violation]


def test_summary_table_shows_status_and_findings(make_result, kebab_violation):
    result = make_result(violations=[kebab_violation])
    findings = [Finding(policy_id="max-violations", message="violations exceeded limit (1 > 0)", severity=Severity.FAIL)]

    table = format_summary_table(result, findings)

    assert "Scan Summary" in table
    assert "[kebab-case] BadName.swift (not kebab-case)" in table
    assert "Status    : FAIL" in table
    assert "[fail] max-violations: violations exceeded limit (1 > 0)" in table


def test_summary_table_passes_without_fail_findings(make_result):
    findings = [Finding(policy_id="p", message="heads up", severity=Severity.WARN)]

    assert "Status    : PASS" in format_summary_table(make_result(), findings)
