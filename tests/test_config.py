import pytest

from dirguard.config import Config, build_policy, load_config, parse_config
from dirguard.errors import ConfigError
from dirguard.options import DEFAULT_IGNORE_PREFIXES, ScanScope
from dirguard.policies.combinators import AllOfPolicy, AnyOfPolicy, NOfPolicy, NotPolicy
from dirguard.policies.max_violations import MaxViolationsPolicy
from dirguard.policies.no_empty_dirs import NoEmptyDirsMode, NoEmptyDirsPolicy
from dirguard.severity import Severity

CONFIG_TEXT = """
scan:
  scope: docc
  extra_ignore_prefixes: [node_modules]
  follow_symlinks: true
  concurrency: 4
policies:
  - max-violations: {rules: [kebab-case], limit: 0}
  - no-empty-dirs: {mode: ignore-noise}
  - any-of:
      - max-violations: {limit: 10}
  - n-of:
      required: 1
      severity: warn
      policies:
        - max-violations: {rules: [empty-dir], limit: 0}
  - not: {max-violations: {limit: 100}}
""".strip()


def test_load_config_builds_options_and_policy_tree(tmp_path):
    path = tmp_path / ".dirguard.yaml"
    path.write_text(CONFIG_TEXT, encoding="utf-8")

    config = load_config(path)
    options = config.options(["src"])
    policies = config.build_policies(["src"])

    assert options.roots == ("src",)
    assert options.scope == ScanScope.DOCC
    assert options.ignore_prefixes == DEFAULT_IGNORE_PREFIXES + ("node_modules",)
    assert options.follow_symlinks is True
    assert options.concurrency == 4

    assert [type(policy) for policy in policies] == [
        MaxViolationsPolicy,
        NoEmptyDirsPolicy,
        AnyOfPolicy,
        NOfPolicy,
        NotPolicy,
    ]
    assert policies[0].rule_ids == frozenset({"kebab-case"})
    assert policies[1].mode == NoEmptyDirsMode.IGNORE_NOISE
    assert policies[1].roots == ("src",)
    assert policies[3].required == 1
    assert policies[3].severity == Severity.WARN
    assert policies[4].child.id == "max-violations"


def test_missing_config_file_returns_none(tmp_path):
    assert load_config(tmp_path / "absent.yaml") is None


def test_empty_config_uses_defaults():
    config = Config()

    options = config.options(["."])

    assert options.scope == ScanScope.ALL
    assert options.ignore_prefixes == DEFAULT_IGNORE_PREFIXES
    assert config.build_policies(["."]) == []


def test_group_accepts_mapping_form():
    policy = build_policy({"all-of": {"severity": "info", "policies": [{"max-violations": {"limit": 1}}]}}, roots=())

    assert isinstance(policy, AllOfPolicy)
    assert policy.severity == Severity.INFO
    assert [child.id for child in policy.children] == ["max-violations"]


def test_not_accepts_explicit_policy_key():
    policy = build_policy({"not": {"policy": {"any-of": []}, "severity": "warn"}}, roots=())

    assert isinstance(policy, NotPolicy)
    assert policy.severity == Severity.WARN
    assert policy.child.id == "any-of"


def test_no_empty_dirs_custom_lists():
    policy = build_policy(
        {"no-empty-dirs": {"mode": "custom", "roots": ["docs"], "ignore": [".DS"], "keep": [".gitkeep"]}},
        roots=("src",),
    )

    assert policy.roots == ("docs",)
    assert policy.ignore == (".DS",)
    assert policy.keep == frozenset({".gitkeep"})


@pytest.mark.parametrize(
    "data",
    [
        ["not", "a", "mapping"],
        {"unexpected": 1},
        {"scan": {"bogus": True}},
        {"scan": {"scope": "everything"}},
        {"scan": {"ignore_prefixes": "not-a-list"}},
        {"scan": {"concurrency": "many"}},
        {"scan": {"concurrency": True}},
        {"policies": {"max-violations": {"limit": 1}}},
        {"policies": [{"max-violations": {"limit": "ten"}}]},
        {"policies": [{"max-violations": {"limit": 1, "extra": 2}}]},
        {"policies": [{"unknown-policy": {}}]},
        {"policies": [{"max-violations": {"limit": 1}, "not": {}}]},
        {"policies": [{"n-of": {"policies": []}}]},
        {"policies": [{"no-empty-dirs": {"mode": "sometimes"}}]},
        {"policies": [{"max-violations": {"limit": 1, "severity": "critical"}}]},
    ],
)
def test_invalid_config_raises(data):
    with pytest.raises(ConfigError):
        config = parse_config(data)
        config.options(["."])


def test_config_error_is_value_error():
    assert issubclass(ConfigError, ValueError)
