"""Load scan options and a policy tree from a YAML configuration file.

Example ``.dirguard.yaml``::

    scan:
      scope: all
      extra_ignore_prefixes: [node_modules]
    policies:
      - max-violations: {rules: [kebab-case], limit: 0}
      - any-of:
          - no-empty-dirs: {mode: ignore-noise}
          - max-violations: {rules: [empty-dir], limit: 2}
      - n-of:
          required: 1
          severity: warn
          policies:
            - max-violations: {limit: 10}
      - not: {max-violations: {limit: 100}}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from .errors import ConfigError
from .options import DEFAULT_IGNORE_PREFIXES, ScanOptions, ScanScope
from .policies import PolicyLike
from .policies.combinators import AllOfPolicy, AnyOfPolicy, NOfPolicy, NotPolicy
from .policies.max_violations import MaxViolationsPolicy
from .policies.no_empty_dirs import NoEmptyDirsMode, NoEmptyDirsPolicy
from .severity import Severity
from .utils import read_yaml_file

DEFAULT_CONFIG_FILE = ".dirguard.yaml"

SCAN_KEYS = {"scope", "ignore_prefixes", "extra_ignore_prefixes", "follow_symlinks", "concurrency"}


@dataclass
class Config:
    """Parsed configuration; policies are built lazily because some need the roots."""

    scan: Dict[str, Any] = field(default_factory=dict)
    policies: List[Any] = field(default_factory=list)

    def options(self, roots: Sequence[str]) -> ScanOptions:
        ignore = list(self.scan.get("ignore_prefixes", DEFAULT_IGNORE_PREFIXES))
        ignore.extend(self.scan.get("extra_ignore_prefixes", []))
        try:
            return ScanOptions.create(
                roots=roots,
                scope=self.scan.get("scope", ScanScope.ALL),
                ignore_prefixes=ignore,
                concurrency=self.scan.get("concurrency"),
                follow_symlinks=bool(self.scan.get("follow_symlinks", False)),
            )
        except ValueError as exc:
            raise ConfigError(f"Invalid scan settings: {exc}") from exc

    def build_policies(self, roots: Sequence[str]) -> List[PolicyLike]:
        return [build_policy(node, roots) for node in self.policies]


def load_config(path: Path) -> Optional[Config]:
    """Read ``path``; returns ``None`` when the file does not exist."""

    data = read_yaml_file(path)
    if data is None:
        return None
    return parse_config(data, source=str(path))


def parse_config(data: Any, source: str = "<config>") -> Config:
    if not isinstance(data, dict):
        raise ConfigError(f"Config at {source} is not a mapping")
    unknown = set(data) - {"scan", "policies"}
    if unknown:
        raise ConfigError(f"Unknown top-level keys in {source}: {sorted(unknown)}")

    scan = data.get("scan") or {}
    if not isinstance(scan, dict):
        raise ConfigError("'scan' must be a mapping")
    unknown = set(scan) - SCAN_KEYS
    if unknown:
        raise ConfigError(f"Unknown scan settings: {sorted(unknown)}")
    for key in ("ignore_prefixes", "extra_ignore_prefixes"):
        if key in scan and not _is_string_list(scan[key]):
            raise ConfigError(f"'scan.{key}' must be a list of strings")
    concurrency = scan.get("concurrency")
    if concurrency is not None and (not isinstance(concurrency, int) or isinstance(concurrency, bool)):
        raise ConfigError("'scan.concurrency' must be an integer")

    policies = data.get("policies") or []
    if not isinstance(policies, list):
        raise ConfigError("'policies' must be a list")
    config = Config(scan=dict(scan), policies=list(policies))
    # Validate the tree eagerly so errors surface at load time.
    config.build_policies(roots=())
    return config


def build_policy(node: Any, roots: Sequence[str]) -> PolicyLike:
    """Build one policy from a single-key mapping such as ``{"not": {...}}``."""

    if not isinstance(node, dict) or len(node) != 1:
        raise ConfigError(f"Policy entries must be single-key mappings, got: {node!r}")
    (kind, body), = node.items()
    builder = _BUILDERS.get(kind)
    if builder is None:
        raise ConfigError(f"Unknown policy '{kind}'. Expected one of: {sorted(_BUILDERS)}")
    return builder(body, roots)


def _build_max_violations(body: Any, roots: Sequence[str]) -> PolicyLike:
    body = _mapping(body, "max-violations")
    _reject_unknown(body, {"limit", "rules", "severity"}, "max-violations")
    limit = body.get("limit")
    if not isinstance(limit, int) or isinstance(limit, bool):
        raise ConfigError("'max-violations.limit' must be an integer")
    rules = body.get("rules")
    if rules is not None and not _is_string_list(rules):
        raise ConfigError("'max-violations.rules' must be a list of rule ids")
    return MaxViolationsPolicy(limit=limit, rule_ids=rules, severity=_severity(body))


def _build_no_empty_dirs(body: Any, roots: Sequence[str]) -> PolicyLike:
    body = _mapping(body or {}, "no-empty-dirs")
    _reject_unknown(body, {"mode", "roots", "ignore", "keep", "severity"}, "no-empty-dirs")
    try:
        mode = NoEmptyDirsMode(body.get("mode", NoEmptyDirsMode.STRICT_ZERO))
    except ValueError as exc:
        raise ConfigError(f"Invalid no-empty-dirs mode: {body.get('mode')!r}") from exc
    for key in ("roots", "ignore", "keep"):
        if key in body and not _is_string_list(body[key]):
            raise ConfigError(f"'no-empty-dirs.{key}' must be a list of strings")
    return NoEmptyDirsPolicy(
        mode=mode,
        roots=body.get("roots", roots),
        ignore=body.get("ignore", ()),
        keep=body.get("keep", ()),
        severity=_severity(body),
    )


def _children(body: Any, kind: str, roots: Sequence[str]) -> List[PolicyLike]:
    if not isinstance(body, list):
        raise ConfigError(f"'{kind}' children must be a list")
    return [build_policy(child, roots) for child in body]


def _build_group(cls: Callable[..., PolicyLike], kind: str) -> Callable[[Any, Sequence[str]], PolicyLike]:
    def build(body: Any, roots: Sequence[str]) -> PolicyLike:
        if isinstance(body, list) or body is None:
            return cls(_children(body or [], kind, roots))
        body = _mapping(body, kind)
        _reject_unknown(body, {"policies", "severity"}, kind)
        return cls(_children(body.get("policies", []), kind, roots), severity=_severity(body))

    return build


def _build_n_of(body: Any, roots: Sequence[str]) -> PolicyLike:
    body = _mapping(body, "n-of")
    _reject_unknown(body, {"required", "policies", "severity"}, "n-of")
    required = body.get("required")
    if not isinstance(required, int) or isinstance(required, bool):
        raise ConfigError("'n-of.required' must be an integer")
    return NOfPolicy(_children(body.get("policies", []), "n-of", roots), required=required, severity=_severity(body))


def _build_not(body: Any, roots: Sequence[str]) -> PolicyLike:
    body = _mapping(body, "not")
    if "policy" in body:
        _reject_unknown(body, {"policy", "severity"}, "not")
        return NotPolicy(build_policy(body["policy"], roots), severity=_severity(body))
    return NotPolicy(build_policy(body, roots))


_BUILDERS: Dict[str, Callable[[Any, Sequence[str]], PolicyLike]] = {
    "max-violations": _build_max_violations,
    "no-empty-dirs": _build_no_empty_dirs,
    "all-of": _build_group(AllOfPolicy, "all-of"),
    "any-of": _build_group(AnyOfPolicy, "any-of"),
    "n-of": _build_n_of,
    "not": _build_not,
}


def _mapping(body: Any, kind: str) -> Mapping[str, Any]:
    if not isinstance(body, dict):
        raise ConfigError(f"'{kind}' expects a mapping, got: {body!r}")
    return body


def _reject_unknown(body: Mapping[str, Any], allowed: set, kind: str) -> None:
    unknown = set(body) - allowed
    if unknown:
        raise ConfigError(f"Unknown keys for '{kind}': {sorted(unknown)}")


def _severity(body: Mapping[str, Any]) -> Severity:
    try:
        return Severity(body.get("severity", Severity.FAIL))
    except ValueError as exc:
        raise ConfigError(f"Invalid severity: {body.get('severity')!r}") from exc


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)
