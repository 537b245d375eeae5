"""Rule interface and ordered rule set."""

from __future__ import annotations

from typing import Iterable, List, Optional, Protocol, Tuple

from dirguard.result import Violation


class Rule(Protocol):
    """Protocol implemented by all rules.

    ``apply`` is required. Rules that subclass this protocol explicitly
    inherit the permissive ``accept`` and no-op ``finalize`` defaults.
    """

    id: str
    description: str

    def apply(self, path: str) -> Optional[Violation]:
        """Return a violation for the file at ``path`` or ``None``."""

    def accept(self, directory: str) -> bool:
        """Return False to prune ``directory`` from traversal."""

        return True

    def finalize(self, directory: str, child_count: int) -> Optional[str]:
        """Return a path to record once ``directory``'s children are known."""

        return None


class RuleSet:
    """Ordered composite of rules with short-circuit dispatch."""

    def __init__(self, rules: Iterable[Rule]) -> None:
        self.rules: Tuple[Rule, ...] = tuple(rules)

    @property
    def ids(self) -> List[str]:
        return [rule.id for rule in self.rules]

    def apply(self, path: str) -> Optional[Violation]:
        for rule in self.rules:
            violation = rule.apply(path)
            if violation is not None:
                return violation
        return None

    def accept(self, directory: str) -> bool:
        return all(rule.accept(directory) for rule in self.rules)

    def finalize(self, directory: str, child_count: int) -> Optional[str]:
        for rule in self.rules:
            recorded = rule.finalize(directory, child_count)
            if recorded is not None:
                return recorded
        return None


def default_rules() -> List[Rule]:
    from .empty_dir import EmptyDirectoryRule
    from .kebab_case import KebabCaseRule

    return [KebabCaseRule(), EmptyDirectoryRule()]
