"""Flag file names that are not kebab-case."""

from __future__ import annotations

import os
import re
from typing import Optional

from dirguard.result import Violation

from . import Rule

KEBAB_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")
EXEMPT_NAMES = frozenset({"Info.plist"})


class KebabCaseRule(Rule):
    """File names must be lowercase letters, digits and single hyphens."""

    id = "kebab-case"
    description = "Filenames must be lowercase/digits/hyphens (kebab-case)."

    def apply(self, path: str) -> Optional[Violation]:
        name = os.path.basename(path)
        if name in EXEMPT_NAMES or name.startswith("."):
            return None
        base, _extension = os.path.splitext(name)
        if KEBAB_PATTERN.fullmatch(base) is None:
            return Violation(path=path, reason="not kebab-case", rule_id=self.id)
        return None
