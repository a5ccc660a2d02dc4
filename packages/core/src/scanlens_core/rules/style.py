"""Style detectors: legacy declarations, loose equality, debug leftovers, magic numbers."""

from __future__ import annotations

import re
from dataclasses import dataclass

from scanlens_core.rules.base import Detector, PatternDetector, compile_all

ALLOWED_NUMBERS = frozenset({"0", "1", "100", "1000", "24", "60", "365"})

_NUMBER = re.compile(r"\b(?:[2-9]|[1-9]\d+)\b")
_NAMED_CONSTANT = re.compile(r"^\s*(?:export\s+)?(?:const|static\s+readonly|readonly)\s+[A-Z][A-Z0-9_]*\s*[:=]")


@dataclass(frozen=True)
class MagicNumberDetector(Detector):
    allowed: frozenset = ALLOWED_NUMBERS

    def _suspicious(self, line: str) -> re.Match | None:
        if _NAMED_CONSTANT.match(line):
            return None
        for found in _NUMBER.finditer(line):
            if found.group() not in self.allowed:
                return found
        return None

    def match(self, line: str) -> int | None:
        found = self._suspicious(line)
        return found.start() + 1 if found else None

    def describe(self, line: str) -> str:
        found = self._suspicious(line)
        number = found.group() if found else "?"
        return f"Magic number detected: {number}. Consider using a named constant."


STYLE_RULES = (
    PatternDetector(
        rule="prefer-let-const",
        category="style",
        severity="warning",
        message="Use let or const instead of var to avoid hoisting issues.",
        patterns=compile_all(r"^\s*var\s+"),
    ),
    PatternDetector(
        rule="prefer-strict-equality",
        category="style",
        severity="warning",
        message="Use === (or !==) instead of == (or !=) to avoid type coercion.",
        patterns=compile_all(r"(?<![=!<>])[=!]=(?!=)"),
    ),
    PatternDetector(
        rule="no-console-statements",
        category="style",
        severity="info",
        message="Remove console statements before production deployment.",
        patterns=compile_all(r"\bconsole\.(?:log|debug|info|warn|error|trace)\s*\("),
    ),
    PatternDetector(
        rule="no-debugger-statements",
        category="style",
        severity="warning",
        message="Remove debugger statements before production deployment.",
        patterns=compile_all(r"^\s*debugger\s*;?\s*$"),
    ),
    MagicNumberDetector(
        rule="no-magic-numbers",
        category="style",
        severity="info",
        message="Magic number detected. Consider using a named constant.",
    ),
)
