"""Detector building blocks shared by every rule category.

A detector looks at one line at a time and reports at most one finding per
line. Detectors are plain immutable objects: each category module exposes a
tuple of them, built once at import time, and the catalog runs whichever
tuples are enabled.

Subclasses implement only ``match``; ``scan`` (the per-line loop) and
``describe`` (the message) are shared.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

from scanlens_core.models import Finding


@dataclass(frozen=True)
class Detector(ABC):
    rule: str
    category: str
    severity: str
    message: str

    def scan(self, lines: list[str]) -> list[Finding]:
        findings = []
        for index, line in enumerate(lines):
            column = self.match(line)
            if column is None:
                continue
            findings.append(
                Finding(
                    line=index + 1,
                    column=column,
                    message=self.describe(line),
                    severity=self.severity,
                    rule=self.rule,
                    category=self.category,
                )
            )
        return findings

    @abstractmethod
    def match(self, line: str) -> int | None:
        """Return the 1-based column of the offending text, or None."""

    def describe(self, line: str) -> str:
        return self.message


@dataclass(frozen=True)
class PatternDetector(Detector):
    """Fires when any of ``patterns`` matches and none of ``unless`` does."""

    patterns: tuple[re.Pattern, ...] = ()
    unless: tuple[str, ...] = ()

    def match(self, line: str) -> int | None:
        if any(token in line for token in self.unless):
            return None
        for pattern in self.patterns:
            found = pattern.search(line)
            if found:
                return found.start() + 1
        return None


def compile_all(*patterns: str, flags: int = 0) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(p, flags) for p in patterns)
