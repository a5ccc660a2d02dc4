"""Performance detectors.

Every detector works on a single line. Loop-body checks therefore only see
loops written on one line, e.g. ``for (...) { el = document.querySelector(x) }``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from scanlens_core.rules.base import Detector, PatternDetector, compile_all

LARGE_LITERAL_LINE_LENGTH = 200

_LITERAL_OPENING = re.compile(r"(?:^|[=:(,]|\breturn)\s*[\[{]")


@dataclass(frozen=True)
class LargeLiteralDetector(Detector):
    """Flags over-long lines that open an object or array literal."""

    max_length: int = LARGE_LITERAL_LINE_LENGTH

    def match(self, line: str) -> int | None:
        if len(line) <= self.max_length:
            return None
        if _LITERAL_OPENING.search(line.strip()):
            return 1
        return None


PERFORMANCE_RULES = (
    PatternDetector(
        rule="no-for-in-on-arrays",
        category="performance",
        severity="warning",
        message="Using for...in on arrays is inefficient. Use for...of or forEach instead.",
        patterns=compile_all(r"for\s*\(\s*(?:var|let|const)\s+\w+\s+in\s+.*\["),
    ),
    PatternDetector(
        rule="no-document-write",
        category="performance",
        severity="warning",
        message="document.write() blocks rendering and is deprecated. Use DOM manipulation instead.",
        patterns=compile_all(r"document\.write\s*\("),
    ),
    PatternDetector(
        rule="no-sync-xhr",
        category="performance",
        severity="error",
        message="Synchronous XMLHttpRequest blocks the UI. Use async requests or the fetch API.",
        patterns=compile_all(
            r"XMLHttpRequest[^)]*open[^)]*false",
            r"\.open\s*\([^)]*,\s*false\s*\)",
        ),
    ),
    PatternDetector(
        rule="no-dom-queries-in-loops",
        category="performance",
        severity="warning",
        message="DOM queries inside loops are inefficient. Cache the element outside the loop.",
        patterns=compile_all(
            r"(?:for|while)\s*\([^)]*\)\s*\{[^}]*(?:querySelector(?:All)?|getElementById|getElementsBy\w+)[^}]*\}"
        ),
    ),
    PatternDetector(
        rule="cache-array-length",
        category="performance",
        severity="info",
        message="Accessing array.length in the loop condition is inefficient. Cache the length.",
        patterns=compile_all(r"for\s*\([^)]*\.length[^)]*\)"),
    ),
    PatternDetector(
        rule="check-event-listener-cleanup",
        category="performance",
        severity="warning",
        message="Event listeners should be removed to prevent memory leaks.",
        patterns=compile_all(r"\.addEventListener\s*\("),
        unless=("removeEventListener",),
    ),
    PatternDetector(
        rule="batch-dom-manipulation",
        category="performance",
        severity="info",
        message="Multiple style changes cause reflows. Use cssText or classes instead.",
        patterns=compile_all(r"\.style\.[^=]*=.*\.style\.[^=]*="),
    ),
    PatternDetector(
        rule="no-string-concat-in-loops",
        category="performance",
        severity="warning",
        message="String concatenation in loops is inefficient. Use array.join() or template literals.",
        patterns=compile_all(r"(?:for|while)\s*\([^)]*\)\s*\{[^}]*\+[^}]*\}"),
    ),
    LargeLiteralDetector(
        rule="avoid-large-object-literals",
        category="performance",
        severity="info",
        message="Large object literals can impact performance. Consider using a factory function.",
    ),
)
