"""Rule catalog — runs the enabled detector tables over one file's text."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping

from scanlens_core.models import CATEGORIES, Finding
from scanlens_core.rules.base import Detector, PatternDetector
from scanlens_core.rules.performance import PERFORMANCE_RULES
from scanlens_core.rules.security import SECURITY_RULES
from scanlens_core.rules.style import STYLE_RULES

logger = logging.getLogger(__name__)

DEFAULT_TABLES: Mapping[str, tuple[Detector, ...]] = {
    "security": SECURITY_RULES,
    "performance": PERFORMANCE_RULES,
    "style": STYLE_RULES,
}


def build_custom_detectors(patterns: Iterable[str]) -> tuple[Detector, ...]:
    """Compile user-supplied regular expressions into style detectors.

    Patterns that fail to compile are logged and dropped.
    """
    detectors = []
    for raw in patterns:
        try:
            compiled = re.compile(raw)
        except (re.error, TypeError) as e:
            logger.warning("Ignoring invalid custom rule %r: %s", raw, e)
            continue
        detectors.append(
            PatternDetector(
                rule="custom-rule",
                category="style",
                severity="warning",
                message=f"Line matches custom rule pattern: {raw}",
                patterns=(compiled,),
            )
        )
    return tuple(detectors)


class RuleCatalog:
    """Immutable set of detector tables, one per category.

    Findings come out grouped by category (security, performance, style) and,
    within a category, ordered by line and then by rule order. Custom rules
    run with the style category.
    """

    def __init__(
        self,
        tables: Mapping[str, tuple[Detector, ...]] | None = None,
        custom_rules: Iterable[str] = (),
    ):
        tables = dict(tables if tables is not None else DEFAULT_TABLES)
        custom = build_custom_detectors(custom_rules)
        if custom:
            tables["style"] = tuple(tables.get("style", ())) + custom
        self._tables = {category: tuple(tables.get(category, ())) for category in CATEGORIES}

    @property
    def rules(self) -> list[str]:
        return [d.rule for category in CATEGORIES for d in self._tables[category]]

    def analyze(self, text: str, file_name: str, enabled_categories: Iterable[str] = CATEGORIES) -> list[Finding]:
        if not isinstance(text, str) or not text:
            return []

        enabled = set(enabled_categories)
        lines = text.split("\n")
        findings: list[Finding] = []
        for category in CATEGORIES:
            if category in enabled:
                findings.extend(self._run_category(category, lines, file_name))
        return findings

    def _run_category(self, category: str, lines: list[str], file_name: str) -> list[Finding]:
        collected: list[Finding] = []
        for detector in self._tables[category]:
            try:
                collected.extend(detector.scan(lines))
            except Exception as e:
                # One broken detector must not take the rest of the scan down.
                logger.warning("Detector %s failed on %s: %s", detector.rule, file_name, e)
        # sort() is stable, so same-line findings keep their rule order.
        collected.sort(key=lambda f: f.line)
        return collected
