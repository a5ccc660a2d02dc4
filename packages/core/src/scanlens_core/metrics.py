"""Quality metrics computed from raw source text.

All calculations are text-level approximations — no parsing:

  complexity       1 + control-flow keywords and branching operators
  maintainability  Halstead-volume based maintainability index, 0..100
  duplication      percentage of repeated non-trivial lines, 0..100
  quality_score    fixed 30/40/30 blend of the three above

Every function here is pure and total: any string, including the empty
string, yields well-defined values.
"""

from __future__ import annotations

import math
import re
from collections import Counter

from scanlens_core.models import QualityMetrics

_COMPLEXITY_KEYWORDS = ("if", "else", "for", "while", "do", "switch", "case", "catch", "try", "throw", "return")
_KEYWORD_RE = re.compile(r"\b(?:" + "|".join(_COMPLEXITY_KEYWORDS) + r")\b")
# "?" only as a ternary, never "?." (optional chaining) or "??" (nullish coalescing).
_BRANCH_OPERATOR_RE = re.compile(r"&&|\|\||(?<!\?)\?(?![.?])")

_OPERATOR_RE = re.compile(r"[+\-*/=<>!&|^%~?:]")
_OPERAND_RE = re.compile(r"\b[a-zA-Z_$][a-zA-Z0-9_$]*\b")

_DUPLICATE_MIN_LENGTH = 10

COMPLEXITY_WEIGHT = 0.3
MAINTAINABILITY_WEIGHT = 0.4
DUPLICATION_WEIGHT = 0.3


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_complexity(text: str) -> int:
    return 1 + len(_KEYWORD_RE.findall(text)) + len(_BRANCH_OPERATOR_RE.findall(text))


def calculate_maintainability(text: str, complexity: int) -> int:
    total_lines = len(text.split("\n"))
    operators = len(_OPERATOR_RE.findall(text))
    operands = len(_OPERAND_RE.findall(text))
    vocabulary = operators + operands

    volume = vocabulary * math.log2(vocabulary + 1)
    log_volume = math.log(volume) if volume > 0 else 0.0

    index = 171 - 5.2 * log_volume - 0.23 * complexity - 16.2 * math.log(total_lines)
    return round_half_up(min(100.0, max(0.0, index)))


def calculate_duplication(text: str) -> int:
    candidates = [line.strip() for line in text.split("\n")]
    candidates = [line for line in candidates if len(line) > _DUPLICATE_MIN_LENGTH]
    if not candidates:
        return 0
    counts = Counter(candidates)
    duplicated = sum(n - 1 for n in counts.values() if n > 1)
    return round_half_up(duplicated / len(candidates) * 100)


def count_lines_of_code(text: str) -> int:
    return sum(1 for line in text.split("\n") if line.strip() and not line.strip().startswith("//"))


def quality_score(complexity: float, maintainability: float, duplication: float) -> int:
    """Composite 0..100 score. Weights are fixed, not configurable."""
    return round_half_up(
        max(0.0, 100 - complexity * 5) * COMPLEXITY_WEIGHT
        + maintainability * MAINTAINABILITY_WEIGHT
        + max(0.0, 100 - duplication) * DUPLICATION_WEIGHT
    )


def calculate(text: str) -> QualityMetrics:
    if not isinstance(text, str):
        text = ""
    complexity = calculate_complexity(text)
    maintainability = calculate_maintainability(text, complexity)
    duplication = calculate_duplication(text)
    return QualityMetrics(
        complexity=complexity,
        maintainability=maintainability,
        duplication=duplication,
        lines_of_code=count_lines_of_code(text),
        quality_score=quality_score(complexity, maintainability, duplication),
    )


# --------------------------------------------------------------------------- #
# Reporting                                                                     #
# --------------------------------------------------------------------------- #


def complexity_rating(complexity: int) -> str:
    if complexity <= 5:
        return "Low (Good)"
    if complexity <= 10:
        return "Moderate"
    if complexity <= 20:
        return "High"
    return "Very High (Needs Refactoring)"


def maintainability_rating(maintainability: int) -> str:
    if maintainability >= 80:
        return "Excellent"
    if maintainability >= 60:
        return "Good"
    if maintainability >= 40:
        return "Fair"
    return "Poor (Needs Improvement)"


def duplication_rating(duplication: int) -> str:
    if duplication <= 5:
        return "Low (Good)"
    if duplication <= 15:
        return "Moderate"
    if duplication <= 30:
        return "High"
    return "Very High (Needs Refactoring)"


def quality_report(metrics: QualityMetrics, title: str = "Quality Report") -> str:
    """Render a Markdown report for one file's metrics."""
    lines = [
        f"# {title}\n",
        f"## Overall Quality Score: {metrics.quality_score}/100\n",
        "### Metrics Breakdown",
        f"- **Cyclomatic Complexity**: {metrics.complexity} ({complexity_rating(metrics.complexity)})",
        f"- **Maintainability Index**: {metrics.maintainability}/100 "
        f"({maintainability_rating(metrics.maintainability)})",
        f"- **Code Duplication**: {metrics.duplication}% ({duplication_rating(metrics.duplication)})",
        f"- **Lines of Code**: {metrics.lines_of_code}\n",
    ]

    recommendations = []
    if metrics.complexity > 10:
        recommendations.append("- Consider breaking down complex functions into smaller ones")
    if metrics.maintainability < 50:
        recommendations.append("- Improve code readability and reduce complexity")
    if metrics.duplication > 20:
        recommendations.append("- Extract common code into reusable functions")
    if recommendations:
        lines.append("### Recommendations")
        lines.extend(recommendations)

    return "\n".join(lines)
