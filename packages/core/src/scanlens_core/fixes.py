"""Best-effort text substitutions for a handful of rules.

Fixes rewrite one line at a time with regular expressions. They make no
attempt to preserve semantics: a rewritten line may still need a human look.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable

from scanlens_core.models import Finding
from scanlens_core.rules.style import ALLOWED_NUMBERS

_MAGIC_NUMBER = re.compile(r"\b(?:[2-9]|[1-9]\d+)\b")
_FOR_IN = re.compile(r"for\s*\(\s*(var|let|const)\s+(\w+)\s+in\s+([^)]+)\)")
_LOOSE_EQUALITY = re.compile(r"(?<![=!<>])([=!])=(?!=)")


def _comment_out(line: str) -> str:
    indent = line[: len(line) - len(line.lstrip())]
    return f"{indent}// {line.lstrip()}"


def _var_to_let(line: str) -> str:
    return re.sub(r"\bvar\s+", "let ", line, count=1)


def _strict_equality(line: str) -> str:
    return _LOOSE_EQUALITY.sub(r"\1==", line)


def _name_magic_number(line: str) -> str:
    for found in _MAGIC_NUMBER.finditer(line):
        if found.group() not in ALLOWED_NUMBERS:
            return line[: found.start()] + f"CONSTANT_{found.group()}" + line[found.end() :]
    return line


def _for_in_to_for_of(line: str) -> str:
    return _FOR_IN.sub(r"for (\1 \2 of \3)", line, count=1)


FIXERS: dict[str, Callable[[str], str]] = {
    "prefer-let-const": _var_to_let,
    "prefer-strict-equality": _strict_equality,
    "no-console-statements": _comment_out,
    "no-debugger-statements": _comment_out,
    "no-magic-numbers": _name_magic_number,
    "no-for-in-on-arrays": _for_in_to_for_of,
}


def suggest_fix(line: str, rule: str) -> str | None:
    """Return the rewritten line, or None when the rule has no fix or nothing changes."""
    fixer = FIXERS.get(rule)
    if fixer is None:
        return None
    fixed = fixer(line)
    return fixed if fixed != line else None


def apply_fixes(text: str, findings: Iterable[Finding]) -> tuple[str, int]:
    """Apply every available fix to ``text``. Returns (new_text, fixes_applied).

    Fixes for the same line are applied in finding order, each to the output
    of the previous one. Commented-out lines are not fixed again.
    """
    lines = text.split("\n")
    applied = 0
    for finding in findings:
        index = finding.line - 1
        if not 0 <= index < len(lines) or lines[index].lstrip().startswith("//"):
            continue
        fixed = suggest_fix(lines[index], finding.rule)
        if fixed is not None:
            lines[index] = fixed
            applied += 1
    return "\n".join(lines), applied
