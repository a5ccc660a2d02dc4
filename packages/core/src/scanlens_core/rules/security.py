"""Security detectors: hardcoded secrets, SQL injection, DOM sinks, eval."""

from __future__ import annotations

import re

from scanlens_core.rules.base import PatternDetector, compile_all

_SECRET_PATTERNS = compile_all(
    r"(?:password|passwd|pwd)\s*[:=]\s*[\"'][^\"']+[\"']",
    r"(?:api[_-]?key|apikey)\s*[:=]\s*[\"'][^\"']+[\"']",
    r"(?:secret|token|auth[_-]?token)\s*[:=]\s*[\"'][^\"']+[\"']",
    r"(?:private[_-]?key|privatekey)\s*[:=]\s*[\"'][^\"']+[\"']",
    r"(?:access[_-]?key|accesskey)\s*[:=]\s*[\"'][^\"']+[\"']",
    flags=re.IGNORECASE,
)

# String concatenation inside a SQL statement template.
_SQL_INJECTION_PATTERNS = compile_all(
    r"SELECT\s+.*\s+FROM\s+.*\s+WHERE\s+.*\+.*",
    r"INSERT\s+INTO\s+.*\s+VALUES\s*\(.*\+.*\)",
    r"UPDATE\s+.*\s+SET\s+.*\+.*\s+WHERE",
    r"DELETE\s+FROM\s+.*\s+WHERE\s+.*\+.*",
    flags=re.IGNORECASE,
)

_HTML_SINK_PATTERNS = compile_all(
    r"\.innerHTML\s*=(?!=)",
    r"\.outerHTML\s*=(?!=)",
    r"document\.write\s*\(",
    flags=re.IGNORECASE,
)

_DYNAMIC_EXECUTION_PATTERNS = compile_all(
    r"\beval\s*\(",
    r"\bnew\s+Function\s*\(",
)

SECURITY_RULES = (
    PatternDetector(
        rule="no-hardcoded-secrets",
        category="security",
        severity="error",
        message="Hardcoded secret detected. Use environment variables instead.",
        patterns=_SECRET_PATTERNS,
    ),
    PatternDetector(
        rule="no-sql-injection",
        category="security",
        severity="error",
        message="Potential SQL injection vulnerability. Use parameterized queries.",
        patterns=_SQL_INJECTION_PATTERNS,
    ),
    PatternDetector(
        rule="no-xss-vulnerability",
        category="security",
        severity="warning",
        message="Potential XSS vulnerability. Sanitize user input before rendering.",
        patterns=_HTML_SINK_PATTERNS,
    ),
    PatternDetector(
        rule="no-eval",
        category="security",
        severity="error",
        message="Dynamic code execution detected. eval() and new Function() should be avoided.",
        patterns=_DYNAMIC_EXECUTION_PATTERNS,
    ),
)
