"""Adapter for an external AST-based linter (ESLint by default).

The linter is an optional, supplementary source of findings. It runs as a
subprocess reading the file from stdin and reporting JSON, so scanlens needs
no JavaScript toolchain unless the linter is enabled in config.

Never raises — a missing binary, a timeout, a crash or unparseable output all
degrade to "no findings" with a logged warning, so the built-in rule catalog
still runs.
"""

from __future__ import annotations

import json
import logging
import subprocess
from collections.abc import Sequence

from scanlens_core.models import Finding

logger = logging.getLogger(__name__)

# Exact ESLint rule id → category. Anything not listed falls through to the
# plugin namespace table, then to "style".
RULE_CATEGORIES: dict[str, str] = {
    "no-eval": "security",
    "no-implied-eval": "security",
    "no-new-func": "security",
    "no-script-url": "security",
    "no-unsanitized/property": "security",
    "no-unsanitized/method": "security",
    "react/no-danger": "security",
    "no-for-in": "performance",
    "guard-for-in": "performance",
    "no-await-in-loop": "performance",
    "no-document-write": "performance",
}

# Plugin namespace (the part before "/") → category.
NAMESPACE_CATEGORIES: dict[str, str] = {
    "security": "security",
    "no-unsanitized": "security",
    "xss": "security",
    "performance": "performance",
    "perf": "performance",
}


def categorize_rule(rule_id: str) -> str:
    if rule_id in RULE_CATEGORIES:
        return RULE_CATEGORIES[rule_id]
    if "/" in rule_id:
        namespace = rule_id.split("/", 1)[0].lstrip("@")
        if namespace in NAMESPACE_CATEGORIES:
            return NAMESPACE_CATEGORIES[namespace]
    return "style"


def map_severity(level) -> str:
    """ESLint reports 2 for errors and 1 for warnings."""
    return "error" if level == 2 else "warning"


class ExternalLinter:
    def __init__(self, command: Sequence[str] = ("eslint",), timeout: float = 30):
        self.command = list(command)
        self.timeout = timeout

    def lint(self, text: str, file_name: str) -> list[Finding]:
        cmd = [*self.command, "--stdin", "--stdin-filename", file_name, "--format", "json"]
        try:
            proc = subprocess.run(
                cmd,
                input=text,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired, OSError) as e:
            logger.warning("External linter could not run on %s: %s", file_name, e)
            return []

        # ESLint exits 1 when it found problems; anything above that is a crash.
        if proc.returncode not in (0, 1):
            logger.warning(
                "External linter exited with %d on %s: %s", proc.returncode, file_name, (proc.stderr or "").strip()
            )
            return []

        return self.parse(proc.stdout)

    def parse(self, output: str) -> list[Finding]:
        try:
            results = json.loads(output or "[]")
        except json.JSONDecodeError:
            logger.warning("External linter returned invalid JSON: %s", (output or "")[:200])
            return []

        findings = []
        for result in results if isinstance(results, list) else []:
            if not isinstance(result, dict):
                continue
            for message in result.get("messages", []):
                rule_id = message.get("ruleId") or "unknown"
                findings.append(
                    Finding(
                        line=message.get("line") or 1,
                        column=message.get("column") or 1,
                        message=message.get("message", ""),
                        severity=map_severity(message.get("severity")),
                        rule=rule_id,
                        category=categorize_rule(rule_id),
                    )
                )
        return findings
