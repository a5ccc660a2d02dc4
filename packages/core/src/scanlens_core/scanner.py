"""Core scan orchestration."""

from __future__ import annotations

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from scanlens_core.config import DEFAULT_CONFIG, enabled_categories, is_excluded, is_too_large
from scanlens_core.linter import ExternalLinter
from scanlens_core.metrics import calculate, quality_score, round_half_up
from scanlens_core.models import Finding, QualityMetrics, ScanResult
from scanlens_core.rules.catalog import RuleCatalog

logger = logging.getLogger(__name__)

# Broad workspace scans only run the built-in catalog. Detailed scans also
# spawn the external linter per file, so they keep batches smaller.
WORKSPACE_BATCH_SIZE = 10
DETAILED_BATCH_SIZE = 5


@dataclass
class WorkspaceScanResult:
    """Aggregate result returned by Scanner.scan_many.

    ``quality_metrics`` holds per-file averages (complexity, maintainability,
    duplication) with the quality score recomputed from those averages and
    ``lines_of_code`` summed across files.
    """

    total_files: int = 0
    total_issues: int = 0
    quality_metrics: QualityMetrics = field(default_factory=QualityMetrics.zero)
    file_results: list[ScanResult] = field(default_factory=list)
    scan_duration_ms: int = 0


def too_large_finding(size_bytes: int) -> Finding:
    return Finding(
        line=1,
        column=1,
        message=f"File is too large ({round_half_up(size_bytes / 1024)}KB). Skipping analysis.",
        severity="info",
        rule="file-too-large",
        category="performance",
    )


class Scanner:
    """Runs the rule catalog, the external linter and the metrics engine.

    The only component that knows about both detection and scoring. Holds no
    mutable state after construction, so one instance can serve concurrent
    scan_file calls.
    """

    def __init__(
        self,
        config: dict | None = None,
        catalog: RuleCatalog | None = None,
        linter: ExternalLinter | None = None,
    ):
        self.config = config if config is not None else dict(DEFAULT_CONFIG)
        self.catalog = catalog if catalog is not None else RuleCatalog(custom_rules=self.config.get("custom_rules", []))
        if linter is None:
            linter_cfg = self.config.get("linter") or {}
            if linter_cfg.get("enabled"):
                linter = ExternalLinter(
                    command=linter_cfg.get("command", ["eslint"]), timeout=linter_cfg.get("timeout", 30)
                )
        self.linter = linter

    # ------------------------------------------------------------------ #
    # Admission policy                                                     #
    # ------------------------------------------------------------------ #

    def is_excluded(self, file_name: str) -> bool:
        patterns = self.config.get("exclude_patterns", DEFAULT_CONFIG["exclude_patterns"])
        return is_excluded(file_name, patterns, self.config.get("root", "."))

    def is_too_large(self, size_bytes: int) -> bool:
        return is_too_large(size_bytes, self.config.get("max_file_size", DEFAULT_CONFIG["max_file_size"]))

    # ------------------------------------------------------------------ #
    # Single file                                                          #
    # ------------------------------------------------------------------ #

    def scan_file(
        self,
        text: str,
        file_name: str,
        size_bytes: int | None = None,
        use_linter: bool = True,
    ) -> ScanResult:
        """Scan one file's text and return its findings and metrics.

        Exclusion and size limits are applied before any detector runs:
        excluded files get an empty result, oversized files a single
        ``file-too-large`` finding with zero metrics.
        """
        if not self.config.get("enabled", True) or self.is_excluded(file_name):
            logger.debug("Skipping excluded file %s", file_name)
            return ScanResult(file=file_name, excluded=True)

        if not isinstance(text, str):
            text = ""
        if size_bytes is None:
            size_bytes = len(text.encode("utf-8"))
        if self.is_too_large(size_bytes):
            return ScanResult(file=file_name, findings=[too_large_finding(size_bytes)], oversized=True)

        findings: list[Finding] = []
        if use_linter and self.linter is not None:
            findings.extend(self.linter.lint(text, file_name))
        findings.extend(self.catalog.analyze(text, file_name, enabled_categories(self.config)))

        return ScanResult(file=file_name, findings=findings, metrics=calculate(text))

    # ------------------------------------------------------------------ #
    # Many files                                                           #
    # ------------------------------------------------------------------ #

    def scan_path(self, path: str, use_linter: bool = True) -> ScanResult | None:
        """Read and scan one file from disk. Returns None when it cannot be scanned."""
        try:
            if self.is_excluded(path):
                return ScanResult(file=path, excluded=True)
            size = os.stat(path).st_size
            if self.is_too_large(size):
                return ScanResult(file=path, findings=[too_large_finding(size)], oversized=True)
            text = Path(path).read_text(encoding="utf-8")
            return self.scan_file(text, path, size_bytes=size, use_linter=use_linter)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Skipping unreadable file %s: %s", path, e)
        except Exception as e:
            logger.warning("Failed to scan %s: %s", path, e)
        return None

    def scan_many(self, paths: list[str], detailed: bool = False) -> WorkspaceScanResult:
        """Scan files in sequential batches, each batch on its own thread pool.

        At most one batch of files is open at a time. Results are collected
        only after every task in a batch has resolved, so no counter is ever
        shared between threads.
        """
        start = time.monotonic()
        batch_size = DETAILED_BATCH_SIZE if detailed else WORKSPACE_BATCH_SIZE

        file_results: list[ScanResult] = []
        for i in range(0, len(paths), batch_size):
            batch = paths[i : i + batch_size]
            with ThreadPoolExecutor(max_workers=len(batch)) as pool:
                futures = [pool.submit(self.scan_path, path, detailed) for path in batch]
                batch_results = [f.result() for f in futures]
            file_results.extend(r for r in batch_results if r is not None and not r.excluded)

        result = aggregate(file_results)
        result.scan_duration_ms = int((time.monotonic() - start) * 1000)
        return result


def aggregate(file_results: list[ScanResult]) -> WorkspaceScanResult:
    """Fold per-file results into workspace totals.

    Oversized files count towards files and issues but not towards the
    metric averages, since their metrics were never computed.
    """
    analysed = [r.metrics for r in file_results if not r.oversized]
    total_issues = sum(r.issue_count for r in file_results)

    if analysed:
        avg_complexity = sum(m.complexity for m in analysed) / len(analysed)
        avg_maintainability = sum(m.maintainability for m in analysed) / len(analysed)
        avg_duplication = sum(m.duplication for m in analysed) / len(analysed)
        metrics = QualityMetrics(
            complexity=round_half_up(avg_complexity),
            maintainability=round_half_up(avg_maintainability),
            duplication=round_half_up(avg_duplication),
            lines_of_code=sum(m.lines_of_code for m in analysed),
            quality_score=quality_score(avg_complexity, avg_maintainability, avg_duplication),
        )
    else:
        metrics = QualityMetrics.zero()

    return WorkspaceScanResult(
        total_files=len(file_results),
        total_issues=total_issues,
        quality_metrics=metrics,
        file_results=file_results,
    )


def build_scan_report(result: WorkspaceScanResult) -> str:
    """Build the Markdown workspace report."""
    m = result.quality_metrics
    lines = [
        "# Workspace Scan Report\n",
        f"**Scan completed in {result.scan_duration_ms}ms**\n",
        "## Summary",
        f"- **Files Scanned**: {result.total_files}",
        f"- **Total Issues**: {result.total_issues}",
        f"- **Overall Quality Score**: {m.quality_score}/100\n",
        "## Quality Metrics",
        f"- **Average Complexity**: {m.complexity}",
        f"- **Average Maintainability**: {m.maintainability}/100",
        f"- **Average Duplication**: {m.duplication}%",
        f"- **Total Lines of Code**: {m.lines_of_code}",
    ]

    flagged = [r for r in result.file_results if r.findings]
    if flagged:
        lines.append("\n## Files with Issues")
        lines.append("| File | Errors | Warnings | Info | Total |")
        lines.append("|------|:------:|:--------:|:----:|:-----:|")
        for r in sorted(flagged, key=lambda r: r.issue_count, reverse=True):
            counts = {s: sum(1 for f in r.findings if f.severity == s) for s in ("error", "warning", "info")}
            lines.append(
                f"| `{os.path.basename(r.file)}` "
                f"| {counts['error'] or '—'} "
                f"| {counts['warning'] or '—'} "
                f"| {counts['info'] or '—'} "
                f"| {r.issue_count} |"
            )

    clean = [r for r in result.file_results if not r.findings]
    if clean:
        lines.append(f"\n_Clean: {len(clean)} file(s) with no issues._")

    return "\n".join(lines)
