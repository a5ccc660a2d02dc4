"""Scan result data models.

Shared by the rule catalog, the metrics engine and the scanner. The store
layer consumes these but never the other way round.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field

SEVERITIES = ("error", "warning", "info")
CATEGORIES = ("security", "performance", "style")


@dataclass(frozen=True)
class Finding:
    """One reported issue at a specific line and column (both 1-based)."""

    line: int
    column: int
    message: str
    severity: str  # "error" | "warning" | "info"
    rule: str
    category: str  # "security" | "performance" | "style"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class QualityMetrics:
    complexity: int
    maintainability: int
    duplication: int
    lines_of_code: int
    quality_score: int

    @classmethod
    def zero(cls) -> QualityMetrics:
        """All-zero metrics reported for files that were never analysed."""
        return cls(complexity=0, maintainability=0, duplication=0, lines_of_code=0, quality_score=0)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ScanResult:
    """Findings and metrics for one file from one scan.

    ``excluded`` marks a result produced for a file that matched an exclude
    pattern (or a disabled config). Such results carry no findings and are
    never counted in workspace aggregates. ``oversized`` marks a file that
    exceeded the size limit and was never analysed.
    """

    file: str
    findings: list[Finding] = field(default_factory=list)
    metrics: QualityMetrics = field(default_factory=QualityMetrics.zero)
    excluded: bool = False
    oversized: bool = False

    @property
    def issue_count(self) -> int:
        return len(self.findings)
