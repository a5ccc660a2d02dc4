"""Review history data models.

A ReviewRecord is a snapshot of one ScanResult taken when the scan
was recorded; TimelineSummary and TrendPoint are always derived from the
records currently inside the retention window and are never persisted.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field


def _as_int(value, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


@dataclass
class IssueRecord:
    """A single finding persisted with its review."""

    line: int
    column: int
    message: str
    severity: str
    rule: str
    category: str


@dataclass
class MetricsSnapshot:
    complexity: int = 0
    maintainability: int = 0
    duplication: int = 0


@dataclass
class ReviewRecord:
    """A recorded file scan persisted to the store.

    Created by HistoryAggregator.record() from a ScanResult.
    """

    timestamp: str  # ISO-8601 UTC timestamp
    file_name: str
    file_path: str
    issue_count: int
    issues: list[IssueRecord] = field(default_factory=list)
    metrics: MetricsSnapshot = field(default_factory=MetricsSnapshot)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> ReviewRecord:
        """Build a record from persisted JSON, defaulting any malformed field."""
        metrics = d.get("metrics")
        if not isinstance(metrics, dict):
            metrics = {}
        issues = d.get("issues")
        if not isinstance(issues, list):
            issues = []
        return cls(
            timestamp=d.get("timestamp", ""),
            file_name=str(d.get("file_name") or ""),
            file_path=str(d.get("file_path") or ""),
            issue_count=_as_int(d.get("issue_count")),
            issues=[
                IssueRecord(
                    line=_as_int(i.get("line"), 1),
                    column=_as_int(i.get("column"), 1),
                    message=str(i.get("message", "")),
                    severity=str(i.get("severity", "info")),
                    rule=str(i.get("rule", "unknown")),
                    category=str(i.get("category", "style")),
                )
                for i in issues
                if isinstance(i, dict)
            ],
            metrics=MetricsSnapshot(
                complexity=_as_int(metrics.get("complexity")),
                maintainability=_as_int(metrics.get("maintainability")),
                duplication=_as_int(metrics.get("duplication")),
            ),
        )


@dataclass
class TrendPoint:
    date: str  # YYYY-MM-DD (UTC)
    issues: int
    quality_score: int


@dataclass
class TimelineSummary:
    total_reviews: int = 0
    total_issues: int = 0
    average_quality_score: int = 0
    trend_data: list[TrendPoint] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)
