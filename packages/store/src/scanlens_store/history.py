"""HistoryAggregator — the only writer of review history.

Every call reads the whole document from the store, works on it in memory
and (for record/clear) writes it back. Records older than the retention
window are dropped on every read, so summaries never see stale data even if
nothing has been written for a while.

Storage faults never propagate: a failed read is treated as an empty
history and a failed write is logged and reported on stdout, the way a
review must never be aborted because persistence failed.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import threading
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from scanlens_core.metrics import quality_score, round_half_up
from scanlens_store.models import (
    IssueRecord,
    MetricsSnapshot,
    ReviewRecord,
    TimelineSummary,
    TrendPoint,
)

if TYPE_CHECKING:
    from scanlens_core.models import ScanResult
    from scanlens_store.base import BaseStore

logger = logging.getLogger(__name__)

CSV_HEADER = ["Date", "File", "Issues", "Complexity", "Maintainability", "Duplication"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def record_score(record: ReviewRecord) -> int:
    m = record.metrics
    return quality_score(m.complexity, m.maintainability, m.duplication)


class HistoryAggregator:
    """Records scans and derives timeline summaries from the retained ones."""

    def __init__(
        self,
        store: BaseStore,
        retention_days: int = 30,
        clock: Callable[[], datetime] | None = None,
    ):
        self.store = store
        self.retention_days = retention_days
        self._clock = clock or _utcnow
        self._lock = threading.Lock()

    def _cutoff(self, now: datetime) -> datetime:
        return now - timedelta(days=self.retention_days)

    def _load(self) -> list[dict]:
        try:
            document = self.store.load_document()
        except Exception as e:
            logger.warning("Could not read review history (%s): %s", type(e).__name__, e)
            return []
        reviews = document.get("reviews", []) if isinstance(document, dict) else []
        return [r for r in reviews if isinstance(r, dict)]

    def _prune(self, raw: list[dict], now: datetime) -> list[dict]:
        cutoff = self._cutoff(now)
        kept = []
        for r in raw:
            stamp = _parse_timestamp(r.get("timestamp"))
            if stamp is None:
                logger.debug("Dropping review record with bad timestamp: %r", r.get("timestamp"))
                continue
            if stamp > cutoff:
                kept.append(r)
        return kept

    def _save(self, raw: list[dict]) -> bool:
        try:
            self.store.save_document({"reviews": raw})
        except Exception as e:
            logger.warning("Could not persist review history (%s): %s", type(e).__name__, e)
            print(f"Warning: could not persist review history ({type(e).__name__}: {e})")
            return False
        return True

    def record(self, scan_result: ScanResult) -> ReviewRecord | None:
        """Prepend a record for ``scan_result`` and prune the window.

        Returns the new record, or None when the result was excluded and
        nothing was written.
        """
        if scan_result.excluded:
            return None
        with self._lock:
            now = self._clock()
            new = ReviewRecord(
                timestamp=now.isoformat(),
                file_name=scan_result.file.replace("\\", "/").rsplit("/", 1)[-1],
                file_path=scan_result.file,
                issue_count=scan_result.issue_count,
                issues=[IssueRecord(**f.to_dict()) for f in scan_result.findings],
                metrics=MetricsSnapshot(
                    complexity=scan_result.metrics.complexity,
                    maintainability=scan_result.metrics.maintainability,
                    duplication=scan_result.metrics.duplication,
                ),
            )
            raw = self._prune([new.to_dict(), *self._load()], now)
            self._save(raw)
        return new

    def reviews(self) -> list[ReviewRecord]:
        """Records inside the retention window, newest first."""
        raw = self._prune(self._load(), self._clock())
        records = [ReviewRecord.from_dict(r) for r in raw]
        records.sort(key=lambda r: _parse_timestamp(r.timestamp), reverse=True)
        return records

    def summarize(self) -> TimelineSummary:
        records = self.reviews()
        if not records:
            return TimelineSummary()

        scores = [record_score(r) for r in records]
        by_day: dict[str, list[tuple[int, int]]] = {}
        for r, score in zip(records, scores):
            day = _parse_timestamp(r.timestamp).astimezone(timezone.utc).date().isoformat()
            by_day.setdefault(day, []).append((r.issue_count, score))

        trend = [
            TrendPoint(
                date=day,
                issues=round_half_up(sum(i for i, _ in points) / len(points)),
                quality_score=round_half_up(sum(s for _, s in points) / len(points)),
            )
            for day, points in sorted(by_day.items())
        ]
        return TimelineSummary(
            total_reviews=len(records),
            total_issues=sum(r.issue_count for r in records),
            average_quality_score=round_half_up(sum(scores) / len(scores)),
            trend_data=trend,
        )

    def export_csv(self) -> str:
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for r in self.reviews():
            day = _parse_timestamp(r.timestamp).astimezone(timezone.utc).date().isoformat()
            writer.writerow(
                [
                    day,
                    r.file_name,
                    r.issue_count,
                    r.metrics.complexity,
                    r.metrics.maintainability,
                    r.metrics.duplication,
                ]
            )
        return buf.getvalue()

    def export_json(self) -> str:
        return json.dumps(self.summarize().to_dict(), indent=2)

    def clear(self) -> bool:
        """Remove all history. Returns False when the store could not be cleared."""
        with self._lock:
            try:
                self.store.clear()
            except Exception as e:
                logger.warning("Could not clear review history (%s): %s", type(e).__name__, e)
                return False
        return True


def build_timeline_report(summary: TimelineSummary, latest: ReviewRecord | None = None) -> str:
    """Render the timeline (and the most recent review's metrics) as Markdown."""
    lines = [
        "# Code Quality Timeline\n",
        "## Summary",
        f"- **Total Reviews**: {summary.total_reviews}",
        f"- **Total Issues**: {summary.total_issues}",
        f"- **Average Quality Score**: {summary.average_quality_score}/100",
    ]
    if latest is not None:
        m = latest.metrics
        lines += [
            "\n## Latest Review",
            f"- **File**: `{latest.file_path}`",
            f"- **Issues**: {latest.issue_count}",
            f"- **Complexity**: {m.complexity}",
            f"- **Maintainability**: {m.maintainability}/100",
            f"- **Duplication**: {m.duplication}%",
            f"- **Quality Score**: {record_score(latest)}/100",
        ]
    if summary.trend_data:
        lines += ["\n## Daily Trend", "| Date | Issues | Quality Score |", "|------|:------:|:-------------:|"]
        lines += [f"| {p.date} | {p.issues} | {p.quality_score} |" for p in summary.trend_data]
    return "\n".join(lines)
