"""Tests for HistoryAggregator."""

from __future__ import annotations

import json
import threading
from datetime import datetime, timedelta, timezone

from scanlens_core.models import Finding, QualityMetrics, ScanResult
from scanlens_store.base import BaseStore
from scanlens_store.history import HistoryAggregator, build_timeline_report
from scanlens_store.jsonfile import JsonFileStore
from scanlens_store.noop import NoOpStore

NOW = datetime(2026, 10, 18, 15, 30, tzinfo=timezone.utc)


class _MemoryStore(BaseStore):
    def __init__(self, reviews=None):
        self.document = {"reviews": list(reviews or [])}
        self.saves = 0

    def load_document(self):
        return json.loads(json.dumps(self.document))

    def save_document(self, document):
        self.saves += 1
        self.document = document


class _BrokenStore(BaseStore):
    def load_document(self):
        raise OSError("disk on fire")

    def save_document(self, document):
        raise OSError("disk on fire")

    def clear(self):
        raise OSError("disk on fire")


def _scan(file="src/app.js", issues=1, complexity=2, maintainability=80, duplication=0):
    findings = [Finding(i + 1, 1, "Use let or const.", "warning", "prefer-let-const", "style") for i in range(issues)]
    metrics = QualityMetrics(complexity, maintainability, duplication, 10, 0)
    return ScanResult(file=file, findings=findings, metrics=metrics)


def _raw(timestamp, issue_count=1, complexity=2, maintainability=80, duplication=0, file_path="src/app.js"):
    return {
        "timestamp": timestamp.isoformat() if isinstance(timestamp, datetime) else timestamp,
        "file_name": file_path.rsplit("/", 1)[-1],
        "file_path": file_path,
        "issue_count": issue_count,
        "issues": [],
        "metrics": {"complexity": complexity, "maintainability": maintainability, "duplication": duplication},
    }


def _aggregator(store, now=NOW, retention_days=30):
    return HistoryAggregator(store, retention_days=retention_days, clock=lambda: now)


# ---------------------------------------------------------------------------
# record
# ---------------------------------------------------------------------------


class TestRecord:
    def test_record_prepends_newest_first(self):
        store = _MemoryStore([_raw(NOW - timedelta(days=1), file_path="src/old.js")])
        record = _aggregator(store).record(_scan(file="src/new.js", issues=2))

        assert record.file_name == "new.js"
        assert record.issue_count == 2
        assert record.timestamp == NOW.isoformat()
        assert [r["file_path"] for r in store.document["reviews"]] == ["src/new.js", "src/old.js"]

    def test_record_snapshots_findings_and_metrics(self):
        store = _MemoryStore()
        _aggregator(store).record(_scan(issues=1, complexity=4, maintainability=66, duplication=12))

        saved = store.document["reviews"][0]
        assert saved["issues"][0]["rule"] == "prefer-let-const"
        assert saved["metrics"] == {"complexity": 4, "maintainability": 66, "duplication": 12}

    def test_record_prunes_expired_entries(self):
        store = _MemoryStore(
            [
                _raw(NOW - timedelta(days=29), file_path="src/recent.js"),
                _raw(NOW - timedelta(days=31), file_path="src/expired.js"),
            ]
        )
        _aggregator(store).record(_scan())
        assert [r["file_path"] for r in store.document["reviews"]] == ["src/app.js", "src/recent.js"]

    def test_excluded_result_is_not_recorded(self):
        store = _MemoryStore()
        assert _aggregator(store).record(ScanResult(file="node_modules/x.js", excluded=True)) is None
        assert store.saves == 0

    def test_read_fault_treated_as_empty(self, tmp_path):
        path = tmp_path / "history.json"
        path.write_text("{corrupt")
        record = _aggregator(JsonFileStore(str(path))).record(_scan())

        assert record is not None
        assert [r["file_path"] for r in json.loads(path.read_text())["reviews"]] == ["src/app.js"]

    def test_write_fault_is_logged_not_raised(self, capsys):
        record = _aggregator(_BrokenStore()).record(_scan())
        assert record is not None
        assert "could not persist review history" in capsys.readouterr().out

    def test_concurrent_records_are_serialized(self):
        store = _MemoryStore()
        aggregator = _aggregator(store)
        threads = [threading.Thread(target=aggregator.record, args=(_scan(file=f"f{i}.js"),)) for i in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(store.document["reviews"]) == 20

    def test_noop_store(self):
        assert _aggregator(NoOpStore()).record(_scan()) is not None


# ---------------------------------------------------------------------------
# reviews / summarize
# ---------------------------------------------------------------------------


class TestSummarize:
    def test_empty_history(self):
        summary = _aggregator(_MemoryStore()).summarize()
        assert summary.total_reviews == 0
        assert summary.total_issues == 0
        assert summary.average_quality_score == 0
        assert summary.trend_data == []

    def test_read_fault_gives_zero_summary(self):
        summary = _aggregator(_BrokenStore()).summarize()
        assert summary.total_reviews == 0

    def test_totals_and_average(self):
        store = _MemoryStore(
            [
                _raw(NOW - timedelta(hours=1), issue_count=3, complexity=0, maintainability=100, duplication=0),
                _raw(NOW - timedelta(hours=2), issue_count=1, complexity=10, maintainability=50, duplication=10),
            ]
        )
        summary = _aggregator(store).summarize()
        assert summary.total_reviews == 2
        assert summary.total_issues == 4
        # Per-record scores are 100 and 62.
        assert summary.average_quality_score == 81

    def test_trend_grouped_by_utc_day_ascending(self):
        store = _MemoryStore(
            [
                _raw("2026-10-18T09:00:00+00:00", issue_count=2, complexity=0, maintainability=100),
                _raw("2026-10-16T23:30:00-02:00", issue_count=1, complexity=10, maintainability=50, duplication=10),
                _raw("2026-10-17T08:00:00+00:00", issue_count=4, complexity=10, maintainability=50, duplication=10),
                _raw("2026-10-18T01:00:00+00:00", issue_count=5, complexity=10, maintainability=50, duplication=10),
            ]
        )
        summary = _aggregator(store).summarize()

        # 2026-10-16T23:30-02:00 is 2026-10-17T01:30 UTC.
        assert [(p.date, p.issues, p.quality_score) for p in summary.trend_data] == [
            ("2026-10-17", 3, 62),
            ("2026-10-18", 4, 81),
        ]

    def test_summarize_excludes_expired_without_writing(self):
        store = _MemoryStore([_raw(NOW - timedelta(days=1)), _raw(NOW - timedelta(days=45))])
        summary = _aggregator(store).summarize()
        assert summary.total_reviews == 1
        assert len(store.document["reviews"]) == 2
        assert store.saves == 0

    def test_shorter_retention_window(self):
        store = _MemoryStore([_raw(NOW - timedelta(days=1)), _raw(NOW - timedelta(days=8))])
        assert _aggregator(store, retention_days=7).summarize().total_reviews == 1

    def test_unparsable_timestamps_are_dropped(self):
        store = _MemoryStore([_raw("yesterday"), _raw(NOW - timedelta(hours=3))])
        assert len(_aggregator(store).reviews()) == 1

    def test_reviews_sorted_newest_first(self):
        store = _MemoryStore(
            [
                _raw(NOW - timedelta(days=3), file_path="src/c.js"),
                _raw(NOW - timedelta(days=1), file_path="src/a.js"),
                _raw(NOW - timedelta(days=2), file_path="src/b.js"),
            ]
        )
        assert [r.file_path for r in _aggregator(store).reviews()] == ["src/a.js", "src/b.js", "src/c.js"]

    def test_same_day_issue_counts_are_averaged(self):
        store = _MemoryStore(
            [
                _raw("2026-10-18T09:00:00+00:00", issue_count=2),
                _raw("2026-10-18T10:00:00+00:00", issue_count=4),
            ]
        )
        summary = _aggregator(store).summarize()
        assert [(p.date, p.issues) for p in summary.trend_data] == [("2026-10-18", 3)]
        assert summary.total_issues == 6

    def test_record_exactly_at_retention_boundary_is_dropped(self):
        store = _MemoryStore(
            [
                _raw(NOW - timedelta(days=30), file_path="src/boundary.js"),
                _raw(NOW - timedelta(days=30) + timedelta(seconds=1), file_path="src/inside.js"),
            ]
        )
        assert [r.file_path for r in _aggregator(store).reviews()] == ["src/inside.js"]


# ---------------------------------------------------------------------------
# malformed persisted records
# ---------------------------------------------------------------------------


class TestMalformedRecords:
    def _summarize_one(self, **fields):
        raw = _raw(NOW - timedelta(hours=1), issue_count=2, complexity=0, maintainability=100)
        raw.update(fields)
        return _aggregator(_MemoryStore([raw])).summarize()

    def test_null_issues(self):
        summary = self._summarize_one(issues=None)
        assert summary.total_reviews == 1
        assert summary.total_issues == 2

    def test_non_dict_issue_entries_are_skipped(self):
        raw = _raw(NOW - timedelta(hours=1))
        raw["issues"] = ["oops", 3, {"line": 4, "rule": "no-eval"}]
        record = _aggregator(_MemoryStore([raw])).reviews()[0]
        assert len(record.issues) == 1
        assert record.issues[0].line == 4
        assert record.issues[0].rule == "no-eval"

    def test_metrics_as_list(self):
        summary = self._summarize_one(metrics=[])
        assert summary.total_reviews == 1
        # complexity 0, maintainability 0, duplication 0 scores 60.
        assert summary.average_quality_score == 60

    def test_string_issue_count(self):
        assert self._summarize_one(issue_count="5").total_issues == 5
        assert self._summarize_one(issue_count="many").total_issues == 0

    def test_non_numeric_metric_values(self):
        summary = self._summarize_one(metrics={"complexity": "high", "maintainability": None, "duplication": "7"})
        assert summary.total_reviews == 1

    def test_exports_survive_malformed_record(self):
        raw = _raw("2026-10-18T09:00:00+00:00")
        raw.update(issues=None, metrics="broken", issue_count=None)
        aggregator = _aggregator(_MemoryStore([raw]))

        assert aggregator.export_csv().splitlines()[1] == "2026-10-18,app.js,0,0,0,0"
        assert json.loads(aggregator.export_json())["total_reviews"] == 1


# ---------------------------------------------------------------------------
# export / clear
# ---------------------------------------------------------------------------


class TestExport:
    def test_csv(self):
        store = _MemoryStore(
            [_raw("2026-10-18T09:00:00+00:00", issue_count=2, complexity=4, maintainability=70, duplication=5)]
        )
        lines = _aggregator(store).export_csv().splitlines()
        assert lines == [
            "Date,File,Issues,Complexity,Maintainability,Duplication",
            "2026-10-18,app.js,2,4,70,5",
        ]

    def test_csv_empty_history_has_header_only(self):
        assert _aggregator(_MemoryStore()).export_csv() == "Date,File,Issues,Complexity,Maintainability,Duplication\n"

    def test_csv_quotes_commas_in_file_names(self):
        store = _MemoryStore([_raw(NOW, file_path="src/a,b.js")])
        assert '"a,b.js"' in _aggregator(store).export_csv()

    def test_json_is_timeline_summary(self):
        store = _MemoryStore([_raw("2026-10-18T09:00:00+00:00", issue_count=2, complexity=0, maintainability=100)])
        data = json.loads(_aggregator(store).export_json())
        assert data == {
            "total_reviews": 1,
            "total_issues": 2,
            "average_quality_score": 100,
            "trend_data": [{"date": "2026-10-18", "issues": 2, "quality_score": 100}],
        }

    def test_clear(self):
        store = _MemoryStore([_raw(NOW)])
        assert _aggregator(store).clear() is True
        assert store.document == {"reviews": []}

    def test_clear_fault(self):
        assert _aggregator(_BrokenStore()).clear() is False


def test_timeline_report():
    store = _MemoryStore([_raw("2026-10-18T09:00:00+00:00", issue_count=2, complexity=0, maintainability=100)])
    aggregator = _aggregator(store)
    report = build_timeline_report(aggregator.summarize(), aggregator.reviews()[0])
    assert "**Total Reviews**: 1" in report
    assert "## Latest Review" in report
    assert "`src/app.js`" in report
    assert "| 2026-10-18 | 2 | 100 |" in report
