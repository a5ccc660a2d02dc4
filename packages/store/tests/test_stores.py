"""Tests for scanlens-store backends."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from scanlens_store.gist import GistStore
from scanlens_store.jsonfile import JsonFileStore
from scanlens_store.models import IssueRecord, MetricsSnapshot, ReviewRecord
from scanlens_store.noop import NoOpStore


def _make_record(file_path="src/app.js", timestamp="2026-10-01T12:00:00+00:00", issue_count=1):
    return ReviewRecord(
        timestamp=timestamp,
        file_name=file_path.rsplit("/", 1)[-1],
        file_path=file_path,
        issue_count=issue_count,
        issues=[
            IssueRecord(
                line=1,
                column=1,
                message="Hardcoded secret detected. Use environment variables instead.",
                severity="error",
                rule="no-hardcoded-secrets",
                category="security",
            )
        ],
        metrics=MetricsSnapshot(complexity=3, maintainability=72, duplication=0),
    )


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class TestReviewRecord:
    def test_round_trip(self):
        record = _make_record()
        assert ReviewRecord.from_dict(record.to_dict()) == record

    def test_from_dict_tolerates_missing_fields(self):
        record = ReviewRecord.from_dict({"timestamp": "2026-10-01T00:00:00+00:00", "metrics": None})
        assert record.file_name == ""
        assert record.issues == []
        assert record.metrics == MetricsSnapshot()


# ---------------------------------------------------------------------------
# NoOpStore
# ---------------------------------------------------------------------------


class TestNoOpStore:
    def test_save_does_not_raise(self):
        NoOpStore().save_document({"reviews": [_make_record().to_dict()]})

    def test_load_returns_empty_document(self):
        store = NoOpStore()
        store.save_document({"reviews": [_make_record().to_dict()]})
        assert store.load_document() == {"reviews": []}

    def test_clear_and_close(self):
        store = NoOpStore()
        store.clear()
        store.close()


# ---------------------------------------------------------------------------
# JsonFileStore
# ---------------------------------------------------------------------------


class TestJsonFileStore:
    def test_missing_file_is_empty(self, tmp_path):
        store = JsonFileStore(str(tmp_path / "history.json"))
        assert store.load_document() == {"reviews": []}

    def test_save_creates_parent_directory(self, tmp_path):
        path = tmp_path / ".scanlens" / "review-history.json"
        store = JsonFileStore(str(path))
        store.save_document({"reviews": [_make_record().to_dict()]})

        assert path.exists()
        assert json.loads(path.read_text())["reviews"][0]["file_path"] == "src/app.js"

    def test_save_and_load(self, tmp_path):
        store = JsonFileStore(str(tmp_path / "history.json"))
        document = {"reviews": [_make_record().to_dict()]}
        store.save_document(document)
        assert store.load_document() == document

    def test_save_leaves_no_temp_file(self, tmp_path):
        store = JsonFileStore(str(tmp_path / "history.json"))
        store.save_document({"reviews": []})
        assert [p.name for p in tmp_path.iterdir()] == ["history.json"]

    def test_save_replaces_previous_document(self, tmp_path):
        store = JsonFileStore(str(tmp_path / "history.json"))
        store.save_document({"reviews": [_make_record().to_dict()]})
        store.save_document({"reviews": []})
        assert store.load_document() == {"reviews": []}

    def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / "history.json"
        path.write_text("{not json")
        with pytest.raises(json.JSONDecodeError):
            JsonFileStore(str(path)).load_document()

    def test_wrong_shape_raises(self, tmp_path):
        path = tmp_path / "history.json"
        path.write_text('{"reviews": "nope"}')
        with pytest.raises(ValueError):
            JsonFileStore(str(path)).load_document()

    def test_clear_deletes_file(self, tmp_path):
        path = tmp_path / "history.json"
        store = JsonFileStore(str(path))
        store.save_document({"reviews": []})
        store.clear()
        assert not path.exists()
        store.clear()  # already gone


# ---------------------------------------------------------------------------
# GistStore
# ---------------------------------------------------------------------------


def _make_gist_mock(content: str | None = None):
    """Return a mock Gist object with scanlens_history.json pre-populated."""
    gist = MagicMock()
    if content is None:
        gist.files = {}
    else:
        file_mock = MagicMock()
        file_mock.content = content
        gist.files = {"scanlens_history.json": file_mock}
    return gist


def _make_gist_store(mocker, gist):
    github = mocker.patch("scanlens_store.gist.Github")
    github.return_value.get_gist.return_value = gist
    return GistStore(gist_id="abc123", token="tok"), github


class TestGistStore:
    def test_uses_token_and_gist_id(self, mocker):
        store, github = _make_gist_store(mocker, _make_gist_mock())
        store.load_document()
        assert github.call_args.kwargs["auth"].token == "tok"
        github.return_value.get_gist.assert_called_once_with("abc123")

    def test_missing_file_is_empty(self, mocker):
        store, _ = _make_gist_store(mocker, _make_gist_mock())
        assert store.load_document() == {"reviews": []}

    def test_load_document(self, mocker):
        document = {"reviews": [_make_record().to_dict()]}
        store, _ = _make_gist_store(mocker, _make_gist_mock(json.dumps(document)))
        assert store.load_document() == document

    def test_load_bare_list(self, mocker):
        store, _ = _make_gist_store(mocker, _make_gist_mock("[]"))
        assert store.load_document() == {"reviews": []}

    def test_save_document_edits_gist_file(self, mocker):
        gist = _make_gist_mock("[]")
        content = mocker.patch("scanlens_store.gist.InputFileContent")
        store, _ = _make_gist_store(mocker, gist)

        store.save_document({"reviews": [_make_record().to_dict()]})

        gist.edit.assert_called_once()
        files = gist.edit.call_args.kwargs["files"]
        assert files == {"scanlens_history.json": content.return_value}
        saved = json.loads(content.call_args.args[0])
        assert saved["reviews"][0]["file_path"] == "src/app.js"

    def test_save_propagates_errors(self, mocker):
        gist = _make_gist_mock("[]")
        gist.edit.side_effect = RuntimeError("403 Forbidden")
        store, _ = _make_gist_store(mocker, gist)
        with pytest.raises(RuntimeError):
            store.save_document({"reviews": []})

    def test_close_closes_client(self, mocker):
        store, github = _make_gist_store(mocker, _make_gist_mock())
        store.close()
        github.return_value.close.assert_called_once()
