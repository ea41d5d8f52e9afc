"""Tests for skilllint.history.RunHistory."""

import json
from pathlib import Path

import pytest

from skilllint.history import RunHistory
from skilllint.validation.report import CorpusReport, SkillReport, ValidationResult


@pytest.fixture
def history(tmp_db):
    """Create a RunHistory backed by a temporary DB."""
    h = RunHistory(db_path=tmp_db)
    yield h
    h.close()


def _report(failed=()):
    skills = [
        SkillReport(
            name=name,
            path=Path(name),
            result=ValidationResult(errors=["e"] if name in failed else [], warnings=["w"]),
        )
        for name in ("form-state", "query-cache")
    ]
    return CorpusReport(skills=skills)


class TestRecord:
    def test_insert_and_retrieve(self, history):
        history.record(_report())
        rows = history.get_recent(limit=10)
        assert len(rows) == 1
        assert rows[0]["skills"] == 2
        assert rows[0]["errors"] == 0
        assert rows[0]["warnings"] == 2
        assert rows[0]["failed_skills"] == []
        assert rows[0]["exit_code"] == 0

    def test_failed_skills_stored_as_json(self, history):
        history.record(_report(failed=("query-cache",)))
        row = history.get_recent(limit=1)[0]
        assert row["failed_skills"] == ["query-cache"]
        assert row["exit_code"] == 1

    def test_explicit_exit_code(self, history):
        history.record(_report(), exit_code=1)
        assert history.get_recent(limit=1)[0]["exit_code"] == 1

    def test_timestamp_populated(self, history):
        history.record(_report())
        assert "T" in history.get_recent(limit=1)[0]["timestamp"]  # ISO format

    def test_creates_parent_directory(self, tmp_path):
        db = tmp_path / "nested" / "dir" / "runs.db"
        h = RunHistory(str(db))
        h.close()
        assert db.exists()


class TestQueries:
    def test_recent_is_newest_first(self, history):
        first = history.record(_report())
        second = history.record(_report(failed=("form-state",)))
        rows = history.get_recent(limit=10)
        assert [r["id"] for r in rows] == [second, first]

    def test_limit(self, history):
        for _ in range(5):
            history.record(_report())
        assert len(history.get_recent(limit=3)) == 3

    def test_export_json(self, history):
        history.record(_report())
        history.record(_report(failed=("form-state",)))
        rows = json.loads(history.export_json())
        assert [r["exit_code"] for r in rows] == [0, 1]
