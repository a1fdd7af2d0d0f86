"""Tests for ledger retrieval and parsing."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from ralphwatch.ledger.models import LedgerError
from ralphwatch.ledger.reader import parse_ledger, read_ledger, read_ledger_at
from ralphwatch.lib.config import Project

VALID = json.dumps({
    "project": "demo",
    "userStories": [{"id": "US-1", "title": "Login", "passes": False}],
})


class TestParseLedger:
    """Test parse_ledger."""

    def test_parses_valid_ledger(self):
        ledger = parse_ledger(VALID)
        assert ledger.project == "demo"
        assert [s.id for s in ledger.stories] == ["US-1"]

    def test_rejects_invalid_json(self):
        with pytest.raises(LedgerError, match="Invalid JSON"):
            parse_ledger("{not json")

    def test_rejects_non_object(self):
        with pytest.raises(LedgerError):
            parse_ledger("[1, 2]")

    def test_rejects_missing_stories(self):
        with pytest.raises(LedgerError, match="userStories"):
            parse_ledger(json.dumps({"project": "demo"}))

    def test_rejects_wrong_field_type(self):
        bad = json.dumps({"project": "demo", "userStories": [{"id": "US-1", "passes": "yes"}]})
        with pytest.raises(LedgerError):
            parse_ledger(bad)

    def test_rejects_duplicate_ids(self):
        dup = json.dumps({"project": "demo", "userStories": [{"id": "US-1"}, {"id": "US-1"}]})
        with pytest.raises(LedgerError, match="Duplicate"):
            parse_ledger(dup)


class TestReadLedgerAt:
    """Test reading at a ref."""

    @patch("ralphwatch.ledger.reader.read_file_at_ref")
    def test_absent_file_is_none(self, mock_show):
        mock_show.return_value = None
        assert read_ledger_at(Path("/repo"), "abc", "prd.json") is None

    @patch("ralphwatch.ledger.reader.read_file_at_ref")
    def test_malformed_is_none_with_warning(self, mock_show, caplog):
        mock_show.return_value = "{broken"
        assert read_ledger_at(Path("/repo"), "abc", "prd.json") is None
        assert "malformed" in caplog.text


class TestReadLedger:
    """Test shared-repo then working-copy fallback."""

    def test_nothing_anywhere_is_none(self, tmp_path):
        project = Project(dir=tmp_path / "does-not-exist")
        assert read_ledger(project) is None

    def test_working_copy_used_without_repo(self, tmp_path):
        (tmp_path / "prd.json").write_text(VALID)
        ledger = read_ledger(Project(dir=tmp_path))
        assert ledger is not None
        assert ledger.stories[0].title == "Login"

    def test_malformed_working_copy_is_none(self, tmp_path):
        (tmp_path / "prd.json").write_text("nope")
        assert read_ledger(Project(dir=tmp_path)) is None

    @patch("ralphwatch.ledger.reader.read_file_at_ref")
    @patch("ralphwatch.ledger.reader.resolve_ledger_ref")
    def test_falls_back_when_repo_has_no_ledger(self, mock_ref, mock_show, tmp_path):
        (tmp_path / ".ralph" / "repo.git").mkdir(parents=True)
        (tmp_path / "prd.json").write_text(VALID)
        mock_ref.return_value = "HEAD"
        mock_show.return_value = None
        ledger = read_ledger(Project(dir=tmp_path))
        assert ledger is not None
        assert ledger.project == "demo"

    def test_prefers_working_branch_over_stale_head(self, ralph_repo):
        # The working copy disagrees with the repo; the repo wins
        (ralph_repo.project_dir / "prd.json").write_text(VALID)
        ledger = read_ledger(Project(dir=ralph_repo.project_dir))
        assert ledger.stories[0].claimed_by == "agent-1"
