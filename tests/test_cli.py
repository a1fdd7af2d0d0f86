"""Tests for the rw command line."""

import json
from unittest.mock import patch

import pytest

from ralphwatch.cli import build_parser, main
from ralphwatch.lib.delta import DeltaResult


class TestParser:
    """Test argument parsing."""

    def test_changes_since(self):
        args = build_parser().parse_args(["changes", "/p", "--since", "abc"])
        assert args.since == "abc"
        assert args.project_dir == "/p"

    def test_logs_defaults(self):
        args = build_parser().parse_args(["logs", "/p"])
        assert args.lines == 50
        assert args.agent is None

    def test_edit_requires_action(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["edit", "/p", "--story", "{}"])


class TestMain:
    """Test command dispatch and output."""

    def test_missing_project_dir_exits_2(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["prd", str(tmp_path / "nope")])
        assert exc.value.code == 2

    def test_missing_config_file_exits_2(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["--config", str(tmp_path / "absent.yaml"), "prd", str(tmp_path)])
        assert exc.value.code == 2

    def test_prd_without_ledger(self, tmp_path, capsys):
        assert main(["prd", str(tmp_path)]) == 1
        out = json.loads(capsys.readouterr().out)
        assert out["error"] == "No prd.json found"

    def test_logs_without_directory(self, tmp_path, capsys):
        assert main(["logs", str(tmp_path)]) == 1
        assert "agent_logs" in json.loads(capsys.readouterr().out)["error"]

    def test_changes_prints_delta(self, tmp_path, capsys):
        async def fake_delta(project, since_commit=None):
            return DeltaResult(project=str(project.dir), since_commit=since_commit, head_commit="def")

        with patch("ralphwatch.commands.changes.compute_delta", fake_delta):
            assert main(["changes", str(tmp_path), "--since", "abc"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert out["since_commit"] == "abc"
        assert out["head_commit"] == "def"
        assert out["new_commits"] == []

    def test_edit_bad_json(self, tmp_path, capsys):
        assert main(["edit", str(tmp_path), "--action", "remove_story", "--story", "{"]) == 2

    def test_edit_failure_reports_step(self, tmp_path, capsys):
        code = main(["edit", str(tmp_path), "--action", "remove_story", "--story", '{"id": "US-1"}'])
        assert code == 1
        assert json.loads(capsys.readouterr().out)["step"] == "read"
