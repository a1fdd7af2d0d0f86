"""Tests for rw watch rendering and the poll loop."""

import argparse
from pathlib import Path
from unittest.mock import patch

from ralphwatch.commands.watch import Shown, cmd_watch, render_delta
from ralphwatch.git.log import Commit
from ralphwatch.ledger.diff import StoryTransition
from ralphwatch.lib.config import Project
from ralphwatch.lib.delta import DeltaResult
from ralphwatch.lib.logscan import LogDelta, LogSummary
from ralphwatch.lib.workers import WorkerRecord


def _quiet_delta() -> DeltaResult:
    """A delta with no commits but a fresh worker and an updated log."""
    return DeltaResult(
        project="/p",
        since_commit="abc",
        head_commit="abc",
        new_log_entries=LogDelta(1, [LogSummary("agent-1.log", "working")]),
        workers=[WorkerRecord("ralph-agent-1", "Up 5 seconds", "5 seconds ago")],
        likely_new_workers=["ralph-agent-1"],
    )


class TestRenderDelta:
    """Test rich line rendering."""

    def test_empty_delta_renders_nothing(self):
        assert render_delta(DeltaResult(project="/p", since_commit="a", head_commit="a")) == []

    def test_commits_oldest_first_then_transitions(self):
        delta = DeltaResult(
            project="/p",
            since_commit="a",
            head_commit="c",
            new_commits=[Commit("c" * 40, "second"), Commit("b" * 40, "first")],
            story_transitions=[StoryTransition("US-1", "Login", "available", "claimed by agent-1")],
        )
        lines = [line.plain for line in render_delta(delta)]
        assert lines == [
            "bbbbbbb first",
            "ccccccc second",
            "US-1 Login: available -> claimed by agent-1",
        ]

    def test_already_shown_items_skipped(self):
        delta = _quiet_delta()
        shown = Shown()
        assert [line.plain for line in render_delta(delta, shown)] == [
            "+ worker ralph-agent-1",
            "1 updated log(s): agent-1.log",
        ]
        shown.update(delta)
        assert render_delta(delta, shown) == []

    def test_log_with_new_tail_shown_again(self):
        shown = Shown()
        shown.update(_quiet_delta())
        delta = _quiet_delta()
        delta.new_log_entries = LogDelta(1, [LogSummary("agent-1.log", "finished")])
        assert [line.plain for line in render_delta(delta, shown)] == ["1 updated log(s): agent-1.log"]

    def test_stopped_worker_forgotten(self):
        shown = Shown()
        shown.update(_quiet_delta())
        shown.update(DeltaResult(project="/p", since_commit="abc", head_commit="abc"))
        assert shown.workers == set()


class TestCmdWatch:
    """Test the poll loop."""

    @patch("ralphwatch.commands.watch.time.sleep")
    def test_quiet_polls_print_worker_once(self, _sleep, capsys):
        calls = []

        async def fake_delta(project, since_commit=None):
            calls.append(since_commit)
            return _quiet_delta()

        args = argparse.Namespace(since=None, interval=0, count=3)
        with patch("ralphwatch.commands.watch.compute_delta", fake_delta):
            assert cmd_watch(args, Project(dir=Path("/p"))) == 0

        out = capsys.readouterr().out
        assert out.count("+ worker ralph-agent-1") == 1
        assert out.count("updated log(s)") == 1
        assert calls == [None, "abc", "abc"]
        assert "Last head: abc" in out
