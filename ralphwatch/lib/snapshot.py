"""
Current-state views: the status snapshot and the grouped ledger board.

Unlike lib.delta, these carry no commit-range history.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Optional

from ralphwatch.git.log import recent_commits
from ralphwatch.git.refs import resolve_latest_commit
from ralphwatch.ledger.models import Ledger, Story
from ralphwatch.ledger.reader import read_ledger, searched_locations
from ralphwatch.ledger.status import StoryBoard, build_board
from ralphwatch.lib.config import Project
from ralphwatch.lib.constants import RECENT_COMMITS_LIMIT
from ralphwatch.lib.delta import soft_call
from ralphwatch.lib.workers import WorkerRecord, list_workers


def _brief(story: Story) -> dict:
    return {"id": story.id, "title": story.title}


def board_status_dict(board: Optional[StoryBoard]) -> dict:
    """Compact per-status listing used by the status snapshot."""
    if board is None:
        return {"available": [], "claimed": [], "verifying": [], "done": [], "progress": "unknown"}
    return {
        "available": [{**_brief(s), "priority": s.priority} for s in board.available],
        "claimed": [
            {**_brief(s), "claimed_by": s.claimed_by, "claimed_at": s.claimed_at or "unknown"}
            for s in board.claimed
        ],
        "verifying": [
            {**_brief(s), "verified_by": s.verified_by, "verification_notes": s.verification_notes}
            for s in board.verifying
        ],
        "done": [_brief(s) for s in board.done],
        "progress": board.progress,
    }


def board_detail_dict(ledger: Ledger, board: StoryBoard) -> dict:
    """Full ledger read grouped by derived status."""
    def detail(s: Story) -> dict:
        return {
            **_brief(s),
            "description": s.description,
            "acceptanceCriteria": s.acceptance_criteria,
            "priority": s.priority,
            "notes": s.notes or None,
            "verification_notes": s.verification_notes or None,
        }

    return {
        "project": ledger.project,
        "branch": ledger.branch_name,
        "description": ledger.description,
        "summary": board.summary(),
        "stories": {
            "available": [detail(s) for s in board.available],
            "claimed": [
                {**detail(s), "claimed_by": s.claimed_by, "claimed_at": s.claimed_at}
                for s in board.claimed
            ],
            "verifying": [
                {
                    **_brief(s),
                    "verified_by": s.verified_by,
                    "verification_notes": s.verification_notes,
                }
                for s in board.verifying
            ],
            "done": [_brief(s) for s in board.done],
        },
    }


def ledger_view(project: Project) -> dict:
    """Ledger grouped by status, or an error document if there is none."""
    ledger = read_ledger(project)
    if ledger is None:
        return {
            "error": f"No {project.config.ledger_file} found",
            "searched": searched_locations(project),
        }
    return board_detail_dict(ledger, build_board(ledger))


def stop_requested(project: Project) -> bool:
    """A graceful stop was requested (stop file exists and is non-empty)."""
    try:
        return project.stop_file.stat().st_size > 0
    except OSError:
        return False


@dataclass
class StatusSnapshot:
    """Workers, story board and recent history at one instant."""
    project: str
    latest_commit: str
    stop_requested: bool
    workers: list[WorkerRecord] = field(default_factory=list)
    board: Optional[StoryBoard] = None
    recent_commits: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "project": self.project,
            "latest_commit": self.latest_commit,
            "stop_requested": self.stop_requested,
            "workers": [w.to_dict() for w in self.workers],
            "stories": board_status_dict(self.board),
            "recent_commits": self.recent_commits,
        }


def _recent_commits(project: Project) -> list[str]:
    # Agents push to the bare repo; the working directory is a fallback
    if project.bare_repo.exists():
        commits = recent_commits(project.bare_repo, RECENT_COMMITS_LIMIT)
        if commits:
            return commits
    return recent_commits(project.dir, RECENT_COMMITS_LIMIT)


async def status_snapshot(project: Project) -> StatusSnapshot:
    """Gather workers, ledger, recent commits and latest commit concurrently."""
    cfg = project.config
    workers, ledger, commits, latest = await asyncio.gather(
        soft_call("Worker listing", [], list_workers, cfg.worker_prefix, cfg.worker_runtime, cfg.process_timeout),
        soft_call("Ledger read", None, read_ledger, project),
        soft_call("Recent commits", [], _recent_commits, project),
        soft_call("Latest commit lookup", None, resolve_latest_commit, project.bare_repo),
    )
    return StatusSnapshot(
        project=str(project.dir),
        latest_commit=latest or "unknown",
        stop_requested=stop_requested(project),
        workers=workers,
        board=build_board(ledger) if ledger is not None else None,
        recent_commits=commits,
    )
