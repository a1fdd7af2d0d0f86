"""
Incremental change feed for a project.

compute_delta() is the entry point callers poll: each call's head_commit
becomes the next call's since_commit, giving advancing, non-overlapping
deltas as long as the caller keeps the returned head. Nothing is stored here.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from ralphwatch.git.log import Commit, commits_since
from ralphwatch.git.refs import (
    get_commit_sha,
    get_commit_timestamp_ms,
    ledger_ref_as_of,
    resolve_head,
    resolve_latest_commit,
    resolve_ledger_ref,
    resolve_root_commit,
)
from ralphwatch.ledger.diff import StoryTransition, diff_stories
from ralphwatch.ledger.reader import read_ledger_at
from ralphwatch.lib.config import Project
from ralphwatch.lib.logscan import LogDelta, scan_new_logs
from ralphwatch.lib.workers import WorkerRecord, classify_likely_new, list_workers

logger = logging.getLogger(__name__)


@dataclass
class DeltaResult:
    """Everything that changed between two commits."""
    project: str
    since_commit: str
    head_commit: str
    new_commits: list[Commit] = field(default_factory=list)
    story_transitions: list[StoryTransition] = field(default_factory=list)
    new_log_entries: LogDelta = field(default_factory=LogDelta)
    workers: list[WorkerRecord] = field(default_factory=list)
    likely_new_workers: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "project": self.project,
            "since_commit": self.since_commit,
            "head_commit": self.head_commit,
            "new_commits": [c.to_dict() for c in self.new_commits],
            "story_transitions": [t.to_dict() for t in self.story_transitions],
            "new_log_entries": self.new_log_entries.to_dict(),
            "workers": {
                "current": [w.to_dict() for w in self.workers],
                "likely_new": self.likely_new_workers,
            },
        }


async def soft_call(label: str, default: Any, func: Callable, *args) -> Any:
    """Run a blocking lookup in a thread; any failure becomes default."""
    try:
        return await asyncio.to_thread(func, *args)
    except Exception as e:
        logger.warning(f"{label} failed, using empty result: {e}")
        return default


def _now_ms() -> int:
    return int(time.time() * 1000)


async def compute_delta(
    project: Project,
    since_commit: Optional[str] = None,
    now_ms: Optional[int] = None,
) -> DeltaResult:
    """
    Compute what changed since since_commit.

    Args:
        project: Project to observe
        since_commit: Opaque checkpoint from a previous call's head_commit.
            Defaults to the repository's root commit, as does a token that
            does not name a commit.
        now_ms: Current time in epoch ms (for worker freshness); defaults to now.

    Returns:
        DeltaResult. Each sub-lookup degrades to an empty value on failure,
        so a missing container runtime never hides new commits and vice versa.
    """
    cfg = project.config
    repo = project.bare_repo

    if since_commit:
        checked = await soft_call("Checkpoint lookup", None, get_commit_sha, repo, since_commit)
        if checked is None:
            logger.warning(f"Ignoring since commit {since_commit!r}: not a commit in {repo}")
        since_commit = checked
    if not since_commit:
        since_commit = await soft_call("Root commit lookup", None, resolve_root_commit, repo) or "HEAD"

    head_commit = await soft_call("Latest commit lookup", None, resolve_latest_commit, repo)
    if not head_commit:
        head_commit = await soft_call("Head lookup", None, resolve_head, repo) or "unknown"

    since_ms = await soft_call("Commit timestamp lookup", None, get_commit_timestamp_ms, repo, since_commit)
    if since_ms is None:
        since_ms = 0

    # Both ledger snapshots are taken across all branches: the newest version
    # now, and the newest version that existed when since_commit was made.
    head_ledger_ref = await soft_call("Ledger ref lookup", "HEAD", resolve_ledger_ref, repo, cfg.ledger_file)
    since_ledger_ref = None
    if since_ms:
        since_ledger_ref = await soft_call(
            "Ledger ref lookup at since", None, ledger_ref_as_of, repo, cfg.ledger_file, since_ms,
        )

    commits, old_ledger, new_ledger, workers, logs = await asyncio.gather(
        soft_call("Commit listing", [], commits_since, repo, since_commit, head_commit),
        soft_call(
            "Ledger read at since", None, read_ledger_at,
            repo, since_ledger_ref or since_commit, cfg.ledger_file, cfg.git_timeout,
        ),
        soft_call("Ledger read at head", None, read_ledger_at, repo, head_ledger_ref, cfg.ledger_file, cfg.git_timeout),
        soft_call("Worker listing", [], list_workers, cfg.worker_prefix, cfg.worker_runtime, cfg.process_timeout),
        soft_call(
            "Log scan", LogDelta(), scan_new_logs,
            project.logs_dir, since_ms, cfg.log_suffix, cfg.max_log_summaries, cfg.log_tail_lines,
        ),
    )

    # Sibling branches are not ancestors of since_commit; anything they hold
    # from before the checkpoint was already reported.
    if since_ms:
        commits = [c for c in commits if c.committed_ms is None or c.committed_ms > since_ms]

    if now_ms is None:
        now_ms = _now_ms()

    return DeltaResult(
        project=str(project.dir),
        since_commit=since_commit,
        head_commit=head_commit,
        new_commits=commits,
        story_transitions=diff_stories(old_ledger, new_ledger),
        new_log_entries=logs,
        workers=workers,
        likely_new_workers=classify_likely_new(workers, since_ms, now_ms),
    )
