"""Ref resolution for the shared agent repository.

Agents push to disposable working branches that are never fast-forwarded
into the default line, so the bare repository's HEAD is usually stale.
Everything here is re-resolved on every call; nothing is cached.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path

from ralphwatch.git.runner import run_git

logger = logging.getLogger(__name__)


def get_commit_sha(repo: Path, ref: str = "HEAD") -> str | None:
    """Get the SHA of a ref, or None if it does not name a commit.

    Tokens that look like options are rejected without running git, so a
    caller-supplied ref can never turn into a git flag.
    """
    if not ref or ref.startswith("-"):
        return None
    result = run_git(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"], repo)
    if result.success:
        return result.stdout.strip() or None
    return None


def resolve_head(repo: Path) -> str | None:
    """Tip of the repository's default symbolic pointer."""
    return get_commit_sha(repo, "HEAD")


def resolve_root_commit(repo: Path) -> str | None:
    """First parentless commit reachable from HEAD, or None.

    When HEAD is unborn (agents only pushed working branches), the oldest
    root on any ref is used instead.
    """
    result = run_git(["rev-list", "--max-parents=0", "HEAD"], repo)
    if result.success and result.first_line():
        return result.first_line()
    result = run_git(["rev-list", "--max-parents=0", "--all"], repo)
    if not result.success:
        return None
    roots = result.lines()
    return roots[-1] if roots else None


def resolve_latest_commit(repo: Path) -> str | None:
    """Newest commit (by committer date) across all refs."""
    result = run_git(["log", "--all", "-1", "--format=%H"], repo)
    return result.first_line() if result.success else None


def resolve_ledger_ref(repo: Path, ledger_path: str) -> str:
    """
    Find the most recent commit on any branch that touched the ledger.

    Falls back to the default head (and finally the literal "HEAD") when no
    commit touched the path or the lookup fails. Never raises.
    """
    try:
        result = run_git(["log", "--all", "-1", "--format=%H", "--", ledger_path], repo)
        if result.success:
            sha = result.stdout.strip()
            if sha:
                logger.debug(f"Ledger ref for {repo}: {sha}")
                return sha
        else:
            logger.debug(f"Ledger ref lookup failed in {repo}: {result.stderr.strip()}")
        return resolve_head(repo) or "HEAD"
    except Exception as e:
        logger.warning(f"Ledger ref resolution failed in {repo}: {e}")
        return "HEAD"


def ledger_ref_as_of(repo: Path, ledger_path: str, until_ms: int) -> str | None:
    """Most recent ledger-touching commit on any branch committed at or before until_ms."""
    until = datetime.fromtimestamp(until_ms // 1000, timezone.utc).strftime("%Y-%m-%d %H:%M:%S +0000")
    result = run_git(["log", "--all", "-1", "--format=%H", f"--until={until}", "--", ledger_path], repo)
    return result.first_line() if result.success else None


def get_commit_timestamp_ms(repo: Path, ref: str) -> int | None:
    """Committer timestamp of a ref in epoch milliseconds."""
    result = run_git(["show", "-s", "--format=%ct", "--end-of-options", ref], repo)
    if not result.success:
        return None
    try:
        return int(result.first_line()) * 1000
    except (TypeError, ValueError):
        return None


def get_default_branch(repo: Path) -> str | None:
    """Branch the default symbolic pointer refers to, or None if detached."""
    result = run_git(["symbolic-ref", "--short", "HEAD"], repo)
    if result.success:
        return result.stdout.strip() or None
    return None


def get_branch_containing(repo: Path, ref: str) -> str | None:
    """Most recently committed branch whose history contains ref."""
    result = run_git(
        [
            "for-each-ref",
            "--sort=-committerdate",
            "--contains", ref,
            "--format=%(refname:short)",
            "refs/heads",
        ],
        repo,
    )
    return result.first_line() if result.success else None


def branch_exists(repo: Path, branch: str) -> bool:
    """Check if a branch exists."""
    result = run_git(["show-ref", "--verify", f"refs/heads/{branch}"], repo)
    return result.success
