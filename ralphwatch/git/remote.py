"""Git remote operations."""

from pathlib import Path

from ralphwatch.git.runner import run_git, GitResult


def clone_branch(source: Path, branch: str, dest: Path) -> GitResult:
    """Clone a single branch of source into dest."""
    return run_git(
        ["clone", "--branch", branch, "--single-branch", str(source), str(dest)],
        dest.parent,
        timeout=60,
    )


def push_head(worktree: Path, remote: str = "origin") -> GitResult:
    """Push the current branch back to its remote."""
    return run_git(["push", remote, "HEAD"], worktree, timeout=60)
