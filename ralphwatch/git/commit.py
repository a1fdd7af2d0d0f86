"""Git commit operations."""

from pathlib import Path

from ralphwatch.git.runner import run_git, GitResult


def set_identity(worktree: Path, name: str, email: str) -> GitResult:
    """Configure the committer identity for a single worktree."""
    result = run_git(["config", "user.email", email], worktree)
    if not result.success:
        return result
    return run_git(["config", "user.name", name], worktree)


def stage_files(worktree: Path, files: list[str]) -> GitResult:
    """Stage specific files."""
    return run_git(["add", "--"] + files, worktree)


def commit(worktree: Path, message: str) -> GitResult:
    """Create a commit with the given message."""
    return run_git(["commit", "-m", message], worktree)
