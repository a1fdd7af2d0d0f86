"""Reading file contents at a ref."""

from pathlib import Path

from ralphwatch.git.runner import run_git


def read_file_at_ref(repo: Path, ref: str, path: str, timeout: int = 30) -> str | None:
    """Return the text of path at ref, or None if the ref or path is absent."""
    result = run_git(["show", "--end-of-options", f"{ref}:{path}"], repo, timeout=timeout)
    if result.success:
        return result.stdout
    return None
