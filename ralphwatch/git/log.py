"""Commit listing across all branches."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ralphwatch.git.runner import run_git

logger = logging.getLogger(__name__)

# Unit separator keeps subjects with tabs or spaces intact
_FIELD_SEP = "\x1f"


@dataclass
class Commit:
    """A commit as reported to observers."""
    hash: str
    message: str
    committed_ms: Optional[int] = field(default=None, compare=False)

    def to_dict(self) -> dict:
        return {"hash": self.hash, "message": self.message}


def _parse_commit(line: str) -> Commit:
    sha, _, rest = line.partition(_FIELD_SEP)
    stamp, _, subject = rest.partition(_FIELD_SEP)
    try:
        committed_ms = int(stamp) * 1000
    except ValueError:
        committed_ms = None
    return Commit(hash=sha.strip(), message=subject, committed_ms=committed_ms)


def commits_since(repo: Path, baseline: str, head: str) -> list[Commit]:
    """
    List commits introduced since baseline.

    Includes everything reachable from head or any other ref but not from
    baseline, in git's native log order (newest first). Best effort: returns
    an empty list on any lookup failure.
    """
    result = run_git(
        [
            "log",
            "--all",
            f"--format=%H{_FIELD_SEP}%ct{_FIELD_SEP}%s",
            "--end-of-options",
            f"{baseline}..{head}",
        ],
        repo,
    )
    if not result.success:
        logger.debug(f"Commit range {baseline}..{head} failed: {result.stderr.strip()}")
        return []

    return [_parse_commit(line) for line in result.stdout.splitlines() if line.strip()]


def recent_commits(repo: Path, limit: int = 10) -> list[str]:
    """One-line log of the newest commits across all branches."""
    result = run_git(["log", "--oneline", f"-{limit}", "--all"], repo, timeout=10)
    if not result.success:
        return []
    return result.lines()
