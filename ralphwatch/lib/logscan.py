"""
Agent log scanning.

Log files are append-only, one per agent iteration, under agent_logs/.
Only tails are ever read; nothing here mutates a log file.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ralphwatch.lib.constants import DEFAULT_LOG_LINES

logger = logging.getLogger(__name__)


@dataclass
class LogSummary:
    """Tail of one log file."""
    file: str
    last_lines: str

    def to_dict(self) -> dict:
        return {"file": self.file, "last_lines": self.last_lines}


@dataclass
class LogDelta:
    """Log files modified after a reference time."""
    new_count: int = 0
    recent_summaries: list[LogSummary] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "new_count": self.new_count,
            "recent_summaries": [s.to_dict() for s in self.recent_summaries],
        }


@dataclass
class LogTail:
    """Tail of one log file with line counts."""
    file: str
    total_lines: int
    showing_last: int
    content: str

    def to_dict(self) -> dict:
        return {
            "file": self.file,
            "total_lines": self.total_lines,
            "showing_last": self.showing_last,
            "content": self.content,
        }


@dataclass
class LogListing:
    """Most recent logs in a log directory."""
    total_log_files: int
    logs: list[LogTail] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "total_log_files": self.total_log_files,
            "showing": len(self.logs),
            "logs": [t.to_dict() for t in self.logs],
        }


def _list_logs(logs_dir: Path, suffix: str) -> list[tuple[str, int]]:
    """(name, mtime_ms) for every log file, newest first.

    Raises OSError if the directory cannot be enumerated. Files that vanish
    between listing and stat are skipped.
    """
    entries = []
    for path in logs_dir.iterdir():
        if not path.name.endswith(suffix):
            continue
        try:
            st = path.stat()
        except OSError:
            continue
        if not path.is_file():
            continue
        entries.append((path.name, st.st_mtime_ns // 1_000_000))
    entries.sort(key=lambda e: e[1], reverse=True)
    return entries


def _tail(text: str, lines: int) -> tuple[str, int]:
    """Last N lines of text joined with newlines, plus the total line count."""
    all_lines = text.splitlines()
    if lines <= 0:
        return "", len(all_lines)
    return "\n".join(all_lines[-lines:]), len(all_lines)


def scan_new_logs(
    logs_dir: Path,
    since_ms: int,
    suffix: str = ".log",
    max_summaries: int = 5,
    tail_lines: int = 10,
) -> LogDelta:
    """
    Find log files modified strictly after since_ms.

    new_count covers every such file; summaries cover only the max_summaries
    most recently modified, newest first, each cut to its last tail_lines
    lines. A missing or unreadable directory yields an empty delta.
    """
    try:
        entries = _list_logs(logs_dir, suffix)
    except OSError as e:
        logger.debug(f"No log directory at {logs_dir}: {e}")
        return LogDelta()

    fresh = [(name, mtime) for name, mtime in entries if mtime > since_ms]

    summaries = []
    for name, _ in fresh[:max_summaries]:
        try:
            text = (logs_dir / name).read_text(errors="replace")
        except OSError as e:
            logger.warning(f"Could not read log {name}: {e}")
            continue
        tail, _ = _tail(text, tail_lines)
        summaries.append(LogSummary(file=name, last_lines=tail))

    return LogDelta(new_count=len(fresh), recent_summaries=summaries)


def read_agent_logs(
    logs_dir: Path,
    agent_id: Optional[str] = None,
    lines: int = DEFAULT_LOG_LINES,
    max_files: int = 5,
    suffix: str = ".log",
) -> Optional[LogListing]:
    """Tails of the most recent logs, optionally for one agent.

    Returns None if the log directory does not exist.
    """
    try:
        entries = _list_logs(logs_dir, suffix)
    except OSError:
        return None

    if agent_id:
        entries = [(name, mtime) for name, mtime in entries if name.startswith(agent_id)]

    tails = []
    for name, _ in entries[:max_files]:
        try:
            text = (logs_dir / name).read_text(errors="replace")
        except OSError as e:
            logger.warning(f"Could not read log {name}: {e}")
            continue
        content, total = _tail(text, lines)
        tails.append(LogTail(
            file=name,
            total_lines=total,
            showing_last=min(lines, total),
            content=content,
        ))

    return LogListing(total_log_files=len(entries), logs=tails)
