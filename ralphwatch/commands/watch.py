"""
rw watch - Follow a project by polling for deltas.

Each poll passes the previous head_commit as the next since_commit, so every
commit is shown once. Quiet polls print nothing.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Optional

from rich.console import Console
from rich.text import Text

from ralphwatch.lib.config import Project
from ralphwatch.lib.delta import DeltaResult, compute_delta

POLL_INTERVAL_SECONDS = 10.0

TRANSITION_COLORS = {
    "done": "green",
    "verifying": "cyan",
    "available": "yellow",
}


def _transition_color(status: str) -> str:
    if status.startswith("claimed by "):
        return "blue"
    return TRANSITION_COLORS.get(status, "")


@dataclass
class Shown:
    """What earlier polls already printed.

    A quiet poll keeps the same since_commit, so the same workers and log
    files come back from compute_delta until a new commit lands.
    """
    workers: set[str] = field(default_factory=set)
    log_tails: dict[str, str] = field(default_factory=dict)

    def update(self, delta: DeltaResult) -> None:
        # Forget workers that stopped so a restart under the same name shows again
        running = {w.name for w in delta.workers}
        self.workers = {n for n in self.workers | set(delta.likely_new_workers) if n in running}
        for s in delta.new_log_entries.recent_summaries:
            self.log_tails[s.file] = s.last_lines


def render_delta(delta: DeltaResult, shown: Optional[Shown] = None) -> list[Text]:
    """Rich lines for one delta, skipping what shown says was printed. Empty if nothing changed."""
    shown = shown or Shown()
    lines = []
    for c in reversed(delta.new_commits):
        line = Text()
        line.append(c.hash[:7], style="dim")
        line.append(f" {c.message}")
        lines.append(line)

    for t in delta.story_transitions:
        line = Text()
        line.append(f"{t.id} ", style="bold")
        line.append(f"{t.title}: ")
        line.append(t.from_status, style=_transition_color(t.from_status))
        line.append(" -> ")
        line.append(t.to_status, style=_transition_color(t.to_status))
        lines.append(line)

    for name in delta.likely_new_workers:
        if name not in shown.workers:
            lines.append(Text(f"+ worker {name}", style="magenta"))

    updated = [s.file for s in delta.new_log_entries.recent_summaries if shown.log_tails.get(s.file) != s.last_lines]
    if updated:
        lines.append(Text(f"{len(updated)} updated log(s): {', '.join(updated)}", style="dim"))
    return lines


def cmd_watch(args, project: Project) -> int:
    """Poll compute_delta until interrupted (or --count polls)."""
    console = Console()
    since = args.since
    polls = 0
    shown = Shown()
    interval = args.interval if args.interval is not None else POLL_INTERVAL_SECONDS

    try:
        while True:
            delta = asyncio.run(compute_delta(project, since_commit=since))
            stamp = time.strftime("%H:%M:%S")
            for line in render_delta(delta, shown):
                console.print(Text(f"{stamp} ", style="dim") + line)
            shown.update(delta)
            if delta.head_commit != "unknown":
                since = delta.head_commit

            polls += 1
            if args.count and polls >= args.count:
                break
            time.sleep(interval)
    except KeyboardInterrupt:
        pass

    console.print(Text(f"Last head: {since}", style="dim"))
    return 0
