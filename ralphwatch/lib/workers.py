"""
Worker process inspection.

Workers are containers named with a fixed prefix (ralph-). The runtime only
reports a coarse, rounded uptime string ("45 seconds ago", "3 minutes ago"),
so freshness is a heuristic: a worker started just before the reference
instant may be misclassified in either direction.
"""

import logging
import subprocess
from dataclasses import dataclass
from typing import Optional

from ralphwatch.lib.constants import UPTIME_PATTERN, UPTIME_UNIT_MS

logger = logging.getLogger(__name__)

PS_FORMAT = "{{.Names}}\t{{.Status}}\t{{.RunningFor}}"


@dataclass
class WorkerRecord:
    """One worker as reported by the container runtime."""
    name: str
    status: str
    running_for: str

    def to_dict(self) -> dict:
        return {"name": self.name, "status": self.status, "running_for": self.running_for}


def parse_worker_listing(output: str) -> list[WorkerRecord]:
    """Parse tab-separated `ps` output into records."""
    workers = []
    for line in output.splitlines():
        if not line.strip():
            continue
        parts = line.split("\t")
        parts += [""] * (3 - len(parts))
        workers.append(WorkerRecord(name=parts[0], status=parts[1], running_for=parts[2]))
    return workers


def list_workers(prefix: str = "ralph-", runtime: str = "docker", timeout: int = 10) -> list[WorkerRecord]:
    """Current workers whose name matches prefix.

    No runtime installed, a runtime error or a timeout all yield an empty list.
    """
    cmd = [runtime, "ps", "--filter", f"name={prefix}", "--format", PS_FORMAT]
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
    except FileNotFoundError:
        logger.debug(f"{runtime} not found; no workers")
        return []
    except subprocess.TimeoutExpired:
        logger.warning(f"{runtime} ps timed out after {timeout}s")
        return []

    if result.returncode != 0:
        logger.debug(f"{runtime} ps failed: {result.stderr.strip()}")
        return []
    return parse_worker_listing(result.stdout)


def parse_uptime_ms(text: str) -> Optional[int]:
    """Milliseconds from the first "<int> <unit>" in an uptime string."""
    match = UPTIME_PATTERN.search(text or "")
    if not match:
        return None
    return int(match.group(1)) * UPTIME_UNIT_MS[match.group(2)]


def classify_likely_new(workers: list[WorkerRecord], since_ms: int, now_ms: int) -> list[str]:
    """
    Names of workers that probably started after since_ms.

    A worker is likely new iff its uptime is strictly shorter than the time
    elapsed since the reference instant. Unparseable uptimes (for example
    "About a minute ago") are never flagged.
    """
    window = now_ms - since_ms
    likely_new = []
    for worker in workers:
        uptime = parse_uptime_ms(worker.running_for)
        if uptime is None:
            continue
        if uptime < window:
            likely_new.append(worker.name)
    return likely_new
