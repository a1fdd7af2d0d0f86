"""
rw status - Worker health, story board progress, and recent commits.
"""

import asyncio

from ralphwatch.commands.output import print_json
from ralphwatch.lib.config import Project
from ralphwatch.lib.snapshot import status_snapshot


def cmd_status(args, project: Project) -> int:
    """Show a point-in-time status snapshot."""
    snapshot = asyncio.run(status_snapshot(project))
    print_json(snapshot.to_dict())
    return 0
