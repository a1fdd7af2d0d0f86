"""
rw changes - What changed since a previous commit.

Prints new commits, story transitions, new log entries and worker changes.
Pass the printed head_commit as --since on the next call to get only the
next increment.
"""

import asyncio

from ralphwatch.commands.output import print_json
from ralphwatch.lib.config import Project
from ralphwatch.lib.delta import compute_delta


def cmd_changes(args, project: Project) -> int:
    result = asyncio.run(compute_delta(project, since_commit=args.since))
    print_json(result.to_dict())
    return 0
