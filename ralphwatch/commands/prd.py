"""
rw prd - Read the ledger with stories grouped by status.
"""

from ralphwatch.commands.output import print_json
from ralphwatch.lib.config import Project
from ralphwatch.lib.snapshot import ledger_view


def cmd_prd(args, project: Project) -> int:
    """Print available, claimed, verifying and done stories."""
    view = ledger_view(project)
    print_json(view)
    return 1 if "error" in view else 0
