"""
rw logs - Tail the most recent agent logs.
"""

from ralphwatch.commands.output import print_json
from ralphwatch.lib.config import Project
from ralphwatch.lib.logscan import read_agent_logs


def cmd_logs(args, project: Project) -> int:
    """Show the last lines of the newest agent logs."""
    cfg = project.config
    listing = read_agent_logs(
        project.logs_dir,
        agent_id=args.agent,
        lines=args.lines,
        max_files=cfg.max_log_summaries,
        suffix=cfg.log_suffix,
    )

    if listing is None:
        print_json({"error": f"No {cfg.logs_dir} directory found", "path": str(project.logs_dir)})
        return 1

    if not listing.logs:
        message = f"No logs found for agent '{args.agent}'" if args.agent else "No log files found"
        print_json({"logs": [], "message": message})
        return 0

    print_json(listing.to_dict())
    return 0
