#!/usr/bin/env python3
"""ralphwatch CLI entrypoint."""

import argparse
import logging
import sys
from pathlib import Path

from ralphwatch.lib.config import ConfigError, load_project
from ralphwatch.commands import changes as cmd_changes_module
from ralphwatch.commands import edit as cmd_edit_module
from ralphwatch.commands import logs as cmd_logs_module
from ralphwatch.commands import prd as cmd_prd_module
from ralphwatch.commands import status as cmd_status_module
from ralphwatch.commands import watch as cmd_watch_module
from ralphwatch.lib.constants import DEFAULT_LOG_LINES


def get_project(args):
    """Load the project named on the command line."""
    project_dir = Path(args.project_dir)
    if not project_dir.is_dir():
        print(f"ERROR: Project directory not found: {project_dir}", file=sys.stderr)
        sys.exit(2)
    config_path = Path(args.config) if args.config else None
    try:
        return load_project(project_dir, config_path)
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(2)


def cmd_changes(args):
    return cmd_changes_module.cmd_changes(args, get_project(args))


def cmd_status(args):
    return cmd_status_module.cmd_status(args, get_project(args))


def cmd_prd(args):
    return cmd_prd_module.cmd_prd(args, get_project(args))


def cmd_logs(args):
    return cmd_logs_module.cmd_logs(args, get_project(args))


def cmd_edit(args):
    return cmd_edit_module.cmd_edit(args, get_project(args))


def cmd_watch(args):
    return cmd_watch_module.cmd_watch(args, get_project(args))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='rw', description='Observe ralph agent fleets')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging on stderr')
    parser.add_argument('--config', '-c', help='observer.yaml path (default: <project>/.ralph/observer.yaml)')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # rw changes
    p_changes = subparsers.add_parser('changes', help='Show what changed since a commit')
    p_changes.add_argument('project_dir', help='Project directory')
    p_changes.add_argument('--since', '-s', help='Commit to diff from (head_commit of a previous call)')
    p_changes.set_defaults(func=cmd_changes)

    # rw status
    p_status = subparsers.add_parser('status', help='Show workers, story board and recent commits')
    p_status.add_argument('project_dir', help='Project directory')
    p_status.set_defaults(func=cmd_status)

    # rw prd
    p_prd = subparsers.add_parser('prd', help='Show ledger stories grouped by status')
    p_prd.add_argument('project_dir', help='Project directory')
    p_prd.set_defaults(func=cmd_prd)

    # rw logs
    p_logs = subparsers.add_parser('logs', help='Tail recent agent logs')
    p_logs.add_argument('project_dir', help='Project directory')
    p_logs.add_argument('--agent', '-a', help="Only logs for this agent (e.g. 'agent-1')")
    p_logs.add_argument('--lines', '-n', type=int, default=DEFAULT_LOG_LINES, help='Lines per log file')
    p_logs.set_defaults(func=cmd_logs)

    # rw edit
    p_edit = subparsers.add_parser('edit', help='Add, edit or remove a ledger story')
    p_edit.add_argument('project_dir', help='Project directory')
    p_edit.add_argument('--action', required=True, choices=['add_story', 'edit_story', 'remove_story'])
    p_edit.add_argument('--story', required=True, help='Story JSON, e.g. \'{"id": "US-005", "priority": 1}\'')
    p_edit.set_defaults(func=cmd_edit)

    # rw watch
    p_watch = subparsers.add_parser('watch', help='Poll for changes until interrupted')
    p_watch.add_argument('project_dir', help='Project directory')
    p_watch.add_argument('--since', '-s', help='Commit to start from (default: root commit)')
    p_watch.add_argument('--interval', '-i', type=float, help='Seconds between polls')
    p_watch.add_argument('--count', type=int, help='Stop after this many polls')
    p_watch.set_defaults(func=cmd_watch)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
