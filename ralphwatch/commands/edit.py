"""
rw edit - Add, edit, or remove a story in the shared ledger.

The change is committed to the bare repo so running agents pick it up on
their next pull.
"""

import json
import logging

from pydantic import ValidationError as PydanticValidationError

from ralphwatch.commands.output import print_json
from ralphwatch.ledger.edit import LedgerEdit, LedgerEditError, commit_ledger_edit
from ralphwatch.lib.config import Project

logger = logging.getLogger(__name__)


def cmd_edit(args, project: Project) -> int:
    """Apply one ledger edit. Exit 2 on bad input, 1 on a failed step."""
    try:
        story = json.loads(args.story)
    except json.JSONDecodeError as e:
        print_json({"error": f"--story is not valid JSON: {e}"})
        return 2

    try:
        edit = LedgerEdit(action=args.action, story=story)
    except PydanticValidationError as e:
        print_json({"error": "Invalid story data", "details": json.loads(e.json(include_url=False))})
        return 2

    try:
        result = commit_ledger_edit(project, edit)
    except LedgerEditError as e:
        logger.warning(f"Ledger edit failed: {e}")
        print_json(e.to_dict())
        return 1

    print_json(result.to_dict())
    return 0
