"""Requirements ledger (prd.json): models, derived status, reading, diffing and editing."""

from ralphwatch.ledger.models import Ledger, LedgerError, Story
from ralphwatch.ledger.status import (
    StoryBoard,
    build_board,
    derive_status,
    verification_in_use,
)
from ralphwatch.ledger.reader import parse_ledger, read_ledger, read_ledger_at
from ralphwatch.ledger.diff import StoryTransition, diff_stories

__all__ = [
    "Ledger",
    "LedgerError",
    "Story",
    "StoryBoard",
    "build_board",
    "derive_status",
    "verification_in_use",
    "parse_ledger",
    "read_ledger",
    "read_ledger_at",
    "StoryTransition",
    "diff_stories",
]
