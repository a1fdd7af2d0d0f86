"""
Derived story status.

A story's status is a pure function of its fields plus one snapshot-wide
toggle: whether verification is in use anywhere in the ledger. The toggle is
computed once per snapshot and passed in explicitly, so two snapshots in a
diff can legitimately disagree on it.
"""

from dataclasses import dataclass, field

from ralphwatch.ledger.models import Ledger, Story
from ralphwatch.lib.constants import (
    CLAIMED_PREFIX,
    STATUS_AVAILABLE,
    STATUS_DONE,
    STATUS_VERIFYING,
)


def verification_in_use(stories: list[Story]) -> bool:
    """True iff any story carries the verified field at all."""
    return any(s.verification_tracked for s in stories)


def derive_status(story: Story, verifying: bool) -> str:
    """Status of one story under the snapshot's verification toggle."""
    if story.passes:
        if not verifying or story.verified:
            return STATUS_DONE
        return STATUS_VERIFYING
    if story.claimed_by:
        return f"{CLAIMED_PREFIX}{story.claimed_by}"
    return STATUS_AVAILABLE


@dataclass
class StoryBoard:
    """A ledger's stories grouped by derived status."""
    available: list[Story] = field(default_factory=list)
    claimed: list[Story] = field(default_factory=list)
    verifying: list[Story] = field(default_factory=list)
    done: list[Story] = field(default_factory=list)
    verification_in_use: bool = False

    @property
    def total(self) -> int:
        return len(self.available) + len(self.claimed) + len(self.verifying) + len(self.done)

    @property
    def progress(self) -> str:
        total = self.total
        built = len(self.verifying) + len(self.done)
        if self.verification_in_use:
            return f"{len(self.done)}/{total} verified, {built}/{total} built"
        return f"{built}/{total} stories complete"

    def summary(self) -> dict:
        return {
            "total": self.total,
            "available": len(self.available),
            "claimed": len(self.claimed),
            "verifying": len(self.verifying),
            "done": len(self.done),
        }


def build_board(ledger: Ledger) -> StoryBoard:
    """Group stories by derived status. Available stories are sorted by priority."""
    verifying = verification_in_use(ledger.stories)
    board = StoryBoard(verification_in_use=verifying)
    for story in ledger.stories:
        status = derive_status(story, verifying)
        if status == STATUS_DONE:
            board.done.append(story)
        elif status == STATUS_VERIFYING:
            board.verifying.append(story)
        elif status == STATUS_AVAILABLE:
            board.available.append(story)
        else:
            board.claimed.append(story)
    # sorted() is stable, so equal priorities keep ledger order
    board.available = sorted(board.available, key=lambda s: s.priority)
    return board
