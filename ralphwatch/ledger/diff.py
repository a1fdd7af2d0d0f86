"""Story lifecycle transitions between two ledger snapshots."""

from dataclasses import dataclass
from typing import Optional

from ralphwatch.ledger.models import Ledger
from ralphwatch.ledger.status import derive_status, verification_in_use
from ralphwatch.lib.constants import STATUS_NEW


@dataclass
class StoryTransition:
    """A change in one story's derived status."""
    id: str
    title: str
    from_status: str
    to_status: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "from": self.from_status,
            "to": self.to_status,
        }


def diff_stories(baseline: Optional[Ledger], current: Optional[Ledger]) -> list[StoryTransition]:
    """
    Compute per-story status transitions from baseline to current.

    Each snapshot is evaluated under its own verification toggle, since
    verification may have been adopted between the two points in time.
    Stories with no counterpart in baseline transition from "new".
    Order follows current's declaration order. Renames are not reported;
    the title is always current's.
    """
    if current is None:
        return []

    previous = {}
    if baseline is not None:
        baseline_verifying = verification_in_use(baseline.stories)
        previous = {s.id: derive_status(s, baseline_verifying) for s in baseline.stories}

    current_verifying = verification_in_use(current.stories)
    transitions = []
    for story in current.stories:
        from_status = previous.get(story.id, STATUS_NEW)
        to_status = derive_status(story, current_verifying)
        if from_status != to_status:
            transitions.append(StoryTransition(
                id=story.id,
                title=story.title,
                from_status=from_status,
                to_status=to_status,
            ))
    return transitions
