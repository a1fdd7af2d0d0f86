"""
Data models for the requirements ledger.

The ledger is a JSON document (prd.json) with camelCase keys for the story
body and snake_case keys for the lifecycle fields workers write.
"""

from dataclasses import dataclass, field
from typing import Optional


class LedgerError(Exception):
    """Ledger content does not have the expected document shape."""
    pass


# JSON key -> attribute for fields the ledger document defines
_STORY_KEYS = {
    "id": "id",
    "title": "title",
    "description": "description",
    "acceptanceCriteria": "acceptance_criteria",
    "priority": "priority",
    "passes": "passes",
    "notes": "notes",
    "claimed_by": "claimed_by",
    "claimed_at": "claimed_at",
    "verified": "verified",
    "verified_by": "verified_by",
    "verified_at": "verified_at",
    "verification_notes": "verification_notes",
}

_LEDGER_KEYS = ("project", "branchName", "description", "userStories")


@dataclass
class Story:
    """One unit of requested work.

    ``verification_tracked`` records whether the ``verified`` key is present
    in the document at all. A ledger that never adopted verification has no
    such key anywhere, which is different from ``verified: false``.
    """
    id: str
    title: str = ""
    description: str = ""
    acceptance_criteria: list[str] = field(default_factory=list)
    priority: int = 0
    passes: bool = False
    notes: Optional[str] = None
    claimed_by: Optional[str] = None
    claimed_at: Optional[str] = None
    verified: Optional[bool] = None
    verified_by: Optional[str] = None
    verified_at: Optional[str] = None
    verification_notes: Optional[str] = None
    verification_tracked: bool = False
    extra: dict = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict) -> "Story":
        values = {attr: data[key] for key, attr in _STORY_KEYS.items() if key in data}
        values["acceptance_criteria"] = list(values.get("acceptance_criteria") or [])
        for key in ("title", "description"):
            if values.get(key) is None:
                values[key] = ""
        if values.get("priority") is None:
            values["priority"] = 0
        values["passes"] = bool(values.get("passes"))
        extra = {k: v for k, v in data.items() if k not in _STORY_KEYS}
        return cls(**values, verification_tracked="verified" in data, extra=extra)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "acceptanceCriteria": list(self.acceptance_criteria),
            "priority": self.priority,
            "passes": self.passes,
        }
        if self.notes is not None:
            data["notes"] = self.notes
        data["claimed_by"] = self.claimed_by
        data["claimed_at"] = self.claimed_at
        if self.verification_tracked:
            data["verified"] = self.verified
            data["verified_by"] = self.verified_by
            data["verified_at"] = self.verified_at
            data["verification_notes"] = self.verification_notes
        data.update(self.extra)
        return data


@dataclass
class Ledger:
    """The ledger's content as of one commit."""
    project: str
    stories: list[Story] = field(default_factory=list)
    branch_name: Optional[str] = None
    description: Optional[str] = None
    extra: dict = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict) -> "Ledger":
        stories = [Story.from_dict(s) for s in data.get("userStories", [])]
        seen = set()
        for story in stories:
            if story.id in seen:
                raise LedgerError(f"Duplicate story id: {story.id}")
            seen.add(story.id)
        return cls(
            project=data.get("project") or "",
            stories=stories,
            branch_name=data.get("branchName"),
            description=data.get("description"),
            extra={k: v for k, v in data.items() if k not in _LEDGER_KEYS},
        )

    def to_dict(self) -> dict:
        data = {"project": self.project}
        if self.branch_name is not None:
            data["branchName"] = self.branch_name
        if self.description is not None:
            data["description"] = self.description
        data.update(self.extra)
        data["userStories"] = [s.to_dict() for s in self.stories]
        return data

    def find(self, story_id: str) -> Optional[Story]:
        for story in self.stories:
            if story.id == story_id:
                return story
        return None
