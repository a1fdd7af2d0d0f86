"""
Ledger edits: add, edit or remove a story.

This is the only write path. Edits go through a private temporary clone of
the shared repository (clone, modify, commit, push, discard), so concurrent
invocations never share a workspace. A push rejected because another writer
got there first is reported as a failed push; the caller decides whether to
retry.
"""

import json
import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ralphwatch.git.commit import commit, set_identity, stage_files
from ralphwatch.git.refs import (
    get_branch_containing,
    get_commit_sha,
    get_default_branch,
    resolve_ledger_ref,
)
from ralphwatch.git.remote import clone_branch, push_head
from ralphwatch.git.runner import run_git
from ralphwatch.ledger.models import Ledger, LedgerError, Story
from ralphwatch.ledger.reader import parse_ledger
from ralphwatch.lib.config import Project
from ralphwatch.lib.validate import SchemaError, validate_before_write

logger = logging.getLogger(__name__)

COMMITTER_NAME = "ralphwatch"
COMMITTER_EMAIL = "ralphwatch@localhost"
COMMIT_PREFIX = "[ralphwatch]"


class LedgerEditError(Exception):
    """An edit failed at a specific step (read, parse, apply, clone, write, commit, push)."""

    def __init__(self, step: str, message: str, stderr: str = ""):
        self.step = step
        self.message = message
        self.stderr = stderr
        super().__init__(f"{step}: {message}" + (f" ({stderr})" if stderr else ""))

    def to_dict(self) -> dict:
        data = {"error": self.message, "step": self.step}
        if self.stderr:
            data["stderr"] = self.stderr
        return data


class StoryPatch(BaseModel):
    """Story fields supplied with an edit. Only fields actually given are applied."""
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    id: str = Field(min_length=1)
    title: Optional[str] = None
    description: Optional[str] = None
    acceptance_criteria: Optional[list[str]] = Field(default=None, alias="acceptanceCriteria")
    priority: Optional[int] = None
    notes: Optional[str] = None
    verified: Optional[bool] = None
    verified_by: Optional[str] = None
    verified_at: Optional[str] = None
    verification_notes: Optional[str] = None


class LedgerEdit(BaseModel):
    """One requested modification to the ledger."""
    action: Literal["add_story", "edit_story", "remove_story"]
    story: StoryPatch


_VERIFICATION_FIELDS = ("verified", "verified_by", "verified_at", "verification_notes")


def _add_story(ledger: Ledger, patch: StoryPatch) -> str:
    if patch.title is None or patch.description is None or patch.acceptance_criteria is None:
        raise LedgerEditError("apply", "add_story requires title, description, and acceptanceCriteria")
    if ledger.find(patch.id):
        raise LedgerEditError("apply", f"Story {patch.id} already exists")

    priority = patch.priority
    if priority is None:
        priority = max([0] + [s.priority for s in ledger.stories]) + 1

    given = patch.model_fields_set
    track = any(s.verification_tracked for s in ledger.stories) or any(f in given for f in _VERIFICATION_FIELDS)
    story = Story(
        id=patch.id,
        title=patch.title,
        description=patch.description,
        acceptance_criteria=list(patch.acceptance_criteria),
        priority=priority,
        passes=False,
        notes=patch.notes or "",
        verification_tracked=track,
    )
    if track:
        story.verified = bool(patch.verified)
        story.verified_by = patch.verified_by
        story.verified_at = patch.verified_at
        story.verification_notes = patch.verification_notes
    ledger.stories.append(story)
    return f"{COMMIT_PREFIX} Add story {patch.id}: {patch.title}"


def _edit_story(ledger: Ledger, patch: StoryPatch) -> str:
    story = ledger.find(patch.id)
    if story is None:
        raise LedgerEditError("apply", f"Story {patch.id} not found")

    updates = patch.model_dump(exclude_unset=True, exclude={"id"})
    if not updates:
        raise LedgerEditError("apply", "edit_story requires at least one field to update")

    for attr, value in updates.items():
        setattr(story, attr, value)
    if any(f in updates for f in _VERIFICATION_FIELDS):
        story.verification_tracked = True

    changed = patch.model_dump(exclude_unset=True, exclude={"id"}, by_alias=True)
    return f"{COMMIT_PREFIX} Edit story {patch.id}: update {', '.join(changed)}"


def _remove_story(ledger: Ledger, patch: StoryPatch) -> str:
    story = ledger.find(patch.id)
    if story is None:
        raise LedgerEditError("apply", f"Story {patch.id} not found")
    ledger.stories.remove(story)
    return f"{COMMIT_PREFIX} Remove story {patch.id}: {story.title}"


_ACTIONS = {
    "add_story": _add_story,
    "edit_story": _edit_story,
    "remove_story": _remove_story,
}


def apply_edit(ledger: Ledger, edit: LedgerEdit) -> str:
    """Apply an edit in memory and return the commit message.

    Raises:
        LedgerEditError: step "apply" if the edit is not valid for this ledger
    """
    return _ACTIONS[edit.action](ledger, edit.story)


@dataclass
class EditResult:
    """Outcome of a committed and pushed edit."""
    action: str
    story_id: str
    commit_message: str
    total_stories: int
    branch: str
    commit: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "success": True,
            "action": self.action,
            "story_id": self.story_id,
            "commit_message": self.commit_message,
            "total_stories": self.total_stories,
            "branch": self.branch,
            "commit": self.commit,
        }


def _target_branch(repo: Path, ledger_file: str) -> str:
    """Branch holding the current ledger: where agents will pull the edit from."""
    ref = resolve_ledger_ref(repo, ledger_file)
    return get_branch_containing(repo, ref) or get_default_branch(repo) or "main"


def commit_ledger_edit(project: Project, edit: LedgerEdit) -> EditResult:
    """
    Apply an edit to the shared ledger and push it.

    Refuses to write anything unless a valid base ledger exists.

    Raises:
        LedgerEditError: with the failing step and git's diagnostic text
    """
    cfg = project.config
    repo = project.bare_repo
    if not repo.exists():
        raise LedgerEditError(
            "read",
            f"No bare repo found at {cfg.repo_subdir} - has ralph been run on this project?",
        )

    branch = _target_branch(repo, cfg.ledger_file)
    shown = run_git(["show", "--end-of-options", f"{branch}:{cfg.ledger_file}"], repo, timeout=cfg.git_timeout)
    if not shown.success:
        raise LedgerEditError(
            "read",
            f"Failed to read {cfg.ledger_file} from {branch}",
            shown.stderr.strip(),
        )

    try:
        ledger = parse_ledger(shown.stdout)
    except LedgerError as e:
        raise LedgerEditError("parse", f"Failed to parse {cfg.ledger_file}: {e}") from None

    message = apply_edit(ledger, edit)

    with tempfile.TemporaryDirectory(prefix="ralphwatch-ledger-") as tmp:
        work = Path(tmp) / "work"

        cloned = clone_branch(repo, branch, work)
        if not cloned.success:
            raise LedgerEditError("clone", "Failed to clone bare repo for update", cloned.stderr.strip())

        ledger_path = work / cfg.ledger_file
        data = ledger.to_dict()
        try:
            validate_before_write(data, "ledger", ledger_path)
            ledger_path.write_text(json.dumps(data, indent=2) + "\n")
        except (SchemaError, OSError) as e:
            raise LedgerEditError("write", f"Failed to write {cfg.ledger_file}: {e}") from None

        for result in (
            set_identity(work, COMMITTER_NAME, COMMITTER_EMAIL),
            stage_files(work, [cfg.ledger_file]),
            commit(work, message),
        ):
            if not result.success:
                raise LedgerEditError(
                    "commit",
                    f"Failed to commit {cfg.ledger_file} update",
                    (result.stderr or result.stdout).strip(),
                )

        pushed = push_head(work)
        if not pushed.success:
            raise LedgerEditError(
                "push",
                "Failed to push update to bare repo (another writer may have pushed first; retry)",
                pushed.stderr.strip(),
            )
        sha = get_commit_sha(work)

    logger.info(f"Pushed ledger edit to {branch}: {message}")
    return EditResult(
        action=edit.action,
        story_id=edit.story.id,
        commit_message=message,
        total_stories=len(ledger.stories),
        branch=branch,
        commit=sha,
    )
