"""
Ledger retrieval.

Absence is a valid state ("no ledger yet"), not a fault: every read here
returns None instead of raising. Malformed content is logged and treated the
same as absence. Only parse_ledger raises, for callers (the edit path) that
must refuse to proceed without a valid base document.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from ralphwatch.git.refs import resolve_ledger_ref
from ralphwatch.git.show import read_file_at_ref
from ralphwatch.ledger.models import Ledger, LedgerError
from ralphwatch.lib.config import Project
from ralphwatch.lib.validate import SchemaError, validate

logger = logging.getLogger(__name__)


def parse_ledger(text: str) -> Ledger:
    """Parse and validate ledger JSON.

    Raises:
        LedgerError: If the text is not JSON or does not match the ledger schema
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise LedgerError(f"Invalid JSON: {e}") from None

    if not isinstance(data, dict):
        raise LedgerError("Ledger must be a JSON object")

    try:
        validate(data, "ledger")
    except SchemaError as e:
        raise LedgerError(str(e)) from None

    return Ledger.from_dict(data)


def read_ledger_at(repo: Path, ref: str, ledger_file: str, timeout: int = 30) -> Optional[Ledger]:
    """Ledger as of ref inside the shared repository, or None."""
    text = read_file_at_ref(repo, ref, ledger_file, timeout=timeout)
    if text is None:
        return None
    try:
        return parse_ledger(text)
    except LedgerError as e:
        logger.warning(f"Ignoring malformed {ledger_file} at {ref}: {e}")
        return None


def read_working_ledger(path: Path) -> Optional[Ledger]:
    """Ledger from a plain on-disk copy, or None."""
    try:
        text = path.read_text()
    except OSError:
        return None
    try:
        return parse_ledger(text)
    except LedgerError as e:
        logger.warning(f"Ignoring malformed {path}: {e}")
        return None


def read_ledger(project: Project) -> Optional[Ledger]:
    """Current ledger for a project.

    Prefers the shared repository at the most recent ledger-touching commit
    across all branches (the default HEAD is stale while agents work on
    their own branches), then the working-directory copy.
    """
    cfg = project.config
    repo = project.bare_repo
    if repo.exists():
        ref = resolve_ledger_ref(repo, cfg.ledger_file)
        ledger = read_ledger_at(repo, ref, cfg.ledger_file, timeout=cfg.git_timeout)
        if ledger is not None:
            return ledger
        logger.debug(f"No usable {cfg.ledger_file} at {ref} in {repo}, trying working copy")

    return read_working_ledger(project.ledger_path)


def searched_locations(project: Project) -> list[str]:
    """Human-readable list of places read_ledger looks."""
    return [
        f"{project.bare_repo} (bare repo)",
        f"{project.ledger_path} (working directory)",
    ]
