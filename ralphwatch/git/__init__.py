"""Git operations for ralphwatch.

Return type conventions:
- Functions returning GitResult: Caller must check .success before using output.
  Examples: commit(), clone_branch(), push_head()
- Functions returning bool: True on success/condition met, False otherwise.
  Examples: branch_exists()
- Functions returning parsed values (str, int, list): Return None/empty on failure.
  Examples: resolve_head() -> None, commits_since() -> []
- resolve_ledger_ref() never fails; it degrades to the default head.
"""

from ralphwatch.git.runner import GitResult, run_git
from ralphwatch.git.refs import (
    get_commit_sha,
    resolve_head,
    resolve_root_commit,
    resolve_latest_commit,
    resolve_ledger_ref,
    ledger_ref_as_of,
    get_commit_timestamp_ms,
    get_default_branch,
    get_branch_containing,
    branch_exists,
)
from ralphwatch.git.log import Commit, commits_since, recent_commits
from ralphwatch.git.show import read_file_at_ref
from ralphwatch.git.commit import set_identity, stage_files, commit
from ralphwatch.git.remote import clone_branch, push_head

__all__ = [
    # runner
    "GitResult",
    "run_git",
    # refs
    "get_commit_sha",
    "resolve_head",
    "resolve_root_commit",
    "resolve_latest_commit",
    "resolve_ledger_ref",
    "ledger_ref_as_of",
    "get_commit_timestamp_ms",
    "get_default_branch",
    "get_branch_containing",
    "branch_exists",
    # log
    "Commit",
    "commits_since",
    "recent_commits",
    # show
    "read_file_at_ref",
    # commit
    "set_identity",
    "stage_files",
    "commit",
    # remote
    "clone_branch",
    "push_head",
]
