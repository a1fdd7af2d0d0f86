"""Shared fixtures: a real bare repository shaped like a ralph project."""

import json
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

import pytest

BASE_TS = 1_700_000_000


def git(cwd: Path, *args: str, ts: int | None = None) -> str:
    env = dict(os.environ)
    env.update({
        "GIT_AUTHOR_NAME": "agent",
        "GIT_AUTHOR_EMAIL": "agent@localhost",
        "GIT_COMMITTER_NAME": "agent",
        "GIT_COMMITTER_EMAIL": "agent@localhost",
    })
    if ts is not None:
        env["GIT_AUTHOR_DATE"] = f"{ts} +0000"
        env["GIT_COMMITTER_DATE"] = f"{ts} +0000"
    result = subprocess.run(
        ["git", "-C", str(cwd), *args],
        capture_output=True, text=True, env=env, check=True,
    )
    return result.stdout.strip()


def prd(*stories: dict) -> str:
    return json.dumps({"project": "demo", "branchName": "ralph/work", "userStories": list(stories)}, indent=2)


@dataclass
class RalphRepo:
    """Project dir with .ralph/repo.git and the SHAs of each commit."""
    project_dir: Path
    bare: Path
    root: str
    readme: str
    claim: str
    notes: str


@pytest.fixture
def ralph_repo(tmp_path) -> RalphRepo:
    """
    main:        root (prd: US-1 available) -> readme
    ralph/work:  ... readme -> claim (prd: US-1 claimed by agent-1) -> notes

    The bare repo's HEAD stays on main, which is stale.
    """
    if shutil.which("git") is None:
        pytest.skip("git not installed")

    work = tmp_path / "work"
    work.mkdir()
    git(work, "init", "-q")
    git(work, "symbolic-ref", "HEAD", "refs/heads/main")

    story = {"id": "US-1", "title": "Login", "priority": 1, "passes": False, "claimed_by": None}
    (work / "prd.json").write_text(prd(story))
    git(work, "add", "prd.json")
    git(work, "commit", "-q", "-m", "Initial ledger", ts=BASE_TS)
    root = git(work, "rev-parse", "HEAD")

    (work / "README.md").write_text("demo\n")
    git(work, "add", "README.md")
    git(work, "commit", "-q", "-m", "Add readme", ts=BASE_TS + 10)
    readme = git(work, "rev-parse", "HEAD")

    git(work, "checkout", "-q", "-b", "ralph/work")
    (work / "prd.json").write_text(prd({**story, "claimed_by": "agent-1"}))
    git(work, "commit", "-q", "-am", "Claim US-1", ts=BASE_TS + 20)
    claim = git(work, "rev-parse", "HEAD")

    (work / "notes.txt").write_text("progress\n")
    git(work, "add", "notes.txt")
    git(work, "commit", "-q", "-m", "Progress notes", ts=BASE_TS + 30)
    notes = git(work, "rev-parse", "HEAD")

    git(work, "checkout", "-q", "main")

    project_dir = tmp_path / "project"
    (project_dir / ".ralph").mkdir(parents=True)
    git(tmp_path, "clone", "-q", "--bare", str(work), str(project_dir / ".ralph" / "repo.git"))

    return RalphRepo(
        project_dir=project_dir,
        bare=project_dir / ".ralph" / "repo.git",
        root=root,
        readme=readme,
        claim=claim,
        notes=notes,
    )


@dataclass
class ForkedRepo:
    """Project whose two working branches both fork from the root commit."""
    project_dir: Path
    bare: Path
    root: str
    claim: str
    code: str


@pytest.fixture
def forked_repo(tmp_path) -> ForkedRepo:
    """
    main:      root (prd: US-1 available)
    ralph/b:   root -> claim (prd: US-1 claimed by agent-1)   at +10
    ralph/a:   root -> code (no ledger change)                at +20

    Neither branch is an ancestor of the other.
    """
    if shutil.which("git") is None:
        pytest.skip("git not installed")

    work = tmp_path / "work"
    work.mkdir()
    git(work, "init", "-q")
    git(work, "symbolic-ref", "HEAD", "refs/heads/main")

    story = {"id": "US-1", "title": "Login", "priority": 1, "passes": False, "claimed_by": None}
    (work / "prd.json").write_text(prd(story))
    git(work, "add", "prd.json")
    git(work, "commit", "-q", "-m", "Initial ledger", ts=BASE_TS)
    root = git(work, "rev-parse", "HEAD")

    git(work, "checkout", "-q", "-b", "ralph/b")
    (work / "prd.json").write_text(prd({**story, "claimed_by": "agent-1"}))
    git(work, "commit", "-q", "-am", "agent b claims US-1", ts=BASE_TS + 10)
    claim = git(work, "rev-parse", "HEAD")

    git(work, "checkout", "-q", "-b", "ralph/a", root)
    (work / "app.py").write_text("print('a')\n")
    git(work, "add", "app.py")
    git(work, "commit", "-q", "-m", "agent a work", ts=BASE_TS + 20)
    code = git(work, "rev-parse", "HEAD")

    git(work, "checkout", "-q", "main")

    project_dir = tmp_path / "project"
    (project_dir / ".ralph").mkdir(parents=True)
    git(tmp_path, "clone", "-q", "--bare", str(work), str(project_dir / ".ralph" / "repo.git"))

    return ForkedRepo(
        project_dir=project_dir,
        bare=project_dir / ".ralph" / "repo.git",
        root=root,
        claim=claim,
        code=code,
    )
