"""Reading recent commit history from git."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass

from ridge.drift.gitref import GitError


@dataclass
class GitLogEntry:
    """One commit from git log."""

    hash: str
    date: str
    message: str


@dataclass
class HistoryEntry:
    """Architecture state at a specific commit."""

    ref: str
    date: str
    message: str
    node_count: int = 0
    edge_count: int = 0
    topology: str = ""
    changes_from_previous: int = 0


def get_significant_commits(repo_path: str, limit: int = 10) -> list[GitLogEntry]:
    """The most recent non-merge commits, newest first.

    A limit of zero or less means 10; limits above 20 are capped at 20.
    """
    if limit <= 0:
        limit = 10
    limit = min(limit, 20)

    try:
        proc = subprocess.run(
            ["git", "log", "--format=%H|%aI|%s", f"-n{limit}", "--no-merges"],
            cwd=repo_path,
            capture_output=True,
            text=True,
        )
    except OSError as err:
        raise GitError(f"git log: {err}") from err
    if proc.returncode != 0:
        raise GitError(f"git log: exit status {proc.returncode}: {proc.stderr.strip()}")

    entries = []
    for line in proc.stdout.strip().split("\n"):
        if not line:
            continue
        parts = line.split("|", 2)
        if len(parts) < 3:
            continue
        entries.append(GitLogEntry(hash=parts[0], date=parts[1], message=parts[2]))
    return entries