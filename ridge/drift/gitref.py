"""Safe git ref handling and temporary worktree checkouts."""

from __future__ import annotations

import shutil
import subprocess
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

_EXTRA_REF_CHARS = frozenset("./-_~^")


class InvalidRefError(ValueError):
    """Raised when a git ref is unsafe to pass to git."""


class GitError(RuntimeError):
    """Raised when a git command fails."""


def _is_valid_ref_char(c: str) -> bool:
    return c.isalpha() or c.isdecimal() or c in _EXTRA_REF_CHARS


def validate_ref(ref: str) -> None:
    """Reject empty refs, refs starting with '-', and refs with unsafe characters."""
    if not ref:
        raise InvalidRefError("empty ref")
    if ref.startswith("-"):
        raise InvalidRefError(f"ref cannot start with dash: {ref!r}")
    for c in ref:
        if not _is_valid_ref_char(c):
            raise InvalidRefError(f"invalid character in ref: {c}")


@contextmanager
def checkout_ref(repo_path: str, ref: str) -> Iterator[str]:
    """Check out ref into a temporary detached worktree, yielding its path.

    The worktree and its temporary directory are removed on exit.
    """
    try:
        validate_ref(ref)
    except InvalidRefError as err:
        raise InvalidRefError(f"invalid ref: {err}") from err

    tmp_dir = tempfile.mkdtemp(prefix="arch-drift-")
    worktree = str(Path(tmp_dir) / "worktree")
    try:
        proc = subprocess.run(
            ["git", "worktree", "add", "--detach", worktree, ref],
            cwd=repo_path,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
    except OSError as err:
        shutil.rmtree(tmp_dir, ignore_errors=True)
        raise GitError(f"git worktree add {ref}: {err}") from err
    if proc.returncode != 0:
        shutil.rmtree(tmp_dir, ignore_errors=True)
        raise GitError(f"git worktree add {ref}: {proc.stdout}: exit status {proc.returncode}")

    try:
        yield worktree
    finally:
        try:
            subprocess.run(
                ["git", "worktree", "remove", "--force", worktree],
                cwd=repo_path,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError:
            pass
        shutil.rmtree(tmp_dir, ignore_errors=True)