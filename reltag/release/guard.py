"""Workspace Guard: refuse to release from a dirty working tree.

A release tag must be reproducible from the tagged commit alone, so any
staged, unstaged or untracked change blocks the run. Callers may allow a
fixed set of paths (the CLI allows the version record and the changelog);
those get committed with the release.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from reltag.core.result import Err, Ok, Result
from reltag.git.repository import Repository
from reltag.release.errors import DirtyWorkspaceError

__all__ = ["GitWorkspaceGuard", "WorkspaceGuard"]

_MAX_LISTED_PATHS = 10


class WorkspaceGuard(Protocol):
    def check_clean(self) -> Result[None, DirtyWorkspaceError]: ...


class GitWorkspaceGuard:
    def __init__(self, repo: Repository, *, allowed: Iterable[str] = ()) -> None:
        self.repo = repo
        self.allowed = frozenset(allowed)

    def check_clean(self) -> Result[None, DirtyWorkspaceError]:
        status = self.repo.status()
        if isinstance(status, Err):
            return Err(
                DirtyWorkspaceError(
                    message=f"cannot determine workspace state: {status.error.message}",
                    hint="Run reltag from inside a git work tree.",
                )
            )

        pending = status.value.without(self.allowed)
        if pending.is_clean:
            return Ok(None)

        listed = [f"{e.pretty_xy()} {e.path}" for e in pending.entries]
        shown = listed[:_MAX_LISTED_PATHS]
        if len(listed) > len(shown):
            shown.append(f"... and {len(listed) - len(shown)} more")

        return Err(
            DirtyWorkspaceError(
                message=f"git workspace must be clean ({len(listed)} pending change(s))",
                paths=tuple(shown),
            )
        )
