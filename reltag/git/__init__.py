"""Git operations used by the release flow.

Usage:
    from reltag.git import Repository

    repo = Repository(Path("/path/to/repo"))
    status = repo.status()
    if status.is_ok():
        print(f"Branch: {status.unwrap().branch}")
"""

from reltag.git.repository import (
    GitError,
    GitStatus,
    Repository,
    StatusEntry,
    find_repository,
)

__all__ = [
    "GitError",
    "GitStatus",
    "Repository",
    "StatusEntry",
    "find_repository",
]
