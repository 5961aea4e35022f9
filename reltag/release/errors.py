"""Release error taxonomy.

Each failure the release flow can end in is its own frozen dataclass;
``ReleaseError`` is their union, so callers dispatch with ``match``.
Every error carries a ``message`` and may carry a ``hint`` telling the
operator what to do next.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class DirtyWorkspaceError:
    """The working tree has uncommitted or untracked changes."""

    message: str
    paths: tuple[str, ...] = field(default_factory=tuple)
    hint: str | None = "Commit, stash or remove these changes, then re-run."


@dataclass(frozen=True, slots=True)
class NotFoundError:
    """No version has ever been recorded."""

    message: str
    path: Path | None = None
    hint: str | None = "Run: reltag set-version"


@dataclass(frozen=True, slots=True)
class ValidationError:
    """A version string is not a valid semantic version."""

    message: str
    value: str = ""
    hint: str | None = "Expected MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD], e.g. 2.3.0"


@dataclass(frozen=True, slots=True)
class VersionWriteError:
    message: str
    path: Path | None = None
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class ChangelogError:
    """The changelog tool failed or produced an empty section."""

    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class Cancelled:
    """The operator declined at a confirmation gate."""

    message: str = "cancelled by operator"
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class VcsError:
    """Staging or committing failed."""

    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class SigningError:
    """The signed tag could not be created."""

    message: str
    hint: str | None = "Check that git can sign (user.signingkey, gpg-agent)."


@dataclass(frozen=True, slots=True)
class DuplicateTagError:
    """A tag with the release name already exists. Tags are never moved."""

    tag: str
    message: str = ""
    hint: str | None = "Pick a new version with: reltag set-version"

    def __post_init__(self) -> None:
        if not self.message:
            object.__setattr__(self, "message", f"tag {self.tag} already exists")


@dataclass(frozen=True, slots=True)
class LockError:
    """Another release run holds the repository lock."""

    message: str
    path: Path | None = None
    hint: str | None = None


ReleaseError = (
    DirtyWorkspaceError
    | NotFoundError
    | ValidationError
    | VersionWriteError
    | ChangelogError
    | Cancelled
    | VcsError
    | SigningError
    | DuplicateTagError
    | LockError
)
