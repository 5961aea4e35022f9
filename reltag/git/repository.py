"""Git repository abstraction.

The release flow touches git in a handful of places: the cleanliness
check, staging and committing the changelog, looking up and creating the
release tag, and reading history for changelog seeding. All of them live
here and return Result types.

Usage:
    repo = Repository(Path("/path/to/repo"))

    match repo.status():
        case Ok(status) if status.is_clean:
            print("ready to release")
        case Ok(status):
            print(f"{len(status.entries)} pending change(s)")
        case Err(e):
            print(f"git failed: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from reltag.core.result import Err, Ok, Result
from reltag.platform.process import ProcessError
from reltag.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0

__all__ = [
    "GitError",
    "GitStatus",
    "Repository",
    "StatusEntry",
    "find_repository",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message (git's stderr when available)
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single ``git status --porcelain=v1`` line.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??")
        path: File path as printed by git (``old -> new`` for renames)
    """

    xy: str
    path: str

    @property
    def paths(self) -> tuple[str, ...]:
        """Every path this entry touches (both sides of a rename)."""
        if " -> " in self.path:
            old, new = self.path.split(" -> ", 1)
            return (_unquote(old), _unquote(new))
        return (_unquote(self.path),)

    def pretty_xy(self) -> str:
        """Format XY with dots for spaces (". M" instead of " M")."""
        return self.xy.replace(" ", ".")


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Parsed working tree status.

    Attributes:
        branch: Current branch name ("" when unknown)
        entries: Staged, unstaged and untracked entries
    """

    branch: str
    entries: tuple[StatusEntry, ...] = field(default_factory=tuple)

    @property
    def is_clean(self) -> bool:
        return len(self.entries) == 0

    def without(self, allowed: frozenset[str]) -> GitStatus:
        """Drop entries whose every path is in ``allowed``."""
        kept = tuple(e for e in self.entries if not all(p in allowed for p in e.paths))
        return GitStatus(branch=self.branch, entries=kept)


class Repository:
    """Git working tree rooted at ``path``.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def status(self) -> Result[GitStatus, GitError]:
        """Run ``git status --porcelain=v1 -b -uall`` and parse it.

        ``-uall`` lists every untracked file, not just its directory.
        """
        result = self._run(["status", "--porcelain=v1", "-b", "-uall"])
        match result:
            case Err(e):
                return Err(_git_error("status", e, "git status failed"))
            case Ok(stdout):
                return Ok(self._parse_status(stdout))

    def git_dir(self) -> Result[Path, GitError]:
        """Absolute path of the ``.git`` directory (works for worktrees)."""
        result = self._run(["rev-parse", "--absolute-git-dir"])
        match result:
            case Err(e):
                return Err(_git_error("rev-parse", e, "not a git repository"))
            case Ok(stdout):
                return Ok(Path(stdout.strip()))

    def stage_all(self) -> Result[None, GitError]:
        """Stage every pending change, including deletions and new files."""
        result = self._run(["add", "-A"])
        if isinstance(result, Err):
            return Err(_git_error("add", result.error, "git add failed"))
        return Ok(None)

    def commit(self, message: str) -> Result[str, GitError]:
        """Commit the index and return the new HEAD sha.

        An empty index is an error, as git reports it.
        """
        result = self._run(["commit", "-m", message])
        if isinstance(result, Err):
            return Err(_git_error("commit", result.error, "git commit failed"))
        return self.head_sha()

    def head_sha(self) -> Result[str, GitError]:
        result = self._run(["rev-parse", "HEAD"])
        match result:
            case Err(e):
                return Err(_git_error("rev-parse", e, "no HEAD commit"))
            case Ok(stdout):
                return Ok(stdout.strip())

    def tag_exists(self, name: str) -> Result[bool, GitError]:
        result = self._run(["for-each-ref", "--format=%(refname)", f"refs/tags/{name}"])
        match result:
            case Err(e):
                return Err(_git_error("for-each-ref", e, "tag lookup failed"))
            case Ok(stdout):
                return Ok(f"refs/tags/{name}" in stdout.split())

    def create_tag(
        self, name: str, message: str, *, key: str | None = None
    ) -> Result[None, GitError]:
        """Create a signed annotated tag at HEAD.

        ``key`` selects the signing key (``git tag -u``); without it git
        signs with the committer identity. Signing may block on a pinentry
        prompt, so no timeout is applied.
        """
        args = ["tag", "-u", key] if key is not None else ["tag", "--sign"]
        args += ["-m", message, name]

        result = self._run(args, timeout=None)
        if isinstance(result, Err):
            return Err(_git_error("tag", result.error, "git tag failed"))
        return Ok(None)

    def last_tag(self) -> str | None:
        """Most recent tag reachable from HEAD, or None."""
        result = self._run(["describe", "--tags", "--abbrev=0"])
        match result:
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def log_subjects(self, since: str | None = None) -> Result[list[str], GitError]:
        """Commit subjects from ``since`` (exclusive) to HEAD, newest first."""
        args = ["log", "--no-merges", "--pretty=format:%s"]
        if since is not None:
            args.append(f"{since}..HEAD")
        result = self._run(args)
        match result:
            case Err(e):
                return Err(_git_error("log", e, "git log failed"))
            case Ok(stdout):
                return Ok([line.strip() for line in stdout.splitlines() if line.strip()])

    def _run(
        self, args: list[str], *, timeout: float | None = _GIT_TIMEOUT_SECONDS
    ) -> Result[str, ProcessError]:
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)

    def _parse_status(self, output: str) -> GitStatus:
        lines = [ln for ln in output.splitlines() if ln.strip()]
        if not lines:
            return GitStatus(branch="")

        branch = ""
        if lines[0].startswith("##"):
            branch = self._parse_branch_line(lines.pop(0))

        entries: list[StatusEntry] = []
        for line in lines:
            if len(line) < 4:
                continue
            entries.append(StatusEntry(xy=line[:2], path=line[3:]))

        return GitStatus(branch=branch, entries=tuple(entries))

    def _parse_branch_line(self, line: str) -> str:
        """Parse ``## branch...upstream [ahead N]`` down to the branch name."""
        s = line[2:].strip().split(" [", 1)[0]
        if s.startswith("No commits yet on "):
            return s.removeprefix("No commits yet on ")
        return s.split("...", 1)[0].strip()


def find_repository(start: Path) -> Result[Repository, GitError]:
    """Locate the work tree containing ``start``."""
    result = run_process(
        ["git", "-C", str(start), "rev-parse", "--show-toplevel"],
        cwd=start,
        timeout=_GIT_TIMEOUT_SECONDS,
    )
    match result:
        case Err(e):
            return Err(_git_error("rev-parse", e, f"{start} is not inside a git work tree"))
        case Ok(stdout):
            return Ok(Repository(Path(stdout.strip())))


def _git_error(command: str, error: ProcessError, fallback: str) -> GitError:
    message = error.stderr.strip() or error.stdout.strip() or fallback
    return GitError(command=command, message=message, returncode=error.returncode)


def _unquote(path: str) -> str:
    if len(path) >= 2 and path.startswith('"') and path.endswith('"'):
        return path[1:-1]
    return path
