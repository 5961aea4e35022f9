"""Error presentation for release commands.

Centralized error formatting and exit code mapping, so ``set-version``
and ``tag`` report failures the same way.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from reltag.core.errors import ErrorCode
from reltag.output.console import Style
from reltag.release.errors import (
    Cancelled,
    ChangelogError,
    DirtyWorkspaceError,
    DuplicateTagError,
    LockError,
    NotFoundError,
    ReleaseError,
    SigningError,
    ValidationError,
    VcsError,
    VersionWriteError,
)

if TYPE_CHECKING:
    from reltag.output.console import ConsoleProtocol
    from reltag.release.orchestrator import RunReport

__all__ = ["print_abort_report", "print_release_error", "release_error_exit_code"]


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    """Print an error, its details and its hint."""
    console.error(error.message)
    match error:
        case DirtyWorkspaceError(paths=paths):
            for path in paths:
                console.print(f"  {path}", Style.DIM)
        case _:
            pass
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def release_error_exit_code(error: ReleaseError) -> int:
    match error:
        case NotFoundError() | ValidationError() | Cancelled() | DuplicateTagError():
            return int(ErrorCode.USER_ERROR)
        case LockError() | SigningError():
            return int(ErrorCode.ENV_ERROR)
        case DirtyWorkspaceError():
            return int(ErrorCode.WORKSPACE_ERROR)
        case ChangelogError() | VcsError():
            return int(ErrorCode.TOOL_ERROR)
        case VersionWriteError():
            return int(ErrorCode.IO_ERROR)


def print_abort_report(
    report: RunReport,
    console: ConsoleProtocol,
    *,
    signing_key: str | None = None,
) -> None:
    """Explain an aborted run: where it stopped and what it left behind.

    Args:
        report: The aborted run
        console: Where to print
        signing_key: Configured key, so the suggested ``git tag`` matches it
    """
    if report.error is None:
        return

    stage = report.failed_stage.value if report.failed_stage else "unknown"
    console.newline()
    console.print(f"Release aborted at stage: {stage}", Style.BOLD)
    print_release_error(report.error, console)

    if not report.side_effects:
        console.print("No changes were made.", Style.DIM)
        return

    console.print("Already done (not rolled back):", Style.WARNING)
    for effect in report.side_effects:
        console.print(f"  - {effect}")

    for line in _remediation(report, signing_key):
        console.print(line, Style.DIM)


def _remediation(report: RunReport, signing_key: str | None) -> list[str]:
    if report.commit_sha is None:
        return [
            "The changelog edit is still in the working tree.",
            "Adjust the notes if needed and re-run 'reltag tag',",
            "or discard the edit with: git checkout -- <changelog file>",
        ]

    tag = report.tag or "<tag>"
    if isinstance(report.error, DuplicateTagError):
        return [
            f"Tag {tag} was created by someone else after the release commit.",
            f"Inspect it with: git show {tag}",
            "Drop the release commit with: git reset --hard HEAD~1",
            "then pick a new version with: reltag set-version",
        ]

    sign = f"-u {signing_key}" if signing_key is not None else "--sign"
    return [
        f"The release commit exists but tag {tag} does not.",
        f"Either create it by hand: git tag {sign} {tag}",
        "or drop the commit and re-run: git reset --hard HEAD~1",
    ]
