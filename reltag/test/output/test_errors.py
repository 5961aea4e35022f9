"""Tests for reltag.output.errors module."""

from __future__ import annotations

import pytest

from reltag.core.errors import ErrorCode
from reltag.output.console import MockConsole
from reltag.output.errors import print_abort_report, print_release_error, release_error_exit_code
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
from reltag.release.orchestrator import RunReport, Stage


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (NotFoundError("missing"), ErrorCode.USER_ERROR),
        (ValidationError("bad"), ErrorCode.USER_ERROR),
        (Cancelled(), ErrorCode.USER_ERROR),
        (DuplicateTagError(tag="1.0.0"), ErrorCode.USER_ERROR),
        (LockError("held"), ErrorCode.ENV_ERROR),
        (SigningError("no key"), ErrorCode.ENV_ERROR),
        (DirtyWorkspaceError("dirty"), ErrorCode.WORKSPACE_ERROR),
        (ChangelogError("chag"), ErrorCode.TOOL_ERROR),
        (VcsError("commit"), ErrorCode.TOOL_ERROR),
        (VersionWriteError("disk"), ErrorCode.IO_ERROR),
    ],
)
def test_exit_codes(error: ReleaseError, code: ErrorCode) -> None:
    assert release_error_exit_code(error) == int(code)


def test_print_release_error_lists_paths_and_hint() -> None:
    console = MockConsole()

    print_release_error(DirtyWorkspaceError("dirty", paths=(".M README.md",)), console)

    assert console.messages[0] == "error: dirty"
    assert "  .M README.md" in console.messages
    assert console.messages[-1].startswith("hint: Commit, stash or remove")


def test_print_release_error_without_hint() -> None:
    console = MockConsole()
    print_release_error(VcsError("git add failed"), console)
    assert console.messages == ["error: git add failed"]


class TestAbortReport:
    def test_nothing_done(self) -> None:
        console = MockConsole()
        report = RunReport(
            stage=Stage.ABORTED,
            history=(Stage.INIT, Stage.ABORTED),
            failed_stage=Stage.GUARD_CHECKED,
            error=DirtyWorkspaceError("dirty"),
        )

        print_abort_report(report, console)

        assert console.find("Release aborted at stage: guard_checked")
        assert console.find("No changes were made.")

    def test_changelog_left_behind(self) -> None:
        console = MockConsole()
        report = RunReport(
            stage=Stage.ABORTED,
            history=(),
            failed_stage=Stage.CHANGELOG_CONFIRMED,
            error=Cancelled(),
            side_effects=("changelog CHANGELOG.md updated for 1.0.0 (not committed)",),
        )

        print_abort_report(report, console)

        assert console.find("Already done (not rolled back):")
        assert console.find("  - changelog CHANGELOG.md updated")
        assert console.find("git checkout --")

    def test_commit_without_tag(self) -> None:
        console = MockConsole()
        report = RunReport(
            stage=Stage.ABORTED,
            history=(),
            tag="1.0.0",
            commit_sha="abc1234",
            failed_stage=Stage.TAGGED,
            error=SigningError("gpg failed"),
            side_effects=("changelog ...", "commit abc1234 created: ..."),
        )

        print_abort_report(report, console)

        assert console.find("git tag --sign 1.0.0")
        assert console.find("git reset --hard HEAD~1")

    def test_commit_without_tag_uses_configured_key(self) -> None:
        console = MockConsole()
        report = RunReport(
            stage=Stage.ABORTED,
            history=(),
            tag="1.0.0",
            commit_sha="abc1234",
            failed_stage=Stage.TAGGED,
            error=SigningError("gpg failed"),
            side_effects=("commit abc1234 created: ...",),
        )

        print_abort_report(report, console, signing_key="0xDEADBEEF")

        assert console.find("git tag -u 0xDEADBEEF 1.0.0")
        assert not console.find("--sign")

    def test_tag_taken_after_commit(self) -> None:
        console = MockConsole()
        report = RunReport(
            stage=Stage.ABORTED,
            history=(),
            tag="1.0.0",
            commit_sha="abc1234",
            failed_stage=Stage.TAGGED,
            error=DuplicateTagError(tag="1.0.0"),
            side_effects=("commit abc1234 created: ...",),
        )

        print_abort_report(report, console)

        assert console.find("git show 1.0.0")
        assert console.find("git reset --hard HEAD~1")
        assert not console.find("git tag")

    def test_success_prints_nothing(self) -> None:
        console = MockConsole()
        print_abort_report(RunReport(stage=Stage.TAGGED, history=()), console)
        assert console.outputs == []
