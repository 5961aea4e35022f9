"""Tests for reltag.release.guard module."""

from __future__ import annotations

from pathlib import Path

from reltag.core.result import Err, Ok
from reltag.git.repository import Repository
from reltag.release.guard import GitWorkspaceGuard
from reltag.test._git import git


class TestGitWorkspaceGuard:
    def test_clean(self, git_repo: Path) -> None:
        assert GitWorkspaceGuard(Repository(git_repo)).check_clean() == Ok(None)

    def test_unstaged_change(self, git_repo: Path) -> None:
        (git_repo / "README.md").write_text("edited\n", encoding="utf-8")

        result = GitWorkspaceGuard(Repository(git_repo)).check_clean()

        assert isinstance(result, Err)
        assert result.error.paths == (".M README.md",)
        assert "1 pending change(s)" in result.error.message

    def test_staged_change(self, git_repo: Path) -> None:
        (git_repo / "README.md").write_text("edited\n", encoding="utf-8")
        git(git_repo, "add", "README.md")

        result = GitWorkspaceGuard(Repository(git_repo)).check_clean()

        assert isinstance(result, Err)
        assert result.error.paths == ("M. README.md",)

    def test_untracked_file(self, git_repo: Path) -> None:
        (git_repo / "scratch.txt").write_text("x", encoding="utf-8")

        result = GitWorkspaceGuard(Repository(git_repo)).check_clean()

        assert isinstance(result, Err)
        assert result.error.paths == ("?? scratch.txt",)

    def test_allowed_paths_are_ignored(self, git_repo: Path) -> None:
        (git_repo / "VERSION").write_text("1.0.0", encoding="utf-8")
        guard = GitWorkspaceGuard(Repository(git_repo), allowed={"VERSION"})

        assert guard.check_clean() == Ok(None)

    def test_allowed_does_not_hide_other_changes(self, git_repo: Path) -> None:
        (git_repo / "VERSION").write_text("1.0.0", encoding="utf-8")
        (git_repo / "other.txt").write_text("x", encoding="utf-8")
        guard = GitWorkspaceGuard(Repository(git_repo), allowed={"VERSION"})

        result = guard.check_clean()

        assert isinstance(result, Err)
        assert result.error.paths == ("?? other.txt",)

    def test_long_listing_is_truncated(self, git_repo: Path) -> None:
        for i in range(12):
            (git_repo / f"f{i:02}.txt").write_text("x", encoding="utf-8")

        result = GitWorkspaceGuard(Repository(git_repo)).check_clean()

        assert isinstance(result, Err)
        assert len(result.error.paths) == 11
        assert result.error.paths[-1] == "... and 2 more"
        assert "12 pending change(s)" in result.error.message

    def test_not_a_repository(self, tmp_path: Path, git_env: None) -> None:
        plain = tmp_path / "plain"
        plain.mkdir()

        result = GitWorkspaceGuard(Repository(plain)).check_clean()

        assert isinstance(result, Err)
        assert "cannot determine workspace state" in result.error.message
