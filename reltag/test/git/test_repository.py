"""Tests for reltag.git.repository module."""

from __future__ import annotations

from pathlib import Path

from reltag.core.result import Err, Ok
from reltag.git.repository import GitStatus, Repository, StatusEntry, find_repository
from reltag.test._git import git


class TestStatusEntry:
    def test_rename_paths(self) -> None:
        entry = StatusEntry(xy="R ", path="old.md -> new.md")
        assert entry.paths == ("old.md", "new.md")

    def test_quoted_path(self) -> None:
        entry = StatusEntry(xy="??", path='"with space.txt"')
        assert entry.paths == ("with space.txt",)

    def test_pretty_xy(self) -> None:
        assert StatusEntry(xy=" M", path="a").pretty_xy() == ".M"


class TestGitStatus:
    def test_without_drops_allowed_paths(self) -> None:
        status = GitStatus(
            branch="main",
            entries=(
                StatusEntry(xy=" M", path="VERSION"),
                StatusEntry(xy="??", path="scratch.txt"),
            ),
        )

        remaining = status.without(frozenset({"VERSION"}))

        assert [e.path for e in remaining.entries] == ["scratch.txt"]
        assert remaining.branch == "main"

    def test_without_keeps_rename_touching_other_path(self) -> None:
        status = GitStatus(branch="", entries=(StatusEntry(xy="R ", path="VERSION -> V2"),))
        assert not status.without(frozenset({"VERSION"})).is_clean


class TestParseStatus:
    def _parse(self, output: str) -> GitStatus:
        return Repository(Path("."))._parse_status(output)  # pyright: ignore[reportPrivateUsage]

    def test_empty(self) -> None:
        status = self._parse("")
        assert status.is_clean
        assert status.branch == ""

    def test_branch_with_upstream(self) -> None:
        status = self._parse("## main...origin/main [ahead 2]\n M VERSION\n")
        assert status.branch == "main"
        assert status.entries == (StatusEntry(xy=" M", path="VERSION"),)

    def test_no_commits_yet(self) -> None:
        status = self._parse("## No commits yet on main\n?? README.md\n")
        assert status.branch == "main"
        assert status.entries == (StatusEntry(xy="??", path="README.md"),)


class TestRepository:
    """Against a real throwaway repository."""

    def test_clean_status(self, git_repo: Path) -> None:
        result = Repository(git_repo).status()
        assert isinstance(result, Ok)
        assert result.value.is_clean

    def test_dirty_status_lists_untracked_files_individually(self, git_repo: Path) -> None:
        (git_repo / "README.md").write_text("changed\n", encoding="utf-8")
        (git_repo / "docs").mkdir()
        (git_repo / "docs" / "a.md").write_text("a\n", encoding="utf-8")

        result = Repository(git_repo).status()

        assert isinstance(result, Ok)
        paths = sorted(e.path for e in result.value.entries)
        assert paths == ["README.md", "docs/a.md"]

    def test_git_dir(self, git_repo: Path) -> None:
        result = Repository(git_repo).git_dir()
        assert isinstance(result, Ok)
        assert result.value.resolve() == (git_repo / ".git").resolve()

    def test_stage_and_commit(self, git_repo: Path) -> None:
        repo = Repository(git_repo)
        (git_repo / "VERSION").write_text("1.0.0", encoding="utf-8")

        assert isinstance(repo.stage_all(), Ok)
        result = repo.commit("Preparing the 1.0.0 release.")

        assert isinstance(result, Ok)
        assert result.value == git(git_repo, "rev-parse", "HEAD")
        assert git(git_repo, "log", "-1", "--pretty=%s") == "Preparing the 1.0.0 release."

    def test_commit_with_nothing_staged_fails(self, git_repo: Path) -> None:
        result = Repository(git_repo).commit("empty")
        assert isinstance(result, Err)
        assert result.error.command == "commit"

    def test_tag_exists(self, git_repo: Path) -> None:
        repo = Repository(git_repo)
        assert repo.tag_exists("1.0.0") == Ok(False)

        git(git_repo, "tag", "1.0.0")

        assert repo.tag_exists("1.0.0") == Ok(True)
        assert repo.tag_exists("1.0") == Ok(False)

    def test_create_tag_with_key(self, git_repo: Path, fake_signer: Path) -> None:
        repo = Repository(git_repo)

        result = repo.create_tag("1.0.0", "First release", key="0xDEADBEEF")

        assert isinstance(result, Ok)
        assert git(git_repo, "cat-file", "-t", "1.0.0") == "tag"
        tag_object = git(git_repo, "cat-file", "-p", "1.0.0")
        assert "First release" in tag_object
        assert "BEGIN PGP SIGNATURE" in tag_object

    def test_create_tag_fails_when_signing_fails(self, git_repo: Path) -> None:
        git(git_repo, "config", "gpg.program", str(git_repo / "no-such-gpg"))

        result = Repository(git_repo).create_tag("1.0.0", "First release")

        assert isinstance(result, Err)
        assert result.error.command == "tag"
        assert git(git_repo, "tag", "--list") == ""

    def test_create_signed_tag(self, git_repo: Path, fake_signer: Path) -> None:
        repo = Repository(git_repo)

        result = repo.create_tag("1.0.0", "First release")

        assert isinstance(result, Ok)
        assert "BEGIN PGP SIGNATURE" in git(git_repo, "cat-file", "-p", "1.0.0")

    def test_create_duplicate_tag_fails(self, git_repo: Path, fake_signer: Path) -> None:
        repo = Repository(git_repo)
        git(git_repo, "tag", "1.0.0")

        result = repo.create_tag("1.0.0", "again")

        assert isinstance(result, Err)
        assert "already exists" in result.error.message

    def test_last_tag_and_log_subjects(self, git_repo: Path) -> None:
        repo = Repository(git_repo)
        assert repo.last_tag() is None

        git(git_repo, "tag", "1.0.0")
        for subject in ("Add export", "Fix crash"):
            (git_repo / "README.md").write_text(subject, encoding="utf-8")
            git(git_repo, "commit", "-q", "-am", subject)

        assert repo.last_tag() == "1.0.0"
        assert repo.log_subjects("1.0.0") == Ok(["Fix crash", "Add export"])

    def test_log_subjects_without_tag_lists_everything(self, git_repo: Path) -> None:
        assert Repository(git_repo).log_subjects() == Ok(["Initial commit"])


class TestFindRepository:
    def test_from_subdirectory(self, git_repo: Path) -> None:
        sub = git_repo / "src" / "pkg"
        sub.mkdir(parents=True)

        result = find_repository(sub)

        assert isinstance(result, Ok)
        assert result.value.path.resolve() == git_repo.resolve()

    def test_outside_repository(self, tmp_path: Path, git_env: None) -> None:
        outside = tmp_path / "plain"
        outside.mkdir()

        result = find_repository(outside)

        assert isinstance(result, Err)
