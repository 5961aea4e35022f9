"""Shared fixtures: throwaway git repositories and a stand-in signer."""

from __future__ import annotations

import os
import shutil
import stat
from pathlib import Path

import pytest

from reltag.test._git import git

_FAKE_GPG = """#!/bin/sh
cat > /dev/null
printf '%s\\n' '[GNUPG:] BEGIN_SIGNING' '[GNUPG:] SIG_CREATED D 1 8 00 1700000000 FAKEKEY' >&2
printf '%s\\n' '-----BEGIN PGP SIGNATURE-----' '' 'ZmFrZSBzaWduYXR1cmU=' '-----END PGP SIGNATURE-----'
"""


@pytest.fixture
def git_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Isolate git from the developer's global and system configuration."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(home / ".gitconfig"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    for name in ("GIT_DIR", "GIT_WORK_TREE", "GIT_INDEX_FILE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def git_repo(tmp_path: Path, git_env: None) -> Path:
    """A repository with one commit and a clean working tree."""
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "config", "user.name", "Release Tester")
    git(repo, "config", "user.email", "release@example.com")
    git(repo, "config", "commit.gpgsign", "false")
    git(repo, "config", "tag.gpgsign", "false")
    (repo / "README.md").write_text("demo\n", encoding="utf-8")
    git(repo, "add", "README.md")
    git(repo, "commit", "-q", "-m", "Initial commit")
    return repo


@pytest.fixture
def fake_signer(tmp_path: Path, git_repo: Path) -> Path:
    """Point ``gpg.program`` at a script that emits a dummy signature."""
    if os.name == "nt":
        pytest.skip("fake gpg program is a POSIX shell script")

    script = tmp_path / "fake-gpg"
    script.write_text(_FAKE_GPG, encoding="utf-8")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    git(git_repo, "config", "gpg.program", str(script))
    return script
