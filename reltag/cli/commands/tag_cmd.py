"""``tag``: run the full release flow and create the signed tag."""

from __future__ import annotations

import typer

from reltag.cli.context import CLIContext, build_context, exit_with
from reltag.core.errors import ErrorCode
from reltag.core.result import Err
from reltag.git.repository import Repository
from reltag.output.console import Style
from reltag.output.errors import print_abort_report, release_error_exit_code
from reltag.release.changelog import ChangelogAdapter, CommandChangelog, MarkdownChangelog
from reltag.release.confirm import TerminalConfirmer
from reltag.release.guard import GitWorkspaceGuard
from reltag.release.lock import LOCK_FILENAME, RunLock
from reltag.release.orchestrator import TagOrchestrator
from reltag.release.version_store import FileVersionStore


def make_changelog(c: CLIContext, repo: Repository) -> ChangelogAdapter:
    cfg = c.config.changelog
    if cfg.tool == "command":
        return CommandChangelog(
            c.root,
            c.changelog_path,
            update_command=cfg.update_command,
            contents_command=cfg.contents_command,
        )
    return MarkdownChangelog(
        c.changelog_path,
        history=lambda: repo.log_subjects(repo.last_tag()),
    )


def make_orchestrator(c: CLIContext, repo: Repository) -> TagOrchestrator:
    """Wire the orchestrator to the real repository, files and terminal.

    The version record and the changelog are the two files a release
    commit is meant to carry, so pending edits to them do not count as a
    dirty workspace.
    """
    git_dir = repo.git_dir()
    if isinstance(git_dir, Err):
        exit_with(git_dir.error.message, code=ErrorCode.ENV_ERROR)

    allowed = {
        p.relative_to(c.root).as_posix()
        for p in (c.version_path, c.changelog_path)
        if p.is_relative_to(c.root)
    }
    return TagOrchestrator(
        store=FileVersionStore(c.version_path),
        guard=GitWorkspaceGuard(repo, allowed=allowed),
        changelog=make_changelog(c, repo),
        confirmer=TerminalConfirmer(c.console),
        vcs=repo,
        console=c.console,
        config=c.config,
        lock=RunLock(git_dir.value / LOCK_FILENAME),
    )


def tag(ctx: typer.Context) -> None:
    """Tag (and sign) the release recorded by 'set-version'."""
    c = build_context(ctx)
    assert c.repo is not None

    report = make_orchestrator(c, c.repo).run()
    if report.succeeded:
        c.console.success(f"release {report.tag} is tagged")
        c.console.print("Publish it with: git push --follow-tags", Style.DIM)
        return

    print_abort_report(report, c.console, signing_key=c.config.signing_key)
    assert report.error is not None
    raise typer.Exit(code=release_error_exit_code(report.error))
