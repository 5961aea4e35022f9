from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import typer

from reltag.core.config import ReleaseConfig, discover_config, load_config
from reltag.core.errors import ErrorCode
from reltag.core.result import Err
from reltag.git.repository import Repository, find_repository
from reltag.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class GlobalOptions:
    repo: Path | None = None
    config: Path | None = None
    verbose: bool = False


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    repo: Repository | None
    config: ReleaseConfig
    console: ConsoleProtocol

    @property
    def version_path(self) -> Path:
        return self.root / self.config.version_file

    @property
    def changelog_path(self) -> Path:
        return self.root / self.config.changelog_file


def exit_with(message: str, *, code: ErrorCode) -> NoReturn:
    typer.echo(f"error: {message}", err=True)
    raise typer.Exit(code=int(code))


def options_of(ctx: typer.Context) -> GlobalOptions:
    obj = ctx.obj
    return obj if isinstance(obj, GlobalOptions) else GlobalOptions()


def build_context(ctx: typer.Context, *, require_git: bool = True) -> CLIContext:
    """Resolve the repository root and configuration for a command.

    Without ``--repo`` the root is the enclosing git work tree. Commands
    that do not need git fall back to the current directory.
    """
    options = options_of(ctx)
    start = (options.repo or Path.cwd()).expanduser().resolve()

    found = find_repository(start)
    if isinstance(found, Err):
        if require_git:
            exit_with(found.error.message, code=ErrorCode.ENV_ERROR)
        root, repo = start, None
    else:
        repo = found.value
        root = repo.path

    if options.config is not None:
        config_result = load_config(options.config.expanduser())
    else:
        config_result = discover_config(root)
    if isinstance(config_result, Err):
        exit_with(config_result.error.message, code=ErrorCode.ENV_ERROR)

    return CLIContext(root=root, repo=repo, config=config_result.value, console=RichConsole())
