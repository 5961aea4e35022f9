"""``set-version`` and ``show-version``: manage the version record."""

from __future__ import annotations

import typer

from reltag.cli.context import build_context
from reltag.core.result import Err, Ok
from reltag.output.console import Style
from reltag.output.errors import print_release_error, release_error_exit_code
from reltag.release.version_store import FileVersionStore


def set_version(
    ctx: typer.Context,
    version: str | None = typer.Argument(
        None, help="New version (MAJOR.MINOR.PATCH[-PRE][+BUILD]); prompted if omitted."
    ),
) -> None:
    """Set the version for the next release; required before 'tag'."""
    c = build_context(ctx, require_git=False)
    store = FileVersionStore(c.version_path)

    match store.get_version():
        case Ok(current):
            c.console.print(f"Current version: {current}")
        case Err(_):
            c.console.print("Current version: (none)", Style.DIM)

    if version is None:
        version = typer.prompt("Enter new version number")

    result = store.set_version(version.strip())
    if isinstance(result, Err):
        print_release_error(result.error, c.console)
        raise typer.Exit(code=release_error_exit_code(result.error))

    c.console.success(f"next release version set to {version.strip()} ({c.config.version_file})")


def show_version(ctx: typer.Context) -> None:
    """Print the version recorded for the next release."""
    c = build_context(ctx, require_git=False)
    result = FileVersionStore(c.version_path).get_version()
    match result:
        case Ok(value):
            typer.echo(value)
        case Err(error):
            print_release_error(error, c.console)
            raise typer.Exit(code=release_error_exit_code(error))
