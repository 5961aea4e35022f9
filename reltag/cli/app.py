from __future__ import annotations

from pathlib import Path

import typer

from reltag import __version__
from reltag.cli.commands.tag_cmd import tag
from reltag.cli.commands.version_cmd import set_version, show_version
from reltag.cli.context import GlobalOptions
from reltag.output.log import setup_logging


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    invoke_without_command=True,
    rich_markup_mode="rich",
    help="Tag signed releases from a clean git tree, with changelog review.",
)


app.command("set-version")(set_version)
app.command("show-version")(show_version)
app.command()(tag)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    repo: Path | None = typer.Option(
        None,
        "--repo",
        help="Repository to release (default: the enclosing git work tree).",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Config file (default: reltag.toml or [tool.reltag] in pyproject.toml).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every release step."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    setup_logging(verbose=verbose)
    ctx.obj = GlobalOptions(repo=repo, config=config, verbose=verbose)


def main() -> None:
    app()
