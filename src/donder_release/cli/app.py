"""Typer application wiring the donder-release commands."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from donder_release import __version__
from donder_release.cli.commands import run_clean, run_init, run_release_command
from donder_release.logging import configure_logging

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

PathOption = Annotated[
    str | None,
    typer.Option("--path", help="Repository root (defaults to the working directory)."),
]
ConfigOption = Annotated[
    str | None,
    typer.Option("--config", "-c", help="Configuration file (searched for when omitted)."),
]
PackageOption = Annotated[
    list[str] | None,
    typer.Option("--package", "-p", help="Package to process, repeatable. Use root for the root."),
]


def release(
    path: PathOption = None,
    config: ConfigOption = None,
    pre_id: Annotated[
        str, typer.Option("--pre-id", help="Pre-release identifier, e.g. alpha, beta or rc.")
    ] = "",
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Preview the release notes without publishing.")
    ] = False,
    package: PackageOption = None,
) -> None:
    """Compute and publish the next release of every package."""
    run_release_command(path, config, pre_id, dry_run, package or [], console, err_console)


def init(path: PathOption = None) -> None:
    """Create a starter [cyan]donder-release.toml[/]."""
    run_init(path, console, err_console)


def clean(
    path: PathOption = None,
    config: ConfigOption = None,
    package: PackageOption = None,
) -> None:
    """Delete pre-release GitHub releases and tags."""
    run_clean(path, config, package or [], console, err_console)


app.command()(release)
app.command()(init)
app.command()(clean)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False, "--version", callback=_show_version, is_eager=True, help="Show version and exit."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show warnings and errors."),
    json_log: bool = typer.Option(False, "--json-log", help="Emit logs as JSON lines."),
) -> None:
    configure_logging(verbose=verbose, quiet=quiet, json_log=json_log)


def main() -> None:
    app()
