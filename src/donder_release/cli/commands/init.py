"""Implementation of the 'init' command."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.markup import escape

from donder_release.config.template import init_config
from donder_release.exceptions import ConfigError

if TYPE_CHECKING:
    from rich.console import Console


def run_init(path: str | None, console: Console, err_console: Console) -> None:
    """Write a starter configuration file.

    Args:
        path: Directory to create the file in, defaults to the working directory
        console: Console for standard output
        err_console: Console for error output
    """
    try:
        created = init_config(Path(path) if path else None)
    except ConfigError as e:
        err_console.print(f"[red]Error initializing config:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    console.print(f"[green]✓[/] Created [cyan]{escape(str(created))}[/]")
    console.print("[dim]Declare your version files under [cyan]bump_files[/] before releasing.[/]")
