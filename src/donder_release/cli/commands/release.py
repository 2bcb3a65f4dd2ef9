"""Implementation of the 'release' command.

The release command computes the next release of every package and, unless
running in preview mode, bumps version files, commits, tags, pushes and
publishes a GitHub release.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from donder_release.config import RunOptions, load_config
from donder_release.core.packages import partition_packages
from donder_release.exceptions import DonderReleaseError
from donder_release.forge import GitHubClient, resolve_token
from donder_release.logging import get_logger
from donder_release.pipeline import PackageRelease, ReleaseContext, run_release
from donder_release.vcs import GitRepository
from donder_release.vcs.git import DEFAULT_AUTHOR_EMAIL, DEFAULT_AUTHOR_NAME

if TYPE_CHECKING:
    from rich.console import Console

log = get_logger(__name__)


def _show_notes(release: PackageRelease, console: Console, preview: bool) -> None:
    name = release.package.display_name
    if not release.needs_release:
        console.print(f"[yellow]{name}:[/] no relevant commits, nothing to release.")
        return
    if not preview:
        return

    console.print(
        Panel(
            Text(release.document.notes),
            title=f"[yellow]Preview[/] {escape(name)} → [green]{release.next_tag}[/]",
            border_style="yellow",
        )
    )


def run_release_command(
    path: str | None,
    config_file: str | None,
    pre_id: str,
    dry_run: bool,
    packages: list[str],
    console: Console,
    err_console: Console,
) -> None:
    """Run the release command.

    Args:
        path: Optional path to the repository
        config_file: Optional configuration file, searched for when omitted
        pre_id: Pre-release identifier (e.g., "alpha", "beta", "rc")
        dry_run: Preview the release without publishing it
        packages: Names of the packages to release, all when empty
        console: Console for standard output
        err_console: Console for error output
    """
    project_path = Path(path) if path else Path.cwd()

    try:
        options = RunOptions(pre_id=pre_id, preview=dry_run, packages=tuple(packages))
    except ValidationError as e:
        err_console.print(f"[red]Invalid pre-release id:[/] {pre_id!r}")
        raise SystemExit(1) from e

    # Load configuration
    try:
        config = load_config(Path(config_file) if config_file else project_path)
        selected = partition_packages(config.bump_files, config.tag_prefix, options.packages)
    except DonderReleaseError as e:
        err_console.print(f"[red]Error loading configuration:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    token = resolve_token()
    if not options.preview and not token:
        err_console.print("[red]Error:[/] GH_TOKEN env var not set")
        raise SystemExit(1)

    repo = GitRepository(
        project_path,
        token=token,
        author_name=os.environ.get("GIT_AUTHOR_NAME", DEFAULT_AUTHOR_NAME),
        author_email=os.environ.get("GIT_AUTHOR_EMAIL", DEFAULT_AUTHOR_EMAIL),
    )

    publisher: GitHubClient | None = None
    try:
        if options.preview:
            log.info("running in preview mode, release will not be published")
        else:
            log.info("running in publish mode, release will be published")
            repo.sync()
            publisher = GitHubClient(repo.remote.owner, repo.remote.repo, token=token)

        ctx = ReleaseContext(
            config=config,
            options=options,
            repo=repo,
            origin_url=repo.origin_url(),
            root=repo.path,
            publisher=publisher,
        )
        results = run_release(
            selected,
            ctx,
            on_prepared=lambda release: _show_notes(release, console, options.preview),
        )
    except DonderReleaseError as e:
        err_console.print(f"[red]Release failed:[/] {escape(str(e))}")
        raise SystemExit(1) from e
    finally:
        if publisher is not None:
            publisher.close()

    failed = [r for r in results if r.error is not None]
    for release in failed:
        name = release.package.display_name
        err_console.print(f"[red]{name} failed:[/] {escape(str(release.error))}")

    for release in results:
        if release.published:
            console.print(f"  [green]✓[/] Published [green]{release.next_tag}[/]")

    if failed:
        raise SystemExit(1)

    console.print("[green]Completed successfully 🎉[/]")
