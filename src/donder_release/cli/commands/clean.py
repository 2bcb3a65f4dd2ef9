"""Implementation of the 'clean' command.

Removes the pre-releases of the selected packages: their GitHub releases
first, then their local and remote tags.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from rich.markup import escape

from donder_release.config import load_config
from donder_release.core.packages import partition_packages
from donder_release.exceptions import DonderReleaseError
from donder_release.forge import GitHubClient, resolve_token
from donder_release.logging import get_logger
from donder_release.vcs import GitRepository
from donder_release.vcs.git import DEFAULT_AUTHOR_EMAIL, DEFAULT_AUTHOR_NAME

if TYPE_CHECKING:
    from rich.console import Console

log = get_logger(__name__)


def clean_package_pre_releases(
    tag_prefix: str,
    repo: GitRepository,
    client: GitHubClient,
) -> list[str]:
    """Delete the pre-release releases and tags carrying ``tag_prefix``.

    Returns:
        Deleted tag names
    """
    client.clean_pre_releases(tag_prefix)

    deleted = []
    for tag in repo.list_tags(tag_prefix):
        if not tag.version.is_prerelease:
            continue
        repo.delete_local_tag(tag.tag)
        repo.delete_remote_tag(tag.tag)
        deleted.append(tag.tag)
    return deleted


def run_clean(
    path: str | None,
    config_file: str | None,
    packages: list[str],
    console: Console,
    err_console: Console,
) -> None:
    """Run the clean command.

    Args:
        path: Optional path to the repository
        config_file: Optional configuration file, searched for when omitted
        packages: Names of the packages to clean, all when empty
        console: Console for standard output
        err_console: Console for error output
    """
    project_path = Path(path) if path else Path.cwd()

    token = resolve_token()
    if not token:
        err_console.print("[red]Error:[/] GH_TOKEN env var not set")
        raise SystemExit(1)

    try:
        config = load_config(Path(config_file) if config_file else project_path)
        selected = partition_packages(config.bump_files, config.tag_prefix, packages)

        repo = GitRepository(
            project_path,
            token=token,
            author_name=os.environ.get("GIT_AUTHOR_NAME", DEFAULT_AUTHOR_NAME),
            author_email=os.environ.get("GIT_AUTHOR_EMAIL", DEFAULT_AUTHOR_EMAIL),
        )
        with GitHubClient(repo.remote.owner, repo.remote.repo, token=token) as client:
            for package in selected:
                log.info("cleaning pre-releases", package=package.display_name)
                deleted = clean_package_pre_releases(package.tag_prefix, repo, client)
                console.print(
                    f"  [green]✓[/] {escape(package.display_name)}: "
                    f"removed {len(deleted)} pre-release tag(s)"
                )
    except DonderReleaseError as e:
        err_console.print(f"[red]Clean failed:[/] {escape(str(e))}")
        raise SystemExit(1) from e
