"""Release pipeline.

Each package runs the same sequence, one package at a time:

    resolve last release -> read commits -> classify -> next version
        -> render notes -> [write changelog -> bump files -> commit, tag, push
        -> publish]

The bracketed steps only run outside preview mode. A package without
release-relevant commits is skipped. In preview mode a failing package is
reported and the next one still runs; in publish mode the first failure
stops the run. Steps already applied to a failed package are not rolled
back.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Protocol

import structlog

from donder_release.config.models import DonderReleaseConfig, RunOptions
from donder_release.config.template import render_template
from donder_release.core.changelog import ChangelogDocument, build_changelog, write_changelog_file
from donder_release.core.commits import calculate_bump, classify_commits, get_breaking_changes
from donder_release.core.packages import Package
from donder_release.core.resolver import next_version, resolve_last_release
from donder_release.core.tags import TagInfo, TagSource, format_tag
from donder_release.exceptions import DonderReleaseError
from donder_release.logging import get_logger
from donder_release.project.bump_files import apply_version
from donder_release.vcs.git import Commit

log = get_logger(__name__)


class CommitSource(Protocol):
    def get_commits(self, since: str = "", path: str = "") -> list[Commit]: ...


class Repository(TagSource, CommitSource, Protocol):
    """Everything the pipeline needs from version control."""

    def commit(self, message: str) -> None: ...

    def push(self) -> None: ...

    def tag(self, name: str) -> None: ...

    def push_tag(self, name: str) -> None: ...


class ReleasePublisher(Protocol):
    def publish_release(self, tag: str, tag_prefix: str, notes: str) -> object: ...


@dataclass
class ReleaseContext:
    """Collaborators and settings shared by every package of a run.

    Attributes:
        config: Loaded configuration
        options: Choices made for this run
        repo: Version control access
        origin_url: Web URL of the repository, for links in the notes
        root: Repository root; version and changelog paths are relative to it
        publisher: Release publisher, required outside preview mode
        today: Release date override
    """

    config: DonderReleaseConfig
    options: RunOptions
    repo: Repository
    origin_url: str
    root: Path = field(default_factory=Path.cwd)
    publisher: ReleasePublisher | None = None
    today: date | None = None


@dataclass
class PackageRelease:
    """Outcome of the pipeline for one package."""

    package: Package
    last_release: TagInfo | None = None
    document: ChangelogDocument | None = None
    changelog_path: Path | None = None
    published: bool = False
    error: DonderReleaseError | None = None

    @property
    def needs_release(self) -> bool:
        return self.document is not None

    @property
    def next_tag(self) -> str:
        return self.document.next_version if self.document else ""


def prepare_release(package: Package, ctx: ReleaseContext) -> PackageRelease:
    """Compute the next version and release notes of a package.

    Returns:
        The prepared release; ``document`` is None when no release is needed

    Raises:
        DonderReleaseError: If tags or commits cannot be read, or a version is invalid
    """
    rules = ctx.config.release_types
    pre_id = ctx.options.pre_id

    last = resolve_last_release(ctx.repo, package.tag_prefix, pre_id)
    release = PackageRelease(package=package, last_release=last)

    if last.is_initial:
        log.info("retrieving all commits", path=package.path or ".")
        commits = ctx.repo.get_commits("", package.path)
    else:
        log.info("retrieving commits since release", head=last.head, path=package.path or ".")
        commits = ctx.repo.get_commits(last.head, package.path)

    log.info("analyzing commits", count=len(commits))
    classified = classify_commits(
        commits,
        [r.commit_type for r in rules],
        bang_breaking=ctx.config.bang_breaking,
    )
    if not classified:
        log.info("no relevant commits found, skipping release")
        return release

    log.info("found relevant commits", count=len(classified))
    for commit in get_breaking_changes(classified):
        log.info("breaking change", sha=commit.sha, note=commit.breaking_note)
    bump = calculate_bump(classified, rules)
    version = next_version(last, bump, pre_id)
    next_tag = format_tag(package.tag_prefix, version)
    log.info("next release version", tag=next_tag, bump=str(bump))

    release.document = build_changelog(
        classified,
        next_tag,
        "" if last.is_initial else last.tag,
        rules,
        ctx.origin_url,
        today=ctx.today,
    )
    return release


def changelog_path(package: Package, ctx: ReleaseContext) -> Path | None:
    """Changelog file of a package, or None when notes are not persisted."""
    if not ctx.config.changelog_file:
        return None
    return ctx.root / package.path / ctx.config.changelog_file


def apply_release(release: PackageRelease, ctx: ReleaseContext) -> None:
    """Persist notes, bump version files, commit, tag, push and publish.

    Raises:
        DonderReleaseError: If any step fails
        ValueError: If no publisher is configured
    """
    if release.document is None:
        return
    if ctx.publisher is None:
        raise ValueError("a publisher is required to publish releases")

    package = release.package
    document = release.document
    tag = document.next_version

    path = changelog_path(package, ctx)
    if path is not None:
        release.changelog_path = write_changelog_file(path, document.notes)

    version = tag.removeprefix(package.tag_prefix)
    log.info("bumping version files", count=len(package.bump_files))
    for bump_file in package.bump_files:
        apply_version(bump_file, version, ctx.root)

    log.info("publishing release", tag=tag)
    ctx.repo.commit(render_template(ctx.config.release_message, tag))
    ctx.repo.push()
    ctx.repo.tag(tag)
    ctx.repo.push_tag(tag)
    ctx.publisher.publish_release(tag, package.tag_prefix, document.notes)
    release.published = True


def run_release(
    packages: Sequence[Package],
    ctx: ReleaseContext,
    on_prepared: Callable[[PackageRelease], None] | None = None,
) -> list[PackageRelease]:
    """Run the pipeline for every package, in order.

    Args:
        packages: Packages to release
        ctx: Shared run context
        on_prepared: Called with each prepared release before it is applied,
            e.g. to show the notes

    Returns:
        One PackageRelease per processed package

    Raises:
        DonderReleaseError: Outside preview mode, the first failure
    """
    results: list[PackageRelease] = []

    for package in packages:
        with structlog.contextvars.bound_contextvars(package=package.display_name):
            release = PackageRelease(package=package)
            try:
                release = prepare_release(package, ctx)
                if on_prepared is not None:
                    on_prepared(release)
                if not ctx.options.preview:
                    apply_release(release, ctx)
            except DonderReleaseError as e:
                release.error = e
                results.append(release)
                if not ctx.options.preview:
                    raise
                log.error("package failed", error=str(e))
                continue
            results.append(release)

    return results
