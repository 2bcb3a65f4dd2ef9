"""Release notes rendering.

Notes are Markdown. Commits are grouped into one section per commit type,
ordered like the configured release types, and inside a section by scope
in order of first appearance::

    ## [v1.3.0](https://github.com/acme/app/compare/v1.2.0...v1.3.0)

    ###### _Oct 18, 2026_

    ### Features
    - add export button ([a1b2c3d](https://github.com/acme/app/commit/a1b2c3d))

    - **api:**
      - paginate results ([d4e5f6a](https://github.com/acme/app/commit/d4e5f6a))

The notes can also be prepended to a changelog file on disk.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from donder_release.exceptions import ChangelogError
from donder_release.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

    from donder_release.config.models import ReleaseTypeRule
    from donder_release.core.commits import ClassifiedCommit

log = get_logger(__name__)

CHANGELOG_HEADER = (
    "# CHANGELOG\n"
    "\n"
    "_This file is auto-generated by donder-release and should not be edited manually._\n"
    "\n"
)

# Lines of CHANGELOG_HEADER replaced when an existing file is updated.
_HEADER_LINES = 3


@dataclass
class ChangelogDocument:
    """Release notes of one package for one run."""

    commits: list[ClassifiedCommit] = field(default_factory=list)
    next_version: str = ""
    notes: str = ""


def format_date(day: date) -> str:
    """Format as ``Oct 18, 2026``. Days below 10 are padded with a space: ``Oct  8, 2026``."""
    return f"{day:%b} {day.day:>2}, {day.year}"


def _section_position(section_type: str, rules: Sequence[ReleaseTypeRule]) -> int:
    # Sections without a configured rule sort before every configured one.
    for index, rule in enumerate(rules):
        if rule.commit_type == section_type:
            return index
    return -1


def _section_title(section_type: str, rules: Sequence[ReleaseTypeRule]) -> str:
    for rule in rules:
        if rule.commit_type == section_type:
            return rule.section
    return section_type


def group_commits(
    commits: Sequence[ClassifiedCommit],
    rules: Sequence[ReleaseTypeRule],
) -> list[tuple[str, dict[str, list[ClassifiedCommit]]]]:
    """Group commits by section, then by scope.

    Args:
        commits: Classified commits in history order
        rules: Effective release type rules, in configured order

    Returns:
        ``(section_type, {scope: commits})`` pairs in rendering order
    """
    sections: dict[str, dict[str, list[ClassifiedCommit]]] = {}
    for commit in commits:
        scopes = sections.setdefault(commit.section_type, {})
        scopes.setdefault(commit.scope, []).append(commit)

    # sorted() is stable, so unconfigured sections keep discovery order.
    return sorted(sections.items(), key=lambda item: _section_position(item[0], rules))


def _commit_link(commit: ClassifiedCommit, origin_url: str) -> str:
    return f"{commit.description} ([{commit.sha}]({origin_url}/commit/{commit.sha}))"


def render_notes(
    commits: Sequence[ClassifiedCommit],
    next_tag: str,
    last_tag: str,
    rules: Sequence[ReleaseTypeRule],
    origin_url: str,
    *,
    today: date | None = None,
) -> str:
    """Render release notes.

    Args:
        commits: Classified commits of the release
        next_tag: Tag of the release being prepared
        last_tag: Tag of the previous release, empty for a first release
        rules: Effective release type rules, in configured order
        origin_url: Web URL of the repository, used for links
        today: Release date, defaults to the current UTC date

    Returns:
        Markdown release notes
    """
    day = today or datetime.now(UTC).date()

    if last_tag:
        lines = [f"## [{next_tag}]({origin_url}/compare/{last_tag}...{next_tag})"]
    else:
        lines = [f"## {next_tag}"]
    lines.append("")
    lines.append(f"###### _{format_date(day)}_")

    for section_type, scopes in group_commits(commits, rules):
        lines.append("")
        lines.append(f"### {_section_title(section_type, rules)}")

        for scope, scoped_commits in scopes.items():
            if not scope:
                lines.extend(f"- {_commit_link(c, origin_url)}" for c in scoped_commits)
                continue

            lines.append("")
            lines.append(f"- **{scope}:**")
            lines.extend(f"  - {_commit_link(c, origin_url)}" for c in scoped_commits)

    return "\n".join(lines) + "\n"


def build_changelog(
    commits: Sequence[ClassifiedCommit],
    next_tag: str,
    last_tag: str,
    rules: Sequence[ReleaseTypeRule],
    origin_url: str,
    *,
    today: date | None = None,
) -> ChangelogDocument:
    """Render notes and bundle them with the commits they describe."""
    notes = render_notes(commits, next_tag, last_tag, rules, origin_url, today=today)
    return ChangelogDocument(commits=list(commits), next_version=next_tag, notes=notes)


def write_changelog_file(path: Path, notes: str) -> Path:
    """Prepend release notes to a changelog file.

    The file starts with a fixed header. When the file already exists, its
    first three lines (the previous header) are replaced and everything
    after them is kept below the new notes.

    Args:
        path: Changelog file to create or update
        notes: Rendered release notes

    Returns:
        The written path

    Raises:
        ChangelogError: If the file cannot be read or written
    """
    try:
        previous = path.read_text(encoding="utf-8") if path.exists() else ""
    except OSError as e:
        raise ChangelogError(f"failed to read changelog file {path}: {e}") from e

    content = CHANGELOG_HEADER + notes
    if previous:
        remaining = previous.splitlines()[_HEADER_LINES:]
        content = content.rstrip("\n") + "\n" + "\n".join(remaining)
        content = content.rstrip("\n") + "\n"

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ChangelogError(f"failed to write changelog file {path}: {e}") from e

    log.info("wrote release notes", path=str(path))
    return path
