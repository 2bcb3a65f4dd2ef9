"""Conventional commit classification.

A commit is classified when its subject has the form
``type(scope)!: description`` and ``type`` is one of the configured
release types. A commit whose message carries a ``BREAKING CHANGE: ``
footer is kept even when its type is not configured, so that it can still
trigger a major release. Everything else is dropped.

Examples of recognized subjects:
    feat: add user authentication
    fix(api): handle null response
    perf(parser)!: drop the legacy tokenizer
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING

from donder_release.core.version import BumpType

if TYPE_CHECKING:
    from donder_release.config.models import ReleaseTypeRule
    from donder_release.vcs.git import Commit

BREAKING_MARKER = "BREAKING CHANGE: "

_SUBJECT_TAIL = r"(?P<scope>\([\w\-.]+\))?(?P<bang>!)?: (?P<description>.+)"

# Fallback for commits that carry a breaking-change footer but whose type
# is not configured.
ANY_TYPE_PATTERN = re.compile(rf"^(?P<type>\w+){_SUBJECT_TAIL}")


@lru_cache(maxsize=32)
def type_pattern(commit_types: tuple[str, ...]) -> re.Pattern[str]:
    """Build the subject pattern restricted to the given commit types."""
    alternatives = "|".join(re.escape(t) for t in commit_types)
    return re.compile(rf"^(?P<type>{alternatives}){{1}}{_SUBJECT_TAIL}")


@dataclass(frozen=True)
class ClassifiedCommit:
    """A commit that takes part in a release.

    Attributes:
        section_type: Commit type, also the changelog section key
        scope: Scope without parentheses, empty when absent
        description: Subject text after ``: ``
        breaking_note: Text of the ``BREAKING CHANGE: `` footer, empty when absent
        sha: Short commit hash
        bang: Whether the subject carried the ``!`` marker
    """

    section_type: str
    scope: str
    description: str
    breaking_note: str
    sha: str
    bang: bool = False

    @property
    def is_breaking(self) -> bool:
        return bool(self.breaking_note)


def find_breaking_note(commit: Commit) -> str | None:
    """Return the remainder of the first ``BREAKING CHANGE: `` line.

    The remainder is kept as written and may be empty. None means no line
    carries the marker.
    """
    for line in commit.message.splitlines():
        if line.startswith(BREAKING_MARKER):
            return line[len(BREAKING_MARKER) :]
    return None


def classify_commit(
    commit: Commit,
    commit_types: Sequence[str],
    *,
    bang_breaking: bool = False,
) -> ClassifiedCommit | None:
    """Classify one commit.

    Args:
        commit: Commit to classify
        commit_types: Configured commit types, in configuration order
        bang_breaking: Treat a ``!`` marker as a breaking change

    Returns:
        The classified commit, or None when the commit is not release relevant
    """
    match = type_pattern(tuple(commit_types)).match(commit.subject) if commit_types else None
    found_note = find_breaking_note(commit)
    breaking_note = found_note or ""

    if match is None and found_note is not None:
        match = ANY_TYPE_PATTERN.match(commit.subject)

    if match is None:
        return None

    scope = match.group("scope") or ""
    description = match.group("description").strip()
    bang = match.group("bang") is not None

    if bang_breaking and bang and not breaking_note:
        breaking_note = description

    return ClassifiedCommit(
        section_type=match.group("type"),
        scope=scope.strip("()"),
        description=description,
        breaking_note=breaking_note,
        sha=commit.sha,
        bang=bang,
    )


def classify_commits(
    commits: Iterable[Commit],
    commit_types: Sequence[str],
    *,
    bang_breaking: bool = False,
) -> list[ClassifiedCommit]:
    """Classify commits, dropping the ones that are not release relevant.

    Input order is preserved.
    """
    classified = []
    for commit in commits:
        result = classify_commit(commit, commit_types, bang_breaking=bang_breaking)
        if result is not None:
            classified.append(result)
    return classified


def calculate_bump(
    commits: Sequence[ClassifiedCommit],
    rules: Sequence[ReleaseTypeRule],
) -> BumpType:
    """Determine the bump level implied by a set of classified commits.

    A breaking change always wins. Otherwise any commit whose type maps to
    a minor rule gives a minor bump, and anything else a patch bump.

    Args:
        commits: Classified commits of one package
        rules: Effective release type rules

    Returns:
        The bump level, BumpType.NONE when there are no commits
    """
    if not commits:
        return BumpType.NONE

    if any(c.is_breaking for c in commits):
        return BumpType.MAJOR

    minor_types = {r.commit_type for r in rules if r.bump == BumpType.MINOR}
    if any(c.section_type in minor_types for c in commits):
        return BumpType.MINOR

    return BumpType.PATCH


def get_breaking_changes(commits: Sequence[ClassifiedCommit]) -> list[ClassifiedCommit]:
    """Commits carrying a breaking-change note, in input order."""
    return [c for c in commits if c.is_breaking]
