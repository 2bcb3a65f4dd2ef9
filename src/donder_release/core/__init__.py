"""Core release computation for donder-release.

This module contains the fundamental building blocks:
- Semantic version parsing and ordering
- Conventional commit classification
- Last release selection and next version computation
- Release notes rendering
- Partitioning a repository into packages
"""

from __future__ import annotations

from donder_release.core.changelog import (
    ChangelogDocument,
    build_changelog,
    render_notes,
    write_changelog_file,
)
from donder_release.core.commits import (
    ClassifiedCommit,
    calculate_bump,
    classify_commit,
    classify_commits,
    get_breaking_changes,
)
from donder_release.core.packages import Package, partition_packages
from donder_release.core.resolver import (
    next_version,
    resolve_last_release,
    seed_release,
    select_last_release,
)
from donder_release.core.tags import TagInfo, parse_tags
from donder_release.core.version import BumpType, Version, parse_version

__all__ = [
    # Version
    "BumpType",
    # Changelog
    "ChangelogDocument",
    # Commits
    "ClassifiedCommit",
    # Packages
    "Package",
    # Tags
    "TagInfo",
    "Version",
    "build_changelog",
    "calculate_bump",
    "classify_commit",
    "classify_commits",
    "get_breaking_changes",
    "next_version",
    "parse_tags",
    "parse_version",
    "partition_packages",
    "render_notes",
    "resolve_last_release",
    "seed_release",
    "select_last_release",
    "write_changelog_file",
]
