"""Release tags.

A release tag is a tag prefix followed by a semantic version, for example
``v1.4.0`` for the repository root or ``api@v2.0.0-beta.1`` for a package.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Protocol

from donder_release.core.version import Version, is_valid_version


@dataclass(frozen=True)
class TagInfo:
    """A discovered or synthesized release tag.

    Attributes:
        version: Version carried by the tag
        prefix: Tag prefix, e.g. ``v`` or ``api@v``
        head: Commit the tag points to, empty when synthesized
        is_initial: True for the seed of a package that has never been released
    """

    version: Version
    prefix: str
    head: str = ""
    is_initial: bool = False

    @property
    def tag(self) -> str:
        return f"{self.prefix}{self.version}"

    def with_head(self, head: str) -> TagInfo:
        return replace(self, head=head)

    def __str__(self) -> str:
        return self.tag


class TagSource(Protocol):
    """Where release tags come from."""

    def list_tags(self, prefix: str) -> list[TagInfo]:
        """Tags with the given prefix and a valid version, newest version first."""
        ...

    def tag_head(self, tag: str) -> str:
        """Commit the tag points to."""
        ...


def strip_prefix(tag: str, prefix: str) -> str | None:
    """Return the version part of ``tag``, or None if it lacks the prefix."""
    if not tag.startswith(prefix):
        return None
    return tag[len(prefix) :]


def parse_tags(names: Iterable[str], prefix: str) -> list[TagInfo]:
    """Turn raw tag names into TagInfo, sorted by version descending.

    Names that do not start with ``prefix`` or whose remainder is not a
    valid semantic version are skipped.
    """
    tags = []
    for name in names:
        remainder = strip_prefix(name.strip(), prefix)
        if remainder is None or not is_valid_version(remainder):
            continue
        tags.append(TagInfo(version=Version.parse(remainder), prefix=prefix))

    tags.sort(key=lambda t: t.version, reverse=True)
    return tags


def format_tag(prefix: str, version: Version) -> str:
    return f"{prefix}{version}"
