"""Semantic version handling.

Versions follow Semantic Versioning 2.0.0: ``MAJOR.MINOR.PATCH`` with an
optional ``-prerelease`` suffix and optional ``+build`` metadata. Ordering
follows the SemVer precedence rules; build metadata is ignored when
comparing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum
from functools import total_ordering

from donder_release.exceptions import InvalidVersionError

_IDENT = r"[0-9A-Za-z-]+"

SEMVER_PATTERN = re.compile(
    r"^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    rf"(?:-(?P<prerelease>{_IDENT}(?:\.{_IDENT})*))?"
    rf"(?:\+(?P<build>{_IDENT}(?:\.{_IDENT})*))?$"
)


class BumpType(str, Enum):
    """Magnitude of a version increment."""

    NONE = "none"
    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"

    def __str__(self) -> str:
        return self.value


def _prerelease_key(prerelease: str) -> tuple[tuple[int, int | str], ...]:
    # Numeric identifiers sort before alphanumeric ones and compare numerically.
    parts: list[tuple[int, int | str]] = []
    for ident in prerelease.split("."):
        if ident.isdigit():
            parts.append((0, int(ident)))
        else:
            parts.append((1, ident))
    return tuple(parts)


@total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """An immutable semantic version.

    Attributes:
        major: Major version number
        minor: Minor version number
        patch: Patch version number
        prerelease: Pre-release suffix without the leading dash, e.g. ``beta.2``
        build: Build metadata without the leading plus, e.g. ``5``
    """

    major: int
    minor: int
    patch: int
    prerelease: str = ""
    build: str = ""

    @classmethod
    def parse(cls, value: str) -> Version:
        """Parse a version string.

        Args:
            value: Version string such as ``1.2.3``, ``2.0.0-rc.1`` or ``1.0.0+7``

        Returns:
            Parsed Version

        Raises:
            InvalidVersionError: If the string is not a valid semantic version
        """
        match = SEMVER_PATTERN.match(value.strip())
        if not match:
            raise InvalidVersionError(f"Invalid semantic version: {value!r}")

        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            prerelease=match.group("prerelease") or "",
            build=match.group("build") or "",
        )

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    @property
    def core(self) -> str:
        """The ``MAJOR.MINOR.PATCH`` triple as a string."""
        return f"{self.major}.{self.minor}.{self.patch}"

    def bump(self, bump_type: BumpType) -> Version:
        """Increment the numeric triple, dropping pre-release and build data.

        Args:
            bump_type: Which component to increment

        Returns:
            The bumped version
        """
        if bump_type == BumpType.MAJOR:
            return Version(self.major + 1, 0, 0)
        if bump_type == BumpType.MINOR:
            return Version(self.major, self.minor + 1, 0)
        if bump_type == BumpType.PATCH:
            return Version(self.major, self.minor, self.patch + 1)
        return Version(self.major, self.minor, self.patch)

    def with_prerelease(self, prerelease: str) -> Version:
        return replace(self, prerelease=prerelease, build="")

    def without_build(self) -> Version:
        return replace(self, build="")

    def _key(self) -> tuple:
        # A release sorts after every pre-release of the same triple.
        if self.prerelease:
            return (self.major, self.minor, self.patch, 0, _prerelease_key(self.prerelease))
        return (self.major, self.minor, self.patch, 1, ())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        version = self.core
        if self.prerelease:
            version += f"-{self.prerelease}"
        if self.build:
            version += f"+{self.build}"
        return version


def parse_version(value: str) -> Version:
    """Parse a version string. Shorthand for ``Version.parse``."""
    return Version.parse(value)


def is_valid_version(value: str) -> bool:
    return SEMVER_PATTERN.match(value.strip()) is not None
