"""Splitting a repository into independently released packages.

Every version file declared in the configuration belongs to exactly one
package. Files with ``package = false`` belong to the repository root.
Files with ``package = true`` belong to a package named after their parent
directory, e.g. ``packages/api/package.json`` belongs to package ``api``
rooted at ``packages/api`` and tagged ``api@v<version>``.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from donder_release.exceptions import ConfigValidationError

if TYPE_CHECKING:
    from donder_release.config.models import BumpFile

ROOT_DISPLAY_NAME = "root"


@dataclass
class Package:
    """A unit of independent release.

    Attributes:
        name: Package name, empty for the repository root
        path: Directory of the package, empty for the repository root
        tag_prefix: Prefix of the package's release tags
        bump_files: Version files updated when the package is released
    """

    name: str
    path: str
    tag_prefix: str
    bump_files: list[BumpFile] = field(default_factory=list)

    @classmethod
    def create(cls, name: str, path: str, tag_prefix: str) -> Package:
        """Build a package, deriving its tag prefix from the global one."""
        prefix = f"{name}@{tag_prefix}" if name else tag_prefix
        return cls(name=name, path=path, tag_prefix=prefix)

    @property
    def is_root(self) -> bool:
        return not self.name

    @property
    def display_name(self) -> str:
        return self.name or ROOT_DISPLAY_NAME


def package_location(path: str) -> tuple[str, str]:
    """Return ``(name, directory)`` of the package owning a version file.

    Raises:
        ConfigValidationError: If the path has no parent directory
    """
    segments = path.split("/")
    if len(segments) < 2:
        raise ConfigValidationError(f"invalid bump file path for a package: {path!r}")
    return segments[-2], "/".join(segments[:-1])


def partition_packages(
    bump_files: Iterable[BumpFile],
    tag_prefix: str,
    selected: Sequence[str] = (),
) -> list[Package]:
    """Group version files into packages.

    Args:
        bump_files: Version file declarations, in configuration order
        tag_prefix: Global tag prefix
        selected: Names of the packages to keep, all when empty.
            The repository root can be selected as ``root``.

    Returns:
        Packages with at least one version file, root first when present

    Raises:
        ConfigValidationError: If a package path is malformed or the
            selection leaves nothing to release
    """
    root = Package.create("", "", tag_prefix)
    packages: dict[str, Package] = {}

    for bump_file in bump_files:
        if not bump_file.package:
            root.bump_files.append(bump_file)
            continue

        name, directory = package_location(bump_file.path)
        if name not in packages:
            packages[name] = Package.create(name, directory, tag_prefix)
        packages[name].bump_files.append(bump_file)

    collected = ([root] if root.bump_files else []) + list(packages.values())

    if selected:
        wanted = set(selected)
        collected = [
            p for p in collected if p.name in wanted or (p.is_root and ROOT_DISPLAY_NAME in wanted)
        ]

    if not collected:
        raise ConfigValidationError(
            "no packages to release, make sure the selected packages are defined "
            "in your config file"
        )

    return collected
