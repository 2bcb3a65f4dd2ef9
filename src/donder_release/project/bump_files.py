"""Version file updates.

Writes a release version into the version declaration of each supported
ecosystem:

- ``cargo``: ``version = "..."`` in the ``[package]`` table of Cargo.toml
- ``npm``: the ``"version"`` key of package.json
- ``pub``: the ``version:`` line of pubspec.yaml
- ``ios``: ``MARKETING_VERSION`` and ``CURRENT_PROJECT_VERSION`` of an Xcode project
- ``android``: not supported, always fails

Text formats are updated with targeted regex replacements rather than a
parse and rewrite, so formatting and comments are preserved.

With ``build_metadata`` enabled, a numeric build number is appended as
``+N``, one more than the build number currently in the file.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import TYPE_CHECKING

from donder_release.core.version import Version
from donder_release.exceptions import ProjectError, UnsupportedTargetError, VersionNotFoundError
from donder_release.logging import get_logger

if TYPE_CHECKING:
    from donder_release.config.models import BumpFile

log = get_logger(__name__)

# Any semantic version inside arbitrary text.
VERSION_DATA_PATTERN = re.compile(
    r"(\d+\.\d+\.\d+)"
    r"(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
)

# App Store Connect only accepts numeric build versions, so pre-release ids
# are mapped to a leading number. Stable releases use 5.0.
IOS_PRERELEASE_IDS = {"alpha": 1, "beta": 2, "rc": 3}
IOS_OTHER_PRERELEASE = 4
IOS_STABLE_PROJECT_VERSION = "5.0"


def with_build_metadata(version: str, current: str, build_metadata: bool) -> str:
    """Return the version to write, appending ``+N`` when requested.

    Args:
        version: Release version, without build metadata
        current: Version currently declared in the file
        build_metadata: Whether to append a build number

    Raises:
        ProjectError: If the current build metadata is not a number
    """
    if not build_metadata:
        return version

    match = VERSION_DATA_PATTERN.search(current)
    build = match.group(3) if match else None
    if build is None:
        return f"{version}+1"
    if not build.isdigit():
        raise ProjectError(f"Build metadata {build!r} of version {current!r} is not a number")
    return f"{version}+{int(build) + 1}"


def _read(path: Path) -> str:
    if not path.is_file():
        raise ProjectError(f"Version file not found: {path}")
    return path.read_text(encoding="utf-8")


def bump_cargo(path: Path, version: str, build_metadata: bool = False) -> str:
    """Update ``[package].version`` (or ``[workspace.package].version``) in Cargo.toml.

    Returns:
        The version written
    """
    content = _read(path)
    key_pattern = r'^(version\s*=\s*)"([^"]+)"'

    for section in (r"^\[package\].*?(?=^\[|\Z)", r"^\[workspace\.package\].*?(?=^\[|\Z)"):
        section_match = re.search(section, content, re.MULTILINE | re.DOTALL)
        if not section_match:
            continue
        key_match = re.search(key_pattern, section_match.group(0), re.MULTILINE)
        if not key_match:
            continue

        final = with_build_metadata(version, key_match.group(2), build_metadata)
        start, end = section_match.span()
        new_section = re.sub(
            key_pattern,
            lambda m: f'{m.group(1)}"{final}"',
            section_match.group(0),
            count=1,
            flags=re.MULTILINE,
        )
        path.write_text(content[:start] + new_section + content[end:], encoding="utf-8")
        return final

    raise VersionNotFoundError(f"Could not find version in {path}. Expected [package].version.")


def bump_npm(path: Path, version: str, build_metadata: bool = False) -> str:
    """Update the ``version`` key of package.json.

    Returns:
        The version written
    """
    try:
        package_json = json.loads(_read(path))
    except json.JSONDecodeError as e:
        raise ProjectError(f"Invalid JSON in {path}: {e}") from e

    current = package_json.get("version")
    if not isinstance(current, str):
        raise VersionNotFoundError(f"Could not find version in {path}")

    final = with_build_metadata(version, current, build_metadata)
    package_json["version"] = final
    content = json.dumps(package_json, indent=2, ensure_ascii=False) + "\n"
    path.write_text(content, encoding="utf-8")
    return final


def bump_pub(path: Path, version: str, build_metadata: bool = False) -> str:
    """Update the top-level ``version:`` line of pubspec.yaml.

    Returns:
        The version written
    """
    content = _read(path)
    pattern = re.compile(r"""^(version:[ \t]*)(["']?)([^\s"'#]+)\2""", re.MULTILINE)

    match = pattern.search(content)
    if not match:
        raise VersionNotFoundError(f"Could not find version in {path}")

    final = with_build_metadata(version, match.group(3), build_metadata)
    new_content = pattern.sub(
        lambda m: f"{m.group(1)}{m.group(2)}{final}{m.group(2)}", content, count=1
    )
    path.write_text(new_content, encoding="utf-8")
    return final


def bump_android(path: Path, version: str, build_metadata: bool = False) -> str:
    raise UnsupportedTargetError("android bumping is not yet supported")


def ios_project_version(version: Version) -> str:
    """Map a version to an Xcode ``CURRENT_PROJECT_VERSION``.

    ``1.2.0-beta.3`` gives ``2.3``, ``1.2.0`` gives ``5.0``.
    """
    if not version.is_prerelease:
        return IOS_STABLE_PROJECT_VERSION

    pre_id, _, rest = version.prerelease.partition(".")
    number = IOS_PRERELEASE_IDS.get(pre_id, IOS_OTHER_PRERELEASE)
    return f"{number}.{rest.split('.')[0] or 0}"


def ios_project_file(path: Path) -> Path:
    """Locate ``project.pbxproj`` from an app directory or an explicit file path."""
    if path.name == "project.pbxproj":
        return path
    if path.suffix == ".xcodeproj":
        return path / "project.pbxproj"
    return path.parent / f"{path.name}.xcodeproj" / "project.pbxproj"


def bump_ios(path: Path, version: str, build_metadata: bool = False) -> str:
    """Update ``MARKETING_VERSION`` and ``CURRENT_PROJECT_VERSION`` of an Xcode project.

    Returns:
        The marketing version written
    """
    parsed = Version.parse(version)
    project_file = ios_project_file(path)
    content = _read(project_file)

    for key in ("MARKETING_VERSION", "CURRENT_PROJECT_VERSION"):
        if not re.search(rf"{key} = .*;", content):
            raise VersionNotFoundError(f"Could not find {key} in {project_file}")

    content = re.sub(r"MARKETING_VERSION = .*;", f"MARKETING_VERSION = {parsed.core};", content)
    content = re.sub(
        r"CURRENT_PROJECT_VERSION = .*;",
        f"CURRENT_PROJECT_VERSION = {ios_project_version(parsed)};",
        content,
    )
    project_file.write_text(content, encoding="utf-8")
    return parsed.core


BUMPERS = {
    "cargo": bump_cargo,
    "npm": bump_npm,
    "pub": bump_pub,
    "android": bump_android,
    "ios": bump_ios,
}


def apply_version(bump_file: BumpFile, version: str, root: Path | None = None) -> str:
    """Write ``version`` into a declared version file.

    Args:
        bump_file: Version file declaration
        version: Release version without tag prefix or build metadata
        root: Repository root the declaration's path is relative to

    Returns:
        The version written to the file

    Raises:
        ProjectError: If the file cannot be updated
    """
    bumper = BUMPERS.get(bump_file.target)
    if bumper is None:
        raise UnsupportedTargetError(f"invalid file bump target: {bump_file.target}")

    path = (root or Path.cwd()) / bump_file.path
    written = bumper(path, version, bump_file.build_metadata)
    log.info("bumped version file", path=bump_file.path, version=written)
    return written
