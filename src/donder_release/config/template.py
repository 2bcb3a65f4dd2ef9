"""Configuration scaffolding and message templates."""

from __future__ import annotations

from pathlib import Path

from donder_release.config.models import DEFAULT_CONFIG_FILE
from donder_release.exceptions import ConfigError

TEMPLATE_MARKER = "%s"

CONFIG_TEMPLATE = """\
# Configuration file for donder-release

# Release message of the release commit - %s will be replaced with the release version
release_message = "chore(release): %s"
# Prefix of the release tag
tag_prefix = "v"
# If defined, release notes are also written to this file (relative to each package)
# changelog_file = "CHANGELOG.md"
# Treat a "type!:" subject as a breaking change
# bang_breaking = false

# Commit types that trigger a release and their semver bump.
# feat, fix and revert are reserved types and can only have their section renamed.
# [[types]]
# commit_type = "feat"
# section = "Features"
#
# [[types]]
# commit_type = "perf"
# bump = "patch"
# section = "Performance Improvements"

# Version files bumped on release; at least one must be defined.
# Supported targets: cargo, npm, pub, android and ios.
# With package = true the file's parent folder is released on its own,
# with its own commits, tags and notes. This is useful for monorepos.
[[bump_files]]
target = "npm"
path = "package.json"

# [[bump_files]]
# target = "pub"
# path = "pubspec.yaml"
# build_metadata = true
#
# [[bump_files]]
# target = "npm"
# path = "packages/a-test/package.json"
# package = true
"""


def render_template(template: str, value: str) -> str:
    """Replace every ``%s`` marker in ``template`` with ``value``."""
    return template.replace(TEMPLATE_MARKER, value)


def init_config(directory: Path | None = None) -> Path:
    """Write a commented starter configuration file.

    Args:
        directory: Where to create the file, defaults to the working directory

    Returns:
        Path of the created file

    Raises:
        ConfigError: If the file already exists or cannot be written
    """
    path = (directory or Path.cwd()) / DEFAULT_CONFIG_FILE
    if path.exists():
        raise ConfigError(f"{path} already exists")

    try:
        path.write_text(CONFIG_TEMPLATE, encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"failed to write {path}: {e}") from e
    return path
