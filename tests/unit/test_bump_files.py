"""Tests for version file updates."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from donder_release.config.models import BumpFile
from donder_release.core.version import Version
from donder_release.exceptions import ProjectError, UnsupportedTargetError, VersionNotFoundError
from donder_release.project import apply_version
from donder_release.project.bump_files import (
    bump_cargo,
    bump_ios,
    bump_npm,
    bump_pub,
    ios_project_file,
    ios_project_version,
    with_build_metadata,
)

if TYPE_CHECKING:
    from pathlib import Path

CARGO_TOML = """\
[package]
name = "demo"
version = "0.1.0" # keep
edition = "2021"

[dependencies]
serde = { version = "1.0" }
"""

PBXPROJ = """\
\t\t\t\tCURRENT_PROJECT_VERSION = 1.0;
\t\t\t\tMARKETING_VERSION = 0.9.0;
\t\t\t\tCURRENT_PROJECT_VERSION = 1.0;
\t\t\t\tMARKETING_VERSION = 0.9.0;
"""


class TestWithBuildMetadata:
    """Tests for with_build_metadata()."""

    def test_disabled(self):
        """Without build metadata the version is unchanged."""
        assert with_build_metadata("1.2.0", "1.1.0+4", False) == "1.2.0"

    def test_first_build(self):
        """A version without build number starts at +1."""
        assert with_build_metadata("1.2.0", "1.1.0", True) == "1.2.0+1"

    def test_increment(self):
        """The current build number is incremented."""
        assert with_build_metadata("1.2.0-beta.0", "1.1.0+41", True) == "1.2.0-beta.0+42"

    def test_non_numeric_build(self):
        """A non-numeric build number cannot be incremented."""
        with pytest.raises(ProjectError, match="not a number"):
            with_build_metadata("1.2.0", "1.1.0+sha.abc", True)


class TestBumpCargo:
    """Tests for bump_cargo()."""

    def test_package_version(self, tmp_path: Path):
        """Only the package version changes, comments are kept."""
        path = tmp_path / "Cargo.toml"
        path.write_text(CARGO_TOML)

        assert bump_cargo(path, "1.0.0") == "1.0.0"

        content = path.read_text()
        assert 'version = "1.0.0" # keep' in content
        assert 'serde = { version = "1.0" }' in content
        assert content.count('version = "1.0.0"') == 1

    def test_workspace_package(self, tmp_path: Path):
        """The workspace package version is used as a fallback."""
        path = tmp_path / "Cargo.toml"
        path.write_text('[workspace]\nmembers = ["a"]\n\n[workspace.package]\nversion = "2.0.0"\n')

        bump_cargo(path, "2.1.0")

        assert 'version = "2.1.0"' in path.read_text()

    def test_missing_version(self, tmp_path: Path):
        """A manifest without version is an error."""
        path = tmp_path / "Cargo.toml"
        path.write_text('[package]\nname = "demo"\n')

        with pytest.raises(VersionNotFoundError):
            bump_cargo(path, "1.0.0")


class TestBumpNpm:
    """Tests for bump_npm()."""

    def test_version_key(self, tmp_path: Path):
        """The version key is replaced and other keys are kept."""
        path = tmp_path / "package.json"
        path.write_text(json.dumps({"name": "demo", "version": "0.1.0", "private": True}))

        bump_npm(path, "1.0.0")

        data = json.loads(path.read_text())
        assert data == {"name": "demo", "version": "1.0.0", "private": True}
        assert path.read_text().endswith("}\n")

    def test_build_metadata(self, tmp_path: Path):
        """Build numbers are appended when requested."""
        path = tmp_path / "package.json"
        path.write_text('{"version": "0.1.0+9"}')

        assert bump_npm(path, "0.2.0", build_metadata=True) == "0.2.0+10"

    def test_invalid_json(self, tmp_path: Path):
        """Malformed JSON is reported."""
        path = tmp_path / "package.json"
        path.write_text("{")

        with pytest.raises(ProjectError, match="Invalid JSON"):
            bump_npm(path, "1.0.0")

    def test_missing_file(self, tmp_path: Path):
        """A missing file is reported."""
        with pytest.raises(ProjectError, match="not found"):
            bump_npm(tmp_path / "package.json", "1.0.0")


class TestBumpPub:
    """Tests for bump_pub()."""

    def test_version_line(self, tmp_path: Path):
        """The version line is replaced in place."""
        path = tmp_path / "pubspec.yaml"
        path.write_text("name: app\nversion: 1.0.0+3 # build\nenvironment:\n  sdk: '>=3.0.0'\n")

        assert bump_pub(path, "1.1.0", build_metadata=True) == "1.1.0+4"
        assert path.read_text() == (
            "name: app\nversion: 1.1.0+4 # build\nenvironment:\n  sdk: '>=3.0.0'\n"
        )

    def test_missing_version(self, tmp_path: Path):
        """A pubspec without version is an error."""
        path = tmp_path / "pubspec.yaml"
        path.write_text("name: app\n")

        with pytest.raises(VersionNotFoundError):
            bump_pub(path, "1.0.0")


class TestBumpIos:
    """Tests for the ios target."""

    @pytest.mark.parametrize(
        ("version", "expected"),
        [
            ("1.2.0", "5.0"),
            ("1.2.0-alpha.0", "1.0"),
            ("1.2.0-beta.3", "2.3"),
            ("1.2.0-dev.7", "4.7"),
        ],
    )
    def test_project_version(self, version, expected):
        """Pre-release tracks map to numeric project versions."""
        assert ios_project_version(Version.parse(version)) == expected

    def test_project_file(self, tmp_path: Path):
        """An app directory resolves to its Xcode project file."""
        assert ios_project_file(tmp_path / "ios" / "Runner") == (
            tmp_path / "ios" / "Runner.xcodeproj" / "project.pbxproj"
        )

    def test_bump(self, tmp_path: Path):
        """Every build configuration is updated."""
        project = tmp_path / "Runner.xcodeproj"
        project.mkdir()
        (project / "project.pbxproj").write_text(PBXPROJ)

        assert bump_ios(project, "1.3.0-rc.2") == "1.3.0"

        content = (project / "project.pbxproj").read_text()
        assert content.count("MARKETING_VERSION = 1.3.0;") == 2
        assert content.count("CURRENT_PROJECT_VERSION = 3.2;") == 2


class TestApplyVersion:
    """Tests for apply_version()."""

    def test_relative_to_root(self, tmp_path: Path):
        """Paths are resolved against the repository root."""
        (tmp_path / "packages" / "a").mkdir(parents=True)
        path = tmp_path / "packages" / "a" / "package.json"
        path.write_text('{"version": "1.0.0"}')

        bump_file = BumpFile(target="npm", path="packages/a/package.json")
        written = apply_version(bump_file, "1.1.0", tmp_path)

        assert written == "1.1.0"
        assert json.loads(path.read_text())["version"] == "1.1.0"

    def test_android_unsupported(self, tmp_path: Path):
        """The android target always fails."""
        with pytest.raises(UnsupportedTargetError):
            apply_version(BumpFile(target="android", path="app/build.gradle"), "1.0.0", tmp_path)
