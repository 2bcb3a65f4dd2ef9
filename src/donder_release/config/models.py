"""Configuration models for donder-release.

The configuration file holds the release settings shared by every
package of the repository. Per-run choices (pre-release id, preview mode,
package selection) are kept apart in RunOptions.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from donder_release.core.version import BumpType

# Reserved commit types and their fixed bump levels. Users may only rename
# their changelog sections.
RESERVED_TYPES: dict[str, BumpType] = {
    "feat": BumpType.MINOR,
    "fix": BumpType.PATCH,
    "revert": BumpType.PATCH,
}

DEFAULT_SECTIONS: dict[str, str] = {
    "feat": "Features",
    "fix": "Bug Fixes",
    "revert": "Reverts",
}

BumpTarget = Literal["cargo", "npm", "pub", "android", "ios"]

DEFAULT_CONFIG_FILE = "donder-release.toml"


class ReleaseTypeRule(BaseModel):
    """Effective mapping of a commit type to a bump level and changelog section."""

    model_config = ConfigDict(frozen=True)

    commit_type: str
    bump: BumpType
    section: str


class TypeConfig(BaseModel):
    """A commit type entry as written in the configuration file.

    Reserved types (feat, fix, revert) must leave ``bump`` empty; any other
    type must declare a ``minor`` or ``patch`` bump.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    commit_type: str = Field(min_length=1, pattern=r"^\w+$")
    bump: Literal["", "minor", "patch"] = ""
    section: str

    @field_validator("section")
    @classmethod
    def _section_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("type section cannot be empty")
        return value

    @model_validator(mode="after")
    def _check_bump(self) -> TypeConfig:
        if self.commit_type in RESERVED_TYPES:
            if self.bump:
                raise ValueError(
                    "feat, fix and revert are reserved types and cannot have a bump"
                )
        elif self.bump not in ("minor", "patch"):
            raise ValueError(f"type {self.commit_type!r}: only minor and patch bumps are allowed")
        return self


class BumpFile(BaseModel):
    """A version file to update on release.

    Attributes:
        target: Ecosystem of the file (cargo, npm, pub, android, ios)
        path: File path relative to the repository root
        build_metadata: Append an incrementing ``+N`` build number
        package: Release the file's parent directory as its own package
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    target: BumpTarget
    path: str = Field(min_length=1)
    build_metadata: bool = False
    package: bool = False


class DonderReleaseConfig(BaseModel):
    """Root configuration model."""

    model_config = ConfigDict(extra="forbid")

    release_message: str = "chore(release): %s"
    tag_prefix: str = "v"
    types: list[TypeConfig] = Field(default_factory=list)
    bump_files: list[BumpFile] = Field(default_factory=list, validate_default=True)
    include_authors: bool = True
    changelog_file: str = ""
    bang_breaking: bool = False

    @field_validator("types")
    @classmethod
    def _unique_types(cls, value: list[TypeConfig]) -> list[TypeConfig]:
        seen: set[str] = set()
        for entry in value:
            if entry.commit_type in seen:
                raise ValueError(f"duplicate commit type {entry.commit_type!r}")
            seen.add(entry.commit_type)
        return value

    @field_validator("bump_files")
    @classmethod
    def _require_bump_files(cls, value: list[BumpFile]) -> list[BumpFile]:
        if not value:
            raise ValueError("at least one bump file must be defined")
        return value

    @property
    def release_types(self) -> list[ReleaseTypeRule]:
        """Reserved types first, then the configured additions in file order."""
        sections = dict(DEFAULT_SECTIONS)
        extra: list[ReleaseTypeRule] = []

        for entry in self.types:
            if entry.commit_type in RESERVED_TYPES:
                sections[entry.commit_type] = entry.section
            else:
                extra.append(
                    ReleaseTypeRule(
                        commit_type=entry.commit_type,
                        bump=BumpType(entry.bump),
                        section=entry.section,
                    )
                )

        reserved = [
            ReleaseTypeRule(commit_type=name, bump=bump, section=sections[name])
            for name, bump in RESERVED_TYPES.items()
        ]
        return reserved + extra


class RunOptions(BaseModel):
    """Choices made for a single invocation."""

    model_config = ConfigDict(frozen=True)

    pre_id: str = Field(default="", pattern=r"^[0-9A-Za-z-]*$")
    preview: bool = False
    packages: tuple[str, ...] = ()
