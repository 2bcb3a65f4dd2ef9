"""Exception hierarchy for donder-release.

All errors raised on purpose by the tool derive from DonderReleaseError,
so the CLI can report them uniformly and exit with a non-zero status.
"""

from __future__ import annotations


class DonderReleaseError(Exception):
    """Base class for all donder-release errors."""


# -- Configuration -----------------------------------------------------------


class ConfigError(DonderReleaseError):
    """Configuration could not be used."""


class ConfigNotFoundError(ConfigError):
    """No configuration file was found."""


class ConfigValidationError(ConfigError):
    """Configuration is present but invalid."""


# -- Versions ----------------------------------------------------------------


class VersionError(DonderReleaseError):
    """Version handling failed."""


class InvalidVersionError(VersionError):
    """A string is not a valid semantic version."""


class ReleaseError(DonderReleaseError):
    """The next release could not be computed."""


# -- Collaborators -----------------------------------------------------------


class GitError(DonderReleaseError):
    """A git command failed."""

    def __init__(self, message: str, stderr: str = "") -> None:
        self.stderr = stderr.strip()
        if self.stderr:
            message = f"{message}: {self.stderr}"
        super().__init__(message)


class ForgeError(DonderReleaseError):
    """The hosting API could not be used."""


class PublishError(ForgeError):
    """A release could not be published."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ProjectError(DonderReleaseError):
    """A version file could not be updated."""


class VersionNotFoundError(ProjectError):
    """No version declaration was found in a version file."""


class UnsupportedTargetError(ProjectError):
    """The version-file target is recognized but cannot be bumped."""


class ChangelogError(DonderReleaseError):
    """Release notes could not be written."""
