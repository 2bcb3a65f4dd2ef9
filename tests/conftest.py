"""Shared fixtures."""

from __future__ import annotations

import logging
import os

import pytest
import structlog

from donder_release.config.models import BumpFile, DonderReleaseConfig, TypeConfig
from donder_release.vcs.git import Commit

# Wide, fixed console so Rich does not wrap CLI output around long tmp paths.
os.environ["COLUMNS"] = "200"


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop handlers installed by CLI runs, their streams die with the runner."""
    yield
    structlog.reset_defaults()
    for handler in list(logging.root.handlers):
        logging.root.removeHandler(handler)


@pytest.fixture
def config() -> DonderReleaseConfig:
    """Configuration with one extra release type and a root npm file."""
    return DonderReleaseConfig(
        types=[TypeConfig(commit_type="perf", bump="patch", section="Performance")],
        bump_files=[BumpFile(target="npm", path="package.json")],
    )


@pytest.fixture
def make_commit():
    """Factory for commits with a generated hash."""
    counter = iter(range(1, 10_000))

    def _make(subject: str, body: str = "", sha: str | None = None) -> Commit:
        return Commit(sha=sha or f"{next(counter):07x}", subject=subject, body=body)

    return _make
