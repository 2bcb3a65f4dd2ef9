"""Configuration management for donder-release."""

from __future__ import annotations

from donder_release.config.loader import find_config_file, load_config
from donder_release.config.models import (
    BumpFile,
    DonderReleaseConfig,
    ReleaseTypeRule,
    RunOptions,
    TypeConfig,
)
from donder_release.config.template import init_config, render_template

__all__ = [
    "BumpFile",
    "DonderReleaseConfig",
    "ReleaseTypeRule",
    "RunOptions",
    "TypeConfig",
    "find_config_file",
    "init_config",
    "load_config",
    "render_template",
]
