"""CLI command implementations."""

from __future__ import annotations

from donder_release.cli.commands.clean import run_clean
from donder_release.cli.commands.init import run_init
from donder_release.cli.commands.release import run_release_command

__all__ = ["run_clean", "run_init", "run_release_command"]
