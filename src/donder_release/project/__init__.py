"""Version file manipulation."""

from __future__ import annotations

from donder_release.project.bump_files import apply_version

__all__ = ["apply_version"]
