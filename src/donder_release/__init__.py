"""donder-release: release automation driven by Conventional Commits."""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
