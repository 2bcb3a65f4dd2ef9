"""Hosting service integration."""

from __future__ import annotations

from donder_release.forge.github import GitHubClient, resolve_token

__all__ = [
    "GitHubClient",
    "resolve_token",
]
