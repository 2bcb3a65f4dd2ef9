"""Version control integration."""

from __future__ import annotations

from donder_release.vcs.git import Commit, GitRepository, RemoteInfo, parse_remote_url

__all__ = [
    "Commit",
    "GitRepository",
    "RemoteInfo",
    "parse_remote_url",
]
