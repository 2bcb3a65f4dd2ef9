"""Git operations.

Thin wrapper around the ``git`` command line used to read tags and
history, and to create the release commit and tag. Credentials are only
injected into the remote URL used for pushing, never into the URLs shown
in release notes.
"""

from __future__ import annotations

import re
import subprocess
from dataclasses import dataclass
from pathlib import Path

from donder_release.core.tags import TagInfo, parse_tags
from donder_release.exceptions import GitError
from donder_release.logging import get_logger

log = get_logger(__name__)

DEFAULT_AUTHOR_NAME = "donder-release"
DEFAULT_AUTHOR_EMAIL = "donder-release@users.noreply.github.com"

# Field and record separators for ``git log`` output.
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = f"--pretty=format:%h{_FIELD_SEP}%s{_FIELD_SEP}%b{_RECORD_SEP}"

_REMOTE_PATTERN = re.compile(
    r"^(?:ssh://)?(?:git@|https?://(?:[^@/]+@)?)"
    r"(?P<host>[\w.\-]+)(?::\d+)?[:/]"
    r"(?P<owner>[\w.\-]+)/(?P<repo>[\w.\-]+?)(?:\.git)?/?$"
)


@dataclass(frozen=True)
class Commit:
    """A commit from history.

    Attributes:
        sha: Abbreviated commit hash
        subject: First line of the message
        body: Rest of the message, may be empty
    """

    sha: str
    subject: str
    body: str = ""

    @property
    def message(self) -> str:
        if self.body:
            return f"{self.subject}\n\n{self.body}"
        return self.subject


@dataclass(frozen=True)
class RemoteInfo:
    """Host, owner and repository name parsed from a remote URL."""

    host: str
    owner: str
    repo: str

    @property
    def web_url(self) -> str:
        return f"https://{self.host}/{self.owner}/{self.repo}"

    def authenticated_url(self, token: str) -> str:
        return f"https://x-access-token:{token}@{self.host}/{self.owner}/{self.repo}.git"


def parse_remote_url(url: str) -> RemoteInfo:
    """Parse an SSH or HTTPS remote URL.

    Raises:
        GitError: If the URL is not recognized
    """
    match = _REMOTE_PATTERN.match(url.strip())
    if not match:
        raise GitError(f"Unrecognized remote URL: {url!r}")
    return RemoteInfo(match.group("host"), match.group("owner"), match.group("repo"))


def parse_log_output(output: str) -> list[Commit]:
    """Parse ``git log`` output produced with the module's log format."""
    commits = []
    for record in output.split(_RECORD_SEP):
        record = record.strip("\n")
        if not record:
            continue
        fields = record.split(_FIELD_SEP)
        sha = fields[0].strip()
        subject = fields[1].strip() if len(fields) > 1 else ""
        body = fields[2].strip() if len(fields) > 2 else ""
        if sha:
            commits.append(Commit(sha=sha, subject=subject, body=body))
    return commits


class GitRepository:
    """A local git repository.

    Args:
        path: Repository working directory, defaults to the current directory
        token: Access token used to push, optional
        author_name: Author of release commits
        author_email: Author email of release commits
    """

    def __init__(
        self,
        path: Path | None = None,
        *,
        token: str = "",
        author_name: str = DEFAULT_AUTHOR_NAME,
        author_email: str = DEFAULT_AUTHOR_EMAIL,
    ) -> None:
        self.path = (path or Path.cwd()).resolve()
        self.token = token
        self.author_name = author_name
        self.author_email = author_email
        self._remote: RemoteInfo | None = None

    def _run(self, *args: str) -> str:
        try:
            result = subprocess.run(
                ["git", *args],
                cwd=self.path,
                capture_output=True,
                text=True,
                check=True,
            )
        except FileNotFoundError as e:
            raise GitError("git executable not found") from e
        except subprocess.CalledProcessError as e:
            raise GitError(f"git {args[0]} failed", stderr=e.stderr or "") from e
        return result.stdout

    # -- Remote --------------------------------------------------------------

    @property
    def remote(self) -> RemoteInfo:
        if self._remote is None:
            self._remote = parse_remote_url(self._run("config", "--get", "remote.origin.url"))
        return self._remote

    def origin_url(self) -> str:
        """Web URL of the origin remote, without credentials."""
        return self.remote.web_url

    def _push_target(self) -> str:
        return self.remote.authenticated_url(self.token) if self.token else "origin"

    # -- Working tree --------------------------------------------------------

    def is_dirty(self) -> bool:
        return bool(self._run("status", "--porcelain").strip())

    def sync(self) -> None:
        """Pull the current branch and refresh tags from the remote.

        Raises:
            GitError: If the working tree has uncommitted changes or a command fails
        """
        if self.is_dirty():
            raise GitError(
                "There are uncommitted changes. "
                "Please commit or stash them before running donder-release."
            )
        target = self._push_target()
        self._run("pull", target)
        self._run("fetch", "--prune", "--prune-tags", "--tags", target)

    # -- Tags and history ----------------------------------------------------

    def list_tags(self, prefix: str) -> list[TagInfo]:
        """Release tags with the given prefix, newest version first."""
        return parse_tags(self._run("tag", "--list").split(), prefix)

    def tag_head(self, tag: str) -> str:
        return self._run("rev-list", "-1", tag).strip()

    def get_commits(self, since: str = "", path: str = "") -> list[Commit]:
        """Commits reachable from HEAD, newest first.

        Args:
            since: Exclude this commit and its ancestors, all history when empty
            path: Only commits touching this path, whole repository when empty
        """
        args = ["log", _LOG_FORMAT]
        if since:
            args.append(f"{since}..HEAD")
        if path:
            args.extend(["--", path])
        return parse_log_output(self._run(*args))

    # -- Release -------------------------------------------------------------

    def commit(self, message: str) -> None:
        self._run("add", "--all")
        self._run(
            "-c",
            f"user.name={self.author_name}",
            "-c",
            f"user.email={self.author_email}",
            "commit",
            f"--author={self.author_name} <{self.author_email}>",
            "-m",
            message,
        )
        log.info("created release commit", message=message)

    def push(self) -> None:
        """Push HEAD, undoing the release commit when the push fails."""
        try:
            self._run("push", self._push_target(), "HEAD")
        except GitError:
            self.undo_commit()
            raise

    def tag(self, name: str) -> None:
        self._run(
            "-c",
            f"user.name={self.author_name}",
            "-c",
            f"user.email={self.author_email}",
            "tag",
            "-a",
            name,
            "-m",
            name,
        )
        log.info("created tag", tag=name)

    def push_tag(self, name: str) -> None:
        """Push a tag, deleting it locally when the push fails."""
        try:
            self._run("push", self._push_target(), name)
        except GitError:
            self.delete_local_tag(name)
            raise

    def delete_local_tag(self, name: str) -> None:
        self._run("tag", "-d", name)

    def delete_remote_tag(self, name: str) -> None:
        self._run("push", "--delete", self._push_target(), name)

    def undo_commit(self) -> None:
        self._run("reset", "--hard", "HEAD^")
