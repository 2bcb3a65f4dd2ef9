"""GitHub REST API client.

Publishes releases and removes pre-releases through the GitHub REST API
v3 using ``httpx``. Requests are made without a timeout and are not
retried; a failed call surfaces as an error for the package being
released.

Authentication:

    The token is resolved in order of precedence:

    1. ``token`` constructor parameter.
    2. ``GH_TOKEN`` env var.
    3. ``GITHUB_TOKEN`` env var.
"""

from __future__ import annotations

import os
from typing import Any

import httpx

from donder_release.core.tags import strip_prefix
from donder_release.core.version import Version, is_valid_version
from donder_release.exceptions import ForgeError, PublishError
from donder_release.logging import get_logger

log = get_logger(__name__)

DEFAULT_API_URL = "https://api.github.com"

_API_VERSION = "2022-11-28"
_USER_AGENT = "donder-release"


def resolve_token(token: str = "") -> str:
    """Return the first available token, or ``""``."""
    return token or os.environ.get("GH_TOKEN", "") or os.environ.get("GITHUB_TOKEN", "")


class GitHubClient:
    """Releases of one GitHub repository.

    Args:
        owner: Repository owner
        repo: Repository name
        token: Access token, resolved from the environment when empty
        api_url: API base URL, for GitHub Enterprise
        transport: Custom httpx transport, used by tests

    Raises:
        ForgeError: If no token is available
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        *,
        token: str = "",
        api_url: str = DEFAULT_API_URL,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        token = resolve_token(token)
        if not token:
            raise ForgeError("GH_TOKEN env var not set")

        self.owner = owner
        self.repo = repo
        self._repo_url = f"{api_url.rstrip('/')}/repos/{owner}/{repo}"
        self._client = httpx.Client(
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {token}",
                "User-Agent": _USER_AGENT,
                "X-GitHub-Api-Version": _API_VERSION,
            },
            timeout=None,
            transport=transport,
        )

    def __repr__(self) -> str:
        return f"GitHubClient(owner={self.owner!r}, repo={self.repo!r})"

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise ForgeError(f"{method} {url} failed: {e}") from e

    def publish_release(self, tag: str, tag_prefix: str, notes: str) -> dict[str, Any]:
        """Create a GitHub release for an existing tag.

        The release is flagged as a pre-release when the tag's version has a
        pre-release component.

        Args:
            tag: Release tag, e.g. ``api@v1.2.0``
            tag_prefix: Prefix of ``tag``
            notes: Release notes

        Returns:
            The created release as returned by the API

        Raises:
            PublishError: If the API rejects the release
        """
        version = Version.parse(strip_prefix(tag, tag_prefix) or tag)
        payload = {
            "tag_name": tag,
            "name": tag,
            "body": notes,
            "prerelease": version.is_prerelease,
        }

        response = self._request("POST", f"{self._repo_url}/releases", json=payload)
        if not response.is_success:
            raise PublishError(
                f"failed to publish release {tag}: {response.status_code} {response.text}",
                status_code=response.status_code,
            )

        log.info("published release", tag=tag, prerelease=version.is_prerelease)
        return response.json()

    def list_releases(self, per_page: int = 100) -> list[dict[str, Any]]:
        """Return every release of the repository, following pagination."""
        releases: list[dict[str, Any]] = []
        url: str | None = f"{self._repo_url}/releases?per_page={per_page}"

        while url:
            response = self._request("GET", url)
            if not response.is_success:
                raise ForgeError(f"failed to list releases: {response.status_code}")
            releases.extend(response.json())
            url = response.links.get("next", {}).get("url")

        return releases

    def delete_release(self, release_id: int) -> None:
        response = self._request("DELETE", f"{self._repo_url}/releases/{release_id}")
        if not response.is_success and response.status_code != 404:
            raise ForgeError(f"failed to delete release {release_id}: {response.status_code}")

    def clean_pre_releases(self, tag_prefix: str) -> list[str]:
        """Delete the pre-releases whose tag carries ``tag_prefix``.

        Returns:
            Tags of the deleted releases
        """
        deleted = []
        for release in self.list_releases():
            tag = release.get("tag_name", "")
            remainder = strip_prefix(tag, tag_prefix)
            if not release.get("prerelease") or remainder is None:
                continue
            if not is_valid_version(remainder):
                continue
            self.delete_release(release["id"])
            deleted.append(tag)
            log.info("deleted pre-release", tag=tag)
        return deleted
