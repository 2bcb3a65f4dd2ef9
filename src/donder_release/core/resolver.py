"""Last-release selection and next-version computation.

Resolution runs in two phases:

1. Select the last release among a package's tags. Stable tags always
   qualify; pre-release tags only qualify when they are on the requested
   pre-release track. A package without any qualifying tag gets a
   synthesized seed (``1.0.0`` or ``1.0.0-<pre_id>.0``).
2. Compute the next version from the last release, the bump level of the
   new commits and the requested pre-release track.

While the last release is itself a pre-release, the numeric triple is
frozen and only the pre-release counter moves:

    last            bump    pre_id   next
    1.2.0           minor   ""       1.3.0
    1.2.0           minor   beta     1.3.0-beta.0
    1.3.0-beta.0    patch   beta     1.3.0-beta.1
    1.3.0-beta.4    major   ""       1.3.0
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from donder_release.core.tags import TagInfo
from donder_release.core.version import BumpType, Version
from donder_release.exceptions import InvalidVersionError, ReleaseError
from donder_release.logging import get_logger

if TYPE_CHECKING:
    from donder_release.core.tags import TagSource

log = get_logger(__name__)

INITIAL_VERSION = Version(1, 0, 0)


def seed_release(tag_prefix: str, pre_id: str = "") -> TagInfo:
    """Synthesize the release info of a package that was never released."""
    version = INITIAL_VERSION.with_prerelease(f"{pre_id}.0") if pre_id else INITIAL_VERSION
    return TagInfo(version=version, prefix=tag_prefix, is_initial=True)


def select_last_release(
    tags: Sequence[TagInfo],
    tag_prefix: str,
    pre_id: str = "",
) -> TagInfo:
    """Pick the release the next version is computed from.

    Args:
        tags: Tags of one package, sorted by version descending
        tag_prefix: The package's tag prefix, used for the seed
        pre_id: Requested pre-release track, empty for a stable release

    Returns:
        The first qualifying tag, or a seed marked ``is_initial``
    """
    for tag in tags:
        if pre_id and pre_id in tag.version.prerelease:
            return tag
        if not tag.version.is_prerelease:
            return tag

    return seed_release(tag_prefix, pre_id)


def resolve_last_release(source: TagSource, tag_prefix: str, pre_id: str = "") -> TagInfo:
    """Select the last release from a tag source and resolve its head commit."""
    last = select_last_release(source.list_tags(tag_prefix), tag_prefix, pre_id)

    if last.is_initial:
        log.info("no previous release found, assuming first release", prefix=tag_prefix)
        return last

    log.info("last release", tag=last.tag)
    return last.with_head(source.tag_head(last.tag))


def _next_prerelease(current: str, pre_id: str) -> str:
    if not current:
        return f"{pre_id}.0"

    existing_id, _, rest = current.partition(".")
    if existing_id != pre_id:
        return f"{pre_id}.0"

    counter = rest.split(".")[0]
    if not counter:
        return f"{pre_id}.0"
    if not counter.isdigit():
        raise InvalidVersionError(
            f"Cannot continue pre-release {current!r}: counter {counter!r} is not a number"
        )
    return f"{pre_id}.{int(counter) + 1}"


def next_version(last_release: TagInfo, bump: BumpType, pre_id: str = "") -> Version:
    """Compute the version of the next release.

    Args:
        last_release: Release selected by select_last_release
        bump: Bump level implied by the new commits
        pre_id: Requested pre-release track, empty for a stable release

    Returns:
        The next version, without build metadata

    Raises:
        ReleaseError: If the bump level is not a known increment
        InvalidVersionError: If an existing pre-release counter is malformed
    """
    if last_release.is_initial:
        return last_release.version.without_build()

    if bump not in (BumpType.MAJOR, BumpType.MINOR, BumpType.PATCH):
        raise ReleaseError(f"invalid release type: {bump!r}")

    current = last_release.version
    if current.is_prerelease:
        version = Version(current.major, current.minor, current.patch, current.prerelease)
    else:
        version = current.bump(bump)

    if pre_id:
        version = version.with_prerelease(_next_prerelease(version.prerelease, pre_id))
    else:
        version = version.with_prerelease("")

    return version
