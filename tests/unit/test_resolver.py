"""Tests for last-release selection and next-version computation."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from donder_release.core.resolver import (
    next_version,
    resolve_last_release,
    seed_release,
    select_last_release,
)
from donder_release.core.tags import TagInfo, format_tag, parse_tags
from donder_release.core.version import BumpType, Version
from donder_release.exceptions import InvalidVersionError, ReleaseError


def tag(version: str, prefix: str = "v") -> TagInfo:
    return TagInfo(version=Version.parse(version), prefix=prefix, head="deadbee")


class TestParseTags:
    """Tests for parse_tags()."""

    def test_filters_and_sorts(self):
        """Foreign and invalid tags are skipped, the rest sorted newest first."""
        names = ["v1.0.0", "v1.2.0", "api@v3.0.0", "v1.1.0-beta.1", "vnext", "v1.1.0", "1.5.0"]
        tags = parse_tags(names, "v")

        assert [t.tag for t in tags] == ["v1.2.0", "v1.1.0", "v1.1.0-beta.1", "v1.0.0"]

    def test_package_prefix(self):
        """Package prefixes select only that package's tags."""
        tags = parse_tags(["v1.0.0", "api@v2.0.0", "web@v0.1.0"], "api@v")

        assert [t.tag for t in tags] == ["api@v2.0.0"]
        assert tags[0].version == Version(2, 0, 0)

    def test_format_tag(self):
        """A tag is the prefix followed by the version."""
        assert format_tag("api@v", Version.parse("1.0.0-rc.0")) == "api@v1.0.0-rc.0"


class TestSelectLastRelease:
    """Tests for select_last_release()."""

    def test_no_tags_seeds_stable(self):
        """An untagged package starts at 1.0.0."""
        last = select_last_release([], "v")

        assert last.is_initial
        assert str(last.version) == "1.0.0"
        assert last.tag == "v1.0.0"

    def test_no_tags_seeds_prerelease(self):
        """An untagged package on a pre-release track starts at 1.0.0-<id>.0."""
        last = select_last_release([], "v", "rc")

        assert last.is_initial
        assert str(last.version) == "1.0.0-rc.0"

    def test_stable_ignores_prereleases(self):
        """Without a pre-release id, pre-release tags are skipped."""
        tags = [tag("2.0.0-beta.1"), tag("1.4.0"), tag("1.3.0")]

        assert select_last_release(tags, "v").tag == "v1.4.0"

    def test_matching_track_selected(self):
        """A pre-release tag on the requested track is selected."""
        tags = [tag("2.0.0-beta.3"), tag("2.0.0-alpha.5"), tag("1.4.0")]

        assert select_last_release(tags, "v", "beta").tag == "v2.0.0-beta.3"

    def test_other_track_skipped(self):
        """Pre-release tags on a different track are skipped."""
        tags = [tag("2.0.0-beta.3"), tag("1.4.0")]

        assert select_last_release(tags, "v", "rc").tag == "v1.4.0"

    def test_only_other_track_seeds(self):
        """Only foreign pre-release tags still gives a seed."""
        last = select_last_release([tag("1.0.0-alpha.1")], "v", "rc")

        assert last.is_initial
        assert str(last.version) == "1.0.0-rc.0"

    def test_seed_release_prefix(self):
        """Seeds carry the package prefix."""
        assert seed_release("web@v", "beta").tag == "web@v1.0.0-beta.0"


class TestResolveLastRelease:
    """Tests for resolve_last_release()."""

    def test_resolves_head(self):
        """The head commit of a real tag is looked up."""
        source = MagicMock()
        source.list_tags.return_value = [TagInfo(Version(1, 2, 0), "v")]
        source.tag_head.return_value = "c0ffee1"

        last = resolve_last_release(source, "v")

        assert last.head == "c0ffee1"
        source.list_tags.assert_called_once_with("v")
        source.tag_head.assert_called_once_with("v1.2.0")

    def test_seed_skips_head_lookup(self):
        """A seed has no head to look up."""
        source = MagicMock()
        source.list_tags.return_value = []

        last = resolve_last_release(source, "v")

        assert last.is_initial
        source.tag_head.assert_not_called()


class TestNextVersion:
    """Tests for next_version()."""

    @pytest.mark.parametrize(
        ("last", "bump", "pre_id", "expected"),
        [
            ("1.2.0", BumpType.MAJOR, "", "2.0.0"),
            ("1.2.0", BumpType.MINOR, "", "1.3.0"),
            ("1.2.0", BumpType.PATCH, "", "1.2.1"),
            ("1.2.0", BumpType.MINOR, "beta", "1.3.0-beta.0"),
            ("2.0.0-beta.3", BumpType.PATCH, "beta", "2.0.0-beta.4"),
            ("2.0.0-alpha.2", BumpType.MINOR, "beta", "2.0.0-beta.0"),
            ("1.3.0-alpha.1", BumpType.PATCH, "alpha", "1.3.0-alpha.2"),
            ("1.3.0-beta.4", BumpType.MAJOR, "", "1.3.0"),
            ("1.3.0-beta", BumpType.PATCH, "beta", "1.3.0-beta.0"),
            ("1.2.0+9", BumpType.PATCH, "", "1.2.1"),
        ],
    )
    def test_transitions(self, last, bump, pre_id, expected):
        """Compute the next version from the last release."""
        assert str(next_version(tag(last), bump, pre_id)) == expected

    def test_prerelease_freezes_triple(self):
        """The bump is not applied while the last release is a pre-release."""
        result = next_version(tag("1.3.0-alpha.1"), BumpType.MAJOR, "alpha")

        assert (result.major, result.minor, result.patch) == (1, 3, 0)

    def test_initial_returns_seed(self):
        """A seed already is the next version."""
        assert str(next_version(seed_release("v", "rc"), BumpType.MAJOR, "rc")) == "1.0.0-rc.0"
        assert str(next_version(seed_release("v"), BumpType.PATCH)) == "1.0.0"

    def test_invalid_bump(self):
        """An unknown bump level is an error."""
        with pytest.raises(ReleaseError):
            next_version(tag("1.0.0"), BumpType.NONE)

    def test_non_numeric_counter(self):
        """A non-numeric pre-release counter cannot be continued."""
        with pytest.raises(InvalidVersionError):
            next_version(tag("1.0.0-beta.x"), BumpType.PATCH, "beta")

    @pytest.mark.parametrize(
        ("last", "bump", "pre_id"),
        [
            ("0.1.0", BumpType.PATCH, ""),
            ("1.0.0", BumpType.MINOR, "rc"),
            ("2.0.0-rc.9", BumpType.MAJOR, "rc"),
            ("2.0.0-rc.9", BumpType.PATCH, ""),
            ("2.0.0-alpha.3", BumpType.PATCH, "beta"),
        ],
    )
    def test_monotonic(self, last, bump, pre_id):
        """The next version is always newer than the last release."""
        previous = tag(last)
        assert next_version(previous, bump, pre_id) > previous.version
