"""Tests for version parsing and ordering."""

import itertools

import pytest

from versioning.errors import ParseError, VersionParseError
from versioning.pep440 import PreRelease, PreReleaseKind, Version, compare_versions


class TestVersionParse:
    """Tests for Version.parse."""

    def test_parse_all_components(self):
        """Every optional component is captured."""
        version = Version.parse("2022!1.2.3rc3.post1.dev2")
        assert version == Version(
            release=(1, 2, 3),
            epoch=2022,
            pre_release=PreRelease(PreReleaseKind.RELEASE_CANDIDATE, 3),
            post_release=1,
            dev_release=2,
            local=None,
        )

    def test_round_trip_canonical(self):
        """Canonical strings serialize back unchanged."""
        for text in (
            "2022!1.2.3rc3.post1.dev2",
            "1.0",
            "0.0.1a0",
            "3.11b4",
            "1!2.0.post3",
            "4.0.dev9",
            "1.2+ubuntu-1.local",
        ):
            assert str(Version.parse(text)) == text

    def test_long_pre_release_names_are_normalized(self):
        """alpha and beta normalize to a and b."""
        alpha = Version.parse("1.0alpha2")
        beta = Version.parse("1.0beta1")
        assert alpha.pre_release == PreRelease(PreReleaseKind.ALPHA, 2)
        assert beta.pre_release == PreRelease(PreReleaseKind.BETA, 1)
        assert str(alpha) == "1.0a2"
        assert str(beta) == "1.0b1"

    def test_absent_markers_stay_unset(self):
        """Missing qualifiers are None rather than zero."""
        version = Version.parse("1.0")
        assert version.epoch is None
        assert version.pre_release is None
        assert version.post_release is None
        assert version.dev_release is None
        assert version.local is None
        assert version.is_prerelease is False

    def test_local_label_is_opaque(self):
        """Anything after + is kept verbatim."""
        version = Version.parse("1.0+cu118.abc-def")
        assert version.release == (1, 0)
        assert version.local == "cu118.abc-def"

    @pytest.mark.parametrize("text", [
        "",
        "v1.0",
        "1.0-1",
        "1..0",
        "1.0a",
        "1.0.post",
        "1.0 ",
        "1.0+",
        "1.0c1",
        "latest",
    ])
    def test_invalid_versions(self, text):
        """Strings outside the grammar raise a parse error naming the input."""
        with pytest.raises(VersionParseError) as excinfo:
            Version.parse(text)
        assert excinfo.value.text == text
        assert isinstance(excinfo.value, ParseError)
        assert isinstance(excinfo.value, ValueError)


class TestVersionOrdering:
    """Tests for compare_versions and the rich comparisons."""

    def test_release_segments_are_not_padded(self):
        """1.0 and 1.0.0 are distinct, the longer one sorting later."""
        short = Version.parse("1.0")
        long = Version.parse("1.0.0")
        assert short != long
        assert compare_versions(short, long) == -1
        assert short < long

    def test_numeric_segments(self):
        """Segments compare as integers, not strings."""
        assert Version.parse("1.10") > Version.parse("1.9")
        assert Version.parse("2") > Version.parse("1.99.99")

    def test_absent_epoch_sorts_before_explicit_epoch(self):
        """No epoch is not treated as epoch 0."""
        assert Version.parse("5.0") < Version.parse("0!1.0")
        assert Version.parse("1!1.0") > Version.parse("0!9.0")

    def test_final_release_outranks_any_pre_release(self):
        """The pre-release check runs before release segments."""
        assert Version.parse("1.0") > Version.parse("2.0a1")
        assert Version.parse("1.0.0") > Version.parse("1.0.0a0")

    def test_pre_release_rank(self):
        """a < b < rc, then by number."""
        ordered = ["1.0a1", "1.0a2", "1.0b1", "1.0rc1", "1.0rc2"]
        versions = [Version.parse(text) for text in ordered]
        for lower, higher in zip(versions, versions[1:]):
            assert lower < higher

    def test_pre_releases_compare_release_segments_first(self):
        """Between two pre-releases the release segments still lead."""
        assert Version.parse("2.0a1") > Version.parse("1.0rc9")

    def test_post_and_dev_releases(self):
        """Absent post/dev sorts before a present one."""
        assert Version.parse("1.0") < Version.parse("1.0.post1")
        assert Version.parse("1.0.post1") < Version.parse("1.0.post2")
        assert Version.parse("1.0") < Version.parse("1.0.dev0")
        assert Version.parse("1.0.post1") < Version.parse("1.0.post1.dev1")

    def test_local_ignored_by_ordering_but_not_equality(self):
        """Versions differing only in local are unequal yet ordered level."""
        left = Version.parse("1.0+abc")
        right = Version.parse("1.0+xyz")
        assert left != right
        assert compare_versions(left, right) == 0
        assert not left < right
        assert not left > right
        assert left <= right
        assert left >= right

    def test_equal_versions_hash_alike(self):
        """Structural equality is usable for sets and dict keys."""
        assert Version.parse("1.2.3") == Version.parse("1.2.3")
        assert len({Version.parse("1.2.3"), Version.parse("1.2.3")}) == 1

    def test_ordering_is_total(self):
        """Exactly one of <, level, > holds for every pair."""
        samples = [
            Version.parse(text) for text in (
                "1.0", "1.0.0", "1.0a1", "2.0a1", "1!0.1", "1.0.post1",
                "1.0.dev1", "1.0+local", "0.9", "1.0rc1.post2.dev3",
            )
        ]
        for left, right in itertools.product(samples, repeat=2):
            outcomes = [left < right, compare_versions(left, right) == 0, left > right]
            assert outcomes.count(True) == 1
            assert compare_versions(left, right) == -compare_versions(right, left)

    def test_sorting(self):
        """Versions sort with the builtin sorted()."""
        texts = ["1.0", "0.9", "1.0.post1", "1.0rc1", "1!0.1", "1.0a1"]
        result = [str(v) for v in sorted(Version.parse(text) for text in texts)]
        assert result == ["1.0a1", "1.0rc1", "0.9", "1.0", "1.0.post1", "1!0.1"]
