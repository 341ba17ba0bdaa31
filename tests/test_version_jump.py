"""Tests for version jump analysis."""

import pytest

from upgrade_risk.intelligence.version_jump import VersionJumpAnalyzer, analyze_version_jump
from upgrade_risk.models import FALLBACK_VERSION_JUMP, VersionJump


class TestVersionJump:
    """Test version deltas."""

    def test_major_bump(self):
        """1.0.0 -> 2.0.0 is one major version."""
        assert analyze_version_jump("1.0.0", "2.0.0") == VersionJump(1, 0, 0)

    def test_deltas_are_signed(self):
        """Each component is a plain difference, negatives included."""
        assert analyze_version_jump("1.2.3", "1.4.0") == VersionJump(0, 2, -3)
        assert analyze_version_jump("2.0.0", "1.5.0") == VersionJump(-1, 5, 0)

    @pytest.mark.parametrize(
        "from_version,to_version,expected",
        [
            ("16", "18", VersionJump(2, 0, 0)),
            ("v2.1", "v2.3", VersionJump(0, 2, 0)),
            ("^1.2.3", "~1.2.5", VersionJump(0, 0, 2)),
            ("pkg@3.0.0", "pkg@4.1.0", VersionJump(1, 1, 0)),
            ("1.2.3-beta.1", "1.2.4", VersionJump(0, 0, 1)),
        ],
    )
    def test_loose_versions_are_coerced(self, from_version, to_version, expected):
        """Prefixes, ranges and partial versions coerce like semver.coerce."""
        assert analyze_version_jump(from_version, to_version) == expected

    @pytest.mark.parametrize(
        "from_version,to_version",
        [
            ("latest", "2.0.0"),
            ("1.0.0", "next"),
            ("", "1.0.0"),
            (None, None),
        ],
    )
    def test_unparsable_versions_fall_back_to_major(self, from_version, to_version):
        """Unknown versions are treated as a major change, never an error."""
        assert analyze_version_jump(from_version, to_version) == FALLBACK_VERSION_JUMP
        assert FALLBACK_VERSION_JUMP == VersionJump(major=1, minor=0, patch=0)

    def test_jump_helpers(self):
        """is_major / is_minor_only / is_patch_only classify the delta."""
        assert VersionJump(1, 0, 0).is_major
        assert VersionJump(0, 3, 0).is_minor_only
        assert not VersionJump(1, 3, 0).is_minor_only
        assert VersionJump(0, 0, 1).is_patch_only
        assert not VersionJump(0, 1, 1).is_patch_only


class TestCoerce:
    """Test version coercion."""

    def test_coerce_fills_missing_components(self):
        """Missing minor/patch become zero."""
        version = VersionJumpAnalyzer.coerce("16")

        assert version is not None
        assert (version.major, version.minor, version.micro) == (16, 0, 0)

    def test_coerce_without_digits(self):
        """Text without a number cannot be coerced."""
        assert VersionJumpAnalyzer.coerce("latest") is None
        assert VersionJumpAnalyzer.coerce(None) is None
