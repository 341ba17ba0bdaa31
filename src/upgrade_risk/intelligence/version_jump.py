"""Semantic version delta between two version strings."""

import logging
import re

from packaging.version import InvalidVersion, Version

from upgrade_risk.models import FALLBACK_VERSION_JUMP, VersionJump

logger = logging.getLogger(__name__)

# First run of up to three dot-separated integers, like semver.coerce
_COERCE_PATTERN = re.compile(r"(?<!\d)(\d{1,16})(?:\.(\d{1,16}))?(?:\.(\d{1,16}))?")


class VersionJumpAnalyzer:
    """Computes major/minor/patch deltas with a conservative fallback."""

    @staticmethod
    def coerce(version: str | None) -> Version | None:
        """Coerce a loose version string into a three-part version.

        Args:
            version: Version text such as "16", "v2.1", "^1.2.3" or "pkg@3.0.0"

        Returns:
            Parsed version, or None if no numeric version can be found
        """
        if not version:
            return None

        match = _COERCE_PATTERN.search(version)
        if not match:
            return None

        major, minor, patch = (int(part or 0) for part in match.groups())

        try:
            return Version(f"{major}.{minor}.{patch}")
        except InvalidVersion:
            return None

    def analyze(self, from_version: str | None, to_version: str | None) -> VersionJump:
        """Calculate the version jump between two versions.

        Args:
            from_version: Current version
            to_version: Target version

        Returns:
            Signed ``to - from`` delta per component, or a major-level fallback
            when either version cannot be coerced
        """
        old = self.coerce(from_version)
        new = self.coerce(to_version)

        if old is None or new is None:
            logger.debug(
                f"Could not coerce versions {from_version!r} -> {to_version!r}, "
                f"assuming a major change"
            )
            return FALLBACK_VERSION_JUMP

        return VersionJump(
            major=new.major - old.major,
            minor=new.minor - old.minor,
            patch=new.micro - old.micro,
        )


def analyze_version_jump(from_version: str | None, to_version: str | None) -> VersionJump:
    """Calculate the version jump between two versions."""
    return VersionJumpAnalyzer().analyze(from_version, to_version)
