"""Core data models for the Upgrade Risk Engine."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ChangeType(Enum):
    """Kind of change a diff made to a single file."""

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


class Severity(Enum):
    """Severity of a detected breaking change."""

    CRITICAL = "critical"
    BREAKING = "breaking"
    WARNING = "warning"

    @property
    def rank(self) -> int:
        """Sort rank, most severe first."""
        order = {
            Severity.CRITICAL: 0,
            Severity.BREAKING: 1,
            Severity.WARNING: 2,
        }
        return order[self]


class ChangeCategory(Enum):
    """What kind of contract a breaking change touches."""

    RUNTIME_REQUIREMENT = "runtime-requirement"
    API_CHANGE = "api-change"
    REMOVAL = "removal"
    DEPRECATION = "deprecation"
    DOCUMENTED_CHANGE = "documented-change"


class DiffDepth(Enum):
    """How much of the upstream change we were able to inspect."""

    FULL = "full"
    PARTIAL = "partial"
    NONE = "none"


class RiskLevel(Enum):
    """Risk levels for an upgrade."""

    SAFE = "safe"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"
    UNKNOWN = "unknown"

    @property
    def order(self) -> int:
        """Monotonic rank used to compare levels.

        UNKNOWN ranks above CRITICAL so that "no trustworthy verdict" never
        compares as safer than a scored level.
        """
        ranks = {
            RiskLevel.SAFE: 0,
            RiskLevel.LOW: 1,
            RiskLevel.MEDIUM: 2,
            RiskLevel.HIGH: 3,
            RiskLevel.CRITICAL: 4,
            RiskLevel.UNKNOWN: 5,
        }
        return ranks[self]


class EstimatedEffort(Enum):
    """Expected remediation effort."""

    NONE = "none"
    MINIMAL = "minimal"
    MODERATE = "moderate"
    SIGNIFICANT = "significant"
    UNKNOWN = "unknown"


class TestingScope(Enum):
    """How much testing an upgrade warrants."""

    __test__ = False  # not a pytest test class

    NONE = "none"
    UNIT = "unit"
    INTEGRATION = "integration"
    UNKNOWN = "unknown"


class MigrationComplexity(Enum):
    """Rough size of the migration work."""

    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


class ChangelogSource(Enum):
    """Where changelog text came from, grouped by reliability."""

    GITHUB_RELEASES = "github-releases"
    CHANGELOG_FILE = "changelog-file"
    NPM_REGISTRY = "npm-registry"
    PYPI = "pypi"
    GIT_COMMITS = "git-commits"
    UNKNOWN = "unknown"

    @property
    def tier(self) -> int:
        """Reliability tier (1 is the most reliable)."""
        if self in {ChangelogSource.GITHUB_RELEASES, ChangelogSource.CHANGELOG_FILE}:
            return 1
        if self in {ChangelogSource.NPM_REGISTRY, ChangelogSource.PYPI}:
            return 2
        return 3


@dataclass(frozen=True)
class DiffChange:
    """Structured record of one file block in a unified diff."""

    file: str
    change_type: ChangeType
    additions: int = 0
    deletions: int = 0
    content: str | None = None

    def added_lines(self) -> list[str]:
        """Lines added by this change, without the leading '+'."""
        return [line[1:] for line in self._lines() if _is_added(line)]

    def removed_lines(self) -> list[str]:
        """Lines removed by this change, without the leading '-'."""
        return [line[1:] for line in self._lines() if _is_removed(line)]

    def _lines(self) -> list[str]:
        if not self.content:
            return []
        return self.content.splitlines()


def _is_added(line: str) -> bool:
    return line.startswith("+") and not line.startswith("+++")


def _is_removed(line: str) -> bool:
    return line.startswith("-") and not line.startswith("---")


@dataclass(frozen=True)
class BreakingChange:
    """A detected, categorized signal that a contract changed."""

    text: str
    severity: Severity
    source: str
    category: ChangeCategory
    confidence: float

    def __post_init__(self) -> None:
        """Validate confidence bounds."""
        if not 0.0 < self.confidence <= 1.0:
            raise ValueError(
                f"Breaking change confidence must be in (0, 1], got {self.confidence}"
            )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-ready dict."""
        return {
            "text": self.text,
            "severity": self.severity.value,
            "source": self.source,
            "category": self.category.value,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class VersionJump:
    """Per-component delta between two semantic versions (to - from)."""

    major: int = 0
    minor: int = 0
    patch: int = 0

    @property
    def is_major(self) -> bool:
        """Check if the jump crosses a major version."""
        return self.major > 0

    @property
    def is_minor_only(self) -> bool:
        """Check if only the minor component moved forward."""
        return self.major == 0 and self.minor > 0

    @property
    def is_patch_only(self) -> bool:
        """Check if only the patch component moved forward."""
        return self.major == 0 and self.minor == 0 and self.patch > 0

    def __str__(self) -> str:
        """String representation."""
        return f"+{self.major}.{self.minor}.{self.patch}"


# Conservative "assume a major change" answer for unparsable versions
FALLBACK_VERSION_JUMP = VersionJump(major=1, minor=0, patch=0)


@dataclass(frozen=True)
class UsageStats:
    """How the consuming project uses the dependency."""

    direct_usage_count: int = 0
    critical_path_usage: bool = False
    test_coverage: float = 0.0  # 0-100


@dataclass(frozen=True)
class ConfidenceContext:
    """How deep the upstream change inspection went."""

    diff_analysis_depth: DiffDepth = DiffDepth.NONE


@dataclass(frozen=True)
class PackageFlags:
    """Package-specific facts that adjust the score."""

    breaking_change_patterns: tuple[str, ...] = ()
    is_type_definition: bool = False
    is_dev_dependency: bool = False
    is_lockfile_only: bool = False


@dataclass(frozen=True)
class RiskFactors:
    """Input bundle for risk assessment."""

    version_jump: VersionJump = field(default_factory=VersionJump)
    usage: UsageStats = field(default_factory=UsageStats)
    confidence: ConfidenceContext = field(default_factory=ConfidenceContext)
    package: PackageFlags = field(default_factory=PackageFlags)
    overall_confidence: float | None = None  # from ConfidenceEstimator


@dataclass(frozen=True)
class RiskAssessment:
    """Final verdict for one dependency upgrade."""

    level: RiskLevel
    score: float  # 0-100
    confidence: float  # 0-1
    factors: tuple[str, ...] = ()
    mitigation_steps: tuple[str, ...] = ()
    estimated_effort: EstimatedEffort = EstimatedEffort.UNKNOWN
    testing_scope: TestingScope = TestingScope.UNKNOWN

    @property
    def is_safe(self) -> bool:
        """Check if upgrade is considered safe to merge without review."""
        return self.level in {RiskLevel.SAFE, RiskLevel.LOW}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-ready dict."""
        return {
            "level": self.level.value,
            "score": self.score,
            "confidence": self.confidence,
            "factors": list(self.factors),
            "mitigationSteps": list(self.mitigation_steps),
            "estimatedEffort": self.estimated_effort.value,
            "testingScope": self.testing_scope.value,
        }


@dataclass(frozen=True)
class EvidenceSources:
    """Which optional information sources were actually obtained."""

    changelog_source: ChangelogSource | None = None
    has_code_diff: bool = False
    production_usage_count: int = 0
    test_usage_count: int = 0
    has_llm_summary: bool = False
