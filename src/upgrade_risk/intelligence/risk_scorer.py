"""Risk scoring algorithm."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from upgrade_risk.intelligence.confidence import (
    UNKNOWN_CONFIDENCE_THRESHOLD,
    confidence_from_depth,
)
from upgrade_risk.models import (
    DiffDepth,
    EstimatedEffort,
    MigrationComplexity,
    RiskAssessment,
    RiskFactors,
    RiskLevel,
    TestingScope,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreWeights:
    """Weights of the additive risk model."""

    major: float = 20.0
    minor: float = 5.0
    patch: float = 1.0
    per_usage: float = 2.0
    usage_cap: float = 20.0
    critical_path: float = 10.0
    per_pattern: float = 5.0
    pattern_cap: float = 20.0
    depth_none_penalty: float = 10.0
    depth_partial_penalty: float = 5.0
    coverage_mitigation: float = 20.0
    type_definition_patch_reduction: float = 10.0
    type_definition_minor_reduction: float = 5.0
    type_definition_factor: float = 0.3
    type_definition_major_floor: float = 10.0
    dev_dependency_reduction: float = 1.0
    lockfile_factor: float = 0.3
    lockfile_cap: float = 10.0


DEFAULT_WEIGHTS = ScoreWeights()

# Upper bound (inclusive) of each scored level
LEVEL_THRESHOLDS = (
    (5.0, RiskLevel.SAFE),
    (15.0, RiskLevel.LOW),
    (30.0, RiskLevel.MEDIUM),
    (50.0, RiskLevel.HIGH),
)

EFFORT_BY_LEVEL = {
    RiskLevel.SAFE: EstimatedEffort.NONE,
    RiskLevel.LOW: EstimatedEffort.MINIMAL,
    RiskLevel.MEDIUM: EstimatedEffort.MINIMAL,
    RiskLevel.HIGH: EstimatedEffort.MODERATE,
    RiskLevel.CRITICAL: EstimatedEffort.SIGNIFICANT,
    RiskLevel.UNKNOWN: EstimatedEffort.UNKNOWN,
}

TESTING_SCOPE_BY_LEVEL = {
    RiskLevel.SAFE: TestingScope.NONE,
    RiskLevel.LOW: TestingScope.UNIT,
    RiskLevel.MEDIUM: TestingScope.UNIT,
    RiskLevel.HIGH: TestingScope.INTEGRATION,
    RiskLevel.CRITICAL: TestingScope.INTEGRATION,
    RiskLevel.UNKNOWN: TestingScope.UNKNOWN,
}

# Steps mention at most this many specific breaking changes
MAX_PATTERN_STEPS = 3
PATTERN_PREVIEW_LENGTH = 50


def calculate_base_risk_score(
    factors: RiskFactors,
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> float:
    """Calculate the 0-100 risk score for an upgrade.

    Adjustments are applied in order to the running score, so the
    type-definition, dev-dependency and lockfile rules see the result of
    everything before them.

    Args:
        factors: Upgrade risk inputs
        weights: Model weights

    Returns:
        Score clamped to [0, 100]
    """
    jump = factors.version_jump
    usage = factors.usage
    package = factors.package

    score = 0.0

    # Version jump
    score += jump.major * weights.major
    score += jump.minor * weights.minor
    score += jump.patch * weights.patch

    # Usage exposure
    usage_count = max(usage.direct_usage_count, 0)
    score += min(usage_count * weights.per_usage, weights.usage_cap)
    if usage.critical_path_usage:
        score += weights.critical_path

    # Breaking change evidence
    score += min(len(package.breaking_change_patterns) * weights.per_pattern, weights.pattern_cap)

    # Missing information penalty
    depth = factors.confidence.diff_analysis_depth
    if depth is DiffDepth.NONE:
        score += weights.depth_none_penalty
    elif depth is DiffDepth.PARTIAL:
        score += weights.depth_partial_penalty

    # Test coverage mitigation
    coverage = min(max(usage.test_coverage, 0.0), 100.0)
    score -= (coverage / 100) * weights.coverage_mitigation

    if package.is_type_definition:
        if jump.is_patch_only:
            score = max(0.0, score - weights.type_definition_patch_reduction)
        elif jump.is_minor_only:
            score = max(0.0, score - weights.type_definition_minor_reduction)
        elif jump.is_major:
            score = max(score * weights.type_definition_factor, weights.type_definition_major_floor)
        else:
            score *= weights.type_definition_factor

    if package.is_dev_dependency:
        score -= weights.dev_dependency_reduction

    if package.is_lockfile_only:
        score = min(score * weights.lockfile_factor, weights.lockfile_cap)

    return max(0.0, min(100.0, score))


def classify_risk_level(score: float, is_type_definition: bool = False) -> RiskLevel:
    """Map a score to a risk level.

    Args:
        score: Risk score (0-100)
        is_type_definition: Whether the package only ships type definitions

    Returns:
        Scored risk level (never UNKNOWN)
    """
    if is_type_definition and score < 5:
        return RiskLevel.SAFE

    for upper_bound, level in LEVEL_THRESHOLDS:
        if score <= upper_bound:
            return level

    return RiskLevel.CRITICAL


def estimate_effort(level: RiskLevel) -> EstimatedEffort:
    """Expected remediation effort for a level."""
    return EFFORT_BY_LEVEL[level]


def determine_testing_scope(level: RiskLevel) -> TestingScope:
    """Testing scope warranted by a level."""
    return TESTING_SCOPE_BY_LEVEL[level]


def determine_migration_complexity(
    breaking_changes: Sequence[object],
    usage_count: int,
) -> MigrationComplexity:
    """Estimate migration size from breaking change count and usage.

    Args:
        breaking_changes: Detected breaking changes (any representation)
        usage_count: Number of direct usages in the project

    Returns:
        Migration complexity
    """
    count = len(breaking_changes)

    if count == 0:
        return MigrationComplexity.SIMPLE
    if count > 5 or usage_count > 20:
        return MigrationComplexity.COMPLEX
    if count > 2 or usage_count > 10:
        return MigrationComplexity.MODERATE
    return MigrationComplexity.SIMPLE


def estimate_test_coverage(production_usage: int, test_usage: int) -> float:
    """Approximate coverage from how often tests touch the package.

    Args:
        production_usage: Usages in production code
        test_usage: Usages in test code

    Returns:
        Coverage percentage (0-100); 100 when there is no production usage
    """
    if production_usage <= 0:
        return 100.0

    ratio = max(test_usage, 0) / production_usage
    return min(ratio * 100, 100.0)


def describe_risk_factors(factors: RiskFactors) -> list[str]:
    """Human-readable reasons behind a score.

    Args:
        factors: Upgrade risk inputs

    Returns:
        Ordered list of contributing reasons
    """
    descriptions: list[str] = []
    jump = factors.version_jump
    usage = factors.usage
    package = factors.package

    if jump.major > 0:
        descriptions.append(f"Major version upgrade ({jump.major} major versions)")
    elif jump.minor > 0:
        descriptions.append(f"Minor version upgrade ({jump.minor} minor versions)")

    pattern_count = len(package.breaking_change_patterns)
    if pattern_count > 0:
        descriptions.append(f"{pattern_count} breaking changes detected")

    if usage.direct_usage_count > 0:
        descriptions.append(f"Used in {usage.direct_usage_count} production locations")

    if usage.critical_path_usage:
        descriptions.append("Used in critical paths")

    if package.is_type_definition:
        descriptions.append("Type definitions package")

    if package.is_dev_dependency:
        descriptions.append("Development dependency")

    if package.is_lockfile_only:
        descriptions.append("Lockfile-only change")

    if factors.confidence.diff_analysis_depth is DiffDepth.NONE:
        descriptions.append("Limited information available")

    coverage = min(max(usage.test_coverage, 0.0), 100.0)
    if coverage > 70:
        descriptions.append(f"Good test coverage ({round(coverage)}%)")
    elif coverage < 30 and usage.direct_usage_count > 0:
        descriptions.append(f"Low test coverage ({round(coverage)}%)")

    return descriptions


def generate_mitigation_steps(factors: RiskFactors, level: RiskLevel) -> list[str]:
    """Suggest concrete steps that reduce the risk of an upgrade.

    Args:
        factors: Upgrade risk inputs
        level: Classified risk level

    Returns:
        Ordered list of steps
    """
    steps: list[str] = []

    if factors.confidence.diff_analysis_depth is DiffDepth.NONE:
        steps.append("Review package documentation for migration guide")
        steps.append("Check issue tracker for known problems")

    if factors.usage.test_coverage < 50 and factors.usage.direct_usage_count > 0:
        steps.append("Add tests for affected functionality before upgrading")

    if factors.version_jump.major > 0:
        steps.append("Review breaking changes in release notes")
        steps.append("Update code to accommodate API changes")

    for pattern in factors.package.breaking_change_patterns[:MAX_PATTERN_STEPS]:
        preview = pattern[:PATTERN_PREVIEW_LENGTH]
        lowered = pattern.lower()
        if "removed" in lowered or "deleted" in lowered:
            steps.append(f"Replace removed functionality: {preview}...")
        elif "renamed" in lowered:
            steps.append(f"Update renamed APIs: {preview}...")

    if level in {RiskLevel.HIGH, RiskLevel.CRITICAL}:
        steps.append("Prepare rollback plan in case of issues")

    if level is RiskLevel.UNKNOWN:
        steps.append("Run the full regression suite before merging")

    return steps


class RiskAssessor:
    """Turns risk factors into a final, deterministic assessment."""

    def __init__(self, weights: ScoreWeights = DEFAULT_WEIGHTS) -> None:
        """Initialize assessor.

        Args:
            weights: Model weights
        """
        self.weights = weights

    def assess(self, factors: RiskFactors) -> RiskAssessment:
        """Assess an upgrade.

        Args:
            factors: Upgrade risk inputs

        Returns:
            RiskAssessment with score, level and remediation estimate
        """
        score = round(calculate_base_risk_score(factors, self.weights), 4)
        confidence = self._overall_confidence(factors)
        level = self._determine_level(score, confidence, factors)

        logger.debug(f"Risk score {score} (confidence {confidence}) -> {level.value}")

        return RiskAssessment(
            level=level,
            score=score,
            confidence=confidence,
            factors=tuple(describe_risk_factors(factors)),
            mitigation_steps=tuple(generate_mitigation_steps(factors, level)),
            estimated_effort=estimate_effort(level),
            testing_scope=determine_testing_scope(level),
        )

    @staticmethod
    def _overall_confidence(factors: RiskFactors) -> float:
        if factors.overall_confidence is None:
            return confidence_from_depth(
                factors.confidence.diff_analysis_depth,
                factors.usage.test_coverage,
            )
        return round(min(max(factors.overall_confidence, 0.0), 1.0), 4)

    @staticmethod
    def _determine_level(score: float, confidence: float, factors: RiskFactors) -> RiskLevel:
        # Without evidence or enough information the score is not trusted
        if confidence < UNKNOWN_CONFIDENCE_THRESHOLD and not factors.package.breaking_change_patterns:
            return RiskLevel.UNKNOWN
        return classify_risk_level(score, factors.package.is_type_definition)
