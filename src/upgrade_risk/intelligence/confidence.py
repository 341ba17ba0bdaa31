"""Confidence in the evidence behind an assessment."""

from dataclasses import dataclass

from upgrade_risk.models import ChangelogSource, DiffDepth, EvidenceSources


@dataclass(frozen=True)
class ConfidenceWeights:
    """Additive contribution of each evidence source."""

    changelog_by_tier: tuple[float, float, float] = (0.5, 0.4, 0.3)
    code_diff: float = 0.2
    balanced_usage: float = 0.2
    one_sided_usage: float = 0.1
    llm_summary: float = 0.1


DEFAULT_CONFIDENCE_WEIGHTS = ConfidenceWeights()

# Below this the caller should not trust the score at all
UNKNOWN_CONFIDENCE_THRESHOLD = 0.5


class ConfidenceEstimator:
    """Scores how trustworthy the evidence set is (0-1)."""

    def __init__(self, weights: ConfidenceWeights = DEFAULT_CONFIDENCE_WEIGHTS) -> None:
        """Initialize estimator.

        Args:
            weights: Contribution table
        """
        self.weights = weights

    def estimate(self, sources: EvidenceSources) -> float:
        """Estimate confidence from the sources that were obtained.

        Args:
            sources: Which evidence sources are available

        Returns:
            Confidence in [0, 1]
        """
        confidence = 0.0

        if sources.changelog_source is not None:
            confidence += self.changelog_weight(sources.changelog_source)

        if sources.has_code_diff:
            confidence += self.weights.code_diff

        has_production = sources.production_usage_count > 0
        has_test = sources.test_usage_count > 0
        if has_production and has_test:
            confidence += self.weights.balanced_usage
        elif has_production or has_test:
            confidence += self.weights.one_sided_usage

        if sources.has_llm_summary:
            confidence += self.weights.llm_summary

        return round(min(max(confidence, 0.0), 1.0), 4)

    def changelog_weight(self, source: ChangelogSource) -> float:
        """Contribution of a changelog from the given source."""
        return self.weights.changelog_by_tier[source.tier - 1]


def determine_diff_depth(has_changelog: bool, has_diff: bool) -> DiffDepth:
    """Determine how deep the change inspection went."""
    if has_changelog and has_diff:
        return DiffDepth.FULL
    if has_changelog or has_diff:
        return DiffDepth.PARTIAL
    return DiffDepth.NONE


# Used by assess() when the caller supplies no estimator output
DEPTH_CONFIDENCE = {
    DiffDepth.FULL: 0.8,
    DiffDepth.PARTIAL: 0.5,
    DiffDepth.NONE: 0.0,
}

COVERAGE_CONFIDENCE_BONUS = 0.2


def confidence_from_depth(depth: DiffDepth, test_coverage: float = 0.0) -> float:
    """Fallback confidence when only the diff depth and coverage are known.

    Args:
        depth: How deep the change inspection went
        test_coverage: Test coverage percentage (0-100)

    Returns:
        Confidence in [0, 1]
    """
    confidence = DEPTH_CONFIDENCE[depth]
    if test_coverage > 50:
        confidence += COVERAGE_CONFIDENCE_BONUS
    return round(min(confidence, 1.0), 4)
