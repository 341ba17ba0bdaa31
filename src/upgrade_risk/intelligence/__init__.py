"""Intelligence module exports."""

from upgrade_risk.intelligence.breaking_changes import BreakingChangeAnalyzer
from upgrade_risk.intelligence.changelog_nlp import ChangelogAnalyzer, filter_by_token_limit
from upgrade_risk.intelligence.confidence import ConfidenceEstimator, determine_diff_depth
from upgrade_risk.intelligence.risk_scorer import (
    DEFAULT_WEIGHTS,
    RiskAssessor,
    ScoreWeights,
    calculate_base_risk_score,
    classify_risk_level,
)
from upgrade_risk.intelligence.version_jump import VersionJumpAnalyzer, analyze_version_jump

__all__ = [
    "BreakingChangeAnalyzer",
    "ChangelogAnalyzer",
    "filter_by_token_limit",
    "ConfidenceEstimator",
    "determine_diff_depth",
    "DEFAULT_WEIGHTS",
    "RiskAssessor",
    "ScoreWeights",
    "calculate_base_risk_score",
    "classify_risk_level",
    "VersionJumpAnalyzer",
    "analyze_version_jump",
]
