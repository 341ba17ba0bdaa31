"""Breaking change detection and risk scoring for dependency upgrades."""

from upgrade_risk.analyzer import (
    UpgradeEvaluation,
    UpgradeRequest,
    UpgradeRiskAnalyzer,
    analyze,
    assess,
    evaluate,
)
from upgrade_risk.models import (
    BreakingChange,
    DiffChange,
    RiskAssessment,
    RiskFactors,
    RiskLevel,
)

__version__ = "0.1.0"

__all__ = [
    "UpgradeEvaluation",
    "UpgradeRequest",
    "UpgradeRiskAnalyzer",
    "analyze",
    "assess",
    "evaluate",
    "BreakingChange",
    "DiffChange",
    "RiskAssessment",
    "RiskFactors",
    "RiskLevel",
    "__version__",
]
