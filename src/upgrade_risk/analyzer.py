"""Core analyzer orchestrator."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from upgrade_risk.intelligence.breaking_changes import BreakingChangeAnalyzer
from upgrade_risk.intelligence.changelog_nlp import ChangelogAnalyzer, filter_by_token_limit
from upgrade_risk.intelligence.confidence import ConfidenceEstimator, determine_diff_depth
from upgrade_risk.intelligence.risk_scorer import (
    RiskAssessor,
    determine_migration_complexity,
    estimate_test_coverage,
)
from upgrade_risk.intelligence.version_jump import VersionJumpAnalyzer
from upgrade_risk.models import (
    BreakingChange,
    ChangelogSource,
    ConfidenceContext,
    DiffChange,
    EvidenceSources,
    MigrationComplexity,
    PackageFlags,
    RiskAssessment,
    RiskFactors,
    UsageStats,
    VersionJump,
)
from upgrade_risk.parsers.diff import DiffParser, DiffStats
from upgrade_risk.parsers.package_traits import (
    is_lockfile_only,
    is_type_definition_package,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpgradeRequest:
    """Everything known about one dependency upgrade."""

    package_name: str
    from_version: str
    to_version: str
    diff_text: str | None = None
    changelog_text: str | None = None
    changelog_source: ChangelogSource | None = None
    production_usage_count: int = 0
    test_usage_count: int = 0
    critical_path_usage: bool = False
    test_coverage: float | None = None  # measured coverage, 0-100
    is_dev_dependency: bool = False
    has_llm_summary: bool = False
    public_entry_hints: tuple[str, ...] = ()


@dataclass(frozen=True)
class UpgradeEvaluation:
    """Result of evaluating one dependency upgrade."""

    package_name: str
    from_version: str
    to_version: str
    version_jump: VersionJump
    breaking_changes: tuple[BreakingChange, ...]
    diff_stats: DiffStats
    migration_complexity: MigrationComplexity
    assessment: RiskAssessment
    is_lockfile_only: bool = False
    is_type_definition: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-ready dict."""
        return {
            "package": self.package_name,
            "fromVersion": self.from_version,
            "toVersion": self.to_version,
            "versionJump": {
                "major": self.version_jump.major,
                "minor": self.version_jump.minor,
                "patch": self.version_jump.patch,
            },
            "diffStats": {
                "filesChanged": self.diff_stats.files_changed,
                "additions": self.diff_stats.additions,
                "deletions": self.diff_stats.deletions,
            },
            "isLockfileOnly": self.is_lockfile_only,
            "isTypeDefinition": self.is_type_definition,
            "migrationComplexity": self.migration_complexity.value,
            "breakingChanges": [c.to_dict() for c in self.breaking_changes],
            "assessment": self.assessment.to_dict(),
        }


class UpgradeRiskAnalyzer:
    """Runs the full pipeline from raw diff and changelog text to a verdict."""

    def __init__(self, max_changelog_tokens: int = 4000) -> None:
        """Initialize analyzer.

        Args:
            max_changelog_tokens: Token budget for changelog findings
        """
        self.max_changelog_tokens = max_changelog_tokens

        self.diff_parser = DiffParser()
        self.version_analyzer = VersionJumpAnalyzer()
        self.breaking_change_analyzer = BreakingChangeAnalyzer()
        self.changelog_analyzer = ChangelogAnalyzer()
        self.confidence_estimator = ConfidenceEstimator()
        self.assessor = RiskAssessor()

    def evaluate(self, request: UpgradeRequest) -> UpgradeEvaluation:
        """Evaluate a single dependency upgrade.

        Args:
            request: Upgrade inputs

        Returns:
            Upgrade evaluation
        """
        name = request.package_name
        logger.debug(f"Evaluating {name}: {request.from_version} -> {request.to_version}")

        # 1. Parse the code diff
        changes = self.diff_parser.parse(request.diff_text)
        stats = self.diff_parser.summarize(changes)
        logger.debug(f"{name}: {stats.files_changed} file(s) in diff")

        # 2. Changelog findings count as specific evidence for the rule engine
        changelog_findings = filter_by_token_limit(
            self.changelog_analyzer.extract_breaking_changes(request.changelog_text),
            self.max_changelog_tokens,
        )
        logger.debug(f"{name}: {len(changelog_findings)} changelog finding(s)")

        breaking_changes = self.breaking_change_analyzer.analyze(
            changes,
            name,
            request.from_version,
            request.to_version,
            public_entry_hints=request.public_entry_hints or None,
            prior_findings=changelog_findings,
        )
        logger.debug(f"{name}: {len(breaking_changes)} breaking change(s) detected")

        # 3. Package traits
        lockfile_only = is_lockfile_only(changes)
        type_definition = is_type_definition_package(name)

        # 4. Confidence in the evidence
        has_changelog = bool(request.changelog_text and request.changelog_text.strip())
        changelog_source = request.changelog_source
        if has_changelog and changelog_source is None:
            changelog_source = ChangelogSource.UNKNOWN
        if not has_changelog:
            changelog_source = None

        confidence = self.confidence_estimator.estimate(
            EvidenceSources(
                changelog_source=changelog_source,
                has_code_diff=bool(changes),
                production_usage_count=max(request.production_usage_count, 0),
                test_usage_count=max(request.test_usage_count, 0),
                has_llm_summary=request.has_llm_summary,
            )
        )

        # 5. Assess
        version_jump = self.version_analyzer.analyze(request.from_version, request.to_version)
        factors = RiskFactors(
            version_jump=version_jump,
            usage=UsageStats(
                direct_usage_count=max(request.production_usage_count, 0),
                critical_path_usage=request.critical_path_usage,
                test_coverage=self._test_coverage(request),
            ),
            confidence=ConfidenceContext(
                diff_analysis_depth=determine_diff_depth(has_changelog, bool(changes)),
            ),
            package=PackageFlags(
                breaking_change_patterns=tuple(c.text for c in breaking_changes),
                is_type_definition=type_definition,
                is_dev_dependency=request.is_dev_dependency,
                is_lockfile_only=lockfile_only,
            ),
            overall_confidence=confidence,
        )
        assessment = self.assessor.assess(factors)

        logger.info(
            f"{name} {request.from_version} -> {request.to_version}: "
            f"{assessment.level.value} (score {assessment.score:.1f})"
        )

        return UpgradeEvaluation(
            package_name=name,
            from_version=request.from_version,
            to_version=request.to_version,
            version_jump=version_jump,
            breaking_changes=tuple(breaking_changes),
            diff_stats=stats,
            migration_complexity=determine_migration_complexity(
                breaking_changes, request.production_usage_count
            ),
            assessment=assessment,
            is_lockfile_only=lockfile_only,
            is_type_definition=type_definition,
        )

    @staticmethod
    def _test_coverage(request: UpgradeRequest) -> float:
        """Measured coverage when known, else estimated from usage counts."""
        if request.test_coverage is not None:
            return min(max(request.test_coverage, 0.0), 100.0)
        if request.production_usage_count <= 0 and request.test_usage_count <= 0:
            # No usage analysis at all
            return 0.0
        return estimate_test_coverage(request.production_usage_count, request.test_usage_count)


def analyze(
    diff_changes: Iterable[DiffChange],
    package_name: str,
    from_version: str,
    to_version: str,
    public_entry_hints: Iterable[str] | None = None,
) -> list[BreakingChange]:
    """Detect breaking changes in parsed diff records.

    Args:
        diff_changes: Parsed diff records
        package_name: Name of the package being upgraded
        from_version: Current version
        to_version: Target version
        public_entry_hints: Paths of the package's public entry points

    Returns:
        Breaking change findings
    """
    return BreakingChangeAnalyzer().analyze(
        diff_changes, package_name, from_version, to_version, public_entry_hints
    )


def assess(factors: RiskFactors) -> RiskAssessment:
    """Assess an upgrade from its risk factors."""
    return RiskAssessor().assess(factors)


def evaluate(request: UpgradeRequest, max_changelog_tokens: int = 4000) -> UpgradeEvaluation:
    """Evaluate an upgrade from raw inputs."""
    return UpgradeRiskAnalyzer(max_changelog_tokens=max_changelog_tokens).evaluate(request)
