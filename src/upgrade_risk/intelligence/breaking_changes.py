"""Breaking change detection over parsed diffs."""

import logging
import re
from collections.abc import Iterable, Sequence

from upgrade_risk.intelligence.rules import (
    AnalysisContext,
    BreakingChangeRule,
    default_rules,
    strip_breaking_marker,
)
from upgrade_risk.intelligence.version_jump import VersionJumpAnalyzer
from upgrade_risk.models import BreakingChange, DiffChange
from upgrade_risk.parsers.package_traits import (
    extract_public_entry_hints,
    normalize_hints,
)

logger = logging.getLogger(__name__)


class BreakingChangeAnalyzer:
    """Turns diff records into deduplicated, categorized breaking changes.

    The analyzer keeps no per-call state: rules and the version analyzer are
    fixed at construction and every call builds its own context, so one
    instance can serve concurrent analyses of different packages.
    """

    def __init__(self, rules: Sequence[BreakingChangeRule] | None = None) -> None:
        """Initialize analyzer.

        Args:
            rules: Rules in priority order; defaults to the built-in set
        """
        self.rules: tuple[BreakingChangeRule, ...] = tuple(rules or default_rules())
        self.version_analyzer = VersionJumpAnalyzer()

    def analyze(
        self,
        diff_changes: Iterable[DiffChange],
        package_name: str,
        from_version: str,
        to_version: str,
        public_entry_hints: Iterable[str] | None = None,
        prior_findings: Iterable[BreakingChange] | None = None,
    ) -> list[BreakingChange]:
        """Detect breaking changes for one package upgrade.

        Args:
            diff_changes: Parsed diff records
            package_name: Name of the package being upgraded
            from_version: Current version
            to_version: Target version
            public_entry_hints: Paths of the package's public entry points
            prior_findings: Findings from other sources (e.g. a changelog);
                they take part in deduplication and count as specific evidence

        Returns:
            Findings sorted by severity, then confidence (highest first)
        """
        context = self._build_context(
            diff_changes, package_name, from_version, to_version, public_entry_hints
        )

        # Pass 1: every specific rule produces its raw candidates
        candidates: list[BreakingChange] = list(prior_findings or ())
        for rule in self.rules:
            if rule.is_fallback:
                continue
            found = rule.apply(context)
            if found:
                logger.debug(f"{package_name}: rule {rule.name} produced {len(found)} finding(s)")
            candidates.extend(found)

        # Pass 2: global suppression, then the fallback gate
        findings = self._deduplicate(candidates)
        specific_rule_fired = bool(findings)

        if not specific_rule_fired:
            for rule in self.rules:
                if rule.is_fallback:
                    findings.extend(rule.apply(context))
        else:
            logger.debug(f"{package_name}: specific findings present, generic fallback suppressed")

        return sorted(findings, key=lambda c: (c.severity.rank, -c.confidence))

    def _build_context(
        self,
        diff_changes: Iterable[DiffChange],
        package_name: str,
        from_version: str,
        to_version: str,
        public_entry_hints: Iterable[str] | None,
    ) -> AnalysisContext:
        """Build the immutable context shared by all rules of one call."""
        changes = tuple(diff_changes or ())

        hints = list(public_entry_hints or [])
        if not hints:
            # Fall back to entry points declared in the package.json diff
            for change in changes:
                if change.file == "package.json" or change.file.endswith("/package.json"):
                    hints.extend(extract_public_entry_hints(change.content))

        return AnalysisContext(
            changes=changes,
            package_name=package_name,
            from_version=from_version,
            to_version=to_version,
            version_jump=self.version_analyzer.analyze(from_version, to_version),
            public_entry_hints=normalize_hints(hints),
        )

    @staticmethod
    def _deduplicate(candidates: list[BreakingChange]) -> list[BreakingChange]:
        """Drop findings that repeat an earlier finding of the same category.

        Texts are compared without a leading breaking change marker, so a
        changelog line and the same line found in a changed CHANGELOG.md
        collapse to one finding.
        """
        seen: set[tuple[str, str]] = set()
        unique: list[BreakingChange] = []

        for change in candidates:
            description = strip_breaking_marker(change.text)
            key = (change.category.value, re.sub(r"\s+", " ", description).strip().lower())
            if key in seen:
                continue
            seen.add(key)
            unique.append(change)

        return unique
