"""Breaking change extraction from changelog and release note text."""

import math
import re

from upgrade_risk.models import BreakingChange, ChangeCategory, Severity


class ChangelogAnalyzer:
    """Scans changelog text for breaking change markers and sections."""

    # (pattern, severity, category, confidence); first match per line wins
    BREAKING_MARKERS = [
        (r"BREAKING\s*CHANGE", Severity.BREAKING, ChangeCategory.DOCUMENTED_CHANGE, 0.9),
        (r"BREAKING:", Severity.BREAKING, ChangeCategory.DOCUMENTED_CHANGE, 0.9),
        (r"\[BREAKING\]", Severity.BREAKING, ChangeCategory.DOCUMENTED_CHANGE, 0.9),
        (r"\U0001F4A5", Severity.BREAKING, ChangeCategory.DOCUMENTED_CHANGE, 0.8),
    ]

    WARNING_MARKERS = [
        (r"⚠", Severity.WARNING, ChangeCategory.DOCUMENTED_CHANGE, 0.6),
        (r"\[WARNING\]", Severity.WARNING, ChangeCategory.DOCUMENTED_CHANGE, 0.6),
        (r"\[DEPRECATED\]", Severity.WARNING, ChangeCategory.DEPRECATION, 0.75),
        (r"DEPRECATED:", Severity.WARNING, ChangeCategory.DEPRECATION, 0.75),
    ]

    REMOVAL_MARKERS = [
        (r"^[*-]\s*Removed", Severity.BREAKING, ChangeCategory.REMOVAL, 0.75),
        (r"^[*-]\s*Deleted", Severity.BREAKING, ChangeCategory.REMOVAL, 0.75),
        (r"\[REMOVED\]", Severity.BREAKING, ChangeCategory.REMOVAL, 0.8),
        (r"\[DELETED\]", Severity.BREAKING, ChangeCategory.REMOVAL, 0.8),
    ]

    API_MARKERS = [
        (r"API\s*CHANGE", Severity.WARNING, ChangeCategory.API_CHANGE, 0.65),
        (r"NOT\s*BACKWARDS?\s*COMPATIBLE", Severity.BREAKING, ChangeCategory.API_CHANGE, 0.85),
        (r"INCOMPATIBLE", Severity.BREAKING, ChangeCategory.API_CHANGE, 0.8),
        (r"MIGRATION\s*REQUIRED", Severity.BREAKING, ChangeCategory.API_CHANGE, 0.8),
        (r"REQUIRES\s*MIGRATION", Severity.BREAKING, ChangeCategory.API_CHANGE, 0.8),
        (r"^[*-]\s*Renamed", Severity.WARNING, ChangeCategory.API_CHANGE, 0.6),
        (r"^[*-]\s*Moved", Severity.WARNING, ChangeCategory.API_CHANGE, 0.6),
        (r"\[RENAMED\]", Severity.WARNING, ChangeCategory.API_CHANGE, 0.65),
        (r"\[MOVED\]", Severity.WARNING, ChangeCategory.API_CHANGE, 0.65),
    ]

    SECTION_HEADERS = [
        r"^#+\s*Breaking\s*Changes?",
        r"^Breaking\s*Changes?:\s*$",
        r"^#+\s*\[Breaking\s*Changes?\]",
        r"^#+\s*\U0001F4A5\s*Breaking",
        r"^#+\s*Incompatible\s*Changes?",
        r"^#+\s*API\s*Breaking\s*Changes?",
    ]

    SECTION_ITEM_CONFIDENCE = 0.85

    def __init__(self) -> None:
        """Initialize analyzer."""
        self._markers = [
            (re.compile(pattern, re.IGNORECASE), severity, category, confidence)
            for pattern, severity, category, confidence in (
                self.BREAKING_MARKERS
                + self.WARNING_MARKERS
                + self.REMOVAL_MARKERS
                + self.API_MARKERS
            )
        ]
        self._sections = [re.compile(p, re.IGNORECASE) for p in self.SECTION_HEADERS]

    def extract_breaking_changes(self, content: str | None) -> list[BreakingChange]:
        """Extract breaking change descriptions from changelog text.

        Args:
            content: Changelog or release notes text

        Returns:
            One finding per distinct marked line or section item
        """
        if not content:
            return []

        lines = content.splitlines()
        changes: list[BreakingChange] = []
        seen: set[str] = set()

        def add(text: str, severity: Severity, category: ChangeCategory, confidence: float) -> None:
            key = re.sub(r"\s+", " ", text).lower()
            if key in seen:
                return
            seen.add(key)
            changes.append(
                BreakingChange(
                    text=text,
                    severity=severity,
                    source="changelog",
                    category=category,
                    confidence=confidence,
                )
            )

        for index, raw_line in enumerate(lines):
            line = raw_line.strip()
            if not line:
                continue

            # Section items are claimed first so later marker hits on them dedupe
            if self.is_breaking_section(line):
                for item in self._extract_section_items(lines, index):
                    add(
                        item,
                        Severity.BREAKING,
                        ChangeCategory.DOCUMENTED_CHANGE,
                        self.SECTION_ITEM_CONFIDENCE,
                    )
                continue

            for pattern, severity, category, confidence in self._markers:
                if pattern.search(line):
                    add(self._extract_context(lines, index), severity, category, confidence)
                    break

        return changes

    def is_breaking_section(self, line: str) -> bool:
        """Check if a line opens a "Breaking Changes" section."""
        return any(pattern.search(line) for pattern in self._sections)

    @staticmethod
    def _is_list_item(line: str) -> bool:
        return bool(re.match(r"^[-*•]\s", line))

    def _extract_context(self, lines: list[str], index: int) -> str:
        """Return the line, joined with its continuation lines if it is a list item."""
        line = lines[index].strip()

        if not self._is_list_item(line):
            return line

        context = line
        i = index + 1
        while (
            i < len(lines)
            and re.match(r"^\s{2,}\S", lines[i])
            and not self._is_list_item(lines[i].strip())
        ):
            context += " " + lines[i].strip()
            i += 1

        return context

    def _extract_section_items(self, lines: list[str], section_index: int) -> list[str]:
        """Collect list items below a section header until the next header."""
        items: list[str] = []

        for i in range(section_index + 1, len(lines)):
            line = lines[i].strip()

            if re.match(r"^#+\s", line):
                break

            if self._is_list_item(line):
                items.append(self._extract_context(lines, i))

        return items


def estimate_tokens(text: str) -> int:
    """Rough token estimate (about four characters per token)."""
    return math.ceil(len(text) / 4)


def filter_by_token_limit(
    changes: list[BreakingChange],
    max_tokens: int = 4000,
) -> list[BreakingChange]:
    """Keep the most severe findings that fit in a token budget.

    Args:
        changes: Findings to filter
        max_tokens: Token budget

    Returns:
        Findings ordered by severity whose combined text fits the budget
    """
    filtered: list[BreakingChange] = []
    total = 0

    for change in sorted(changes, key=lambda c: c.severity.rank):
        tokens = estimate_tokens(change.text)
        if total + tokens <= max_tokens:
            filtered.append(change)
            total += tokens

    return filtered
