"""Tests for changelog breaking change extraction."""

from upgrade_risk.intelligence.changelog_nlp import (
    ChangelogAnalyzer,
    estimate_tokens,
    filter_by_token_limit,
)
from upgrade_risk.models import BreakingChange, ChangeCategory, Severity


class TestChangelogExtraction:
    """Test marker and section based extraction."""

    def test_breaking_section_items(self, changelog_text):
        """Items under a Breaking Changes header are breaking findings."""
        changes = ChangelogAnalyzer().extract_breaking_changes(changelog_text)
        section_items = [c for c in changes if c.confidence == ChangelogAnalyzer.SECTION_ITEM_CONFIDENCE]

        assert len(section_items) == 2
        assert "Dropped support for Python 3.8" in section_items[0].text
        assert all(c.severity == Severity.BREAKING for c in section_items)

    def test_multiline_items_are_joined(self, changelog_text):
        """Indented continuation lines belong to their list item."""
        changes = ChangelogAnalyzer().extract_breaking_changes(changelog_text)
        texts = [c.text for c in changes]

        assert "- `Client.fetch` now returns an iterator instead of a list" in texts

    def test_deprecation_and_removal_markers(self, changelog_text):
        """Deprecated and removed markers get their own categories."""
        changes = ChangelogAnalyzer().extract_breaking_changes(changelog_text)
        by_category = {c.category: c for c in changes}

        assert ChangeCategory.DEPRECATION in by_category
        assert by_category[ChangeCategory.DEPRECATION].severity == Severity.WARNING
        assert ChangeCategory.REMOVAL in by_category
        assert "connect()" in by_category[ChangeCategory.REMOVAL].text
        assert len(changes) == 4

    def test_findings_come_from_changelog(self, changelog_text):
        """Every finding is tagged with the changelog source."""
        changes = ChangelogAnalyzer().extract_breaking_changes(changelog_text)
        assert {c.source for c in changes} == {"changelog"}

    def test_inline_breaking_marker(self):
        """A BREAKING CHANGE line outside a section is still found."""
        text = "## 2.0.0\n\nBREAKING CHANGE: config files moved to ~/.config\n"
        changes = ChangelogAnalyzer().extract_breaking_changes(text)

        assert len(changes) == 1
        assert changes[0].category == ChangeCategory.DOCUMENTED_CHANGE
        assert changes[0].confidence == 0.9

    def test_api_markers(self):
        """Incompatibility and rename notes are API changes."""
        text = "- Renamed `load` to `read`\n- This release is NOT BACKWARD COMPATIBLE\n"
        changes = ChangelogAnalyzer().extract_breaking_changes(text)

        assert [c.category for c in changes] == [ChangeCategory.API_CHANGE, ChangeCategory.API_CHANGE]
        assert changes[1].severity == Severity.BREAKING

    def test_duplicates_removed(self):
        """The same line repeated is one finding."""
        text = "BREAKING: drop node 14\nBREAKING: drop node 14\n"
        assert len(ChangelogAnalyzer().extract_breaking_changes(text)) == 1

    def test_no_markers(self):
        """Plain release notes yield nothing."""
        text = "## 1.2.0\n\n- Added a new option\n- Fixed a typo\n"
        assert ChangelogAnalyzer().extract_breaking_changes(text) == []

    def test_empty_input(self):
        """Missing changelog yields nothing."""
        assert ChangelogAnalyzer().extract_breaking_changes(None) == []
        assert ChangelogAnalyzer().extract_breaking_changes("") == []

    def test_is_breaking_section(self):
        """Recognized section headers."""
        analyzer = ChangelogAnalyzer()

        assert analyzer.is_breaking_section("## Breaking Changes")
        assert analyzer.is_breaking_section("### 💥 Breaking")
        assert analyzer.is_breaking_section("Breaking changes:")
        assert not analyzer.is_breaking_section("BREAKING CHANGE: something")
        assert not analyzer.is_breaking_section("## Features")


def _change(text: str, severity: Severity) -> BreakingChange:
    return BreakingChange(
        text=text,
        severity=severity,
        source="changelog",
        category=ChangeCategory.DOCUMENTED_CHANGE,
        confidence=0.9,
    )


class TestTokenLimit:
    """Test token budget filtering."""

    def test_estimate_tokens(self):
        """About four characters per token, rounded up."""
        assert estimate_tokens("") == 0
        assert estimate_tokens("abcd") == 1
        assert estimate_tokens("abcde") == 2

    def test_most_severe_kept_first(self):
        """When the budget is tight, warnings are dropped before breaking changes."""
        warning = _change("w" * 40, Severity.WARNING)
        breaking = _change("b" * 40, Severity.BREAKING)
        critical = _change("c" * 40, Severity.CRITICAL)

        kept = filter_by_token_limit([warning, breaking, critical], max_tokens=20)

        assert kept == [critical, breaking]

    def test_everything_fits(self):
        """A generous budget keeps every finding."""
        changes = [_change("short", Severity.WARNING), _change("other", Severity.BREAKING)]
        assert len(filter_by_token_limit(changes)) == 2
