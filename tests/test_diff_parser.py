"""Tests for the unified diff parser."""

import pytest

from upgrade_risk.models import ChangeType
from upgrade_risk.parsers.diff import DiffParser, DiffStats, determine_change_type, parse_diff


class TestDiffParser:
    """Test parsing of unified diff text."""

    def test_empty_input_returns_empty_list(self):
        """Empty, missing or non-diff text is not an error."""
        assert parse_diff("") == []
        assert parse_diff(None) == []
        assert parse_diff("this is not a diff\njust some text\n") == []

    def test_counts_additions_and_deletions(self, node_engine_diff):
        """+/- lines are counted per file, headers excluded."""
        changes = parse_diff(node_engine_diff)

        assert len(changes) == 1
        change = changes[0]
        assert change.file == "package.json"
        assert change.additions == 2
        assert change.deletions == 2
        assert change.change_type == ChangeType.MODIFIED

    def test_header_lines_not_counted(self):
        """'+++' and '---' file markers are not content."""
        raw = (
            "diff --git a/x.js b/x.js\n"
            "--- a/x.js\n"
            "+++ b/x.js\n"
            "+const a = 1;\n"
        )
        change = parse_diff(raw)[0]

        assert change.additions == 1
        assert change.deletions == 0
        assert change.content == "+const a = 1;"

    def test_multiple_files_flushed_in_order(self, relocated_export_diff):
        """Each diff --git header starts a new record."""
        changes = parse_diff(relocated_export_diff)

        assert [c.file for c in changes] == ["lib/a.js", "lib/b.js"]
        assert changes[0].change_type == ChangeType.REMOVED
        assert changes[1].change_type == ChangeType.ADDED

    def test_path_taken_from_b_side(self):
        """Renamed files are reported under their new path."""
        raw = "diff --git a/old/name.js b/new/name.js\n+x\n"
        assert parse_diff(raw)[0].file == "new/name.js"

    def test_lines_before_first_header_ignored(self):
        """Preamble text is not attributed to any file."""
        raw = "+stray line\n-another\ndiff --git a/a.txt b/a.txt\n+real\n"
        changes = parse_diff(raw)

        assert len(changes) == 1
        assert changes[0].additions == 1
        assert changes[0].deletions == 0

    def test_crlf_line_endings(self):
        """Windows line endings parse like Unix ones."""
        raw = "diff --git a/a.js b/a.js\r\n-old\r\n+new\r\n"
        change = parse_diff(raw)[0]

        assert change.file == "a.js"
        assert change.additions == 1
        assert change.deletions == 1
        assert change.content == "-old\n+new"

    def test_file_without_changes_has_no_content(self):
        """A header with only context lines yields content None."""
        raw = "diff --git a/a.js b/a.js\n@@ -1 +1 @@\n context\n"
        change = parse_diff(raw)[0]

        assert change.content is None
        assert change.additions == 0
        assert change.deletions == 0

    def test_header_without_path_is_dropped(self):
        """Records with no file path are filtered out."""
        raw = "diff --git\n+orphan\n"
        assert parse_diff(raw) == []

    def test_added_and_removed_lines_helpers(self, signature_change_diff):
        """DiffChange exposes +/- lines without their prefix."""
        change = parse_diff(signature_change_diff)[0]

        assert change.removed_lines() == ["export function bar(a: number): number {"]
        assert change.added_lines() == ["export function bar(a: number, b: string): number {"]


class TestChangeType:
    """Test change type derivation."""

    @pytest.mark.parametrize(
        "additions,deletions,expected",
        [
            (3, 0, ChangeType.ADDED),
            (0, 2, ChangeType.REMOVED),
            (1, 1, ChangeType.MODIFIED),
            (0, 0, ChangeType.MODIFIED),
        ],
    )
    def test_determine_change_type(self, additions, deletions, expected):
        """Change type follows the addition/deletion counts."""
        assert determine_change_type(additions, deletions) == expected


class TestDiffSummary:
    """Test aggregate diff statistics."""

    def test_summarize(self, lockfile_diff):
        """Summary adds up every file."""
        changes = parse_diff(lockfile_diff)
        stats = DiffParser.summarize(changes)

        assert stats == DiffStats(files_changed=2, additions=2, deletions=2)

    def test_summarize_empty(self):
        """Empty diff summarizes to zeros."""
        assert DiffParser.summarize([]) == DiffStats()
