"""Unified diff parser."""

import logging
import re
from dataclasses import dataclass

from upgrade_risk.models import ChangeType, DiffChange

logger = logging.getLogger(__name__)

FILE_HEADER_PREFIX = "diff --git"
_TARGET_PATH = re.compile(r" b/(.+)$")


@dataclass(frozen=True)
class DiffStats:
    """Aggregate statistics over a parsed diff."""

    files_changed: int = 0
    additions: int = 0
    deletions: int = 0


class _FileAccumulator:
    """Collects lines for the file block currently being parsed."""

    def __init__(self, path: str) -> None:
        self.path = path
        self.additions = 0
        self.deletions = 0
        self.lines: list[str] = []

    def to_change(self) -> DiffChange:
        content = "\n".join(self.lines).strip()
        return DiffChange(
            file=self.path,
            change_type=determine_change_type(self.additions, self.deletions),
            additions=self.additions,
            deletions=self.deletions,
            content=content or None,
        )


class DiffParser:
    """Turns raw unified diff text into per-file change records."""

    def parse(self, raw_diff: str | None) -> list[DiffChange]:
        """Parse unified diff text.

        Args:
            raw_diff: Output of ``git diff`` / ``npm diff``; may be empty

        Returns:
            One DiffChange per file block, in diff order
        """
        if not raw_diff:
            return []

        changes: list[DiffChange] = []
        current: _FileAccumulator | None = None

        for line in raw_diff.splitlines():
            if line.startswith(FILE_HEADER_PREFIX):
                if current is not None:
                    changes.append(current.to_change())

                match = _TARGET_PATH.search(line)
                current = _FileAccumulator(match.group(1) if match else "")
                continue

            # Lines before the first header carry no file to attribute them to
            if current is None:
                continue

            if line.startswith("+") and not line.startswith("+++"):
                current.additions += 1
                current.lines.append(line)
            elif line.startswith("-") and not line.startswith("---"):
                current.deletions += 1
                current.lines.append(line)

        if current is not None:
            changes.append(current.to_change())

        logger.debug(f"Parsed {len(changes)} file(s) from diff")
        return [c for c in changes if c.file]

    @staticmethod
    def summarize(changes: list[DiffChange]) -> DiffStats:
        """Summarize parsed changes.

        Args:
            changes: Parsed diff changes

        Returns:
            Aggregate statistics
        """
        return DiffStats(
            files_changed=len(changes),
            additions=sum(c.additions for c in changes),
            deletions=sum(c.deletions for c in changes),
        )


def determine_change_type(additions: int, deletions: int) -> ChangeType:
    """Derive the change type from line counts."""
    if additions > 0 and deletions == 0:
        return ChangeType.ADDED
    if deletions > 0 and additions == 0:
        return ChangeType.REMOVED
    return ChangeType.MODIFIED


def parse_diff(raw_diff: str | None) -> list[DiffChange]:
    """Parse unified diff text into DiffChange records."""
    return DiffParser().parse(raw_diff)
