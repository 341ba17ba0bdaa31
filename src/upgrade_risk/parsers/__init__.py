"""Diff and package metadata parsers."""

from upgrade_risk.parsers.diff import DiffParser, DiffStats, parse_diff
from upgrade_risk.parsers.package_traits import (
    is_lockfile_only,
    is_type_definition_package,
    extract_public_entry_hints,
)

__all__ = [
    "DiffParser",
    "DiffStats",
    "parse_diff",
    "is_lockfile_only",
    "is_type_definition_package",
    "extract_public_entry_hints",
]
