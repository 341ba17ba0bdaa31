"""Breaking change detection rules.

Each rule is an independent object that turns an analysis context into a list
of candidate findings. Rules never see each other's output; ordering,
suppression and the generic major-version fallback are handled by
:class:`upgrade_risk.intelligence.breaking_changes.BreakingChangeAnalyzer`.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from upgrade_risk.intelligence.version_jump import VersionJumpAnalyzer
from upgrade_risk.models import (
    BreakingChange,
    ChangeCategory,
    DiffChange,
    Severity,
    VersionJump,
)
from upgrade_risk.parsers.package_traits import matches_public_hint

logger = logging.getLogger(__name__)

_IDENTIFIER = r"[A-Za-z_$][\w$]*"

_DOCUMENTATION_FILE = re.compile(
    r"\.(md|markdown|rst|txt)$"
    r"|(^|/)(readme|changelog|changes|history|news|releases?|release[-_]notes|license|authors)(\.[^/]*)?$",
    re.IGNORECASE,
)

# Paths whose churn never reaches package consumers
_NON_PUBLIC_PATHS = [
    re.compile(r"(^|/)__tests__(/|$)", re.IGNORECASE),
    re.compile(r"(^|/)__mocks__(/|$)", re.IGNORECASE),
    re.compile(r"(^|/)tests?(/|$)", re.IGNORECASE),
    re.compile(r"(^|/)specs?(/|$)", re.IGNORECASE),
    re.compile(r"(^|/)test_[^/]*$", re.IGNORECASE),
    re.compile(r"_test\.[^/.]+$", re.IGNORECASE),
    re.compile(r"(^|/)conftest\.py$", re.IGNORECASE),
    re.compile(r"\.test\.", re.IGNORECASE),
    re.compile(r"\.spec\.", re.IGNORECASE),
    re.compile(r"(^|/)examples?(/|$)", re.IGNORECASE),
    re.compile(r"(^|/)bench(marks)?(/|$)", re.IGNORECASE),
    re.compile(r"(^|/)fixtures?(/|$)", re.IGNORECASE),
    re.compile(r"(^|/)coverage(/|$)", re.IGNORECASE),
    re.compile(r"(^|/)dist(/|$)", re.IGNORECASE),
    re.compile(r"(^|/)build(/|$)", re.IGNORECASE),
    re.compile(r"\.map$", re.IGNORECASE),
]


def is_documentation_file(path: str) -> bool:
    """Check if a path is documentation (README, CHANGELOG, *.md, ...)."""
    return bool(path) and bool(_DOCUMENTATION_FILE.search(path))


def is_non_public_file(path: str) -> bool:
    """Check if a path is test, fixture, example or build output."""
    if not path:
        return True
    return any(pattern.search(path) for pattern in _NON_PUBLIC_PATHS)


@dataclass(frozen=True)
class AnalysisContext:
    """Everything a rule may look at for one package analysis."""

    changes: tuple[DiffChange, ...]
    package_name: str
    from_version: str
    to_version: str
    version_jump: VersionJump
    public_entry_hints: tuple[str, ...] = ()

    def files_named(self, filename: str) -> list[DiffChange]:
        """Changes to files with the given base name."""
        return [
            c for c in self.changes
            if c.content and (c.file == filename or c.file.endswith("/" + filename))
        ]

    def documentation_changes(self) -> list[DiffChange]:
        """Changes to documentation files."""
        return [c for c in self.changes if c.content and is_documentation_file(c.file)]

    def api_surface_changes(self) -> list[DiffChange]:
        """Changes that may touch the public API.

        Documentation, tests, fixtures, examples and build output are
        excluded. When public entry hints are known, only matching files are
        kept.
        """
        scoped: list[DiffChange] = []

        for change in self.changes:
            if not change.content:
                continue
            if is_documentation_file(change.file) or is_non_public_file(change.file):
                continue
            if self.public_entry_hints and not matches_public_hint(
                change.file, self.public_entry_hints
            ):
                continue
            scoped.append(change)

        return scoped


class BreakingChangeRule(ABC):
    """Base class for breaking change rules."""

    name: str = "rule"

    # The fallback rule only runs when no specific rule produced a finding
    is_fallback: bool = False

    @abstractmethod
    def apply(self, context: AnalysisContext) -> list[BreakingChange]:
        """Run the rule.

        Args:
            context: Analysis context

        Returns:
            Candidate findings (possibly empty)
        """
        pass


def _leading_integer(constraint: str) -> int | None:
    match = re.search(r"\d+", constraint)
    return int(match.group()) if match else None


class NodeRequirementRule(BreakingChangeRule):
    """Detects a raised Node.js engine requirement in package.json."""

    name = "node-requirement"

    _NODE_ENGINE = re.compile(r'"node"\s*:\s*"([^"]+)"')

    def apply(self, context: AnalysisContext) -> list[BreakingChange]:
        findings: list[BreakingChange] = []

        for change in context.files_named("package.json"):
            old = self._first_constraint(change.removed_lines())
            new = self._first_constraint(change.added_lines())

            if old is None or new is None:
                continue

            old_major = _leading_integer(old)
            new_major = _leading_integer(new)

            if old_major is None or new_major is None or new_major <= old_major:
                continue

            findings.append(
                BreakingChange(
                    text=f"Node.js requirement raised from {old} to {new}",
                    severity=Severity.CRITICAL,
                    source="npm-diff",
                    category=ChangeCategory.RUNTIME_REQUIREMENT,
                    confidence=0.95,
                )
            )

        return findings

    def _first_constraint(self, lines: list[str]) -> str | None:
        for line in lines:
            match = self._NODE_ENGINE.search(line)
            if match:
                return match.group(1)
        return None


class PythonRequirementRule(BreakingChangeRule):
    """Detects a raised minimum Python version in packaging metadata."""

    name = "python-requirement"

    _FILES = ("pyproject.toml", "setup.cfg", "setup.py")
    _REQUIRES_PYTHON = re.compile(
        r"""(?:requires-python|python_requires)\s*[=:]\s*["']?([^"'\n,)]+)"""
    )

    def apply(self, context: AnalysisContext) -> list[BreakingChange]:
        findings: list[BreakingChange] = []

        for filename in self._FILES:
            for change in context.files_named(filename):
                old = self._first_constraint(change.removed_lines())
                new = self._first_constraint(change.added_lines())

                if old is None or new is None:
                    continue

                old_version = VersionJumpAnalyzer.coerce(old)
                new_version = VersionJumpAnalyzer.coerce(new)

                if old_version is None or new_version is None or new_version <= old_version:
                    continue

                findings.append(
                    BreakingChange(
                        text=f"Python requirement raised from {old} to {new}",
                        severity=Severity.CRITICAL,
                        source="pypi-diff",
                        category=ChangeCategory.RUNTIME_REQUIREMENT,
                        confidence=0.95,
                    )
                )

        return findings

    def _first_constraint(self, lines: list[str]) -> str | None:
        for line in lines:
            match = self._REQUIRES_PYTHON.search(line)
            if match:
                return match.group(1).strip()
        return None


@dataclass(frozen=True)
class DocumentationMarker:
    """A literal marker that announces a breaking change in prose."""

    pattern: re.Pattern[str]
    confidence: float
    category: ChangeCategory = ChangeCategory.DOCUMENTED_CHANGE


DOCUMENTATION_MARKERS = (
    DocumentationMarker(re.compile(r"BREAKING[ -]CHANGES?[:\s]\s*(.*)", re.IGNORECASE), 0.9),
    DocumentationMarker(re.compile(r"\[BREAKING\][:\s]\s*(.*)", re.IGNORECASE), 0.9),
    # A bare "breaking" is common prose, so this one needs the colon
    DocumentationMarker(re.compile(r"\bBREAKING:\s*(.*)", re.IGNORECASE), 0.85),
    DocumentationMarker(re.compile(r"\U0001F4A5[:\s]\s*(.*)"), 0.8),
)


def strip_breaking_marker(text: str) -> str:
    """Return the description that follows a breaking change marker.

    Text without a marker (or with nothing after it) is returned unchanged,
    so "BREAKING CHANGE: drop X" and "drop X" describe the same change.
    """
    for marker in DOCUMENTATION_MARKERS:
        match = marker.pattern.search(text)
        if match:
            description = match.group(1).strip()
            return description or text
    return text


class DocumentedChangeRule(BreakingChangeRule):
    """Finds explicit breaking change markers in changed documentation."""

    name = "documented-change"

    def apply(self, context: AnalysisContext) -> list[BreakingChange]:
        findings: list[BreakingChange] = []

        for change in context.documentation_changes():
            for line in change.content.splitlines():
                # A marker the new version deleted is not news
                if line.startswith("-"):
                    continue

                finding = self._match_line(line.lstrip("+ "))
                if finding:
                    findings.append(finding)

        return findings

    @staticmethod
    def _match_line(line: str) -> BreakingChange | None:
        for marker in DOCUMENTATION_MARKERS:
            match = marker.pattern.search(line)
            if not match:
                continue

            text = match.group(1).strip()
            if not text:
                return None

            return BreakingChange(
                text=text,
                severity=Severity.BREAKING,
                source="documented-change",
                category=marker.category,
                confidence=marker.confidence,
            )

        return None


@dataclass
class ExportSurface:
    """Exported names and signatures seen on one side of a diff."""

    names: list[str] = field(default_factory=list)
    signatures: dict[str, set[str]] = field(default_factory=dict)

    def add_name(self, name: str) -> None:
        if name not in self.names:
            self.names.append(name)

    def add_signature(self, name: str, params: str) -> None:
        self.signatures.setdefault(name, set()).add(params)

    def merge(self, other: "ExportSurface") -> None:
        for name in other.names:
            self.add_name(name)
        for name, params in other.signatures.items():
            for p in params:
                self.add_signature(name, p)


_ESM_DECLARATION = re.compile(
    rf"^\s*export\s+(?:declare\s+)?(?:async\s+)?(?:abstract\s+)?"
    rf"(?:function\*?|class|const|let|var|interface|type|enum)\s+({_IDENTIFIER})"
)
_ESM_DEFAULT = re.compile(r"^\s*export\s+default\s+")
_ESM_LIST = re.compile(r"^\s*export\s+(?:type\s+)?\{([^}]+)\}")
_CJS_PROPERTY = re.compile(rf"^\s*(?:module\.)?exports\.({_IDENTIFIER})\s*=")
_CJS_OBJECT = re.compile(r"^\s*module\.exports\s*=\s*\{([^}]+)\}")
_TS_DECLARE = re.compile(rf"^\s*declare\s+(?:function|class|const)\s+({_IDENTIFIER})")
_PY_DECLARATION = re.compile(r"^(?:async\s+)?(?:def|class)\s+([A-Za-z]\w*)")

_JS_SIGNATURES = (
    re.compile(
        rf"^\s*export\s+(?:declare\s+)?(?:async\s+)?function\*?\s*({_IDENTIFIER})\s*\(([^)]*)\)"
    ),
    re.compile(
        rf"^\s*export\s+const\s+({_IDENTIFIER})\s*=\s*(?:async\s*)?\(([^)]*)\)\s*=>"
    ),
    re.compile(rf"^\s*declare\s+function\s+({_IDENTIFIER})\s*\(([^)]*)\)"),
)
_PY_SIGNATURE = re.compile(r"^(?:async\s+)?def\s+([A-Za-z]\w*)\s*\(([^)]*)\)")


def extract_exported_names(line: str, path: str = "") -> list[str]:
    """Extract exported symbol names from one line of source.

    Args:
        line: Source line without its diff prefix
        path: File the line belongs to; Python files use top-level
            ``def``/``class`` without a leading underscore as exports

    Returns:
        Exported names in source order
    """
    names: list[str] = []

    for pattern in (_ESM_DECLARATION, _CJS_PROPERTY, _TS_DECLARE):
        match = pattern.match(line)
        if match:
            names.append(match.group(1))

    if _ESM_DEFAULT.match(line):
        names.append("default")

    listed = _ESM_LIST.match(line)
    if listed:
        for part in listed.group(1).split(","):
            part = part.strip()
            if not part:
                continue
            # `a as b` exports the name b
            names.append(re.split(r"\s+as\s+", part)[-1].strip())

    cjs_object = _CJS_OBJECT.match(line)
    if cjs_object:
        for part in cjs_object.group(1).split(","):
            key = part.split(":")[0].strip()
            if key:
                names.append(key)

    if path.endswith(".py"):
        match = _PY_DECLARATION.match(line)
        if match:
            names.append(match.group(1))

    unique: list[str] = []
    for name in names:
        if name and name not in unique:
            unique.append(name)
    return unique


def extract_function_signature(line: str, path: str = "") -> tuple[str, str] | None:
    """Extract ``(name, params)`` from an exported function declaration."""
    patterns = (_PY_SIGNATURE,) if path.endswith(".py") else _JS_SIGNATURES
    for pattern in patterns:
        match = pattern.match(line)
        if match:
            return match.group(1), match.group(2)
    return None


def normalize_signature(params: str) -> str:
    """Normalize a parameter list so that only names and order remain.

    Type annotations, default values, optional markers, access modifiers and
    whitespace are dropped.
    """
    normalized = params.replace("?", "")
    normalized = re.sub(r"\b(public|private|protected|readonly)\s+", "", normalized)
    normalized = re.sub(r":\s*[^,)]+", "", normalized)
    normalized = re.sub(r"=\s*[^,)]+", "", normalized)
    normalized = re.sub(r"\s+", "", normalized)
    return normalized.strip(",")


def scan_export_surface(change: DiffChange) -> tuple[ExportSurface, ExportSurface]:
    """Collect removed and added export surfaces for one file.

    Returns:
        ``(removed, added)`` surfaces
    """
    removed = ExportSurface()
    added = ExportSurface()

    for side, lines in ((removed, change.removed_lines()), (added, change.added_lines())):
        for line in lines:
            for name in extract_exported_names(line, change.file):
                side.add_name(name)

            signature = extract_function_signature(line, change.file)
            if signature:
                name, params = signature
                side.add_signature(name, normalize_signature(params))

    return removed, added


def collect_export_surfaces(context: AnalysisContext) -> tuple[ExportSurface, ExportSurface]:
    """Merge removed/added export surfaces across every in-scope file."""
    removed = ExportSurface()
    added = ExportSurface()

    for change in context.api_surface_changes():
        file_removed, file_added = scan_export_surface(change)
        removed.merge(file_removed)
        added.merge(file_added)

    return removed, added


class ExportRemovalRule(BreakingChangeRule):
    """Reports exports that disappear from the public API.

    A removal whose name is exported again anywhere in the same diff is
    treated as a move or reformat and suppressed.
    """

    name = "export-removal"

    def apply(self, context: AnalysisContext) -> list[BreakingChange]:
        removed, added = collect_export_surfaces(context)

        offset = [n for n in removed.names if n in added.names]
        if offset:
            logger.debug(f"Suppressed re-added exports: {', '.join(offset)}")

        true_removals = sorted(n for n in removed.names if n not in added.names)

        return [
            BreakingChange(
                text=f"Removed export: {name}",
                severity=Severity.BREAKING,
                source="npm-diff",
                category=ChangeCategory.REMOVAL,
                confidence=0.85,
            )
            for name in true_removals
        ]


class SignatureChangeRule(BreakingChangeRule):
    """Reports exported functions whose parameter list changed."""

    name = "signature-change"

    def apply(self, context: AnalysisContext) -> list[BreakingChange]:
        removed, added = collect_export_surfaces(context)

        changed: list[str] = []
        for name, old_params in removed.signatures.items():
            new_params = added.signatures.get(name)
            if not new_params:
                continue  # not re-added: an export removal, not a signature change
            if any(params not in new_params for params in old_params):
                changed.append(name)

        if not changed:
            return []

        return [
            BreakingChange(
                text=f"Function signatures changed: {', '.join(changed)}",
                severity=Severity.BREAKING,
                source="npm-diff",
                category=ChangeCategory.API_CHANGE,
                confidence=0.8,
            )
        ]


class MajorVersionFallbackRule(BreakingChangeRule):
    """Generic warning for a major bump with no concrete evidence."""

    name = "major-version-fallback"
    is_fallback = True

    def apply(self, context: AnalysisContext) -> list[BreakingChange]:
        if not context.version_jump.is_major:
            return []

        return [
            BreakingChange(
                text=(
                    f"Major version update ({context.from_version} → {context.to_version}) "
                    f"- potential breaking changes"
                ),
                severity=Severity.BREAKING,
                source="version-analysis",
                category=ChangeCategory.DOCUMENTED_CHANGE,
                confidence=0.7,
            )
        ]


def default_rules() -> tuple[BreakingChangeRule, ...]:
    """Rules in priority order, fallback last."""
    return (
        NodeRequirementRule(),
        PythonRequirementRule(),
        SignatureChangeRule(),
        ExportRemovalRule(),
        DocumentedChangeRule(),
        MajorVersionFallbackRule(),
    )
