"""Package-level traits derived from names and diffs."""

import json
import re

from upgrade_risk.models import DiffChange

LOCKFILE_NAMES = (
    "package-lock.json",
    "npm-shrinkwrap.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "poetry.lock",
    "Pipfile.lock",
    "uv.lock",
    "Cargo.lock",
    "composer.lock",
    "mix.lock",
    "Gemfile.lock",
)

# package.json keys that point at the public entry points of a package
_ENTRY_KEYS = re.compile(r'"(?:main|module|types|typings)"\s*:\s*"([^"]+)"')
_EXPORT_CONDITIONS = re.compile(r'"(?:import|require|default|types)"\s*:\s*"([^"]+)"')


def is_lockfile(path: str) -> bool:
    """Check if a path names a dependency lockfile."""
    return any(path == name or path.endswith("/" + name) for name in LOCKFILE_NAMES)


def is_lockfile_only(changes: list[DiffChange]) -> bool:
    """Check if a diff touches nothing but lockfiles.

    Args:
        changes: Parsed diff changes

    Returns:
        True when there is at least one change and every file is a lockfile
    """
    return bool(changes) and all(is_lockfile(c.file) for c in changes)


def is_type_definition_package(package_name: str) -> bool:
    """Check if a package only ships type declarations.

    Covers npm ``@types/*`` and typeshed-style ``types-*`` stubs on PyPI.
    """
    name = package_name.strip().lower()
    return name.startswith("@types/") or name.startswith("types-")


def extract_public_entry_hints(content: str | None) -> list[str]:
    """Pull entry-point paths out of package.json text or diff content.

    Args:
        content: package.json body, or the +/- lines of a package.json diff

    Returns:
        Unique entry paths in first-seen order
    """
    if not content:
        return []

    hints: list[str] = []
    for raw_line in content.splitlines():
        line = raw_line[1:] if raw_line[:1] in {"+", "-", " "} else raw_line

        for pattern in (_ENTRY_KEYS, _EXPORT_CONDITIONS):
            for match in pattern.finditer(line):
                if match.group(1) not in hints:
                    hints.append(match.group(1))

    return hints


def entry_hints_from_manifest(manifest: str) -> list[str]:
    """Collect entry-point paths from a full package.json document.

    Walks ``main``/``module``/``types`` and the nested ``exports`` map. Invalid
    JSON yields no hints.
    """
    try:
        data = json.loads(manifest)
    except json.JSONDecodeError:
        return []

    if not isinstance(data, dict):
        return []

    hints: list[str] = []

    def add(value: object) -> None:
        if isinstance(value, str) and value.strip() and value.strip() not in hints:
            hints.append(value.strip())

    for key in ("main", "module", "types", "typings"):
        add(data.get(key))

    def walk(node: object) -> None:
        if isinstance(node, str):
            add(node)
        elif isinstance(node, dict):
            for key, value in node.items():
                if key.startswith("./"):
                    add(key)
                walk(value)

    walk(data.get("exports"))
    return hints


def normalize_hints(hints: list[str] | tuple[str, ...]) -> tuple[str, ...]:
    """Strip leading ``./`` or ``/`` from hints and drop empties."""
    normalized: list[str] = []
    for hint in hints:
        cleaned = re.sub(r"^\./", "", hint.strip()).lstrip("/")
        if cleaned and cleaned not in normalized:
            normalized.append(cleaned)
    return tuple(normalized)


def matches_public_hint(path: str, hints: tuple[str, ...]) -> bool:
    """Check if a file path is one of the package's public entry points."""
    if not path or not hints:
        return False
    cleaned = re.sub(r"^\./", "", path)
    return any(cleaned.endswith(hint) or hint in cleaned for hint in hints)
