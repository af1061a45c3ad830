"""
Project manifest parsing.

Reads declared dependencies from package.json, pyproject.toml,
requirements.txt and Cargo.toml, and detects the project kind from which
manifests exist at the workspace root.
"""

from __future__ import annotations

import json
import re
import tomllib
from collections.abc import Callable
from pathlib import Path

from jjagent.models import Dependency, DependencyKind, ProjectKind
from jjagent.utils.logger import get_logger

logger = get_logger(__name__)

# PEP 508: name, then anything (extras, specifier, marker)
REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)\s*(\[[^\]]*\])?\s*(.*)$")


def _split_requirement(requirement: str) -> tuple[str, str] | None:
    requirement = requirement.split("#", 1)[0].strip()
    if not requirement or requirement.startswith("-"):
        return None
    match = REQUIREMENT_NAME.match(requirement)
    if not match:
        return None
    name, _extras, rest = match.groups()
    version = rest.split(";", 1)[0].strip()
    return name, version or "*"


def parse_package_json(content: str) -> list[Dependency]:
    data = json.loads(content)
    deps: list[Dependency] = []
    for section, kind in (
        ("dependencies", DependencyKind.RUNTIME),
        ("devDependencies", DependencyKind.DEV),
    ):
        for name, version in (data.get(section) or {}).items():
            deps.append(Dependency(name=name, version=str(version), kind=kind))
    return deps


def parse_requirements_txt(content: str) -> list[Dependency]:
    deps: list[Dependency] = []
    for line in content.splitlines():
        parsed = _split_requirement(line)
        if parsed:
            deps.append(Dependency(name=parsed[0], version=parsed[1]))
    return deps


def parse_pyproject_toml(content: str) -> list[Dependency]:
    data = tomllib.loads(content)
    deps: list[Dependency] = []

    project = data.get("project") or {}
    for requirement in project.get("dependencies") or []:
        parsed = _split_requirement(requirement)
        if parsed:
            deps.append(Dependency(name=parsed[0], version=parsed[1]))

    dev_groups = list((project.get("optional-dependencies") or {}).values())
    dev_groups += list((data.get("dependency-groups") or {}).values())
    for group in dev_groups:
        for requirement in group:
            # dependency-groups may contain {include-group = "..."} tables
            if not isinstance(requirement, str):
                continue
            parsed = _split_requirement(requirement)
            if parsed:
                deps.append(
                    Dependency(name=parsed[0], version=parsed[1], kind=DependencyKind.DEV)
                )
    return deps


def parse_cargo_toml(content: str) -> list[Dependency]:
    data = tomllib.loads(content)
    deps: list[Dependency] = []
    for section, kind in (
        ("dependencies", DependencyKind.RUNTIME),
        ("dev-dependencies", DependencyKind.DEV),
    ):
        for name, spec in (data.get(section) or {}).items():
            if isinstance(spec, dict):
                version = str(spec.get("version", "*"))
            else:
                version = str(spec)
            deps.append(Dependency(name=name, version=version, kind=kind))
    return deps


MANIFEST_PARSERS: dict[str, Callable[[str], list[Dependency]]] = {
    "package.json": parse_package_json,
    "pyproject.toml": parse_pyproject_toml,
    "requirements.txt": parse_requirements_txt,
    "Cargo.toml": parse_cargo_toml,
}


def read_dependencies(root: Path) -> list[Dependency]:
    """
    Collect dependencies from every manifest present at the root.

    A manifest that cannot be read or parsed is logged and skipped.

    Example:
        deps = read_dependencies(Path("/home/dev/project"))
        runtime = [d.name for d in deps if d.kind is DependencyKind.RUNTIME]
    """
    deps: list[Dependency] = []
    for filename, parser in MANIFEST_PARSERS.items():
        manifest = root / filename
        if not manifest.is_file():
            continue
        try:
            found = parser(manifest.read_text(encoding="utf-8"))
        except (OSError, ValueError, AttributeError, TypeError) as exc:
            logger.warning(f"Could not parse {filename}: {exc}")
            continue
        logger.debug(f"{filename}: {len(found)} dependencies")
        deps.extend(found)
    return deps


def detect_project_kind(root: Path) -> ProjectKind:
    """Detect the project type from the manifests at the root."""
    if (root / "tsconfig.json").exists():
        return ProjectKind.TYPESCRIPT
    if (root / "package.json").exists():
        return ProjectKind.JAVASCRIPT
    if (root / "Cargo.toml").exists():
        return ProjectKind.RUST
    if (root / "requirements.txt").exists() or (root / "pyproject.toml").exists():
        return ProjectKind.PYTHON
    return ProjectKind.UNKNOWN
