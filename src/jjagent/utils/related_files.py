"""
Related-file discovery for context building.

Given the changed paths, finds workspace files that import them
(importers) and files they import (importees). Python imports are read
with `ast`; JavaScript/TypeScript relative specifiers with regexes.
Only files that exist inside the workspace are returned.
"""

from __future__ import annotations

import ast
import asyncio
import re
from collections.abc import Iterable, Iterator
from pathlib import Path, PurePosixPath

from jjagent.utils.logger import get_logger

logger = get_logger(__name__)

PYTHON_SUFFIXES = {".py"}
JS_SUFFIXES = {".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx", ".mts", ".cts"}
JS_RESOLVE_SUFFIXES = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".mts", ".cts")

EXCLUDED_DIRS = {
    ".git",
    ".jj",
    "node_modules",
    "dist",
    "build",
    "target",
    "__pycache__",
    ".venv",
    "venv",
    ".mypy_cache",
    ".pytest_cache",
}

JS_SPECIFIER = re.compile(
    r"""(?:\bfrom\s*|\bimport\s*\(\s*|\brequire\s*\(\s*|\bimport\s+)["'](\.{1,2}/[^"']+)["']"""
)


def iter_source_files(root: Path, limit: int) -> Iterator[Path]:
    """Walk the workspace for Python/JS/TS sources, skipping excluded and hidden dirs."""
    count = 0
    stack = [root]
    while stack:
        directory = stack.pop()
        try:
            entries = sorted(directory.iterdir())
        except OSError:
            continue
        for entry in entries:
            if entry.is_dir():
                if entry.name not in EXCLUDED_DIRS and not entry.name.startswith("."):
                    stack.append(entry)
            elif entry.suffix in PYTHON_SUFFIXES | JS_SUFFIXES:
                if count >= limit:
                    return
                count += 1
                yield entry


class ImportGraphFinder:
    """
    Resolves imports between workspace source files.

    Example:
        finder = ImportGraphFinder("/home/dev/project")
        related = await finder.find_related(["src/app/service.py"])
    """

    def __init__(self, root: str | Path, scan_limit: int = 2000) -> None:
        self.root = Path(root).resolve()
        self.scan_limit = scan_limit

    async def find_related(self, changed_paths: list[str]) -> list[str]:
        return await asyncio.to_thread(self._find_related, list(changed_paths))

    def _find_related(self, changed_paths: list[str]) -> list[str]:
        changed = set(changed_paths)
        related: dict[str, None] = {}

        # Importees of the changed files
        for path in changed_paths:
            for target in self.imports_of(path):
                if target not in changed:
                    related.setdefault(target)

        # Importers of the changed files
        if changed:
            for source in iter_source_files(self.root, self.scan_limit):
                rel = source.relative_to(self.root).as_posix()
                if rel in changed or rel in related:
                    continue
                if changed.intersection(self.imports_of(rel)):
                    related.setdefault(rel)

        logger.debug(f"Found {len(related)} related files for {len(changed)} changed files")
        return list(related)

    def imports_of(self, path: str) -> list[str]:
        """Workspace-relative paths of the files `path` imports."""
        suffix = PurePosixPath(path).suffix
        full_path = self.root / path
        if suffix not in PYTHON_SUFFIXES | JS_SUFFIXES or not full_path.is_file():
            return []
        try:
            source = full_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug(f"Skipping unreadable file {path}: {exc}")
            return []

        if suffix in PYTHON_SUFFIXES:
            return list(self._python_imports(path, source))
        return list(self._js_imports(path, source))

    # ----------------------------------------------------------------
    # Python
    # ----------------------------------------------------------------

    def _python_imports(self, path: str, source: str) -> Iterable[str]:
        try:
            tree = ast.parse(source, filename=path)
        except (SyntaxError, ValueError) as exc:
            logger.debug(f"Skipping unparsable file {path}: {exc}")
            return []

        package_parts = list(PurePosixPath(path).parent.parts)
        found: dict[str, None] = {}

        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    for target in self._resolve_module(alias.name.split(".")):
                        found.setdefault(target)
            elif isinstance(node, ast.ImportFrom):
                if node.level:
                    up = node.level - 1
                    if up > len(package_parts):
                        continue
                    base = package_parts[: len(package_parts) - up]
                    module = base + (node.module.split(".") if node.module else [])
                    candidates = [self._module_file(module)]
                    # from . import sibling
                    candidates += [self._module_file(module + [a.name]) for a in node.names]
                    for target in candidates:
                        if target:
                            found.setdefault(target)
                elif node.module:
                    parts = node.module.split(".")
                    for target in self._resolve_module(parts):
                        found.setdefault(target)
                    for alias in node.names:
                        for target in self._resolve_module(parts + [alias.name]):
                            found.setdefault(target)
        found.pop(path, None)
        return found

    def _resolve_module(self, parts: list[str]) -> list[str]:
        results = []
        for prefix in ([], ["src"]):
            target = self._module_file(prefix + parts)
            if target:
                results.append(target)
        return results

    def _module_file(self, parts: list[str]) -> str | None:
        if not parts:
            return None
        base = PurePosixPath(*parts)
        for candidate in (base.with_suffix(".py"), base / "__init__.py"):
            if (self.root / candidate).is_file():
                return candidate.as_posix()
        return None

    # ----------------------------------------------------------------
    # JavaScript / TypeScript
    # ----------------------------------------------------------------

    def _js_imports(self, path: str, source: str) -> Iterable[str]:
        directory = PurePosixPath(path).parent
        found: dict[str, None] = {}
        for specifier in JS_SPECIFIER.findall(source):
            target = self._resolve_js(directory, specifier)
            if target and target != path:
                found.setdefault(target)
        return found

    def _resolve_js(self, directory: PurePosixPath, specifier: str) -> str | None:
        joined = (self.root / directory / specifier).resolve()
        try:
            relative = joined.relative_to(self.root)
        except ValueError:
            return None
        if not relative.parts:
            return None

        candidates = [relative]
        candidates += [relative.with_name(relative.name + ext) for ext in JS_RESOLVE_SUFFIXES]
        candidates += [relative / f"index{ext}" for ext in JS_RESOLVE_SUFFIXES]
        # "./util.js" written for a .ts source
        if relative.suffix in {".js", ".jsx"}:
            candidates += [relative.with_suffix(ext) for ext in (".ts", ".tsx")]

        for candidate in candidates:
            if (self.root / candidate).is_file():
                return candidate.as_posix()
        return None
