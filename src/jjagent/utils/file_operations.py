"""
File operations for reading and applying plan changes inside a workspace.

All paths are workspace-relative. Absolute paths and paths that resolve
outside the workspace root are rejected before touching the disk.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from jjagent.exceptions import FileNotFoundInWorkspaceError, FileOperationError
from jjagent.utils.logger import get_logger

logger = get_logger(__name__)


class WorkspaceFiles:
    """
    File I/O provider rooted at a workspace directory.

    Example:
        files = WorkspaceFiles("/home/dev/project")
        await files.write_text("docs/notes.md", "# Notes\\n")
        content = await files.read_text("docs/notes.md")
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    def resolve(self, path: str) -> Path:
        """
        Map a workspace-relative path to an absolute one.

        Raises:
            FileOperationError: For absolute paths or paths escaping the root
        """
        if Path(path).is_absolute():
            raise FileOperationError(f"Absolute path not allowed: {path}", path=path)

        full_path = (self.root / path).resolve()
        try:
            full_path.relative_to(self.root)
        except ValueError as exc:
            raise FileOperationError(f"Path outside workspace: {path}", path=path) from exc
        return full_path

    async def read_text(self, path: str) -> str:
        """Read a file as UTF-8; undecodable bytes become U+FFFD."""
        full_path = self.resolve(path)
        try:
            return await asyncio.to_thread(full_path.read_text, encoding="utf-8", errors="replace")
        except FileNotFoundError as exc:
            raise FileNotFoundInWorkspaceError(
                f"File not found: {path}", path=path, cause=exc
            ) from exc
        except OSError as exc:
            raise FileOperationError(f"Failed to read {path}: {exc}", path=path, cause=exc) from exc

    async def write_text(self, path: str, content: str) -> Path:
        """Write content, creating parent directories as needed."""
        full_path = self.resolve(path)

        def _write() -> None:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_text(content, encoding="utf-8")

        try:
            await asyncio.to_thread(_write)
        except OSError as exc:
            raise FileOperationError(
                f"Failed to write {path}: {exc}", path=path, cause=exc
            ) from exc

        logger.debug(f"Wrote {path} ({len(content)} chars)")
        return full_path

    async def delete(self, path: str) -> Path:
        full_path = self.resolve(path)
        try:
            await asyncio.to_thread(full_path.unlink)
        except FileNotFoundError as exc:
            raise FileNotFoundInWorkspaceError(
                f"Cannot delete missing file: {path}", path=path, cause=exc
            ) from exc
        except OSError as exc:
            raise FileOperationError(
                f"Failed to delete {path}: {exc}", path=path, cause=exc
            ) from exc

        logger.debug(f"Deleted {path}")
        return full_path

    async def exists(self, path: str) -> bool:
        try:
            full_path = self.resolve(path)
        except FileOperationError:
            return False
        return await asyncio.to_thread(full_path.is_file)
