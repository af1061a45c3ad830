"""
Unit tests for WorkspaceFiles.
"""

from pathlib import Path

import pytest

from jjagent.exceptions import FileNotFoundInWorkspaceError, FileOperationError
from jjagent.utils.file_operations import WorkspaceFiles


class TestWorkspaceFiles:
    """Tests for WorkspaceFiles."""

    @pytest.mark.asyncio
    async def test_write_read_delete(self, workspace: Path, files: WorkspaceFiles) -> None:
        written = await files.write_text("docs/notes.md", "# Notes\n")

        assert written == workspace.resolve() / "docs" / "notes.md"
        assert await files.exists("docs/notes.md") is True
        assert await files.read_text("docs/notes.md") == "# Notes\n"

        await files.delete("docs/notes.md")
        assert await files.exists("docs/notes.md") is False

    @pytest.mark.asyncio
    async def test_missing_file(self, files: WorkspaceFiles) -> None:
        with pytest.raises(FileNotFoundInWorkspaceError) as exc_info:
            await files.read_text("nope.txt")
        assert exc_info.value.path == "nope.txt"

        with pytest.raises(FileNotFoundInWorkspaceError, match="Cannot delete missing file"):
            await files.delete("nope.txt")

    @pytest.mark.parametrize("path", ["../outside.txt", "a/../../outside.txt"])
    def test_escaping_paths_rejected(self, files: WorkspaceFiles, path: str) -> None:
        with pytest.raises(FileOperationError, match="outside workspace"):
            files.resolve(path)

    def test_absolute_path_rejected(self, files: WorkspaceFiles, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError, match="Absolute path"):
            files.resolve(str(tmp_path / "x.txt"))

    @pytest.mark.asyncio
    async def test_exists_outside_workspace_is_false(self, files: WorkspaceFiles) -> None:
        assert await files.exists("../workspace") is False

    @pytest.mark.asyncio
    async def test_non_utf8_bytes_replaced(self, workspace: Path, files: WorkspaceFiles) -> None:
        (workspace / "legacy.py").write_bytes("name = 'café'\n".encode("latin-1"))

        content = await files.read_text("legacy.py")

        assert content == "name = 'caf\ufffd'\n"
