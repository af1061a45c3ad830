"""
Workspace Analyzer - first pipeline stage.

Snapshots the jj workspace: whether jj is initialized, the working-copy
change id, changed files, declared dependencies and project kind.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from jjagent.dependencies import WorkspaceQueries
from jjagent.exceptions import JJCommandError, WorkspaceError
from jjagent.models import WorkspaceSnapshot
from jjagent.utils.logger import get_logger
from jjagent.utils.manifests import detect_project_kind, read_dependencies

logger = get_logger(__name__)


class WorkspaceAnalyzer:
    """
    Builds the WorkspaceSnapshot for a run.

    Example:
        analyzer = WorkspaceAnalyzer(root, JJClient(root))
        snapshot = await analyzer.analyze()
    """

    def __init__(self, root_path: str | Path, jj: WorkspaceQueries) -> None:
        self.root_path = Path(root_path).resolve()
        self.jj = jj

    async def analyze(self) -> WorkspaceSnapshot:
        """
        Analyze the workspace.

        Raises:
            WorkspaceError: If the root is missing or jj queries fail on an
                initialized workspace
        """
        if not self.root_path.is_dir():
            raise WorkspaceError(
                f"Workspace root does not exist: {self.root_path}", path=str(self.root_path)
            )

        logger.info(f"Analyzing workspace: {self.root_path}")

        jj_initialized = await self.jj.is_initialized()
        if not jj_initialized:
            logger.warning(f"No jj repository at {self.root_path}; continuing without changes")

        try:
            revision, changed_files, dependencies, project_kind = await asyncio.gather(
                self._revision(jj_initialized),
                self._changed_files(jj_initialized),
                asyncio.to_thread(read_dependencies, self.root_path),
                asyncio.to_thread(detect_project_kind, self.root_path),
            )
        except JJCommandError as exc:
            raise WorkspaceError(
                f"Failed to analyze workspace: {exc}", path=str(self.root_path), cause=exc
            ) from exc

        snapshot = WorkspaceSnapshot(
            root_path=str(self.root_path),
            jj_initialized=jj_initialized,
            current_revision=revision,
            changed_files=tuple(changed_files),
            dependencies=tuple(dependencies),
            project_kind=project_kind,
        )

        logger.info(
            f"Workspace analyzed: revision={snapshot.current_revision}, "
            f"changed={len(snapshot.changed_files)}, "
            f"dependencies={len(snapshot.dependencies)}, "
            f"kind={snapshot.project_kind.value}"
        )
        return snapshot

    async def _revision(self, jj_initialized: bool) -> str:
        if not jj_initialized:
            return "unknown"
        return await self.jj.current_revision()

    async def _changed_files(self, jj_initialized: bool) -> list:
        if not jj_initialized:
            return []
        return await self.jj.changed_files()
