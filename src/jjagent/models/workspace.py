"""
Workspace snapshot models - output of the Workspace Analyzer.
Describes the jj workspace a pipeline run operates on.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ChangeKind(str, Enum):
    """How a file differs from the parent revision."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"


class DependencyKind(str, Enum):
    RUNTIME = "runtime"
    DEV = "dev"


class ProjectKind(str, Enum):
    """Project type detected from the manifests at the workspace root."""

    TYPESCRIPT = "typescript"
    JAVASCRIPT = "javascript"
    RUST = "rust"
    PYTHON = "python"
    UNKNOWN = "unknown"


class FileChange(BaseModel):
    """A single changed path in the working-copy revision."""

    path: str = Field(description="Workspace-relative path")
    kind: ChangeKind = Field(description="Type of change")

    model_config = ConfigDict(frozen=True)


class Dependency(BaseModel):
    """A dependency declared in one of the workspace manifests."""

    name: str
    version: str = Field(default="*", description="Version or requirement specifier")
    kind: DependencyKind = DependencyKind.RUNTIME

    model_config = ConfigDict(frozen=True)


class WorkspaceSnapshot(BaseModel):
    """
    State of the workspace at the start of a run.

    Produced once per pipeline run and never modified afterwards.

    Example:
        snapshot = WorkspaceSnapshot(
            root_path="/home/dev/project",
            jj_initialized=True,
            current_revision="qpvuntsm",
            changed_files=[FileChange(path="src/app.py", kind=ChangeKind.MODIFIED)],
            project_kind=ProjectKind.PYTHON,
        )
    """

    root_path: str = Field(description="Absolute path of the workspace root")

    jj_initialized: bool = Field(description="Whether `jj status` succeeds in the root")

    current_revision: str = Field(
        default="unknown", description="Change id of the working-copy revision"
    )

    changed_files: tuple[FileChange, ...] = Field(
        default=(), description="Changed files in the working-copy revision, in jj order"
    )

    dependencies: tuple[Dependency, ...] = Field(
        default=(), description="Dependencies declared by the workspace manifests"
    )

    project_kind: ProjectKind = Field(default=ProjectKind.UNKNOWN)

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "root_path": "/home/dev/project",
                "jj_initialized": True,
                "current_revision": "qpvuntsmwlqt",
                "changed_files": [{"path": "src/app.py", "kind": "modified"}],
                "dependencies": [{"name": "pydantic", "version": ">=2", "kind": "runtime"}],
                "project_kind": "python",
            }
        },
    )

    @property
    def changed_paths(self) -> list[str]:
        """Paths of every changed file, in order."""
        return [change.path for change in self.changed_files]

    def is_changed(self, path: str) -> bool:
        """Check whether a path is one of the changed files."""
        return any(change.path == path for change in self.changed_files)
