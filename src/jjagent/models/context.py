"""
Context models - output of the Context Builder, input to the planner.
"""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field

from .workspace import WorkspaceSnapshot

CHARS_PER_TOKEN = 4


def estimate_tokens(content: str) -> int:
    """Rough token estimate: one token per four characters, rounded up."""
    return math.ceil(len(content) / CHARS_PER_TOKEN)


class ContextFile(BaseModel):
    """A file selected for the planning prompt."""

    path: str = Field(description="Workspace-relative path")
    content: str = Field(description="Full file content")
    tokens: int = Field(ge=0, description="Estimated size in tokens")
    relevance: int = Field(default=0, ge=0, description="Additive relevance score")

    model_config = ConfigDict(frozen=True)


class Context(BaseModel):
    """
    Budgeted, ranked set of files handed to the planner.

    Example:
        context = Context(workspace=snapshot, files=[...], total_tokens=1830)
        print(f"{len(context.files)} files, {context.total_tokens} tokens")
    """

    workspace: WorkspaceSnapshot = Field(description="Snapshot this context was built from")

    files: tuple[ContextFile, ...] = Field(
        default=(), description="Selected files, highest relevance first"
    )

    total_tokens: int = Field(default=0, ge=0, description="Sum of the selected files' tokens")

    intent: str | None = Field(default=None, description="Optional user intent for the planner")

    model_config = ConfigDict(frozen=True)

    @property
    def paths(self) -> list[str]:
        return [f.path for f in self.files]
