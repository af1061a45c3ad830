"""
Data Models package for jj-agent.

One record per pipeline stage: WorkspaceSnapshot -> Context ->
ExecutionPlan -> ExecutionResult -> ReviewResult.
"""

from .context import Context, ContextFile, estimate_tokens
from .execution_plan import (
    ExecutionPlan,
    ExecutionStep,
    FileOperation,
    FileOperationKind,
    StepKind,
)
from .execution_result import ExecutionResult, StepResult
from .review_result import ReviewResult, ValidationCheck, ValidationResult
from .workspace import (
    ChangeKind,
    Dependency,
    DependencyKind,
    FileChange,
    ProjectKind,
    WorkspaceSnapshot,
)

__all__ = [
    "ChangeKind",
    "Context",
    "ContextFile",
    "Dependency",
    "DependencyKind",
    "ExecutionPlan",
    "ExecutionResult",
    "ExecutionStep",
    "FileChange",
    "FileOperation",
    "FileOperationKind",
    "ProjectKind",
    "ReviewResult",
    "StepKind",
    "StepResult",
    "ValidationCheck",
    "ValidationResult",
    "WorkspaceSnapshot",
    "estimate_tokens",
]
