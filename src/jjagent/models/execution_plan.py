"""
Execution plan models - output of the planner.
Defines the steps the Executor runs, in declared order.

The wire format uses the planner's JSON keys (`type`, `estimatedDuration`);
both those aliases and the Python field names are accepted.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StepKind(str, Enum):
    """Closed set of operations a step may perform."""

    JJ_COMMAND = "jj_command"
    FILE_WRITE = "file_write"
    FILE_DELETE = "file_delete"
    ANALYSIS = "analysis"
    VALIDATION = "validation"


class FileOperationKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class FileOperation(BaseModel):
    """
    A file touched by a write or delete step.

    An unrecognised `operation` string is kept so only the owning step fails.
    """

    path: str = Field(description="Workspace-relative path")
    operation: FileOperationKind | str = Field(
        union_mode="left_to_right", description="create, update or delete"
    )
    content: str | None = Field(default=None, description="New content for create/update")

    model_config = ConfigDict(frozen=True)

    @property
    def operation_name(self) -> str:
        if isinstance(self.operation, FileOperationKind):
            return self.operation.value
        return str(self.operation)


class ExecutionStep(BaseModel):
    """
    Single step in the execution plan.

    `kind` holds a StepKind for the known kinds; any other string is kept
    as-is so the Executor can report it as an unknown step kind instead of
    the whole plan failing to parse.
    """

    id: str = Field(description="Identifier, unique within the plan")

    kind: StepKind | str = Field(
        alias="type",
        union_mode="left_to_right",
        description="jj_command, file_write, file_delete, analysis or validation",
    )

    description: str = Field(default="", description="Human-readable description of the step")

    command: str | None = Field(
        default=None, description="jj arguments, e.g. 'describe -m \"message\"' (jj_command only)"
    )

    files: tuple[FileOperation, ...] | None = Field(
        default=None, description="Files to write or delete (file_write/file_delete only)"
    )

    dependencies: tuple[str, ...] = Field(
        default=(), description="Ids of steps that must complete before this one"
    )

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "2",
                "type": "jj_command",
                "description": "Describe the change",
                "command": 'describe -m "Add greeting"',
                "dependencies": ["1"],
            }
        },
    )

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        # Planners sometimes emit numeric ids
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("dependencies", mode="before")
    @classmethod
    def _coerce_dependencies(cls, value: object) -> object:
        if value is None:
            return ()
        if isinstance(value, list | tuple):
            return tuple(str(v) if isinstance(v, int) and not isinstance(v, bool) else v for v in value)
        return value

    @property
    def kind_name(self) -> str:
        return self.kind.value if isinstance(self.kind, StepKind) else str(self.kind)


class ExecutionPlan(BaseModel):
    """
    Complete execution plan from the planner.

    Example:
        plan = ExecutionPlan(
            intent="Add a greeting file",
            steps=[...],
            estimated_duration_ms=5000,
            risks=["Overwrites a.txt"],
        )
    """

    intent: str = Field(default="Unknown intent", description="What the plan sets out to do")

    steps: tuple[ExecutionStep, ...] = Field(default=(), description="Steps in execution order")

    estimated_duration_ms: float = Field(
        default=0.0,
        ge=0.0,
        alias="estimatedDuration",
        description="Estimated total duration in milliseconds",
    )

    risks: tuple[str, ...] = Field(default=(), description="Free-text risk notes")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("steps", "risks", mode="before")
    @classmethod
    def _none_to_empty(cls, value: object) -> object:
        return () if value is None else value

    @field_validator("intent", mode="before")
    @classmethod
    def _default_intent(cls, value: object) -> object:
        return value or "Unknown intent"

    @field_validator("estimated_duration_ms", mode="before")
    @classmethod
    def _default_duration(cls, value: object) -> object:
        return value or 0.0

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    @property
    def step_ids(self) -> list[str]:
        return [step.id for step in self.steps]
