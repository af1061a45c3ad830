"""
Review result models - output of the Outcome Reviewer.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .execution_result import ExecutionResult


class ValidationCheck(BaseModel):
    """Result of a single validation check."""

    name: str = Field(description="Check name (e.g. all_steps_completed)")
    passed: bool
    message: str

    model_config = ConfigDict(frozen=True)


class ValidationResult(BaseModel):
    """All checks run against an execution result."""

    passed: bool = Field(description="True only if every check passed")
    checks: tuple[ValidationCheck, ...] = ()

    model_config = ConfigDict(frozen=True)

    @property
    def failed_checks(self) -> list[ValidationCheck]:
        return [check for check in self.checks if not check.passed]


class ReviewResult(BaseModel):
    """
    Final verdict on a run.

    `approved` requires both that validation passed and that execution
    succeeded.
    """

    execution: ExecutionResult
    validation: ValidationResult
    suggestions: tuple[str, ...] = ()
    approved: bool

    model_config = ConfigDict(frozen=True)
