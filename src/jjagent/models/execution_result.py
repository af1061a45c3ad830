"""
Execution result models - output of the Step Executor.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .execution_plan import ExecutionPlan, ExecutionStep


class StepResult(BaseModel):
    """Outcome of one plan step. Produced for every step, failed or not."""

    step: ExecutionStep
    success: bool
    output: str | None = None
    error: str | None = None
    duration_ms: float = Field(ge=0.0, description="Wall time spent on the step")

    model_config = ConfigDict(frozen=True)


class ExecutionResult(BaseModel):
    """
    Outcome of running a whole plan.

    `step_results` lines up 1:1 with `plan.steps`; `success` is true only
    when every step succeeded.
    """

    plan: ExecutionPlan
    step_results: tuple[StepResult, ...] = ()
    success: bool
    duration_ms: float = Field(ge=0.0, description="Total wall time for the plan")

    model_config = ConfigDict(frozen=True)

    @property
    def failed_steps(self) -> list[StepResult]:
        return [result for result in self.step_results if not result.success]

    @property
    def succeeded_count(self) -> int:
        return sum(1 for result in self.step_results if result.success)
