"""
Step Executor - runs plan steps one at a time in declared order.

Each step is dispatched by kind. Any error raised while running a step
is caught at the step boundary and recorded as a failed StepResult; the
remaining steps still run. Overall success is decided after the last
step, as the conjunction of every step's success.
"""

from __future__ import annotations

import asyncio
import time

from jjagent.dependencies import CommandRunner, FileStore
from jjagent.exceptions import ExecutionError, JJAgentError
from jjagent.models import (
    ExecutionPlan,
    ExecutionResult,
    ExecutionStep,
    FileOperationKind,
    StepKind,
    StepResult,
)
from jjagent.pipeline.plan_validator import forward_dependencies
from jjagent.utils.logger import get_logger

logger = get_logger(__name__)


class StepFailure(JJAgentError):
    """A step could not run because it is malformed (missing command, files or content, or an unknown file operation)."""


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


def _check_operations(step: ExecutionStep) -> None:
    for file in step.files or ():
        if not isinstance(file.operation, FileOperationKind):
            raise StepFailure(f"Unknown file operation: {file.operation_name} ({file.path})")


class StepExecutor:
    """
    Executes a validated ExecutionPlan.

    Example:
        executor = StepExecutor(JJClient(root), WorkspaceFiles(root))
        result = await executor.execute(plan)
        print(f"{result.succeeded_count}/{plan.total_steps} steps succeeded")
    """

    def __init__(self, jj: CommandRunner, files: FileStore) -> None:
        self.jj = jj
        self.files = files

    async def execute(self, plan: ExecutionPlan) -> ExecutionResult:
        """
        Run every step of the plan.

        Returns:
            ExecutionResult with one StepResult per step, in plan order

        Raises:
            ExecutionError: Only for plan-level failures, never for a failing step
        """
        logger.info(f"Executing plan: {plan.total_steps} steps - {plan.intent}")
        for step_id, dependency in forward_dependencies(plan):
            logger.warning(f"Step {step_id} runs before its dependency {dependency}")

        start = time.perf_counter()
        results: list[StepResult] = []
        try:
            for index, step in enumerate(plan.steps, start=1):
                logger.info(f"Step {index}/{plan.total_steps} [{step.kind_name}] {step.description}")
                results.append(await self.execute_step(step))
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            raise ExecutionError(f"Failed to execute plan: {exc}", cause=exc) from exc

        result = ExecutionResult(
            plan=plan,
            step_results=tuple(results),
            success=all(r.success for r in results),
            duration_ms=_elapsed_ms(start),
        )
        logger.info(
            f"Plan executed: {result.succeeded_count}/{plan.total_steps} steps succeeded "
            f"in {result.duration_ms:.0f}ms"
        )
        return result

    async def execute_step(self, step: ExecutionStep) -> StepResult:
        """Run one step, converting any error into a failed StepResult."""
        start = time.perf_counter()
        try:
            output = await self._dispatch(step)
        except Exception as exc:
            duration = _elapsed_ms(start)
            logger.warning(f"✗ Step {step.id} failed after {duration:.0f}ms: {exc}")
            return StepResult(step=step, success=False, error=str(exc), duration_ms=duration)

        duration = _elapsed_ms(start)
        logger.debug(f"✓ Step {step.id} completed in {duration:.0f}ms")
        return StepResult(step=step, success=True, output=output, duration_ms=duration)

    async def _dispatch(self, step: ExecutionStep) -> str:
        if step.kind is StepKind.JJ_COMMAND:
            return await self._run_jj_command(step)
        if step.kind is StepKind.FILE_WRITE:
            return await self._write_files(step)
        if step.kind is StepKind.FILE_DELETE:
            return await self._delete_files(step)
        if step.kind is StepKind.ANALYSIS:
            return "Analysis completed"
        if step.kind is StepKind.VALIDATION:
            return "Validation completed"
        raise StepFailure(f"Unknown step type: {step.kind_name}")

    async def _run_jj_command(self, step: ExecutionStep) -> str:
        if not step.command or not step.command.strip():
            raise StepFailure("JJ command step missing command")
        return await self.jj.execute_command(step.command)

    async def _write_files(self, step: ExecutionStep) -> str:
        if not step.files:
            raise StepFailure("File write step missing files")
        _check_operations(step)
        for file in step.files:
            if file.content is None:
                raise StepFailure(f"File write missing content: {file.path}")

        await asyncio.gather(*(self.files.write_text(f.path, f.content or "") for f in step.files))
        return f"Wrote {len(step.files)} file(s)"

    async def _delete_files(self, step: ExecutionStep) -> str:
        if not step.files:
            raise StepFailure("File delete step missing files")
        _check_operations(step)

        await asyncio.gather(*(self.files.delete(f.path) for f in step.files))
        return f"Deleted {len(step.files)} file(s)"
