"""
PipelineOrchestrator - sequences the five stages of a jj-agent run.

1. Workspace analysis - snapshot the jj workspace
2. Context building - budgeted selection of relevant files
3. Planning - planning call, parse and structural validation
4. Execution - run steps in declared order, failures recorded per step
5. Review - grade the execution and suggest follow-ups

Each stage's output feeds the next. Any stage error aborts the run and is
raised as PipelineError carrying the partial PipelineState.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

from jjagent.agents import AIPlanner
from jjagent.exceptions import PipelineError
from jjagent.models import ExecutionResult, ReviewResult
from jjagent.pipeline import ContextBuilder, Reviewer, StepExecutor, WorkspaceAnalyzer
from jjagent.utils.logger import get_logger

from .models import PipelineStage, PipelineState, PipelineStatus

if TYPE_CHECKING:
    from jjagent.dependencies import PipelineDependencies

logger = get_logger(__name__)
T = TypeVar("T")

TOTAL_STAGES = 5


class PipelineOrchestrator:
    """
    Runs the full pipeline against one workspace.

    Example:
        deps = PipelineDependencies.from_settings(get_settings(), reporter=RichReporter())
        orchestrator = PipelineOrchestrator(deps)

        try:
            state = await orchestrator.run()
        except PipelineError as e:
            print(f"Failed in {e.stage}: {e}")
        else:
            print("approved" if state.approved else "not approved")
    """

    def __init__(self, dependencies: PipelineDependencies):
        self.deps = dependencies
        self.analyzer = WorkspaceAnalyzer(dependencies.root_path, dependencies.jj)
        self.context_builder = ContextBuilder(
            dependencies.files, dependencies.related_files, dependencies.budget
        )
        self.planner = AIPlanner(dependencies.planning_client)
        self.executor = StepExecutor(dependencies.jj, dependencies.files)
        self.reviewer = Reviewer(
            duration_limit_factor=dependencies.duration_limit_factor,
            optimize_suggestion_factor=dependencies.optimize_suggestion_factor,
        )

    def _send_progress(self, message: str) -> None:
        """Send progress update via callback if configured."""
        if self.deps.send_message:
            try:
                self.deps.send_message(message)
            except Exception as e:
                logger.warning(f"Failed to send progress update: {e}")

    def _report(self, method: str, *args: object) -> None:
        """Forward to the reporter; presentation failures never affect the run."""
        reporter = self.deps.reporter
        if reporter is None:
            return
        try:
            getattr(reporter, method)(*args)
        except Exception as e:
            logger.warning(f"Reporter {method} failed: {e}")

    async def run(self) -> PipelineState:
        """
        Execute the complete pipeline once.

        Returns:
            PipelineState: Completed state with every stage's output

        Raises:
            PipelineError: If any stage fails; `error.state` holds the partial state
        """
        state = PipelineState(root_path=str(self.deps.root_path))
        state.status = PipelineStatus.RUNNING

        logger.info(f"Starting pipeline run {state.run_id}: {state.root_path}")
        self._send_progress(f"🚀 Starting pipeline: {state.root_path}")

        try:
            state.workspace = await self._run_stage(
                state, PipelineStage.ANALYSIS, 1, "Analyzing workspace...",
                lambda: self.analyzer.analyze(),
            )
            self._report("show_workspace", state.workspace)

            workspace = state.workspace
            state.context = await self._run_stage(
                state, PipelineStage.CONTEXT, 2, "Building context...",
                lambda: self.context_builder.build(workspace, self.deps.intent),
            )
            self._report("show_context", state.context)

            context = state.context
            state.plan = await self._run_stage(
                state, PipelineStage.PLANNING, 3, "Creating execution plan...",
                lambda: self.planner.create_plan(context),
            )
            self._report("show_plan", state.plan)

            plan = state.plan
            state.execution = await self._run_stage(
                state, PipelineStage.EXECUTION, 4, "Executing plan...",
                lambda: self.executor.execute(plan),
            )
            self._report("show_execution", state.execution)

            execution = state.execution
            state.review = await self._run_stage(
                state, PipelineStage.REVIEW, 5, "Reviewing execution...",
                lambda: self._review(execution),
            )
            self._report("show_review", state.review)

        except Exception as e:
            stage = state.stage
            state.stage = PipelineStage.FAILED
            state.status = PipelineStatus.FAILED
            state.add_error(f"{stage.value} stage failed: {e}")
            state.end_time = time.time()

            self._send_progress(f"❌ Pipeline failed: {str(e)[:100]}")
            self._report("show_error", e)
            logger.error(f"Pipeline failed during {stage.value}: {e}", exc_info=True)
            raise PipelineError(
                f"Pipeline failed during {stage.value}: {e}",
                stage=stage.value,
                cause=e,
                state=state,
            ) from e

        state.stage = PipelineStage.COMPLETE
        state.status = PipelineStatus.COMPLETED
        state.end_time = time.time()

        verdict = "approved" if state.approved else "not approved"
        self._send_progress(f"🎉 Pipeline completed: {verdict} ({state.elapsed_time_ms/1000:.1f}s)")
        logger.info(
            f"Pipeline completed: {verdict}, "
            f"{state.execution.succeeded_count if state.execution else 0}/"
            f"{state.plan.total_steps if state.plan else 0} steps, "
            f"{state.elapsed_time_ms:.0f}ms"
        )
        return state

    async def _review(self, execution: ExecutionResult) -> ReviewResult:
        return self.reviewer.review(execution)

    async def _run_stage(
        self,
        state: PipelineState,
        stage: PipelineStage,
        number: int,
        title: str,
        action: Callable[[], Awaitable[T]],
    ) -> T:
        """Run one stage, recording its timing on the state."""
        state.stage = stage
        self._send_progress(f"Stage {number}/{TOTAL_STAGES}: {title}")
        self._report("show_step", title)

        stage_start = time.time()
        result = await action()
        duration_ms = (time.time() - stage_start) * 1000
        state.record_stage_time(stage, duration_ms)
        logger.debug(f"Stage {stage.value} completed in {duration_ms:.0f}ms")
        return result
