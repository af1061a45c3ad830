"""Data models for the Pipeline Orchestrator."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum

from jjagent.models import Context, ExecutionPlan, ExecutionResult, ReviewResult, WorkspaceSnapshot


class PipelineStage(str, Enum):
    """
    Pipeline execution stages.

    Tracks which stage the orchestrator is currently executing.
    """

    IDLE = "idle"
    ANALYSIS = "analysis"
    CONTEXT = "context"
    PLANNING = "planning"
    EXECUTION = "execution"
    REVIEW = "review"
    COMPLETE = "complete"
    FAILED = "failed"


class PipelineStatus(str, Enum):
    """Status of a pipeline run."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


def _new_run_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class PipelineState:
    """
    Complete state of one pipeline run.

    A fresh state is allocated for every run and never reused.

    Example:
        state = await orchestrator.run()
        print(f"Stage: {state.stage.value}")
        print(f"Approved: {state.approved}")
        print(f"Time: {state.elapsed_time_ms:.0f}ms")
    """

    # Identity
    run_id: str = field(default_factory=_new_run_id)
    """Unique run identifier"""

    root_path: str = ""
    """Workspace root the run analyzed"""

    # Pipeline tracking
    stage: PipelineStage = PipelineStage.IDLE
    """Current pipeline stage"""

    status: PipelineStatus = PipelineStatus.PENDING
    """Current execution status"""

    # Stage outputs (populated as the pipeline progresses)
    workspace: WorkspaceSnapshot | None = None
    """Result of workspace analysis"""

    context: Context | None = None
    """Result of context building"""

    plan: ExecutionPlan | None = None
    """Validated plan from the planner"""

    execution: ExecutionResult | None = None
    """Result of running the plan"""

    review: ReviewResult | None = None
    """Result of reviewing the execution"""

    errors: list[str] = field(default_factory=list)
    """List of error messages"""

    # Timing
    start_time: float = field(default_factory=time.time)
    """Run start timestamp"""

    end_time: float | None = None
    """Run end timestamp"""

    stage_timings: dict[str, float] = field(default_factory=dict)
    """Time spent in each stage (ms)"""

    @property
    def elapsed_time_ms(self) -> float:
        """Calculate elapsed time in milliseconds."""
        end = self.end_time if self.end_time else time.time()
        return (end - self.start_time) * 1000

    @property
    def is_complete(self) -> bool:
        return self.stage == PipelineStage.COMPLETE

    @property
    def is_failed(self) -> bool:
        return self.stage == PipelineStage.FAILED

    @property
    def approved(self) -> bool:
        """True only when the run completed and the review approved it."""
        return self.is_complete and self.review is not None and self.review.approved

    def add_error(self, error: str) -> None:
        self.errors.append(error)

    def record_stage_time(self, stage: PipelineStage, duration_ms: float) -> None:
        """Record time spent in a stage."""
        self.stage_timings[stage.value] = duration_ms

    def to_dict(self) -> dict[str, object]:
        """Summary of the state for serialization."""
        return {
            "run_id": self.run_id,
            "root_path": self.root_path,
            "stage": self.stage.value,
            "status": self.status.value,
            "approved": self.approved,
            "errors": self.errors,
            "elapsed_time_ms": self.elapsed_time_ms,
            "stage_timings": self.stage_timings,
            "plan_steps": self.plan.total_steps if self.plan else 0,
            "suggestions": list(self.review.suggestions) if self.review else [],
        }
