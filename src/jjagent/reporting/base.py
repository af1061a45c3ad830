"""Presentation sink for pipeline progress and results."""

from __future__ import annotations

from typing import Protocol

from jjagent.models import Context, ExecutionPlan, ExecutionResult, ReviewResult, WorkspaceSnapshot


class Reporter(Protocol):
    """Receives each stage's output for display. Must not affect the run."""

    def show_step(self, message: str) -> None: ...

    def show_workspace(self, workspace: WorkspaceSnapshot) -> None: ...

    def show_context(self, context: Context) -> None: ...

    def show_plan(self, plan: ExecutionPlan) -> None: ...

    def show_execution(self, result: ExecutionResult) -> None: ...

    def show_review(self, review: ReviewResult) -> None: ...

    def show_error(self, error: BaseException) -> None: ...


class NullReporter:
    """Reporter that discards everything."""

    def show_step(self, message: str) -> None:
        pass

    def show_workspace(self, workspace: WorkspaceSnapshot) -> None:
        pass

    def show_context(self, context: Context) -> None:
        pass

    def show_plan(self, plan: ExecutionPlan) -> None:
        pass

    def show_execution(self, result: ExecutionResult) -> None:
        pass

    def show_review(self, review: ReviewResult) -> None:
        pass

    def show_error(self, error: BaseException) -> None:
        pass
