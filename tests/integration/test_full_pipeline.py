"""
Integration Test: Full Pipeline

Tests the complete end-to-end flow against a real directory:
1. Workspace analysis
2. Context building
3. Planning (canned planner response)
4. Execution (real file writes, scripted jj commands)
5. Review

jj itself and the language model are faked; everything else is the
production wiring.
"""

from pathlib import Path

import pytest
from conftest import FakeJJ, FakePlanningClient

from jjagent.models import ChangeKind, FileChange
from jjagent.orchestrator import PipelineOrchestrator, PipelineStage
from jjagent.utils.logger import get_logger

logger = get_logger(__name__)

PLAN = {
    "intent": "Create a.txt and describe the change",
    "steps": [
        {
            "id": "1",
            "type": "file_write",
            "description": "Create a.txt",
            "files": [{"path": "a.txt", "operation": "create", "content": "hi"}],
            "dependencies": [],
        },
        {
            "id": "2",
            "type": "jj_command",
            "description": "Describe the change",
            "command": "describe -m done",
            "dependencies": ["1"],
        },
    ],
    "estimatedDuration": 60000,
    "risks": [],
}

JJ_STDERR = "Error: There is no jj repo in \".\""


class TestFullPipeline:
    """Integration tests for the complete pipeline."""

    @pytest.mark.asyncio
    async def test_write_then_describe_is_approved(self, make_deps, workspace: Path) -> None:
        jj = FakeJJ()
        deps = make_deps(jj=jj, planning_client=FakePlanningClient(PLAN))

        state = await PipelineOrchestrator(deps).run()

        logger.info(f"Run {state.run_id}: {state.to_dict()}")
        assert state.stage is PipelineStage.COMPLETE
        assert (workspace / "a.txt").read_text() == "hi"
        assert jj.commands == ["describe -m done"]

        assert state.execution is not None
        assert state.execution.success is True
        assert [r.step.id for r in state.execution.step_results] == ["1", "2"]

        assert state.review is not None
        assert state.review.approved is True
        assert state.review.validation.passed is True
        assert state.review.suggestions == ()
        assert state.approved is True

    @pytest.mark.asyncio
    async def test_failed_jj_command_is_not_approved(self, make_deps, workspace: Path) -> None:
        jj = FakeJJ(failures={"describe -m done": JJ_STDERR})
        deps = make_deps(jj=jj, planning_client=FakePlanningClient(PLAN))

        state = await PipelineOrchestrator(deps).run()

        # A failed step is data, not a pipeline error
        assert state.stage is PipelineStage.COMPLETE
        assert (workspace / "a.txt").read_text() == "hi"

        execution = state.execution
        assert execution is not None
        assert execution.success is False
        step_two = execution.step_results[1]
        assert step_two.success is False
        assert step_two.error == JJ_STDERR

        review = state.review
        assert review is not None
        assert review.approved is False
        checks = {check.name: check for check in review.validation.checks}
        assert checks["no_errors"].passed is False
        assert checks["all_steps_completed"].passed is True
        assert review.suggestions == ("Address: 1 step(s) failed", "Retry failed steps: 2")
        assert state.approved is False

    @pytest.mark.asyncio
    async def test_changed_workspace_feeds_context(self, make_deps, workspace: Path) -> None:
        (workspace / "pyproject.toml").write_text(
            '[project]\nname = "demo"\ndependencies = ["rich>=13"]\n'
        )
        (workspace / "demo.py").write_text("import rich\n")
        jj = FakeJJ(changes=[FileChange(path="demo.py", kind=ChangeKind.ADDED)])
        client = FakePlanningClient({"steps": [], "estimatedDuration": 1000})

        state = await PipelineOrchestrator(
            make_deps(jj=jj, planning_client=client, related=["pyproject.toml"])
        ).run()

        assert state.workspace is not None
        assert state.workspace.project_kind.value == "python"
        assert [d.name for d in state.workspace.dependencies] == ["rich"]
        assert state.context is not None
        assert state.context.paths[0] == "demo.py"
        assert "pyproject.toml" in state.context.paths
        assert "- Project Type: python" in client.prompts[0]
