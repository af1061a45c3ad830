"""
Unit tests for the Planner Agent and its prompt.

The planning client is faked; no model is called.
"""

import pytest
from conftest import FakePlanningClient, make_snapshot

from jjagent.agents import AIPlanner
from jjagent.agents.prompts import build_planner_prompt, preview
from jjagent.exceptions import PlanningError, PlanParseError, PlanValidationError
from jjagent.models import ChangeKind, Context, ContextFile


def _context(content: str = "print('hi')\n", intent: str | None = None) -> Context:
    snapshot = make_snapshot("/home/dev/project", {"app.py": ChangeKind.MODIFIED})
    file = ContextFile(path="app.py", content=content, tokens=len(content) // 4 + 1)
    return Context(workspace=snapshot, files=(file,), total_tokens=file.tokens, intent=intent)


class FailingClient:
    async def complete(self, prompt: str) -> str:
        raise ConnectionError("model unavailable")


class TestPlannerPrompt:
    """Tests for build_planner_prompt."""

    def test_includes_workspace_and_files(self) -> None:
        prompt = build_planner_prompt(_context())

        assert "- Root: /home/dev/project" in prompt
        assert "- Current Revision: qpvuntsmwlqt" in prompt
        assert "- Changed Files: 1" in prompt
        assert "[modified] app.py" in prompt
        assert "### app.py\n```\nprint('hi')\n" in prompt
        assert '"estimatedDuration"' in prompt
        assert "## Goal" not in prompt

    def test_includes_intent(self) -> None:
        prompt = build_planner_prompt(_context(intent="Add a greeting file"))
        assert "## Goal\nAdd a greeting file" in prompt

    def test_truncates_long_files(self) -> None:
        prompt = build_planner_prompt(_context(content="a" * 1500))

        assert "a" * 1000 + "..." in prompt
        assert "a" * 1001 not in prompt

    def test_preview(self) -> None:
        assert preview("short") == "short"
        assert preview("x" * 1000) == "x" * 1000
        assert preview("x" * 1001) == "x" * 1000 + "..."


class TestAIPlanner:
    """Tests for AIPlanner.create_plan."""

    @pytest.mark.asyncio
    async def test_creates_validated_plan(self) -> None:
        client = FakePlanningClient(
            {
                "intent": "Greet",
                "steps": [
                    {"id": "1", "type": "analysis", "description": "Look", "dependencies": []},
                    {"id": "2", "type": "validation", "dependencies": ["1"]},
                ],
                "estimatedDuration": 2000,
                "risks": [],
            }
        )

        plan = await AIPlanner(client).create_plan(_context())

        assert plan.intent == "Greet"
        assert plan.step_ids == ["1", "2"]
        assert len(client.prompts) == 1
        assert "### app.py" in client.prompts[0]

    @pytest.mark.asyncio
    async def test_unparsable_response(self) -> None:
        with pytest.raises(PlanParseError):
            await AIPlanner(FakePlanningClient("Sure! Here is your plan.")).create_plan(_context())

    @pytest.mark.asyncio
    async def test_invalid_plan_rejected(self) -> None:
        client = FakePlanningClient(
            {"steps": [{"id": "1", "type": "analysis", "dependencies": ["7"]}]}
        )
        with pytest.raises(PlanValidationError, match="Step 1 depends on non-existent step 7"):
            await AIPlanner(client).create_plan(_context())

    @pytest.mark.asyncio
    async def test_client_failure_wrapped(self) -> None:
        with pytest.raises(PlanningError, match="model unavailable") as exc_info:
            await AIPlanner(FailingClient()).create_plan(_context())

        assert isinstance(exc_info.value.cause, ConnectionError)
