"""
Planner Agent Implementation for jj-agent.

The Planner sits between context building and execution:
1. Renders the budgeted Context into the planning prompt
2. Sends it to the planning client (Gemini via pydantic-ai by default)
3. Parses the JSON answer into an ExecutionPlan
4. Runs the structural plan checks before handing the plan on
"""

from __future__ import annotations

import json
import re
import time

from pydantic import ValidationError

from jjagent.dependencies import PlanningClient
from jjagent.exceptions import PlanningError, PlanParseError
from jjagent.models import Context, ExecutionPlan
from jjagent.pipeline.plan_validator import validate_plan
from jjagent.utils.logger import get_logger

from .prompts import build_planner_prompt

logger = get_logger(__name__)

CODE_FENCE = re.compile(r"^\s*```[\w-]*\s*\n(.*?)\n?\s*```\s*$", re.DOTALL)


def strip_code_fences(raw: str) -> str:
    """Unwrap a ```json ... ``` block; other text is returned stripped."""
    match = CODE_FENCE.match(raw)
    return (match.group(1) if match else raw).strip()


def parse_plan(raw: str) -> ExecutionPlan:
    """
    Parse the planner's raw answer into an ExecutionPlan.

    Raises:
        PlanParseError: If the answer is not a JSON object of the plan shape
    """
    text = strip_code_fences(raw)
    if not text:
        raise PlanParseError("Planner returned an empty response")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise PlanParseError(f"Planner response is not valid JSON: {exc}", cause=exc) from exc

    if not isinstance(data, dict):
        raise PlanParseError(
            f"Planner response must be a JSON object, got {type(data).__name__}"
        )

    try:
        return ExecutionPlan.model_validate(data)
    except ValidationError as exc:
        raise PlanParseError(
            f"Planner response does not match the plan schema: {exc.error_count()} error(s)",
            cause=exc,
        ) from exc


class AIPlanner:
    """
    Creates validated execution plans from a Context.

    Example:
        planner = AIPlanner(PydanticAIPlanningClient())
        plan = await planner.create_plan(context)
        print(f"{plan.total_steps} steps: {plan.intent}")
    """

    def __init__(self, client: PlanningClient) -> None:
        self.client = client

    async def create_plan(self, context: Context) -> ExecutionPlan:
        """
        Build the prompt, call the planning client, parse and validate.

        Raises:
            PlanParseError: The answer could not be parsed
            PlanValidationError: The plan's step graph is malformed
            PlanningError: The planning call itself failed
        """
        prompt = build_planner_prompt(context)
        logger.info(
            f"Requesting plan: {len(context.files)} context files, "
            f"{context.total_tokens} tokens, prompt {len(prompt)} chars"
        )

        start_time = time.time()
        try:
            raw = await self.client.complete(prompt)
        except PlanningError:
            raise
        except Exception as exc:
            raise PlanningError(f"Failed to create execution plan: {exc}", cause=exc) from exc
        duration = (time.time() - start_time) * 1000

        plan = validate_plan(parse_plan(raw))
        logger.info(
            f"Plan created in {duration:.0f}ms: {plan.total_steps} steps, "
            f"estimated {plan.estimated_duration_ms:.0f}ms, {len(plan.risks)} risks"
        )
        return plan
