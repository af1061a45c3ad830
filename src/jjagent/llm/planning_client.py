"""
Planning client backed by the pydantic-ai adapter.
"""

from __future__ import annotations

from jjagent.agents.prompts.planner_prompts import PLANNER_SYSTEM_PROMPT
from jjagent.utils.logger import get_logger

from .model_roles import ModelRole
from .pydantic_ai_adapter import PydanticAIAdapter

logger = get_logger(__name__)


class PydanticAIPlanningClient:
    """
    Sends the planning prompt to the PLANNER model route and returns raw text.

    Example:
        client = PydanticAIPlanningClient(temperature=0.7, max_output_tokens=4000)
        raw = await client.complete(prompt)
    """

    def __init__(
        self,
        adapter: PydanticAIAdapter | None = None,
        temperature: float = 0.7,
        max_output_tokens: int = 4000,
    ) -> None:
        self.adapter = adapter or PydanticAIAdapter(system_prompt=PLANNER_SYSTEM_PROMPT)
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens

    async def complete(self, prompt: str) -> str:
        logger.debug(f"Planning prompt: {len(prompt)} chars")
        return await self.adapter.run_raw_async(
            ModelRole.PLANNER,
            [{"content": prompt}],
            temperature=self.temperature,
            max_output_tokens=self.max_output_tokens,
        )
