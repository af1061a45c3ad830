"""
PydanticAIAdapter - runs pydantic-ai agents over Gemini models with fallback.
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass, field
from datetime import datetime

from pydantic_ai import Agent
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.settings import ModelSettings

from jjagent.config.settings import get_settings
from jjagent.utils.logger import get_logger

from .model_roles import ModelRole
from .router import ModelRouter

logger = get_logger(__name__)


@dataclass
class AgentRunMetadata:
    """Outcome of the last completion, for logging and display."""

    model_used: str
    role: ModelRole
    duration_ms: float
    timestamp: datetime = field(default_factory=datetime.now)
    fallback_attempts: int = 0


class PydanticAIAdapter:
    """
    Unstructured completions with ordered model fallback.

    Example:
        adapter = PydanticAIAdapter()
        text = await adapter.run_raw_async(
            ModelRole.PLANNER,
            [{"content": "You are a planner..."}, {"content": "Workspace: ..."}],
        )
    """

    def __init__(self, router: ModelRouter | None = None, system_prompt: str | None = None):
        self.router = router or ModelRouter()
        self.system_prompt = system_prompt
        self.last_run: AgentRunMetadata | None = None

    def _export_api_key(self) -> None:
        api_key = get_settings().GOOGLE_API_KEY
        if api_key:
            os.environ["GOOGLE_API_KEY"] = api_key

    def _agents_with_fallback(self, role: ModelRole) -> list[tuple[Agent, str]]:
        """One agent per configured model, in priority order."""
        self._export_api_key()
        agents: list[tuple[Agent, str]] = []
        for spec in self.router.specs(role):
            model = spec.model if spec.model is not None else GoogleModel(spec.model_id)
            if self.system_prompt:
                agent = Agent(model, system_prompt=self.system_prompt)
            else:
                agent = Agent(model)
            agents.append((agent, spec.model_id))
        return agents

    async def run_raw_async(
        self,
        role: ModelRole,
        messages: list[dict[str, str]],
        *,
        temperature: float = 0.7,
        max_output_tokens: int = 4000,
        use_fallback: bool = True,
    ) -> str:
        """
        Run an unstructured text completion.

        Args:
            role: Model role for selection
            messages: List of message dicts with "content" key
            temperature: Sampling temperature
            max_output_tokens: Maximum tokens in response
            use_fallback: If True, retry with fallback models on failure

        Returns:
            str: Raw text response from the first model that succeeds
        """
        prompt = "\n".join(msg["content"] for msg in messages)
        agents = self._agents_with_fallback(role)
        if not use_fallback:
            agents = agents[:1]

        settings: ModelSettings = {"temperature": temperature, "max_tokens": max_output_tokens}
        last_exception: Exception | None = None

        for i, (agent, model_id) in enumerate(agents):
            try:
                logger.info(f"Attempting raw completion {i+1}/{len(agents)}: model={model_id}")
                start_time = time.time()
                result = await agent.run(prompt, model_settings=settings)
                duration = (time.time() - start_time) * 1000

                self.last_run = AgentRunMetadata(
                    model_used=model_id,
                    role=role,
                    duration_ms=duration,
                    fallback_attempts=i,
                )
                logger.info(
                    f"Raw completion succeeded on attempt {i+1}: "
                    f"{duration:.2f} ms, output length={len(result.output)}"
                )
                return result.output

            except Exception as e:
                last_exception = e
                logger.warning(f"Model {model_id} failed: {e}")
                if i < len(agents) - 1:
                    logger.info("Trying fallback model...")

        logger.error(f"All models failed for role {role.value}.")
        if last_exception:
            raise last_exception
        raise RuntimeError(f"No models available for role: {role.value}")
