"""
LLM infrastructure for jj-agent.

Provides model routing, role-based selection, and the pydantic-ai
planning client.
"""

from .model_registry import ModelSpec, load_defaults_from_env
from .model_roles import ModelRole
from .planning_client import PydanticAIPlanningClient
from .pydantic_ai_adapter import AgentRunMetadata, PydanticAIAdapter
from .router import ModelRouter

__all__ = [
    "ModelRole",
    "ModelSpec",
    "load_defaults_from_env",
    "ModelRouter",
    "PydanticAIAdapter",
    "AgentRunMetadata",
    "PydanticAIPlanningClient",
]
