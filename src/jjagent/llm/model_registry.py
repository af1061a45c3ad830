from __future__ import annotations

import os
from dataclasses import dataclass

from pydantic_ai.models import Model

from .model_roles import ModelRole


@dataclass(frozen=True)
class ModelSpec:
    """
    Single model option for a given logical role.

    `model` overrides the Gemini model built from `model_id`, e.g. with a
    pydantic-ai FunctionModel.
    """

    model_id: str
    model: Model | None = None


ENV_KEYS: dict[ModelRole, str] = {
    ModelRole.PLANNER: "MODEL_ROUTE_PLANNER",
}


def _split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _default_models_for(role: ModelRole) -> list[str]:
    """Default Gemini models when the env route is not set."""
    if role is ModelRole.PLANNER:
        # Reasoning first, fast models as fallbacks
        return [
            "gemini-2.5-pro",
            "gemini-2.5-flash",
            "gemini-2.0-flash",
        ]
    return []


def load_defaults_from_env() -> dict[ModelRole, list[ModelSpec]]:
    """
    Build an ordered list of ModelSpec per role from env.

    MODEL_ROUTE_PLANNER="gemini-2.5-pro,gemini-2.5-flash" sets the primary
    model and its fallbacks, in that order.
    """
    table: dict[ModelRole, list[ModelSpec]] = {}

    for role, env_key in ENV_KEYS.items():
        ids = _split_csv(os.getenv(env_key, "")) or _default_models_for(role)
        table[role] = [ModelSpec(model_id=model_id) for model_id in ids]
    return table
