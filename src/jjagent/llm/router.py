"""
ModelRouter - role-based model selection with ordered fallbacks.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from jjagent.utils.logger import get_logger

from .model_registry import ModelSpec, load_defaults_from_env
from .model_roles import ModelRole

logger = get_logger(__name__)


class ModelRouter:
    """
    Picks the models configured for a role, primary first.

    Usage:

        router = ModelRouter()
        primary = router.choose(ModelRole.PLANNER)
        print(primary.model_id)  # e.g. "gemini-2.5-pro"

        for spec in router.specs(ModelRole.PLANNER):
            print(spec.model_id)
    """

    def __init__(self, table: Mapping[ModelRole, list[ModelSpec]] | None = None) -> None:
        self._table: Mapping[ModelRole, list[ModelSpec]] = table or load_defaults_from_env()

        for role, specs in self._table.items():
            model_ids = [spec.model_id for spec in specs]
            logger.debug(
                f"Role {role.value}: primary={model_ids[:1]}, fallbacks={model_ids[1:]}"
            )

    def specs(self, role: ModelRole) -> list[ModelSpec]:
        """All model specs for a role, in priority order."""
        specs = self._table.get(role, [])
        if not specs:
            logger.error(f"No model specs configured for role: {role.value}")
            raise ValueError(f"No model specs configured for role: {role.value}")
        return list(specs)

    def choose(self, role: ModelRole) -> ModelSpec:
        """Primary model spec for the role."""
        return self.specs(role)[0]

    def fallbacks(self, role: ModelRole) -> Iterable[ModelSpec]:
        """Fallback model specs for the role (excludes the primary)."""
        return iter(self.specs(role)[1:])

    def get_config_summary(self) -> dict[str, dict[str, object]]:
        """Primary, fallbacks and model count per role."""
        return {
            role.value: {
                "primary": specs[0].model_id,
                "fallbacks": [spec.model_id for spec in specs[1:]],
                "total_models": len(specs),
            }
            for role, specs in self._table.items()
        }
