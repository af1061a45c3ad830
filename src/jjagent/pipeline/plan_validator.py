"""
Plan Validator - structural checks on a planner-produced ExecutionPlan.

Checks run in order and the first violation wins:
1. Step ids are unique
2. Every dependency names an existing step
3. The dependency graph has no cycles
"""

from __future__ import annotations

from jjagent.exceptions import PlanValidationError
from jjagent.models import ExecutionPlan
from jjagent.utils.logger import get_logger

logger = get_logger(__name__)


def validate_plan(plan: ExecutionPlan) -> ExecutionPlan:
    """
    Return the plan unchanged if it is well-formed.

    Raises:
        PlanValidationError: Naming the duplicate id, the step with the
            missing dependency, or the steps forming a cycle

    Example:
        plan = validate_plan(plan)
    """
    ids = _check_unique_ids(plan)
    _check_dependencies_exist(plan, ids)
    _check_acyclic(plan)
    logger.debug(f"Plan validated: {plan.total_steps} steps")
    return plan


def _check_unique_ids(plan: ExecutionPlan) -> set[str]:
    seen: set[str] = set()
    for step in plan.steps:
        if step.id in seen:
            raise PlanValidationError(f"Duplicate step ID: {step.id}")
        seen.add(step.id)
    return seen


def _check_dependencies_exist(plan: ExecutionPlan, ids: set[str]) -> None:
    for step in plan.steps:
        for dependency in step.dependencies:
            if dependency not in ids:
                raise PlanValidationError(
                    f"Step {step.id} depends on non-existent step {dependency}"
                )


def _check_acyclic(plan: ExecutionPlan) -> None:
    """Depth-first search over the dependency edges, reporting the first cycle found."""
    graph = {step.id: list(step.dependencies) for step in plan.steps}
    visiting: list[str] = []
    done: set[str] = set()

    def visit(step_id: str) -> None:
        if step_id in done:
            return
        if step_id in visiting:
            cycle = visiting[visiting.index(step_id) :] + [step_id]
            raise PlanValidationError(f"Dependency cycle between steps: {' -> '.join(cycle)}")
        visiting.append(step_id)
        for dependency in graph[step_id]:
            visit(dependency)
        visiting.pop()
        done.add(step_id)

    for step_id in graph:
        visit(step_id)


def forward_dependencies(plan: ExecutionPlan) -> list[tuple[str, str]]:
    """(step, dependency) pairs where the dependency is declared after the step."""
    position = {step.id: index for index, step in enumerate(plan.steps)}
    return [
        (step.id, dependency)
        for index, step in enumerate(plan.steps)
        for dependency in step.dependencies
        if position.get(dependency, -1) > index
    ]
