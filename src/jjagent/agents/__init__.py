"""
Agents for jj-agent.

- AIPlanner: turns a budgeted workspace Context into a validated ExecutionPlan.
"""

from .planner_agent import AIPlanner, parse_plan, strip_code_fences

__all__ = [
    "AIPlanner",
    "parse_plan",
    "strip_code_fences",
]
