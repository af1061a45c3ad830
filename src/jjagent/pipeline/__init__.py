"""
Pipeline stages for jj-agent.

- WorkspaceAnalyzer: snapshot the jj workspace
- ContextBuilder: pick and budget the files the planner sees
- validate_plan: structural checks on the planner's output
- StepExecutor: run plan steps with per-step failure isolation
- Reviewer: grade the execution and suggest follow-ups
"""

from .context_builder import ContextBuilder, rank_by_relevance, relevance_score, select_within_budget
from .plan_validator import validate_plan
from .reviewer import Reviewer
from .step_executor import StepExecutor
from .workspace_analyzer import WorkspaceAnalyzer

__all__ = [
    "ContextBuilder",
    "Reviewer",
    "StepExecutor",
    "WorkspaceAnalyzer",
    "rank_by_relevance",
    "relevance_score",
    "select_within_budget",
    "validate_plan",
]
