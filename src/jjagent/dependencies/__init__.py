"""
Dependencies for jj-agent pipeline stages.

Implements the dependency injection pattern: every stage receives its
collaborators explicitly, so tests can swap in fakes.
"""

from .base import (
    CommandRunner,
    ContextBudget,
    FileStore,
    PipelineDependencies,
    PlanningClient,
    RelatedFilesFinder,
    WorkspaceQueries,
)

__all__ = [
    "CommandRunner",
    "ContextBudget",
    "FileStore",
    "PipelineDependencies",
    "PlanningClient",
    "RelatedFilesFinder",
    "WorkspaceQueries",
]
