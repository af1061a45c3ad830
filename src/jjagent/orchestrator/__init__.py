"""
Pipeline orchestration for jj-agent.

- PipelineOrchestrator: runs the five stages once per call
- WorkspaceWatcher: re-runs the pipeline when the workspace changes
"""

from .models import PipelineStage, PipelineState, PipelineStatus
from .orchestrator_agent import PipelineOrchestrator
from .watcher import WatchHandle, WorkspaceWatcher

__all__ = [
    "PipelineOrchestrator",
    "PipelineStage",
    "PipelineState",
    "PipelineStatus",
    "WatchHandle",
    "WorkspaceWatcher",
]
