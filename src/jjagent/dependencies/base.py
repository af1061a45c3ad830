"""
Collaborator interfaces and dependency containers for the pipeline.

Each stage receives only the collaborators it needs. Production wiring
uses JJClient, WorkspaceFiles, ImportGraphFinder and the pydantic-ai
planning client; tests pass fakes that satisfy the same protocols.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from jjagent.config.settings import Settings
    from jjagent.models import FileChange
    from jjagent.reporting import Reporter


class CommandRunner(Protocol):
    """Version-control command runner."""

    async def execute_command(self, command: str) -> str: ...


class WorkspaceQueries(CommandRunner, Protocol):
    """jj queries needed to snapshot the workspace."""

    async def is_initialized(self) -> bool: ...

    async def current_revision(self) -> str: ...

    async def changed_files(self) -> list[FileChange]: ...


class FileStore(Protocol):
    """File I/O provider."""

    async def read_text(self, path: str) -> str: ...

    async def write_text(self, path: str, content: str) -> object: ...

    async def delete(self, path: str) -> object: ...

    async def exists(self, path: str) -> bool: ...


class RelatedFilesFinder(Protocol):
    """Dependency/related-files discoverer."""

    async def find_related(self, changed_paths: list[str]) -> list[str]: ...


class PlanningClient(Protocol):
    """Planning service client: prompt text in, raw response text out."""

    async def complete(self, prompt: str) -> str: ...


@dataclass(frozen=True)
class ContextBudget:
    """
    Limits on context selection.

    Example:
        budget = ContextBudget(max_files=50, max_tokens=32000)
    """

    max_files: int = 50
    """Maximum number of files in the context"""

    max_tokens: int = 32000
    """Maximum sum of the files' token estimates"""

    def __post_init__(self) -> None:
        if self.max_files < 0 or self.max_tokens < 0:
            raise ValueError("Context budget limits must be non-negative")


@dataclass
class PipelineDependencies:
    """
    Dependencies for the Pipeline Orchestrator.

    Example:
        deps = PipelineDependencies(
            root_path=Path("/home/dev/project"),
            jj=JJClient("/home/dev/project"),
            files=WorkspaceFiles("/home/dev/project"),
            related_files=ImportGraphFinder("/home/dev/project"),
            planning_client=PydanticAIPlanningClient(),
        )

        orchestrator = PipelineOrchestrator(deps)
        state = await orchestrator.run()
    """

    root_path: Path
    """Workspace root"""

    jj: WorkspaceQueries
    """jj runner used by the analyzer and by jj_command steps"""

    files: FileStore
    """File reads for context, writes/deletes for plan steps"""

    related_files: RelatedFilesFinder
    """Finds files structurally related to the changed ones"""

    planning_client: PlanningClient
    """LLM client that turns the planning prompt into plan JSON"""

    budget: ContextBudget = ContextBudget()
    """Context selection limits"""

    intent: str | None = None
    """Optional user intent passed to the planner"""

    reporter: Reporter | None = None
    """Presentation sink; None disables reporting"""

    duration_limit_factor: float = 2.0
    """Review fails when execution takes longer than this multiple of the estimate"""

    optimize_suggestion_factor: float = 1.5
    """Review suggests optimization above this multiple of the estimate"""

    send_message: Callable[[str], None] | None = None
    """Optional progress callback (one line per stage transition)"""

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        root_path: Path | None = None,
        intent: str | None = None,
        reporter: Reporter | None = None,
        planning_client: PlanningClient | None = None,
    ) -> PipelineDependencies:
        """Wire the production collaborators from settings."""
        from jjagent.llm import PydanticAIPlanningClient
        from jjagent.utils.file_operations import WorkspaceFiles
        from jjagent.utils.jj_utils import JJClient
        from jjagent.utils.related_files import ImportGraphFinder

        root = (root_path or Path(settings.WORKSPACE_ROOT)).resolve()
        return cls(
            root_path=root,
            jj=JJClient(root, binary=settings.JJ_BINARY, timeout_s=settings.JJ_TIMEOUT_S),
            files=WorkspaceFiles(root),
            related_files=ImportGraphFinder(root, scan_limit=settings.RELATED_FILES_SCAN_LIMIT),
            planning_client=planning_client
            or PydanticAIPlanningClient(
                temperature=settings.PLANNER_TEMPERATURE,
                max_output_tokens=settings.PLANNER_MAX_OUTPUT_TOKENS,
            ),
            budget=ContextBudget(
                max_files=settings.MAX_CONTEXT_FILES,
                max_tokens=settings.MAX_CONTEXT_TOKENS,
            ),
            intent=intent,
            reporter=reporter,
            duration_limit_factor=settings.DURATION_LIMIT_FACTOR,
            optimize_suggestion_factor=settings.OPTIMIZE_SUGGESTION_FACTOR,
        )
