"""
Shared fixtures and fakes for jj-agent tests.

The fakes satisfy the collaborator protocols in jjagent.dependencies so
stages can be exercised without a jj binary or a language model.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from jjagent.config import refresh_settings
from jjagent.dependencies import ContextBudget, PipelineDependencies
from jjagent.exceptions import JJCommandError
from jjagent.models import ChangeKind, FileChange, ProjectKind, WorkspaceSnapshot
from jjagent.utils.file_operations import WorkspaceFiles


class FakeJJ:
    """In-memory jj: fixed query answers, scripted command outcomes."""

    def __init__(
        self,
        initialized: bool = True,
        revision: str = "qpvuntsmwlqt",
        changes: list[FileChange] | None = None,
        failures: dict[str, str] | None = None,
    ) -> None:
        self.initialized = initialized
        self.revision = revision
        self.changes = changes or []
        self.failures = failures or {}
        self.commands: list[str] = []

    async def is_initialized(self) -> bool:
        return self.initialized

    async def current_revision(self) -> str:
        return self.revision

    async def changed_files(self) -> list[FileChange]:
        return list(self.changes)

    async def execute_command(self, command: str) -> str:
        self.commands.append(command)
        if command in self.failures:
            raise JJCommandError(self.failures[command], command=command, exit_code=1)
        return f"ran: {command}"


class FakePlanningClient:
    """Returns a canned response and records the prompts it was given."""

    def __init__(self, response: str | dict) -> None:
        self.response = response if isinstance(response, str) else json.dumps(response)
        self.prompts: list[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.response


class FakeRelatedFiles:
    def __init__(self, related: list[str] | None = None, error: Exception | None = None) -> None:
        self.related = related or []
        self.error = error
        self.calls: list[list[str]] = []

    async def find_related(self, changed_paths: list[str]) -> list[str]:
        self.calls.append(list(changed_paths))
        if self.error:
            raise self.error
        return list(self.related)


def make_snapshot(
    root: Path | str = "/workspace",
    changes: dict[str, ChangeKind] | None = None,
) -> WorkspaceSnapshot:
    return WorkspaceSnapshot(
        root_path=str(root),
        jj_initialized=True,
        current_revision="qpvuntsmwlqt",
        changed_files=tuple(
            FileChange(path=path, kind=kind) for path, kind in (changes or {}).items()
        ),
        project_kind=ProjectKind.UNKNOWN,
    )


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Keep a developer's .env and environment out of the tests."""
    monkeypatch.chdir(tmp_path)
    for key in (
        "GOOGLE_API_KEY",
        "WORKSPACE_ROOT",
        "JJ_BINARY",
        "MAX_CONTEXT_FILES",
        "MAX_CONTEXT_TOKENS",
        "VERBOSE",
        "LOG_FILE",
    ):
        monkeypatch.delenv(key, raising=False)
    refresh_settings()
    yield
    refresh_settings()


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Iterator[None]:
    """CLI runs reconfigure the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Empty workspace directory."""
    root = tmp_path / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def files(workspace: Path) -> WorkspaceFiles:
    return WorkspaceFiles(workspace)


@pytest.fixture
def make_deps(workspace: Path, files: WorkspaceFiles):
    """Factory for PipelineDependencies wired with fakes."""

    def _make(
        jj: FakeJJ | None = None,
        planning_client: FakePlanningClient | None = None,
        related: list[str] | None = None,
        budget: ContextBudget | None = None,
        **kwargs: object,
    ) -> PipelineDependencies:
        return PipelineDependencies(
            root_path=workspace,
            jj=jj or FakeJJ(),
            files=files,
            related_files=FakeRelatedFiles(related),
            planning_client=planning_client or FakePlanningClient({"steps": []}),
            budget=budget or ContextBudget(),
            **kwargs,
        )

    return _make
