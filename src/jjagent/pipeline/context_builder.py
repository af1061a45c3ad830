"""
Context Builder - relevance selection under a file/token budget.

Steps:
1. Candidates: changed files plus files related to them, deduplicated
2. Load every candidate concurrently (all-or-nothing)
3. Score: +100 changed, +50 under 1000 tokens, +25 under 5000 tokens
4. Stable sort by score, highest first
5. Greedy accept; a file that would overflow the budget is skipped and
   the scan moves on to the next one
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from jjagent.dependencies import ContextBudget, FileStore, RelatedFilesFinder
from jjagent.exceptions import ContextBuildError
from jjagent.models import ChangeKind, Context, ContextFile, WorkspaceSnapshot, estimate_tokens
from jjagent.utils.logger import get_logger

logger = get_logger(__name__)

CHANGED_FILE_SCORE = 100
SMALL_FILE_SCORE = 50
MEDIUM_FILE_SCORE = 25
SMALL_FILE_TOKENS = 1000
MEDIUM_FILE_TOKENS = 5000


def relevance_score(tokens: int, is_changed: bool) -> int:
    """Additive relevance score for a candidate file."""
    score = CHANGED_FILE_SCORE if is_changed else 0
    if tokens < SMALL_FILE_TOKENS:
        score += SMALL_FILE_SCORE
    elif tokens < MEDIUM_FILE_TOKENS:
        score += MEDIUM_FILE_SCORE
    return score


def rank_by_relevance(files: Sequence[ContextFile]) -> list[ContextFile]:
    """Sort by descending relevance; equal scores keep their input order."""
    return sorted(files, key=lambda f: -f.relevance)


def select_within_budget(
    files: Sequence[ContextFile], budget: ContextBudget
) -> list[ContextFile]:
    """
    Greedily take files in order while they fit the budget.

    Each file is considered exactly once. One that would exceed the file
    count or the token total is dropped and the scan continues.
    """
    selected: list[ContextFile] = []
    total_tokens = 0
    for file in files:
        if len(selected) + 1 > budget.max_files:
            logger.debug(f"Skipping {file.path}: file limit {budget.max_files} reached")
            continue
        if total_tokens + file.tokens > budget.max_tokens:
            logger.debug(
                f"Skipping {file.path}: {file.tokens} tokens would exceed "
                f"{budget.max_tokens} (used {total_tokens})"
            )
            continue
        selected.append(file)
        total_tokens += file.tokens
    return selected


class ContextBuilder:
    """
    Builds the planning Context from a WorkspaceSnapshot.

    Example:
        builder = ContextBuilder(files, ImportGraphFinder(root), ContextBudget(50, 32000))
        context = await builder.build(snapshot)
        print(f"{len(context.files)} files, {context.total_tokens} tokens")
    """

    def __init__(
        self,
        files: FileStore,
        related_files: RelatedFilesFinder,
        budget: ContextBudget | None = None,
    ) -> None:
        self.files = files
        self.related_files = related_files
        self.budget = budget or ContextBudget()

    async def build(self, workspace: WorkspaceSnapshot, intent: str | None = None) -> Context:
        """
        Select, load, rank and budget the context files.

        Raises:
            ContextBuildError: If related-file discovery or any file read fails
        """
        logger.info(
            f"Building context: budget={self.budget.max_files} files/"
            f"{self.budget.max_tokens} tokens"
        )

        paths = await self.candidate_paths(workspace)
        loaded = await self.load_files(paths)

        scored = [
            file.model_copy(
                update={"relevance": relevance_score(file.tokens, workspace.is_changed(file.path))}
            )
            for file in loaded
        ]
        selected = select_within_budget(rank_by_relevance(scored), self.budget)
        total_tokens = sum(file.tokens for file in selected)

        logger.info(
            f"Context built: {len(selected)}/{len(scored)} candidates, {total_tokens} tokens"
        )
        return Context(
            workspace=workspace,
            files=tuple(selected),
            total_tokens=total_tokens,
            intent=intent,
        )

    async def candidate_paths(self, workspace: WorkspaceSnapshot) -> list[str]:
        """Changed paths followed by related paths, first occurrence wins."""
        # Deleted files have no content left to read
        changed = [c.path for c in workspace.changed_files if c.kind is not ChangeKind.DELETED]
        try:
            related = await self.related_files.find_related(workspace.changed_paths)
        except Exception as exc:
            raise ContextBuildError(f"Failed to find related files: {exc}", cause=exc) from exc

        candidates = list(dict.fromkeys([*changed, *related]))
        logger.debug(f"{len(candidates)} candidates ({len(changed)} changed, {len(related)} related)")
        return candidates

    async def load_files(self, paths: Sequence[str]) -> list[ContextFile]:
        """Read all candidates concurrently; any failure fails the whole batch."""

        async def _load(path: str) -> ContextFile:
            content = await self.files.read_text(path)
            return ContextFile(path=path, content=content, tokens=estimate_tokens(content))

        try:
            return list(await asyncio.gather(*(_load(path) for path in paths)))
        except Exception as exc:
            raise ContextBuildError(f"Failed to load context files: {exc}", cause=exc) from exc
