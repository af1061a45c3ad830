import asyncio
import logging
from pathlib import Path

import typer
from pydantic import ValidationError
from rich import print as rprint
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from jjagent.config import Settings, get_settings
from jjagent.dependencies import PipelineDependencies
from jjagent.exceptions import ConfigError, PipelineError
from jjagent.orchestrator import PipelineOrchestrator, PipelineState, WorkspaceWatcher
from jjagent.reporting import RichReporter
from jjagent.utils.logger import get_logger, setup_logging

app = typer.Typer(no_args_is_help=True, help="JJ-first coding agent.")
logger = get_logger(__name__)

EXIT_APPROVED = 0
EXIT_NOT_APPROVED = 1
EXIT_ERROR = 2

RootOption = typer.Option(None, "--root", "-r", help="Workspace root (default: WORKSPACE_ROOT)")
MaxFilesOption = typer.Option(None, "--max-files", min=0, help="Maximum context files")
MaxTokensOption = typer.Option(None, "--max-tokens", min=0, help="Maximum context tokens")
IntentOption = typer.Option(None, "--intent", "-i", help="What you want the agent to do")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Debug logging")
LogFileOption = typer.Option(None, "--log-file", help="Also write debug logs to this file")


def load_settings(max_files: int | None = None, max_tokens: int | None = None) -> Settings:
    """Effective settings: environment/.env with command-line overrides applied."""
    try:
        settings = get_settings()
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}", cause=e) from e

    overrides: dict[str, object] = {}
    if max_files is not None:
        overrides["MAX_CONTEXT_FILES"] = max_files
    if max_tokens is not None:
        overrides["MAX_CONTEXT_TOKENS"] = max_tokens
    return settings.model_copy(update=overrides) if overrides else settings


def configure_logging(settings: Settings, verbose: bool, log_file: Path | None) -> None:
    level = logging.DEBUG if verbose or settings.VERBOSE else logging.INFO
    path = log_file or (Path(settings.LOG_FILE) if settings.LOG_FILE else None)
    setup_logging(level=level, log_file=path)


def build_dependencies(
    settings: Settings, root: Path | None, intent: str | None
) -> PipelineDependencies:
    return PipelineDependencies.from_settings(
        settings, root_path=root, intent=intent, reporter=RichReporter()
    )


async def run_once(deps: PipelineDependencies) -> PipelineState:
    return await PipelineOrchestrator(deps).run()


def _startup(
    max_files: int | None,
    max_tokens: int | None,
    verbose: bool,
    log_file: Path | None,
) -> Settings:
    try:
        settings = load_settings(max_files, max_tokens)
    except ConfigError as e:
        rprint(f"[bold red]{escape(str(e))}[/bold red]")
        raise typer.Exit(code=EXIT_ERROR) from e
    configure_logging(settings, verbose, log_file)
    return settings


@app.command()
def run(
    root: Path = RootOption,
    max_files: int = MaxFilesOption,
    max_tokens: int = MaxTokensOption,
    intent: str = IntentOption,
    verbose: bool = VerboseOption,
    log_file: Path = LogFileOption,
) -> None:
    """Analyze, plan, execute and review once."""
    settings = _startup(max_files, max_tokens, verbose, log_file)
    deps = build_dependencies(settings, root, intent)

    try:
        state = asyncio.run(run_once(deps))
    except PipelineError as e:
        logger.debug(f"Run failed at stage {e.stage}")
        raise typer.Exit(code=EXIT_ERROR) from e

    raise typer.Exit(code=EXIT_APPROVED if state.approved else EXIT_NOT_APPROVED)


async def watch_workspace(deps: PipelineDependencies, watcher: WorkspaceWatcher) -> None:
    """Run once, then again after every settled change, until cancelled."""

    async def run_logged(paths: list[str] | None = None) -> None:
        if paths:
            rprint(f"[dim]Changed: {', '.join(paths[:5])}{' ...' if len(paths) > 5 else ''}[/dim]")
        try:
            state = await run_once(deps)
        except PipelineError as e:
            logger.error(f"Run failed: {e}")
            return
        verdict = "[green]approved[/green]" if state.approved else "[red]not approved[/red]"
        rprint(f"Run {state.run_id}: {verdict}")

    await run_logged()
    handle = await watcher.start(run_logged)
    rprint(f"[cyan]Watching {watcher.root} for changes (Ctrl+C to stop)...[/cyan]")
    try:
        await asyncio.Event().wait()
    finally:
        await watcher.stop(handle)


@app.command()
def watch(
    root: Path = RootOption,
    max_files: int = MaxFilesOption,
    max_tokens: int = MaxTokensOption,
    intent: str = IntentOption,
    verbose: bool = VerboseOption,
    log_file: Path = LogFileOption,
) -> None:
    """Run once, then re-run whenever the workspace changes."""
    settings = _startup(max_files, max_tokens, verbose, log_file)
    if not settings.WATCH_ENABLED:
        rprint("[yellow]Watching is disabled (WATCH_ENABLED=false)[/yellow]")
        raise typer.Exit(code=EXIT_ERROR)

    deps = build_dependencies(settings, root, intent)
    watcher = WorkspaceWatcher(
        deps.root_path,
        debounce_ms=settings.WATCH_DEBOUNCE_MS,
        poll_interval_ms=settings.WATCH_POLL_INTERVAL_MS,
    )
    try:
        asyncio.run(watch_workspace(deps, watcher))
    except KeyboardInterrupt:
        rprint("\n[dim]Stopped.[/dim]")


@app.command()
def config() -> None:
    """Print the effective settings (secrets masked)."""
    settings = _startup(None, None, False, None)

    table = Table(title="jj-agent settings")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in settings.masked().items():
        table.add_row(key, "" if value is None else str(value))
    Console().print(table)


def main() -> None:
    """Entry point for the CLI."""
    app()
