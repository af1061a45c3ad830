"""Terminal rendering of pipeline results with rich."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from jjagent.models import Context, ExecutionPlan, ExecutionResult, ReviewResult, WorkspaceSnapshot


def format_ms(duration_ms: float) -> str:
    """Human-readable duration: 45ms, 1.2s, 2m 5s."""
    if duration_ms < 1:
        return "<1ms"
    if duration_ms < 1000:
        return f"{duration_ms:.0f}ms"
    seconds = duration_ms / 1000
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m {secs}s"


def status_text(success: bool) -> str:
    return "[green]✓[/green]" if success else "[red]✗[/red]"


class RichReporter:
    """
    Renders each stage's output to the terminal.

    Example:
        reporter = RichReporter()
        deps = PipelineDependencies.from_settings(settings, reporter=reporter)
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def show_step(self, message: str) -> None:
        self.console.print(f"\n[bold cyan]▶ {message}[/bold cyan]")

    def show_workspace(self, workspace: WorkspaceSnapshot) -> None:
        jj_state = "[green]yes[/green]" if workspace.jj_initialized else "[yellow]no[/yellow]"
        summary = (
            f"[bold]Root:[/bold] {escape(workspace.root_path)}\n"
            f"[bold]jj initialized:[/bold] {jj_state}\n"
            f"[bold]Revision:[/bold] {workspace.current_revision}\n"
            f"[bold]Project:[/bold] {workspace.project_kind.value}\n"
            f"[bold]Changed files:[/bold] {len(workspace.changed_files)}  |  "
            f"[bold]Dependencies:[/bold] {len(workspace.dependencies)}"
        )
        self.console.print(Panel(summary, title="Workspace", border_style="blue"))

        if workspace.changed_files:
            table = Table(title="Changed Files")
            table.add_column("Change", justify="center")
            table.add_column("Path", style="cyan")
            for change in workspace.changed_files:
                table.add_row(change.kind.value, escape(change.path))
            self.console.print(table)

    def show_context(self, context: Context) -> None:
        if not context.files:
            self.console.print("[dim]No context files selected.[/dim]")
            return
        table = Table(title=f"Context ({context.total_tokens} tokens)")
        table.add_column("Path", style="cyan")
        table.add_column("Tokens", justify="right")
        table.add_column("Relevance", justify="right")
        for file in context.files:
            table.add_row(escape(file.path), str(file.tokens), str(file.relevance))
        self.console.print(table)

    def show_plan(self, plan: ExecutionPlan) -> None:
        table = Table(title=f"Plan: {escape(plan.intent)}")
        table.add_column("ID", style="bold")
        table.add_column("Type", style="cyan")
        table.add_column("Description")
        table.add_column("Depends on")
        for step in plan.steps:
            detail = escape(step.description)
            if step.command:
                detail += f"\n[dim]jj {escape(step.command)}[/dim]"
            table.add_row(step.id, step.kind_name, detail, ", ".join(step.dependencies))
        self.console.print(table)
        self.console.print(f"[bold]Estimated duration:[/bold] {format_ms(plan.estimated_duration_ms)}")

        if plan.risks:
            risks = "\n".join(f"• {escape(risk)}" for risk in plan.risks)
            self.console.print(Panel(risks, title="Risks", border_style="yellow"))

    def show_execution(self, result: ExecutionResult) -> None:
        table = Table(title="Execution")
        table.add_column("ID", style="bold")
        table.add_column("Status", justify="center")
        table.add_column("Duration", justify="right")
        table.add_column("Output")
        for step_result in result.step_results:
            message = step_result.output if step_result.success else step_result.error
            table.add_row(
                step_result.step.id,
                status_text(step_result.success),
                format_ms(step_result.duration_ms),
                escape(message or ""),
            )
        self.console.print(table)
        self.console.print(
            f"{status_text(result.success)} {result.succeeded_count}/{len(result.step_results)} "
            f"steps succeeded in {format_ms(result.duration_ms)}"
        )

    def show_review(self, review: ReviewResult) -> None:
        lines = [
            f"{status_text(check.passed)} [bold]{check.name}[/bold]: {escape(check.message)}"
            for check in review.validation.checks
        ]
        if review.suggestions:
            lines.append("")
            lines.append("[bold]Suggestions:[/bold]")
            lines.extend(f"• {escape(suggestion)}" for suggestion in review.suggestions)

        verdict = "APPROVED" if review.approved else "NOT APPROVED"
        style = "green" if review.approved else "red"
        self.console.print(
            Panel("\n".join(lines), title=f"Review: {verdict}", border_style=style)
        )

    def show_error(self, error: BaseException) -> None:
        message = f"[bold red]{escape(str(error))}[/bold red]"
        cause = error.__cause__
        if cause is not None:
            message += f"\n[dim]Caused by: {escape(str(cause))}[/dim]"
        self.console.print(Panel(message, title="Error", border_style="red"))
