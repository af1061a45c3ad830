"""
Prompts for the jj-agent Planner.

The Planner turns a budgeted workspace Context into an ExecutionPlan:
ordered steps that run jj commands, write or delete files, and
validate the result.
"""

from __future__ import annotations

from jjagent.models import Context

FILE_PREVIEW_CHARS = 1000

PLANNER_SYSTEM_PROMPT = """You are a JJ-first coding agent. You help developers work with \
Jujutsu (jj) version control and create precise execution plans.

Always answer with a single JSON object and nothing else."""

PLANNER_INSTRUCTIONS = """## Instructions
Create a step-by-step execution plan that:
1. Uses JJ commands for version control operations
2. Modifies or creates files as needed
3. Validates the results
4. Provides clear descriptions for each step

Steps run one at a time in the order you list them. List every step after
the steps it depends on.

Return the plan as a JSON object with the following structure:
{
  "intent": "string",
  "steps": [
    {
      "id": "string",
      "type": "jj_command" | "file_write" | "file_delete" | "analysis" | "validation",
      "description": "string",
      "command": "string (jj_command only, without the leading 'jj')",
      "files": [{"path": "string", "operation": "create|update|delete", "content": "string"}],
      "dependencies": ["string"]
    }
  ],
  "estimatedDuration": number (milliseconds),
  "risks": ["string"]
}"""


def preview(content: str, limit: int = FILE_PREVIEW_CHARS) -> str:
    """First `limit` characters of a file, with "..." when truncated."""
    if len(content) <= limit:
        return content
    return content[:limit] + "..."


def build_planner_prompt(context: Context) -> str:
    """
    Render the planning prompt for a Context.

    Example:
        prompt = build_planner_prompt(context)
        raw = await planning_client.complete(prompt)
    """
    workspace = context.workspace
    sections = [
        "Analyze the following workspace context and create a detailed execution plan.",
        "## Workspace Analysis\n"
        f"- Root: {workspace.root_path}\n"
        f"- Current Revision: {workspace.current_revision}\n"
        f"- Project Type: {workspace.project_kind.value}\n"
        f"- Changed Files: {len(workspace.changed_files)}",
    ]

    if workspace.changed_files:
        sections.append(
            "## Changed Files\n"
            + "\n".join(f"- [{c.kind.value}] {c.path}" for c in workspace.changed_files)
        )

    if context.intent:
        sections.append(f"## Goal\n{context.intent}")

    files = "\n".join(f"### {f.path}\n```\n{preview(f.content)}\n```\n" for f in context.files)
    sections.append(f"## Context Files\n{files}" if files else "## Context Files\n(none)")
    sections.append(PLANNER_INSTRUCTIONS)
    return "\n\n".join(sections)
