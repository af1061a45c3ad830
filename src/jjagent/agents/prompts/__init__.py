"""System prompts for jj-agent agents."""

from .planner_prompts import (
    FILE_PREVIEW_CHARS,
    PLANNER_INSTRUCTIONS,
    PLANNER_SYSTEM_PROMPT,
    build_planner_prompt,
    preview,
)

__all__ = [
    "FILE_PREVIEW_CHARS",
    "PLANNER_SYSTEM_PROMPT",
    "PLANNER_INSTRUCTIONS",
    "build_planner_prompt",
    "preview",
]
