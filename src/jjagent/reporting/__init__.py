"""
Presentation of pipeline progress and results.

- Reporter: protocol the orchestrator reports through
- RichReporter: terminal tables and panels
- NullReporter: discards everything
"""

from .base import NullReporter, Reporter
from .rich_reporter import RichReporter, format_ms

__all__ = ["NullReporter", "Reporter", "RichReporter", "format_ms"]
