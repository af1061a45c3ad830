"""
Exception hierarchy for jj-agent.

One exception class per error kind. Stage-level errors (workspace,
context, planning, execution, review) abort a run and are wrapped in
PipelineError by the orchestrator. Collaborator errors (jj commands,
file operations, configuration) are raised by the utilities and either
wrapped by the stage that called them or, inside a plan step, turned
into a failed StepResult.
"""

from __future__ import annotations


class JJAgentError(Exception):
    """Base class for all jj-agent errors.

    Attributes:
        message: Human-readable description
        cause: Lower-level error that triggered this one, if known
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------
# Stage errors
# ---------------------------------------------------------------


class WorkspaceError(JJAgentError):
    """Workspace analysis failed."""

    def __init__(
        self, message: str, path: str | None = None, cause: BaseException | None = None
    ) -> None:
        super().__init__(message, cause)
        self.path = path


class ContextBuildError(JJAgentError):
    """Context selection failed (e.g. a candidate file could not be read)."""


class PlanningError(JJAgentError):
    """The planning call failed or returned an unusable plan."""


class PlanParseError(PlanningError):
    """The planner response is not a valid ExecutionPlan."""


class PlanValidationError(PlanningError):
    """The plan's step graph is malformed (duplicate ids, missing deps, cycles)."""


class ExecutionError(JJAgentError):
    """Plan-level execution failure. Step failures are recorded as data, not raised."""

    def __init__(
        self, message: str, command: str | None = None, cause: BaseException | None = None
    ) -> None:
        super().__init__(message, cause)
        self.command = command


class ReviewError(JJAgentError):
    """Reviewing an execution result failed."""


class PipelineError(JJAgentError):
    """Any stage error propagated out of the orchestrator."""

    def __init__(
        self,
        message: str,
        stage: str | None = None,
        cause: BaseException | None = None,
        state: object | None = None,
    ) -> None:
        super().__init__(message, cause)
        self.stage = stage
        self.state = state


# ---------------------------------------------------------------
# Collaborator errors
# ---------------------------------------------------------------


class JJCommandError(JJAgentError):
    """A jj invocation could not be run or exited non-zero.

    The message is the command's stderr when it wrote any, so it can be
    shown to the user as-is.
    """

    def __init__(
        self,
        message: str,
        command: str,
        exit_code: int | None = None,
        stderr: str = "",
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause)
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr


class FileOperationError(JJAgentError):
    """Raised when file operations fail."""

    def __init__(self, message: str, path: str, cause: BaseException | None = None) -> None:
        super().__init__(message, cause)
        self.path = path


class FileNotFoundInWorkspaceError(FileOperationError):
    """The requested workspace file does not exist."""


class ConfigError(JJAgentError):
    """Invalid or missing configuration."""

    def __init__(
        self, message: str, key: str | None = None, cause: BaseException | None = None
    ) -> None:
        super().__init__(message, cause)
        self.key = key
