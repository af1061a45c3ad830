"""
Jujutsu (jj) command utilities.

Provides:
- Running jj subcommands in a workspace and returning their stdout
- Workspace queries used by the analyzer (status, current change id)
- Executing plan-supplied command strings
"""

from __future__ import annotations

import asyncio
import re
import shlex
import subprocess
from collections.abc import Sequence
from pathlib import Path

from jjagent.exceptions import JJCommandError
from jjagent.models import ChangeKind, FileChange
from jjagent.utils.logger import get_logger

logger = get_logger(__name__)

# "A path/to/file", "M path/to/file", "D path/to/file"
STATUS_LINE = re.compile(r"^([AMD])\s+(.+)$")

STATUS_KINDS = {
    "A": ChangeKind.ADDED,
    "M": ChangeKind.MODIFIED,
    "D": ChangeKind.DELETED,
}


def parse_status_output(output: str) -> list[FileChange]:
    """
    Parse `jj status` output into file changes.

    Lines that are not A/M/D entries (headers, conflict notes, the
    "Working copy" summary) are ignored.

    Example:
        changes = parse_status_output("Working copy changes:\\nM src/app.py\\n")
        # [FileChange(path='src/app.py', kind=ChangeKind.MODIFIED)]
    """
    changes: list[FileChange] = []
    for line in output.splitlines():
        match = STATUS_LINE.match(line.strip())
        if match:
            status, path = match.groups()
            changes.append(FileChange(path=path.strip(), kind=STATUS_KINDS[status]))
    return changes


def split_command(command: str) -> list[str]:
    """
    Split a plan command string into jj arguments.

    A leading "jj" is dropped so both `describe -m x` and `jj describe -m x`
    are accepted.
    """
    args = shlex.split(command)
    if args and args[0] == "jj":
        args = args[1:]
    return args


class JJClient:
    """
    Runs jj in a fixed workspace directory.

    Example:
        client = JJClient("/home/dev/project")
        revision = await client.current_revision()
        output = await client.execute_command('describe -m "Add greeting"')
    """

    def __init__(
        self,
        workspace_path: str | Path,
        binary: str = "jj",
        timeout_s: int = 60,
    ) -> None:
        self.workspace_path = Path(workspace_path)
        self.binary = binary
        self.timeout_s = timeout_s

    def run(self, args: Sequence[str]) -> str:
        """
        Run `jj <args>` and return stdout.

        Raises:
            JJCommandError: If jj cannot be started, times out or exits non-zero
        """
        command = " ".join(args)
        logger.debug(f"Running: {self.binary} {command} (cwd={self.workspace_path})")

        try:
            result = subprocess.run(
                [self.binary, *args],
                cwd=self.workspace_path,
                capture_output=True,
                text=True,
                timeout=self.timeout_s,
            )
        except subprocess.TimeoutExpired as exc:
            raise JJCommandError(
                f"jj {command} timed out after {self.timeout_s}s", command=command, cause=exc
            ) from exc
        except OSError as exc:
            raise JJCommandError(
                f"Failed to run {self.binary}: {exc}", command=command, cause=exc
            ) from exc

        if result.returncode != 0:
            stderr = result.stderr.strip()
            raise JJCommandError(
                stderr or f"jj {command} exited with status {result.returncode}",
                command=command,
                exit_code=result.returncode,
                stderr=result.stderr,
            )

        return result.stdout

    async def run_async(self, args: Sequence[str]) -> str:
        """Run jj in a worker thread so the event loop stays free."""
        return await asyncio.to_thread(self.run, list(args))

    async def is_initialized(self) -> bool:
        """Check whether the directory is a jj workspace."""
        try:
            await self.run_async(["status"])
        except JJCommandError as exc:
            logger.debug(f"jj status failed, treating workspace as uninitialized: {exc}")
            return False
        return True

    async def current_revision(self) -> str:
        """Change id of the working-copy revision ("unknown" if jj prints nothing)."""
        output = await self.run_async(["log", "-r", "@", "--no-graph", "-T", "change_id"])
        return output.strip() or "unknown"

    async def changed_files(self) -> list[FileChange]:
        """Files changed in the working-copy revision."""
        return parse_status_output(await self.run_async(["status"]))

    async def execute_command(self, command: str) -> str:
        """
        Execute a plan-supplied command string.

        Raises:
            JJCommandError: If the string is empty or jj fails
        """
        args = split_command(command)
        if not args:
            raise JJCommandError("Empty jj command", command=command)
        logger.info(f"Executing: jj {' '.join(args)}")
        return await self.run_async(args)
