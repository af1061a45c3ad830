"""
Unit tests for jj_utils.

subprocess.run is patched, so no jj binary is needed.
"""

import subprocess
from pathlib import Path

import pytest

from jjagent.exceptions import JJCommandError
from jjagent.models import ChangeKind
from jjagent.utils import jj_utils
from jjagent.utils.jj_utils import JJClient, parse_status_output, split_command


class RecordingRun:
    """Stand-in for subprocess.run returning scripted results."""

    def __init__(self, returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.calls: list[list[str]] = []

    def __call__(self, args, **kwargs):
        self.calls.append(list(args))
        return subprocess.CompletedProcess(args, self.returncode, self.stdout, self.stderr)


@pytest.fixture
def fake_run(monkeypatch: pytest.MonkeyPatch) -> RecordingRun:
    run = RecordingRun()
    monkeypatch.setattr(jj_utils.subprocess, "run", run)
    return run


class TestParseStatus:
    """Tests for parse_status_output."""

    def test_parses_change_lines(self) -> None:
        output = (
            "Working copy changes:\n"
            "A docs/new.md\n"
            "M src/app.py\n"
            "D old file.txt\n"
            "Working copy : qpvuntsm 1234abcd (no description set)\n"
            "Parent commit: zzzzzzzz 00000000 (empty) (no description set)\n"
        )
        changes = parse_status_output(output)

        assert [(c.path, c.kind) for c in changes] == [
            ("docs/new.md", ChangeKind.ADDED),
            ("src/app.py", ChangeKind.MODIFIED),
            ("old file.txt", ChangeKind.DELETED),
        ]

    def test_no_changes(self) -> None:
        assert parse_status_output("The working copy has no changes.\n") == []


class TestSplitCommand:
    """Tests for split_command."""

    def test_shell_style_quoting(self) -> None:
        assert split_command('describe -m "Add greeting"') == ["describe", "-m", "Add greeting"]

    def test_leading_jj_dropped(self) -> None:
        assert split_command("jj new") == ["new"]

    def test_empty(self) -> None:
        assert split_command("   ") == []


class TestJJClient:
    """Tests for JJClient."""

    def test_run_returns_stdout(self, fake_run: RecordingRun, tmp_path: Path) -> None:
        fake_run.stdout = "ok\n"
        client = JJClient(tmp_path, binary="jj")

        assert client.run(["status"]) == "ok\n"
        assert fake_run.calls == [["jj", "status"]]

    def test_nonzero_exit_uses_stderr(self, fake_run: RecordingRun, tmp_path: Path) -> None:
        fake_run.returncode = 1
        fake_run.stderr = "Error: Revision `nope` doesn't exist\n"

        with pytest.raises(JJCommandError) as exc_info:
            JJClient(tmp_path).run(["edit", "nope"])

        error = exc_info.value
        assert str(error) == "Error: Revision `nope` doesn't exist"
        assert error.exit_code == 1
        assert error.command == "edit nope"

    def test_nonzero_exit_without_stderr(self, fake_run: RecordingRun, tmp_path: Path) -> None:
        fake_run.returncode = 3
        with pytest.raises(JJCommandError, match="exited with status 3"):
            JJClient(tmp_path).run(["new"])

    def test_missing_binary(self, tmp_path: Path) -> None:
        client = JJClient(tmp_path, binary="jj-definitely-not-installed")
        with pytest.raises(JJCommandError, match="Failed to run"):
            client.run(["status"])

    def test_timeout(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        def slow(args, **kwargs):
            raise subprocess.TimeoutExpired(args, kwargs.get("timeout"))

        monkeypatch.setattr(jj_utils.subprocess, "run", slow)
        with pytest.raises(JJCommandError, match="timed out after 5s"):
            JJClient(tmp_path, timeout_s=5).run(["status"])

    @pytest.mark.asyncio
    async def test_is_initialized(self, fake_run: RecordingRun, tmp_path: Path) -> None:
        client = JJClient(tmp_path)
        assert await client.is_initialized() is True

        fake_run.returncode = 1
        fake_run.stderr = "Error: There is no jj repo in \".\""
        assert await client.is_initialized() is False

    @pytest.mark.asyncio
    async def test_current_revision(self, fake_run: RecordingRun, tmp_path: Path) -> None:
        fake_run.stdout = "qpvuntsmwlqt\n"
        client = JJClient(tmp_path)

        assert await client.current_revision() == "qpvuntsmwlqt"
        assert fake_run.calls[-1] == ["jj", "log", "-r", "@", "--no-graph", "-T", "change_id"]

        fake_run.stdout = ""
        assert await client.current_revision() == "unknown"

    @pytest.mark.asyncio
    async def test_changed_files(self, fake_run: RecordingRun, tmp_path: Path) -> None:
        fake_run.stdout = "Working copy changes:\nM a.py\n"
        changes = await JJClient(tmp_path).changed_files()
        assert [c.path for c in changes] == ["a.py"]

    @pytest.mark.asyncio
    async def test_execute_command(self, fake_run: RecordingRun, tmp_path: Path) -> None:
        fake_run.stdout = "Working copy now at: abc\n"
        output = await JJClient(tmp_path).execute_command('describe -m "done"')

        assert output == "Working copy now at: abc\n"
        assert fake_run.calls == [["jj", "describe", "-m", "done"]]

    @pytest.mark.asyncio
    async def test_execute_empty_command(self, fake_run: RecordingRun, tmp_path: Path) -> None:
        with pytest.raises(JJCommandError, match="Empty jj command"):
            await JJClient(tmp_path).execute_command("jj")
        assert fake_run.calls == []
