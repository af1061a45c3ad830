"""
Unit tests for WorkspaceWatcher.

Short debounce/poll intervals keep these fast; waits are bounded by
polling a condition instead of fixed sleeps where possible.
"""

import asyncio
from collections.abc import Callable
from pathlib import Path

import pytest

from jjagent.orchestrator.watcher import WorkspaceWatcher, diff_snapshots, scan_mtimes


async def _wait_for(condition: Callable[[], bool], timeout: float = 3.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not condition():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


class TestSnapshots:
    """Tests for scan_mtimes and diff_snapshots."""

    def test_scan_skips_hidden_and_excluded(self, tmp_path: Path) -> None:
        (tmp_path / "a.txt").write_text("a")
        (tmp_path / ".env").write_text("SECRET=1")
        (tmp_path / ".jj").mkdir()
        (tmp_path / ".jj" / "store").write_text("x")
        (tmp_path / "node_modules").mkdir()
        (tmp_path / "node_modules" / "x.js").write_text("x")

        assert list(scan_mtimes(tmp_path)) == ["a.txt"]

    def test_diff(self) -> None:
        before = {"same": (1, 1), "modified": (1, 1), "removed": (1, 1)}
        after = {"same": (1, 1), "modified": (2, 1), "added": (1, 1)}
        assert diff_snapshots(before, after) == ["added", "modified", "removed"]


class TestWorkspaceWatcher:
    """Tests for start/stop, debouncing and non-overlapping callbacks."""

    @pytest.mark.asyncio
    async def test_burst_coalesced_into_one_callback(self, tmp_path: Path) -> None:
        calls: list[list[str]] = []

        async def on_change(paths: list[str]) -> None:
            calls.append(paths)

        watcher = WorkspaceWatcher(tmp_path, debounce_ms=150, poll_interval_ms=10)
        handle = await watcher.start(on_change)
        try:
            for name in ("a.txt", "b.txt", "c.txt"):
                (tmp_path / name).write_text(name)
                await asyncio.sleep(0.02)

            await _wait_for(lambda: len(calls) >= 1)
            await asyncio.sleep(0.3)
        finally:
            await watcher.stop(handle)

        assert len(calls) == 1
        assert calls[0] == ["a.txt", "b.txt", "c.txt"]

    @pytest.mark.asyncio
    async def test_changes_during_run_trigger_one_follow_up(self, tmp_path: Path) -> None:
        started = asyncio.Event()
        release = asyncio.Event()
        active = 0
        max_active = 0
        calls: list[list[str]] = []

        async def on_change(paths: list[str]) -> None:
            nonlocal active, max_active
            active += 1
            max_active = max(max_active, active)
            calls.append(paths)
            if len(calls) == 1:
                started.set()
                await release.wait()
            active -= 1

        watcher = WorkspaceWatcher(tmp_path, debounce_ms=30, poll_interval_ms=10)
        handle = await watcher.start(on_change)
        try:
            (tmp_path / "first.txt").write_text("1")
            await asyncio.wait_for(started.wait(), timeout=3)

            # Two separate bursts while the first callback is still running
            (tmp_path / "second.txt").write_text("2")
            await asyncio.sleep(0.15)
            (tmp_path / "third.txt").write_text("3")
            await asyncio.sleep(0.15)
            assert len(calls) == 1

            release.set()
            await _wait_for(lambda: len(calls) >= 2)
            await asyncio.sleep(0.2)
        finally:
            await watcher.stop(handle)

        assert max_active == 1
        assert len(calls) == 2
        assert calls[1] == ["second.txt", "third.txt"]

    @pytest.mark.asyncio
    async def test_callback_error_does_not_stop_watching(self, tmp_path: Path) -> None:
        calls = 0

        async def on_change(paths: list[str]) -> None:
            nonlocal calls
            calls += 1
            raise RuntimeError("pipeline blew up")

        watcher = WorkspaceWatcher(tmp_path, debounce_ms=20, poll_interval_ms=10)
        handle = await watcher.start(on_change)
        try:
            (tmp_path / "a.txt").write_text("a")
            await _wait_for(lambda: calls == 1)
            (tmp_path / "b.txt").write_text("b")
            await _wait_for(lambda: calls == 2)
        finally:
            await watcher.stop(handle)

    @pytest.mark.asyncio
    async def test_stop_cancels_pending_callback(self, tmp_path: Path) -> None:
        calls: list[list[str]] = []

        async def on_change(paths: list[str]) -> None:
            calls.append(paths)

        watcher = WorkspaceWatcher(tmp_path, debounce_ms=200, poll_interval_ms=10)
        handle = await watcher.start(on_change)
        (tmp_path / "a.txt").write_text("a")
        await _wait_for(lambda: handle.timer is not None)

        await watcher.stop(handle)
        await asyncio.sleep(0.3)

        assert calls == []
        assert handle.stopped is True
        assert handle.poll_task is not None and handle.poll_task.done()
        # Stopping twice is harmless
        await watcher.stop(handle)

    @pytest.mark.asyncio
    async def test_independent_watchers(self, tmp_path: Path) -> None:
        left_dir = tmp_path / "left"
        right_dir = tmp_path / "right"
        left_dir.mkdir()
        right_dir.mkdir()
        left_calls: list[list[str]] = []
        right_calls: list[list[str]] = []

        async def on_left(paths: list[str]) -> None:
            left_calls.append(paths)

        async def on_right(paths: list[str]) -> None:
            right_calls.append(paths)

        left = WorkspaceWatcher(left_dir, debounce_ms=20, poll_interval_ms=10)
        right = WorkspaceWatcher(right_dir, debounce_ms=20, poll_interval_ms=10)
        left_handle = await left.start(on_left)
        right_handle = await right.start(on_right)
        try:
            await right.stop(right_handle)
            (left_dir / "x.txt").write_text("x")
            (right_dir / "y.txt").write_text("y")
            await _wait_for(lambda: len(left_calls) == 1)
            await asyncio.sleep(0.1)
        finally:
            await left.stop(left_handle)

        assert left_calls == [["x.txt"]]
        assert right_calls == []
