"""
WorkspaceWatcher - re-run a callback when workspace files change.

Changes are found by polling modification times. Bursts of changes are
coalesced into a single callback after the debounce delay, and callbacks
never overlap: changes seen while a callback is running schedule exactly
one follow-up call. All state lives on the WatchHandle returned by
start(), so watchers (and handles) are independent of each other.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path

from jjagent.utils.logger import get_logger
from jjagent.utils.related_files import EXCLUDED_DIRS

logger = get_logger(__name__)

ChangeCallback = Callable[[list[str]], Awaitable[object]]

# path -> (mtime_ns, size)
Snapshot = dict[str, tuple[int, int]]


def scan_mtimes(root: Path) -> Snapshot:
    """Modification time and size of every non-hidden file under root."""
    snapshot: Snapshot = {}
    for directory, dirnames, filenames in os.walk(root):
        dirnames[:] = [d for d in dirnames if d not in EXCLUDED_DIRS and not d.startswith(".")]
        for name in filenames:
            if name.startswith("."):
                continue
            path = Path(directory, name)
            try:
                stat = path.stat()
            except OSError:
                continue
            snapshot[path.relative_to(root).as_posix()] = (stat.st_mtime_ns, stat.st_size)
    return snapshot


def diff_snapshots(before: Snapshot, after: Snapshot) -> list[str]:
    """Paths added, removed or modified between two snapshots, sorted."""
    changed = {path for path, stamp in after.items() if before.get(path) != stamp}
    changed.update(path for path in before if path not in after)
    return sorted(changed)


@dataclass(eq=False)
class WatchHandle:
    """A running watch. Pass it back to WorkspaceWatcher.stop()."""

    root: Path
    on_change: ChangeCallback
    snapshot: Snapshot = field(default_factory=dict)
    pending: set[str] = field(default_factory=set)
    poll_task: asyncio.Task[None] | None = None
    run_task: asyncio.Task[None] | None = None
    timer: asyncio.TimerHandle | None = None
    rerun: bool = False
    runs: int = 0
    stopped: bool = False

    @property
    def running(self) -> bool:
        """True while a callback is in flight."""
        return self.run_task is not None and not self.run_task.done()


class WorkspaceWatcher:
    """
    Polls a workspace and calls back after changes settle.

    Example:
        watcher = WorkspaceWatcher(root, debounce_ms=1000, poll_interval_ms=500)

        async def on_change(paths: list[str]) -> None:
            await PipelineOrchestrator(deps).run()

        handle = await watcher.start(on_change)
        ...
        await watcher.stop(handle)
    """

    def __init__(
        self,
        root: str | Path,
        debounce_ms: int = 1000,
        poll_interval_ms: int = 500,
    ) -> None:
        self.root = Path(root).resolve()
        self.debounce_s = debounce_ms / 1000
        self.poll_interval_s = poll_interval_ms / 1000

    async def start(self, on_change: ChangeCallback) -> WatchHandle:
        """Take the baseline snapshot and start polling."""
        handle = WatchHandle(root=self.root, on_change=on_change)
        handle.snapshot = await asyncio.to_thread(scan_mtimes, self.root)
        handle.poll_task = asyncio.create_task(self._poll(handle))
        logger.info(
            f"Watching {self.root} ({len(handle.snapshot)} files, "
            f"debounce {self.debounce_s * 1000:.0f}ms)"
        )
        return handle

    async def stop(self, handle: WatchHandle) -> None:
        """Cancel the debounce timer, the polling task and any in-flight callback."""
        if handle.stopped:
            return
        handle.stopped = True
        if handle.timer is not None:
            handle.timer.cancel()
            handle.timer = None

        tasks = [t for t in (handle.poll_task, handle.run_task) if t is not None and not t.done()]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info(f"Stopped watching {handle.root}")

    async def _poll(self, handle: WatchHandle) -> None:
        while not handle.stopped:
            await asyncio.sleep(self.poll_interval_s)
            current = await asyncio.to_thread(scan_mtimes, self.root)
            changed = diff_snapshots(handle.snapshot, current)
            handle.snapshot = current
            if changed:
                logger.debug(f"Detected {len(changed)} changed file(s): {changed[:5]}")
                handle.pending.update(changed)
                self._schedule(handle)

    def _schedule(self, handle: WatchHandle) -> None:
        """(Re)start the debounce timer."""
        if handle.timer is not None:
            handle.timer.cancel()
        loop = asyncio.get_running_loop()
        handle.timer = loop.call_later(self.debounce_s, self._fire, handle)

    def _fire(self, handle: WatchHandle) -> None:
        handle.timer = None
        if handle.stopped:
            return
        if handle.running:
            handle.rerun = True
            return
        handle.run_task = asyncio.create_task(self._dispatch(handle))

    async def _dispatch(self, handle: WatchHandle) -> None:
        while True:
            paths = sorted(handle.pending)
            handle.pending.clear()
            handle.rerun = False
            handle.runs += 1
            logger.info(f"Workspace changed ({len(paths)} file(s)), running callback")
            try:
                await handle.on_change(paths)
            except Exception as e:
                logger.error(f"Watch callback failed: {e}")
            if not handle.rerun or handle.stopped:
                return
