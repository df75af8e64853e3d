"""
File watcher for a single configuration file.

Watches the file's parent directory with watchdog, waits until writes to the
file have settled and then hands one event to an async callback.
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Optional, Set, Tuple

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ..models import WatchOptions

logger = logging.getLogger(__name__)


class FileEventKind(str, Enum):
    """What happened to the watched file."""
    ADD = "add"
    CHANGE = "change"
    UNLINK = "unlink"


@dataclass(frozen=True)
class FileEvent:
    """A settled file event; ``mtime`` is None once the file is gone."""

    kind: FileEventKind
    path: Path
    mtime: Optional[float]


EventCallback = Callable[[FileEvent], Awaitable[None]]


class TargetFileHandler(FileSystemEventHandler):
    """Forwards watchdog events for one file into an asyncio loop."""

    def __init__(self, target: Path, loop: asyncio.AbstractEventLoop, dispatch: Callable[[FileEventKind], None]):
        """
        Initialize file handler.

        Args:
            target: Absolute path of the watched file
            loop: Event loop that owns ``dispatch``
            dispatch: Called on the loop thread with the event kind
        """
        super().__init__()
        self.target = str(target)
        self.loop = loop
        self._dispatch = dispatch

    def _matches(self, path) -> bool:
        return os.path.abspath(os.fsdecode(path)) == self.target

    def _forward(self, kind: FileEventKind) -> None:
        try:
            self.loop.call_soon_threadsafe(self._dispatch, kind)
        except RuntimeError:
            # Loop already closed while the observer was shutting down
            logger.debug(f"Dropped {kind.value} event for {self.target}: event loop closed")

    def on_created(self, event: FileSystemEvent):
        """Handle file creation event."""
        if not event.is_directory and self._matches(event.src_path):
            self._forward(FileEventKind.ADD)

    def on_modified(self, event: FileSystemEvent):
        """Handle file modification event."""
        if not event.is_directory and self._matches(event.src_path):
            self._forward(FileEventKind.CHANGE)

    def on_deleted(self, event: FileSystemEvent):
        """Handle file deletion event."""
        if not event.is_directory and self._matches(event.src_path):
            self._forward(FileEventKind.UNLINK)

    def on_moved(self, event: FileSystemEvent):
        """Handle rename: onto the target is an add, away from it an unlink."""
        if event.is_directory:
            return
        if self._matches(event.dest_path):
            self._forward(FileEventKind.ADD)
        elif self._matches(event.src_path):
            self._forward(FileEventKind.UNLINK)


class FileWatcher:
    """Watches one file and delivers debounced events to a callback."""

    def __init__(self, path: Path, callback: EventCallback, options: Optional[WatchOptions] = None):
        """
        Initialize file watcher.

        Args:
            path: File to watch (it does not need to exist yet)
            callback: Async function receiving each settled FileEvent
            options: Debounce timings
        """
        self.path = Path(os.path.abspath(path))
        self.callback = callback
        self.options = options or WatchOptions()

        self.observer: Optional[Observer] = None
        self.running = False
        self._settle_task: Optional[asyncio.Task] = None
        self._deliveries: Set[asyncio.Task] = set()

    async def start(self) -> None:
        """Start the observer on the file's parent directory."""
        if self.running:
            logger.warning(f"File watcher already running for {self.path}")
            return

        loop = asyncio.get_running_loop()
        handler = TargetFileHandler(self.path, loop, self._on_raw_event)

        self.observer = Observer()
        self.observer.schedule(handler, path=str(self.path.parent), recursive=False)
        self.observer.start()
        self.running = True

        logger.info(f"File watcher started for {self.path}")

    async def close(self) -> None:
        """Stop the observer, drop any unsettled event and wait for running callbacks."""
        if not self.running:
            return
        self.running = False

        observer, self.observer = self.observer, None
        if observer is not None:
            observer.stop()
            await asyncio.to_thread(observer.join, self.options.join_timeout_s)
            if observer.is_alive():
                logger.warning(f"Observer for {self.path} did not stop within {self.options.join_timeout_s}s")

        if self._settle_task is not None:
            self._settle_task.cancel()
            try:
                await self._settle_task
            except asyncio.CancelledError:
                pass
            self._settle_task = None

        if self._deliveries:
            await asyncio.gather(*self._deliveries, return_exceptions=True)

        logger.info(f"File watcher stopped for {self.path}")

    def is_running(self) -> bool:
        """
        Check if file watcher is running.

        Returns:
            True if running, False otherwise
        """
        return self.running

    def _on_raw_event(self, kind: FileEventKind) -> None:
        if not self.running:
            return
        logger.debug(f"Raw {kind.value} event for {self.path}")

        # A newer event restarts settling
        if self._settle_task is not None:
            self._settle_task.cancel()
        self._settle_task = asyncio.get_running_loop().create_task(self._settle(kind))

    def _stat(self) -> Optional[Tuple[int, float]]:
        try:
            st = os.stat(self.path)
        except FileNotFoundError:
            return None
        return st.st_size, st.st_mtime

    async def _settle(self, kind: FileEventKind) -> None:
        """Poll (size, mtime) until it holds still for the stability threshold."""
        interval_ms = self.options.poll_interval_ms
        last = await asyncio.to_thread(self._stat)
        stable_ms = 0
        while stable_ms < self.options.stability_threshold_ms:
            await asyncio.sleep(interval_ms / 1000.0)
            current = await asyncio.to_thread(self._stat)
            if current == last:
                stable_ms += interval_ms
            else:
                last = current
                stable_ms = 0

        if last is None:
            kind = FileEventKind.UNLINK
        elif kind is FileEventKind.UNLINK:
            # Deleted and written again (atomic save by an editor)
            kind = FileEventKind.CHANGE

        event = FileEvent(kind, self.path, last[1] if last is not None else None)
        logger.debug(f"Settled {kind.value} event for {self.path}")

        # Delivered in its own task so a later event cannot cancel it
        task = asyncio.get_running_loop().create_task(self._deliver(event))
        self._deliveries.add(task)
        task.add_done_callback(self._deliveries.discard)
        self._settle_task = None

    async def _deliver(self, event: FileEvent) -> None:
        try:
            await self.callback(event)
        except Exception as e:
            logger.error(f"Error handling {event.kind.value} event for {self.path}: {e}")
