"""Directory watcher bridging watchdog notifications into asyncio.

Only file *write* notifications are forwarded. The shell hook may create
a request file and fill it in a second operation, so the modified event is
the first point where content is guaranteed to be there. Duplicate
notifications for one write are filtered later by the in-flight set.

Watchdog runs its observer in a background thread; events cross into the
event loop with ``call_soon_threadsafe`` and are drained by a single
dispatch loop through ``DirectoryWatcher.events()``.
"""

import asyncio
import contextlib
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .errors import WatcherError

logger = logging.getLogger(__name__)

WRITE = "write"
ERROR = "error"


@dataclass(frozen=True)
class WatchEvent:
    """One item on the watcher's queue: a written path or an error."""

    kind: str
    path: Optional[str] = None
    error: Optional[BaseException] = None

    @classmethod
    def write(cls, path: str) -> "WatchEvent":
        return cls(kind=WRITE, path=path)

    @classmethod
    def failure(cls, error: BaseException) -> "WatchEvent":
        return cls(kind=ERROR, error=error)


def _event_path(raw) -> str:
    """Convert a watchdog event path to str (it may be bytes)."""
    return os.fsdecode(raw)


class _WriteEventHandler(FileSystemEventHandler):
    """Watchdog handler forwarding write notifications to an asyncio queue.

    Runs in the watchdog thread. Anything that goes wrong while handling
    a notification is forwarded as an error item instead of killing the
    observer thread.
    """

    def __init__(self, directory: str, loop: asyncio.AbstractEventLoop, queue: asyncio.Queue):
        super().__init__()
        self._directory = os.path.abspath(directory)
        self._loop = loop
        self._queue = queue

    def _put(self, item: WatchEvent) -> None:
        # Loop already closed during shutdown
        with contextlib.suppress(RuntimeError):
            self._loop.call_soon_threadsafe(self._queue.put_nowait, item)

    def dispatch(self, event: FileSystemEvent) -> None:
        try:
            super().dispatch(event)
        except Exception as e:
            self._put(WatchEvent.failure(e))

    def on_modified(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._put(WatchEvent.write(_event_path(event.src_path)))

    def on_deleted(self, event: FileSystemEvent) -> None:
        if os.path.abspath(_event_path(event.src_path)) == self._directory:
            self._put(WatchEvent.failure(WatcherError(f"watched directory removed: {self._directory}")))

    def on_moved(self, event: FileSystemEvent) -> None:
        if os.path.abspath(_event_path(event.src_path)) == self._directory:
            self._put(WatchEvent.failure(WatcherError(f"watched directory moved: {self._directory}")))


class DirectoryWatcher:
    """Event-driven watcher for the shared request directory."""

    def __init__(self, directory: Path, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.directory = Path(directory)
        self._loop = loop
        self._queue: Optional[asyncio.Queue] = None
        self._observer: Optional[Observer] = None

    @property
    def running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        """Subscribe to the directory.

        Must be called from the event loop thread.

        Raises:
            WatcherError: If the directory cannot be watched
        """
        if self._observer is not None:
            return

        loop = self._loop or asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        handler = _WriteEventHandler(str(self.directory), loop, self._queue)

        observer = Observer()
        try:
            observer.schedule(handler, str(self.directory), recursive=False)
            observer.start()
        except Exception as e:
            raise WatcherError(f"failed to watch {self.directory}: {e}") from e

        self._observer = observer
        logger.debug("watching %s", self.directory)

    def stop(self) -> None:
        """Unsubscribe. Safe to call more than once."""
        observer, self._observer = self._observer, None
        if observer is None:
            return
        observer.stop()
        observer.join(timeout=2.0)

    async def events(self) -> AsyncIterator[WatchEvent]:
        """Yield write and error events for as long as the watcher runs."""
        if self._queue is None:
            raise WatcherError("watcher not started")
        while True:
            yield await self._queue.get()
