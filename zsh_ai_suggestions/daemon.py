"""zsh-ai-suggestions daemon - file-based IPC server.

Keeps a warm process with the suggestion backend loaded, answering
requests the zsh plugin drops into a shared directory.

Architecture:
- Watches /tmp/zsh-ai-suggestions (ZSH_AI_SUGGESTIONS_TMPDIR) for writes
- zsh-ai-input-<token> requests are answered with zsh-ai-output-<token>
- One asyncio task per accepted request; no ordering between requests
- Optional liveness probe exits once no zsh process is left
- SIGINT/SIGTERM cancel in-flight requests, purge the directory and exit

States: STARTING -> SERVING -> STOPPING -> STOPPED. There is no way back
from STOPPING.
"""

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Set

from .backends import Suggester, close_suggester, create_suggester
from .config import Settings
from .errors import StartupError, SuggestionError
from .inflight import InFlightSet
from .lifecycle import (
    LivenessProbe,
    count_shell_processes,
    install_signal_handlers,
    purge_directory,
    remove_signal_handlers,
    sweep_stale,
)
from .processor import RequestProcessor
from .protocol import PathLike
from .watcher import ERROR, DirectoryWatcher, WatchEvent

logger = logging.getLogger(__name__)


class DaemonState(Enum):
    STARTING = "starting"
    SERVING = "serving"
    STOPPING = "stopping"
    STOPPED = "stopped"


class SuggestionDaemon:
    """Directory watcher dispatching requests to a suggestion backend."""

    def __init__(
        self,
        settings: Settings,
        suggester: Optional[Suggester] = None,
        inflight: Optional[InFlightSet] = None,
        shell_counter: Callable[[str], int] = count_shell_processes,
        handle_signals: bool = True,
    ):
        self.settings = settings
        self.directory = Path(settings.tmpdir)
        self.suggester = suggester
        self.inflight = inflight or InFlightSet()
        self.shell_counter = shell_counter
        self.handle_signals = handle_signals

        self.state = DaemonState.STARTING
        self.processor: Optional[RequestProcessor] = None
        self.watcher: Optional[DirectoryWatcher] = None
        self.tasks: Set[asyncio.Task] = set()
        self.stop_reason: Optional[str] = None
        self._stop_event: Optional[asyncio.Event] = None

    async def start(self) -> None:
        """Sweep leftovers, prepare the directory, backend and watcher.

        Raises:
            SuggestionError: StartupError, ConfigError or WatcherError
        """
        sweep_stale(self.directory)

        try:
            self.directory.mkdir(mode=0o755, parents=True, exist_ok=True)
        except OSError as e:
            raise StartupError(f"failed to create tmp directory: {e}") from e

        if self.suggester is None:
            self.suggester = create_suggester(self.settings)

        self.processor = RequestProcessor(
            self.suggester,
            self.inflight,
            request_timeout=self.settings.request_timeout,
            settle_delay=self.settings.settle_delay,
        )

        self.watcher = DirectoryWatcher(self.directory)
        self.watcher.start()

        logger.info("suggestion server started with tmp dir: %s", self.directory)

    def submit(self, path: PathLike) -> Optional[asyncio.Task]:
        """Spawn a processor task for ``path`` if the gate accepts it."""
        if not self.inflight.accept(path):
            return None
        task = asyncio.create_task(self.processor.process(path))
        self.tasks.add(task)
        task.add_done_callback(self.tasks.discard)
        return task

    def handle_event(self, event: WatchEvent) -> Optional[asyncio.Task]:
        if event.kind == ERROR:
            logger.warning("watcher error: %s", event.error)
            return None
        return self.submit(event.path)

    async def _dispatch(self) -> None:
        async for event in self.watcher.events():
            self.handle_event(event)

    def request_stop(self, reason: str) -> None:
        """Leave the serving state. Only the first call has an effect."""
        if self._stop_event is None or self._stop_event.is_set():
            return
        logger.info("%s, cleaning up", reason)
        self.stop_reason = reason
        self._stop_event.set()

    async def run(self) -> int:
        """Run until a shutdown signal or the liveness probe stops us.

        Returns:
            Exit code (0)
        """
        loop = asyncio.get_running_loop()
        self._stop_event = asyncio.Event()

        try:
            await self.start()
        except BaseException:
            await self._close_backend()
            raise

        if self.handle_signals:
            install_signal_handlers(loop, lambda: self.request_stop("shutdown signal received"))

        background: List[asyncio.Task] = [asyncio.create_task(self._dispatch())]
        if self.settings.cleanup_on_exit:
            logger.info("clean up on exit enabled")
            probe = LivenessProbe(
                lambda: self.request_stop(f"no {self.settings.shell_name} processes left"),
                interval=self.settings.probe_interval,
                shell=self.settings.shell_name,
                counter=self.shell_counter,
            )
            background.append(asyncio.create_task(probe.run()))

        self.state = DaemonState.SERVING
        try:
            await self._stop_event.wait()
        finally:
            self.state = DaemonState.STOPPING
            for task in background:
                task.cancel()
            await asyncio.gather(*background, return_exceptions=True)

            if self.handle_signals:
                remove_signal_handlers(loop)
            self.watcher.stop()

            # Nothing may publish after the purge
            pending = list(self.tasks)
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            await self._close_backend()

            purge_directory(self.directory)
            self.state = DaemonState.STOPPED
            logger.info("suggestion server stopped")

        return 0

    async def _close_backend(self) -> None:
        if self.suggester is not None:
            await close_suggester(self.suggester)


def main(settings: Settings) -> int:
    """Entry point for the daemon.

    Returns:
        0 on graceful shutdown, 1 on start-up failure
    """
    daemon = SuggestionDaemon(settings)
    try:
        return asyncio.run(daemon.run())
    except SuggestionError as e:
        logger.error("%s", e.message)
        return 1
    except KeyboardInterrupt:
        return 0
