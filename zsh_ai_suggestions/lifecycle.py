"""Daemon lifecycle: directory sweeps, signal handling and the liveness probe.

The daemon owns the shared directory. Leftovers at start-up come from an
unclean previous run and are swept; on shutdown every regular file in the
directory is purged.

The liveness probe counts running shell processes system-wide (not only
the current user's) and stops the daemon once none are left. A probe that
cannot count is inconclusive, never zero.
"""

import asyncio
import logging
import os
import shlex
import signal
import subprocess
from pathlib import Path
from typing import Callable, Optional

from .errors import ProbeError
from .protocol import is_stale

logger = logging.getLogger(__name__)

# Seconds between liveness checks
PROBE_INTERVAL = 10.0

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def _remove_files(directory: Path, predicate: Callable[[str], bool]) -> int:
    """Remove regular files directly inside ``directory`` matching ``predicate``.

    Returns:
        Number of files removed
    """
    try:
        entries = list(os.scandir(directory))
    except FileNotFoundError:
        return 0
    except OSError as e:
        logger.warning("failed to read temp directory: %s", e)
        return 0

    count = 0
    for entry in entries:
        try:
            if not entry.is_file(follow_symlinks=False):
                continue
        except OSError:
            continue
        if not predicate(entry.name):
            continue
        try:
            os.unlink(entry.path)
        except FileNotFoundError:
            continue
        except OSError as e:
            logger.debug("failed to remove file %s: %s", entry.path, e)
            continue
        count += 1
    return count


def sweep_stale(directory: Path) -> int:
    """Delete leftover request and temp files from a previous run.

    Response files are left alone. Running it twice in a row removes
    nothing the second time.
    """
    count = _remove_files(Path(directory), is_stale)
    if count:
        logger.info("removed %d stale files", count)
    return count


def purge_directory(directory: Path) -> int:
    """Delete every regular file directly inside ``directory``."""
    count = _remove_files(Path(directory), lambda name: True)
    if count:
        logger.info("cleaned up %d files", count)
    return count


def count_shell_processes(name: str = "zsh") -> int:
    """Count running processes named exactly ``name`` on the whole system.

    Uses ``pgrep -c -x`` where /proc exists, otherwise ``ps -e -o comm=``
    reduced to base names and filtered with ``grep -c -x``. Names are
    matched exactly, so the daemon's own process (``zsh-ai-suggesti``)
    never counts as a shell.

    Raises:
        ProbeError: If the count cannot be obtained
    """
    if os.path.exists("/proc"):
        cmd = ["pgrep", "-c", "-x", name]
    else:
        # comm may carry a path or a login-shell dash: /bin/zsh, -zsh
        pipeline = "ps -e -o comm= | sed -e 's#.*/##' -e 's/^-//'"
        cmd = ["sh", "-c", f"{pipeline} | grep -c -x {shlex.quote(name)}"]

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=5)
    except (OSError, subprocess.SubprocessError) as e:
        raise ProbeError(f"failed to count {name} processes: {e}") from e

    # Exit status 1 means no match for both pgrep and grep
    if result.returncode == 1:
        return 0
    if result.returncode != 0:
        raise ProbeError(
            f"failed to count {name} processes: exit {result.returncode}: {result.stderr.strip()}"
        )

    try:
        return int(result.stdout.strip())
    except ValueError as e:
        raise ProbeError(f"failed to parse {name} process count: {result.stdout!r}") from e


class LivenessProbe:
    """Stops the daemon once no shell process is left.

    Args:
        on_exhausted: Called once when the shell count reaches zero
        interval: Seconds between checks
        shell: Process name to count
        counter: Counting function, raises ProbeError when inconclusive
    """

    def __init__(
        self,
        on_exhausted: Callable[[], None],
        interval: float = PROBE_INTERVAL,
        shell: str = "zsh",
        counter: Callable[[str], int] = count_shell_processes,
    ):
        self.on_exhausted = on_exhausted
        self.interval = interval
        self.shell = shell
        self.counter = counter

    async def check(self) -> Optional[int]:
        """Run one probe. Returns the count, or None if inconclusive."""
        try:
            count = await asyncio.to_thread(self.counter, self.shell)
        except ProbeError as e:
            logger.warning("%s", e.message)
            return None
        logger.debug("%s processes: %d", self.shell, count)
        return count

    async def run(self) -> None:
        """Tick until the shell count reaches zero."""
        while True:
            await asyncio.sleep(self.interval)
            count = await self.check()
            if count == 0:
                logger.info("no %s processes found, cleaning up", self.shell)
                self.on_exhausted()
                return


def install_signal_handlers(loop: asyncio.AbstractEventLoop, callback: Callable[[], None]) -> None:
    """Call ``callback`` on SIGINT or SIGTERM."""
    for sig in SHUTDOWN_SIGNALS:
        loop.add_signal_handler(sig, callback)


def remove_signal_handlers(loop: asyncio.AbstractEventLoop) -> None:
    for sig in SHUTDOWN_SIGNALS:
        loop.remove_signal_handler(sig)
