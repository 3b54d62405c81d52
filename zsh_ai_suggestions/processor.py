"""Request processor: one request file in, one response file out.

Steps, strictly in order:
1. Confirm the request file still exists
2. Wait a short settling delay
3. Read and trim the first line
4. Ask the suggester, bounded by the request deadline
5. Publish the response atomically (temp file + rename)
6. Delete the request file
7. Release the path from the in-flight set (always)

Failures are logged and the request is dropped. The shell side has no
error channel; it simply times out waiting for the response file.

File I/O runs in worker threads. Once started, a publish is seen through
even if the task is cancelled, so a stopping daemon never purges before a
rename lands.
"""

import asyncio
import contextlib
import logging
import os
from enum import Enum

from .backends import Suggester
from .inflight import InFlightSet
from .protocol import PathLike, response_path, temp_path

logger = logging.getLogger(__name__)

# Defaults (seconds)
REQUEST_TIMEOUT = 5.0
SETTLE_DELAY = 0.05

RESPONSE_MODE = 0o600


class ProcessResult(Enum):
    """Outcome of processing one request file."""

    PUBLISHED = "published"
    MISSING = "missing"
    READ_FAILED = "read_failed"
    EMPTY = "empty"
    BACKEND_FAILED = "backend_failed"
    WRITE_FAILED = "write_failed"


def read_request(path: PathLike) -> str:
    """Read the first line of a request file, stripped of whitespace."""
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return f.readline().strip()


def publish_atomic(path: PathLike, content: str) -> None:
    """Write ``content`` to ``path`` so readers never see a partial file.

    The content goes to a ``.tmp`` sibling first and is renamed into
    place; the rename is atomic on POSIX filesystems. The temp file is
    removed if anything fails.
    """
    target = os.fspath(path)
    tmp = temp_path(target)
    try:
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, RESPONSE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp, target)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp)
        raise


async def _run_to_completion(func, *args):
    """Run blocking ``func`` in a worker thread and see it through.

    If the caller is cancelled meanwhile, the call still finishes before
    the cancellation propagates, so shutdown never races a half-done write.
    """
    task = asyncio.ensure_future(asyncio.to_thread(func, *args))
    try:
        return await asyncio.shield(task)
    except asyncio.CancelledError:
        with contextlib.suppress(Exception):
            await task
        raise


class RequestProcessor:
    """Turns accepted request files into response files."""

    def __init__(
        self,
        suggester: Suggester,
        inflight: InFlightSet,
        request_timeout: float = REQUEST_TIMEOUT,
        settle_delay: float = SETTLE_DELAY,
    ):
        self.suggester = suggester
        self.inflight = inflight
        self.request_timeout = request_timeout
        self.settle_delay = settle_delay

    async def process(self, path: PathLike) -> ProcessResult:
        """Process one accepted request path.

        The caller must have claimed ``path`` with ``InFlightSet.accept``;
        this method releases it on every exit path.
        """
        input_file = os.fspath(path)
        try:
            return await self._process(input_file)
        finally:
            self.inflight.release(input_file)

    async def _process(self, input_file: str) -> ProcessResult:
        basename = os.path.basename(input_file)
        logger.debug("processing: %s", basename)

        if not os.path.exists(input_file):
            logger.debug("file not accessible: %s", basename)
            return ProcessResult.MISSING

        await asyncio.sleep(self.settle_delay)

        try:
            text = await asyncio.to_thread(read_request, input_file)
        except FileNotFoundError:
            logger.debug("file disappeared before read: %s", basename)
            return ProcessResult.MISSING
        except OSError as e:
            logger.warning("failed to read %s: %s", basename, e)
            return ProcessResult.READ_FAILED

        if not text:
            logger.debug("empty input in file: %s", basename)
            return ProcessResult.EMPTY

        try:
            suggestion = await asyncio.wait_for(
                self.suggester.suggest(text),
                timeout=self.request_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("suggestion timed out after %.1fs: %s", self.request_timeout, basename)
            return ProcessResult.BACKEND_FAILED
        except Exception as e:
            logger.error("failed to get suggestion: %s", e)
            return ProcessResult.BACKEND_FAILED

        if not suggestion or not suggestion.strip():
            logger.warning("empty suggestion for: %s", basename)
            return ProcessResult.BACKEND_FAILED

        output_file = response_path(input_file)
        try:
            await _run_to_completion(publish_atomic, output_file, suggestion)
        except OSError as e:
            logger.error("failed to write output file: %s", e)
            return ProcessResult.WRITE_FAILED

        logger.debug("suggestion generated for: %s", basename)

        try:
            await asyncio.to_thread(os.unlink, input_file)
        except OSError as e:
            logger.debug("failed to remove %s: %s", basename, e)

        return ProcessResult.PUBLISHED
