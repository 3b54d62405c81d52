"""Line-oriented front-end: one suggestion per stdin line."""

import asyncio
import logging
import sys
from typing import Optional, TextIO

from .backends import Suggester, close_suggester, create_suggester
from .config import Settings
from .errors import SuggestionError

logger = logging.getLogger(__name__)


async def run_repl(
    suggester: Suggester,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    request_timeout: float = 5.0,
) -> int:
    """Answer each non-blank input line with a suggestion line.

    Failed suggestions are logged and skipped; the loop ends at EOF.
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    while True:
        line = await asyncio.to_thread(stdin.readline)
        if not line:
            break
        text = line.strip()
        if not text:
            continue
        try:
            suggestion = await asyncio.wait_for(suggester.suggest(text), timeout=request_timeout)
        except asyncio.TimeoutError:
            logger.error("failed to suggest: timed out")
            continue
        except Exception as e:
            logger.error("failed to suggest: %s", e)
            continue
        stdout.write(suggestion + "\n")
        stdout.flush()
    return 0


async def _main(settings: Settings) -> int:
    suggester = create_suggester(settings)
    try:
        return await run_repl(suggester, request_timeout=settings.request_timeout)
    finally:
        await close_suggester(suggester)


def main(settings: Settings) -> int:
    """Entry point for the REPL front-end."""
    try:
        return asyncio.run(_main(settings))
    except SuggestionError as e:
        logger.error("%s", e.message)
        return 1
    except KeyboardInterrupt:
        return 0
