"""HTTP front-end for the suggestion backend.

An alternative to the file-based daemon for clients that prefer HTTP:

- POST /suggest  body is the partial command line, response is the
                 suggestion followed by a newline
- GET  /health   returns "OK"
"""

import asyncio
import logging
from typing import Optional

from aiohttp import web

from .backends import Suggester, close_suggester, create_suggester
from .config import Settings
from .errors import BackendError, ErrorCode, SuggestionError, format_error_response
from .lifecycle import install_signal_handlers

logger = logging.getLogger(__name__)

SUGGESTER_KEY = web.AppKey("suggester", Suggester)
TIMEOUT_KEY = web.AppKey("request_timeout", float)


async def handle_suggest(request: web.Request) -> web.Response:
    """Return a suggestion for the request body."""
    text = (await request.text()).strip()
    if not text:
        return web.json_response(
            format_error_response(ErrorCode.EMPTY_INPUT, "Input text is empty"),
            status=400,
        )

    logger.info("received input: %s", text)
    suggester = request.app[SUGGESTER_KEY]
    try:
        suggestion = await asyncio.wait_for(
            suggester.suggest(text),
            timeout=request.app[TIMEOUT_KEY],
        )
    except asyncio.TimeoutError:
        logger.error("suggestion timed out")
        return web.json_response(
            format_error_response(ErrorCode.TIMEOUT, "failed to get suggestion: timed out"),
            status=500,
        )
    except BackendError as e:
        logger.error("failed to get suggestion: %s", e.message)
        return web.json_response(
            format_error_response(ErrorCode.BACKEND_ERROR, "failed to get suggestion"),
            status=500,
        )
    except Exception as e:
        logger.exception("unexpected error while suggesting: %s", e)
        return web.json_response(
            format_error_response(ErrorCode.INTERNAL, "internal error"),
            status=500,
        )

    logger.info("generated suggestion: %s", suggestion)
    return web.Response(text=suggestion + "\n")


async def handle_health(request: web.Request) -> web.Response:
    return web.Response(text="OK")


def create_app(suggester: Suggester, request_timeout: float = 5.0) -> web.Application:
    """Build the aiohttp application around a suggester."""
    app = web.Application()
    app[SUGGESTER_KEY] = suggester
    app[TIMEOUT_KEY] = request_timeout
    app.router.add_post("/suggest", handle_suggest)
    app.router.add_get("/health", handle_health)

    async def _close(app: web.Application) -> None:
        await close_suggester(app[SUGGESTER_KEY])

    app.on_cleanup.append(_close)
    return app


async def serve(settings: Settings, port: Optional[int] = None) -> int:
    """Serve until SIGINT/SIGTERM, then shut down gracefully."""
    app = create_app(create_suggester(settings), request_timeout=settings.request_timeout)
    port = port or settings.server_port

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, port=port)
    try:
        await site.start()
    except OSError:
        await runner.cleanup()
        raise
    logger.info("server listening on port %d", port)

    stop = asyncio.Event()
    install_signal_handlers(asyncio.get_running_loop(), stop.set)
    try:
        await stop.wait()
        logger.info("shutting down...")
    finally:
        await runner.cleanup()
    logger.info("server stopped gracefully")
    return 0


def main(settings: Settings, port: Optional[int] = None) -> int:
    """Entry point for the HTTP front-end."""
    try:
        return asyncio.run(serve(settings, port=port))
    except SuggestionError as e:
        logger.error("%s", e.message)
        return 1
    except OSError as e:
        logger.error("server failed to start: %s", e)
        return 1
    except KeyboardInterrupt:
        return 0
