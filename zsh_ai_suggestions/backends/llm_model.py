"""Backend delegating to a model configured for the ``llm`` CLI.

Uses whatever plugins, keys and default model the user set up with
``llm keys set`` / ``llm models default``. The blocking prompt call runs
on a daemon thread that hands its result back to the event loop. A
deadline or shutdown stops waiting for it; the thread itself cannot be
interrupted, so it is abandoned and never holds up process exit.
"""

import asyncio
import contextlib
import threading
from typing import Optional

import llm

from ..config import Settings
from ..errors import BackendError, ConfigError
from ..prompt import render_prompt


def _resolve(future: asyncio.Future, result: Optional[str], error: Optional[BaseException]) -> None:
    # Caller may have given up already (deadline, shutdown)
    if future.done():
        return
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(result)


class LLMSuggester:
    """Suggestions from an ``llm`` model."""

    name = "llm"

    def __init__(self, model: llm.Model):
        self.model = model

    @classmethod
    def from_settings(cls, settings: Settings) -> "LLMSuggester":
        return cls(get_model(settings.model))

    def _complete(self, text: str) -> str:
        response = self.model.prompt(text, system=render_prompt(text))
        return response.text()

    def _run_in_thread(self, text: str) -> asyncio.Future:
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def worker():
            result, error = None, None
            try:
                result = self._complete(text)
            except Exception as e:
                error = e
            # Loop already closed when the daemon exited first
            with contextlib.suppress(RuntimeError):
                loop.call_soon_threadsafe(_resolve, future, result, error)

        threading.Thread(target=worker, name="llm-suggest", daemon=True).start()
        return future

    async def suggest(self, text: str) -> str:
        try:
            content = await self._run_in_thread(text)
        except Exception as e:
            raise BackendError(f"llm model {self.model.model_id} failed: {e}") from e
        if not content:
            raise BackendError("no suggestion from llm")
        return content


def get_model(model_id: Optional[str] = None) -> llm.Model:
    """Resolve a model by id, or llm's default model.

    Raises:
        ConfigError: If the model is unknown
    """
    try:
        return llm.get_model(model_id) if model_id else llm.get_model()
    except llm.UnknownModelError as e:
        raise ConfigError(f"unknown llm model: {e}") from e
