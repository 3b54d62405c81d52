"""Suggestion backends.

Every backend implements the ``Suggester`` protocol: given the current
command-line prefix, return a completed command or raise BackendError.
Deadlines are applied by the caller (``asyncio.wait_for``), which cancels
the in-flight HTTP request.

Backends:
- openai: OpenAI chat completions API
- ollama: local Ollama generate API
- gemini: Google Gemini generateContent API
- llm: any model configured for the ``llm`` command-line tool
"""

from typing import Optional, Protocol, runtime_checkable

import httpx

from ..config import Provider, Settings
from ..errors import ConfigError


@runtime_checkable
class Suggester(Protocol):
    """Produces a suggestion for a partial command line."""

    async def suggest(self, text: str) -> str:
        """Return the suggested command.

        Raises:
            BackendError: If the provider fails or returns nothing
        """
        ...


def create_suggester(settings: Settings, client: Optional[httpx.AsyncClient] = None) -> Suggester:
    """Build the backend named by ``settings.provider``.

    Args:
        settings: Validated settings
        client: HTTP client to share (tests pass one with a mock transport)

    Raises:
        ConfigError: If a required credential is missing or the provider
            is unknown
    """
    provider = Provider(settings.provider)

    if provider == Provider.OPENAI:
        from .openai import OpenAISuggester
        return OpenAISuggester.from_settings(settings, client=client)
    if provider == Provider.OLLAMA:
        from .ollama import OllamaSuggester
        return OllamaSuggester.from_settings(settings, client=client)
    if provider == Provider.GEMINI:
        from .gemini import GeminiSuggester
        return GeminiSuggester.from_settings(settings, client=client)
    if provider == Provider.LLM:
        from .llm_model import LLMSuggester
        return LLMSuggester.from_settings(settings)

    raise ConfigError(f"unknown AI type: {provider}")


async def close_suggester(suggester: Suggester) -> None:
    """Release resources held by a backend, if it holds any."""
    aclose = getattr(suggester, "aclose", None)
    if aclose is not None:
        await aclose()


__all__ = [
    "Suggester",
    "create_suggester",
    "close_suggester",
]
