"""Ollama generate backend."""

from typing import Optional

import httpx

from ..config import Settings
from ..errors import BackendError
from ..prompt import render_prompt
from .base import HTTPSuggester

DEFAULT_URL = "http://localhost:11434"
DEFAULT_MODEL = "llama3.1"


class OllamaSuggester(HTTPSuggester):
    """Suggestions from a local Ollama server. No credentials needed."""

    name = "ollama"

    def __init__(
        self,
        base_url: str = DEFAULT_URL,
        model: str = DEFAULT_MODEL,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        super().__init__(client=client, timeout=timeout)
        self.model = model
        self.url = f"{base_url.rstrip('/')}/api/generate"

    @classmethod
    def from_settings(cls, settings: Settings, client: Optional[httpx.AsyncClient] = None) -> "OllamaSuggester":
        return cls(
            base_url=settings.ollama_url,
            model=settings.model or DEFAULT_MODEL,
            client=client,
            timeout=settings.http_timeout,
        )

    async def suggest(self, text: str) -> str:
        payload = {
            "model": self.model,
            "prompt": render_prompt(text),
            "stream": False,
        }
        data = await self._post_json(self.url, payload)

        response = data.get("response")
        if not isinstance(response, str):
            raise BackendError("no suggestion from ollama")
        return response
