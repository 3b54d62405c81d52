"""Google Gemini generateContent backend."""

from typing import Optional

import httpx

from ..config import Settings
from ..errors import BackendError, ConfigError
from ..prompt import render_prompt
from .base import HTTPSuggester

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.0-flash-lite"


class GeminiSuggester(HTTPSuggester):
    """Suggestions from the Gemini API, authenticated with an API key."""

    name = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        if not api_key:
            raise ConfigError("gemini api key is required (ZSH_AI_SUGGESTIONS_GEMINI_API_KEY)")
        super().__init__(client=client, timeout=timeout)
        self.api_key = api_key
        self.model = model
        self.url = f"{base_url.rstrip('/')}/models/{model}:generateContent"

    @classmethod
    def from_settings(cls, settings: Settings, client: Optional[httpx.AsyncClient] = None) -> "GeminiSuggester":
        return cls(
            api_key=settings.gemini_api_key or "",
            model=settings.model or DEFAULT_MODEL,
            base_url=settings.gemini_base_url,
            client=client,
            timeout=settings.http_timeout,
        )

    async def suggest(self, text: str) -> str:
        payload = {
            "system_instruction": {"parts": [{"text": render_prompt(text)}]},
            "contents": {"parts": [{"text": text}]},
        }
        data = await self._post_json(self.url, payload, params={"key": self.api_key})

        try:
            content = data["candidates"][0]["content"]["parts"][0]["text"] or ""
        except (KeyError, IndexError, TypeError):
            content = ""
        if not content:
            raise BackendError("no suggestion from gemini")
        return content
