"""OpenAI chat completions backend."""

from typing import Optional

import httpx

from ..config import Settings
from ..errors import BackendError, ConfigError
from ..prompt import render_prompt
from .base import HTTPSuggester

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o-mini"


class OpenAISuggester(HTTPSuggester):
    """Suggestions from an OpenAI-compatible ``/chat/completions`` endpoint."""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        if not api_key:
            raise ConfigError("openai api key is required (ZSH_AI_SUGGESTIONS_OPENAI_API_KEY)")
        super().__init__(client=client, timeout=timeout)
        self.api_key = api_key
        self.model = model
        self.url = f"{base_url.rstrip('/')}/chat/completions"

    @classmethod
    def from_settings(cls, settings: Settings, client: Optional[httpx.AsyncClient] = None) -> "OpenAISuggester":
        return cls(
            api_key=settings.openai_api_key or "",
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            client=client,
            timeout=settings.http_timeout,
        )

    async def suggest(self, text: str) -> str:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": render_prompt(text)},
                {"role": "user", "content": text},
            ],
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        data = await self._post_json(self.url, payload, headers=headers)

        try:
            content = data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError):
            content = ""
        if not content:
            raise BackendError("no suggestions returned by openai")
        return content
