"""Shared HTTP plumbing for the hosted backends."""

from typing import Any, Dict, Optional

import httpx

from ..errors import BackendError

# Max characters of an error body kept in exception messages
ERROR_BODY_LIMIT = 2000


class HTTPSuggester:
    """Base class for backends talking JSON over HTTP.

    Owns its ``httpx.AsyncClient`` unless one is passed in.
    """

    name = "http"

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: float = 10.0):
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def _post_json(
        self,
        url: str,
        payload: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """POST ``payload`` and decode the JSON response.

        Raises:
            BackendError: On transport errors, non-200 status or bad JSON
        """
        try:
            resp = await self.client.post(url, json=payload, headers=headers, params=params)
        except httpx.HTTPError as e:
            raise BackendError(f"failed to send request: {e}") from e

        if resp.status_code != 200:
            body = resp.text[:ERROR_BODY_LIMIT]
            raise BackendError(f"{self.name} API error ({resp.status_code}): {body}")

        try:
            data = resp.json()
        except ValueError as e:
            raise BackendError(f"failed to decode response: {e}") from e

        if not isinstance(data, dict):
            raise BackendError(f"unexpected {self.name} response: {resp.text[:ERROR_BODY_LIMIT]}")
        return data

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
