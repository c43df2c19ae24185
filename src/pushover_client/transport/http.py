"""
REST HTTP client for the Pushover Open Client API.
"""

import logging
from typing import Any, Optional

import httpx

from pushover_client.errors import PushoverError

DEFAULT_API_URL = "https://api.pushover.net/1"

logger = logging.getLogger(__name__)


class HttpClient:
    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"User-Agent": "pushover-client/0.1.0", "Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    @staticmethod
    def _decode(resp: httpx.Response) -> dict[str, Any]:
        """Decode a reply body.

        The service reports failures as HTTP 4xx with a JSON body holding
        ``status: 0`` and an ``errors`` list, so the body is decoded whatever
        the status code. Only a body that is not a JSON object is an error here.
        """
        try:
            body = resp.json()
        except ValueError:
            raise PushoverError("http_error", f"HTTP {resp.status_code}: {resp.text[:200]}")
        if not isinstance(body, dict):
            raise PushoverError("http_error", f"HTTP {resp.status_code}: unexpected reply {resp.text[:200]}")
        return body

    async def get(self, path: str, params: Optional[dict[str, str]] = None) -> dict[str, Any]:
        logger.debug("GET %s", path)
        resp = await self._client.get(path, params=params)
        return self._decode(resp)

    async def post(self, path: str, data: Optional[dict[str, str]] = None) -> dict[str, Any]:
        logger.debug("POST %s", path)
        resp = await self._client.post(path, data=data)
        return self._decode(resp)

    async def close(self) -> None:
        await self._client.aclose()
