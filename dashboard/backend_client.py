from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BACKEND_URL = "http://localhost:5000/api"


class BackendUnavailableError(RuntimeError):
    """Raised when the dashboard backend cannot be reached or returns garbage."""


class DashboardBackendClient:
    """Call the dashboard backend and hand back its decoded JSON body.

    Error statuses are not raised: the backend reports failures in the body and
    the caller decides what they mean.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BACKEND_URL,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def _get_json(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url, timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.get(path, params=params)
        except httpx.HTTPError as exc:
            raise BackendUnavailableError(f"Failed to reach backend: {path}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise BackendUnavailableError(f"Invalid JSON from backend: {path}") from exc

        if not isinstance(payload, dict):
            raise BackendUnavailableError(f"Unexpected payload from backend: {path}")
        return payload

    async def search_news(self, params: dict[str, Any]) -> dict[str, Any]:
        return await self._get_json("/news", params)

    async def list_sources(self, language: str = "en") -> dict[str, Any]:
        return await self._get_json("/sources", {"language": language})
