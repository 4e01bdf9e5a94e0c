"""Thin asynchronous Statcord API client used by ``StatsClient``.

Wraps only the two endpoints the stats client needs. Status codes are
returned to the caller for interpretation; only transport failures raise.
"""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from ..config.constants import DEFAULT_BASE_URL, STATS_ENDPOINT
from ..errors.handling import handle_transport_error


class StatcordAPI:
    """Asynchronous client for the Statcord HTTP API.

    The base URL and ``Authorization`` header are fixed at construction.

    Attributes:
        base_url (str): Origin every endpoint is resolved against.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        key: str,
        base_url: str = DEFAULT_BASE_URL,
    ):
        """Initialize the StatcordAPI client.

        Args:
            session (aiohttp.ClientSession): The aiohttp session to use for requests.
            key (str): Statcord access key sent as the ``Authorization`` header.
            base_url (str): API origin.

        Raises:
            ValueError: If session is not provided.
        """
        if not session:
            raise ValueError("aiohttp session required")
        self._session = session
        self.base_url = base_url.rstrip("/")
        self._headers = {
            "Authorization": key,
            "Content-Type": "application/json",
        }

    def __repr__(self) -> str:
        return f"StatcordAPI(base_url={self.base_url!r})"

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json_body: dict[str, Any] | None = None,
    ) -> tuple[Any, int, str]:
        """Perform a single HTTP request against the Statcord API.

        Args:
            method (str): HTTP method (e.g., 'GET', 'POST').
            endpoint (str): API endpoint path (without base URL).
            json_body (dict[str, Any] | None): JSON body for the request.

        Returns:
            tuple[Any, int, str]: Decoded JSON body ({} when undecodable), HTTP status
            code and reason phrase.

        Raises:
            TransportFailure: If no response could be obtained.
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"

        async def _perform_request() -> tuple[Any, int, str]:
            async with self._session.request(
                method, url, headers=self._headers, json=json_body
            ) as resp:
                logging.debug(
                    f"Statcord API response: status={resp.status}, url={url}, "
                    f"content-type={resp.headers.get('content-type', 'none')}"
                )
                data = await self._safe_json(resp)
                return data, resp.status, resp.reason or ""

        return await handle_transport_error(
            _perform_request, f"Statcord API {method} {endpoint}"
        )

    # ---- High level helpers ----
    async def post_stats(self, body: dict[str, Any]) -> tuple[Any, int, str]:
        """POST a stats payload (key already merged into ``body``)."""
        return await self.request("POST", STATS_ENDPOINT, json_body=body)

    async def get_bot_stats(self, bot_id: str) -> tuple[Any, int, str]:
        """GET the historical stats of ``bot_id``."""
        return await self.request("GET", bot_id)

    @staticmethod
    async def _safe_json(resp: aiohttp.ClientResponse) -> Any:
        """Decode a JSON body, returning {} for empty or non-JSON bodies."""
        if resp.status == 204:
            return {}
        try:
            data = await resp.json(content_type=None)
        except (aiohttp.ContentTypeError, ValueError):
            return {}
        return {} if data is None else data
