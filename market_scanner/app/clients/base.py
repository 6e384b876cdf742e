"""Shared async HTTP plumbing for market-data clients."""

import logging
from typing import Any

import httpx

from market_scanner.app.clients.errors import MarketDataError

logger = logging.getLogger(__name__)


class BaseHttpClient:
    """Lazily created ``httpx.AsyncClient`` with error mapping.

    Subclasses set ``SOURCE`` for error messages and call ``_request``.
    """

    SOURCE = "http"

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        headers: dict[str, str] | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = headers or {}
        self._client = http_client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self.headers,
                timeout=self.timeout,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        symbol: str | None = None,
    ) -> Any:
        """Make a request and decode the JSON body.

        Raises:
            MarketDataError: On transport errors, non-2xx status or bad JSON
        """
        client = await self._get_client()
        try:
            response = await client.request(method, endpoint, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            self._raise_for_status_error(e, symbol)
            raise MarketDataError(
                f"{self.SOURCE} returned {e.response.status_code} for {endpoint}",
                source=self.SOURCE,
                symbol=symbol,
            ) from e
        except httpx.HTTPError as e:
            raise MarketDataError(
                f"{self.SOURCE} request to {endpoint} failed: {e}",
                source=self.SOURCE,
                symbol=symbol,
            ) from e
        except ValueError as e:
            raise MarketDataError(
                f"{self.SOURCE} returned invalid JSON for {endpoint}",
                source=self.SOURCE,
                symbol=symbol,
            ) from e

    def _raise_for_status_error(self, error: httpx.HTTPStatusError, symbol: str | None) -> None:
        """Hook for subclasses to map specific statuses to richer errors."""


async def close_all(*clients) -> None:
    """Close each client, logging failures so the rest still close."""
    for client in clients:
        try:
            await client.close()
        except Exception as e:
            logger.warning("Error closing %s: %s", type(client).__name__, e)
