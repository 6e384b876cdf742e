"""Signal feed client.

The feed is either a static JSON snapshot published on GitHub Pages
(``crypto_signals.json``, ``thai_signals.json``, ``health.json``) or a REST
backend exposing ``/api/{market}/signals``.
"""

import logging
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from market_scanner.app.clients.base import BaseHttpClient
from market_scanner.app.clients.errors import MarketDataError, SymbolNotFoundError
from market_scanner.core.models import ChartData, MarketType, Signal

logger = logging.getLogger(__name__)

_MARKET_PATHS = {
    MarketType.CRYPTO: "crypto",
    MarketType.THAI_STOCK: "thai",
}


class SignalFeedClient(BaseHttpClient):
    """Client for the published signal feed."""

    SOURCE = "signal feed"

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        super().__init__(base_url, timeout=timeout, http_client=http_client)

    @property
    def is_static(self) -> bool:
        """True when the feed is a static GitHub Pages snapshot."""
        return "github.io" in self.base_url

    def _raise_for_status_error(self, error: httpx.HTTPStatusError, symbol: str | None) -> None:
        if symbol and error.response.status_code == 404:
            raise SymbolNotFoundError(
                f"Symbol not found: {symbol}", source=self.SOURCE, symbol=symbol
            ) from error

    async def get_signals(self, market: MarketType, limit: int | None = None) -> list[Signal]:
        """
        Fetch all published signals for a market.

        Args:
            market: Market to fetch
            limit: Maximum number of signals to return

        Returns:
            Signals in feed order
        """
        path = _MARKET_PATHS[market]
        params = None
        if self.is_static:
            endpoint = f"/{path}_signals.json"
        else:
            endpoint = f"/api/{path}/signals"
            if limit is not None:
                params = {"limit": limit}

        data = await self._request("GET", endpoint, params)
        if not isinstance(data, list):
            raise MarketDataError(
                f"Expected a list of signals from {endpoint}", source=self.SOURCE
            )

        signals = []
        for item in data:
            try:
                signals.append(Signal.from_feed(item, market_type=market))
            except (ValidationError, AttributeError) as e:
                logger.warning("Skipping malformed signal record from %s: %s", endpoint, e)
        if limit is not None:
            signals = signals[:limit]
        return signals

    async def get_signal(self, symbol: str, market: MarketType) -> Signal:
        """Fetch one signal from a REST backend."""
        path = _MARKET_PATHS[market]
        data = await self._request(
            "GET", f"/api/{path}/signal/{quote(symbol, safe='')}", symbol=symbol
        )
        try:
            return Signal.from_feed(data, market_type=market)
        except (ValidationError, AttributeError) as e:
            raise MarketDataError(
                f"Malformed signal record for {symbol}", source=self.SOURCE, symbol=symbol
            ) from e

    async def get_chart(self, symbol: str, market: MarketType) -> ChartData:
        """Fetch chart data from a REST backend."""
        path = _MARKET_PATHS[market]
        data = await self._request(
            "GET", f"/api/{path}/chart/{quote(symbol, safe='')}", symbol=symbol
        )
        try:
            return ChartData.from_feed(data)
        except (ValidationError, AttributeError, TypeError) as e:
            raise MarketDataError(
                f"Malformed chart data for {symbol}", source=self.SOURCE, symbol=symbol
            ) from e

    async def check_connection(self) -> bool:
        """Check whether the feed answers its health endpoint."""
        endpoint = "/health.json" if self.is_static else "/health"
        try:
            await self._request("GET", endpoint)
        except MarketDataError as e:
            logger.info("Signal feed health check failed: %s", e)
            return False
        return True
