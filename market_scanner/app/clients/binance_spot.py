"""Binance spot REST client for tickers and klines."""

import asyncio
from datetime import datetime, timezone
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict

from market_scanner.app.clients.base import BaseHttpClient
from market_scanner.app.clients.errors import SymbolNotFoundError
from market_scanner.core.models import PriceBar

QUOTE_ASSET = "USDT"
INVALID_SYMBOL_CODE = -1121


def to_pair(symbol: str) -> str:
    """Normalize ``btc``, ``BTC/USDT`` or ``btcusdt`` to ``BTCUSDT``."""
    pair = symbol.replace("/", "").strip().upper()
    if not pair.endswith(QUOTE_ASSET):
        pair = f"{pair}{QUOTE_ASSET}"
    return pair


class Ticker24h(BaseModel):
    """Rolling 24h ticker statistics."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    last_price: float
    price_change: float = 0.0
    price_change_percent: float = 0.0
    high_price: float = 0.0
    low_price: float = 0.0
    volume: float = 0.0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Ticker24h":
        # Binance sends numbers as strings
        return cls(
            symbol=data["symbol"],
            last_price=float(data.get("lastPrice") or 0),
            price_change=float(data.get("priceChange") or 0),
            price_change_percent=float(data.get("priceChangePercent") or 0),
            high_price=float(data.get("highPrice") or 0),
            low_price=float(data.get("lowPrice") or 0),
            volume=float(data.get("volume") or 0),
        )


class RateLimiter:
    """Simple rate limiter for API calls."""

    def __init__(self, calls_per_minute: int = 1200):
        self.calls_per_minute = calls_per_minute
        self.interval = 60.0 / calls_per_minute
        self.last_call = 0.0
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Wait if necessary to respect rate limit."""
        async with self._lock:
            loop = asyncio.get_running_loop()
            wait_time = self.last_call + self.interval - loop.time()
            if wait_time > 0:
                await asyncio.sleep(wait_time)
            self.last_call = loop.time()


class BinanceSpotClient(BaseHttpClient):
    """Binance spot market REST API client."""

    SOURCE = "binance"
    BASE_URL = "https://api.binance.com"

    def __init__(
        self,
        base_url: str = BASE_URL,
        timeout: float = 15.0,
        rate_limiter: RateLimiter | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        super().__init__(base_url, timeout=timeout, http_client=http_client)
        self.rate_limiter = rate_limiter or RateLimiter()

    async def _request(self, method, endpoint, params=None, symbol=None):
        await self.rate_limiter.acquire()
        return await super()._request(method, endpoint, params=params, symbol=symbol)

    def _raise_for_status_error(self, error: httpx.HTTPStatusError, symbol: str | None) -> None:
        if error.response.status_code != 400:
            return
        try:
            code = error.response.json().get("code")
        except ValueError:
            return
        if code == INVALID_SYMBOL_CODE:
            raise SymbolNotFoundError(
                f"Unknown Binance symbol: {symbol}", source=self.SOURCE, symbol=symbol
            ) from error

    async def get_ticker_24h(self, symbol: str) -> Ticker24h:
        """Get 24h ticker statistics for one symbol."""
        pair = to_pair(symbol)
        data = await self._request("GET", "/api/v3/ticker/24hr", {"symbol": pair}, symbol=pair)
        return Ticker24h.from_api(data)

    async def get_all_tickers_24h(self) -> dict[str, Ticker24h]:
        """Get 24h ticker statistics for every symbol, keyed by pair."""
        data = await self._request("GET", "/api/v3/ticker/24hr")
        return {item["symbol"]: Ticker24h.from_api(item) for item in data}

    async def get_price(self, symbol: str) -> float:
        """Get the latest traded price for one symbol."""
        pair = to_pair(symbol)
        data = await self._request("GET", "/api/v3/ticker/price", {"symbol": pair}, symbol=pair)
        return float(data["price"])

    async def get_prices(self) -> dict[str, float]:
        """Get the latest traded price for every symbol, keyed by pair."""
        data = await self._request("GET", "/api/v3/ticker/price")
        return {item["symbol"]: float(item["price"]) for item in data}

    async def get_klines(
        self,
        symbol: str,
        interval: str = "1h",
        limit: int = 100,
    ) -> list[PriceBar]:
        """
        Fetch the most recent klines.

        Args:
            symbol: Trading pair or base asset (e.g., "BTC", "BTCUSDT")
            interval: Kline interval (e.g., "1h")
            limit: Number of klines (max 1000)

        Returns:
            List of PriceBar, oldest first
        """
        pair = to_pair(symbol)
        params = {"symbol": pair, "interval": interval, "limit": min(limit, 1000)}
        data = await self._request("GET", "/api/v3/klines", params, symbol=pair)

        return [
            PriceBar(
                time=datetime.fromtimestamp(item[0] / 1000, tz=timezone.utc),
                open=float(item[1]),
                high=float(item[2]),
                low=float(item[3]),
                close=float(item[4]),
                volume=float(item[5]),
            )
            for item in data
        ]
