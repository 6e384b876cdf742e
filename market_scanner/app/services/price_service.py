"""Realtime crypto prices with a short in-memory cache.

Prices go stale within seconds, so entries live for ``ttl`` seconds only.
Lookups never raise: upstream failures are logged and reported as missing.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterable

from market_scanner.app.clients import BinanceSpotClient, MarketDataError, to_pair

logger = logging.getLogger(__name__)


class PriceService:
    """Latest-price lookups backed by Binance."""

    def __init__(
        self,
        client: BinanceSpotClient,
        ttl: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.ttl = ttl
        self._clock = clock
        # pair -> (price, cached_at)
        self._cache: dict[str, tuple[float, float]] = {}

    def _cached(self, pair: str) -> float | None:
        entry = self._cache.get(pair)
        if entry is None:
            return None
        price, cached_at = entry
        if self._clock() - cached_at >= self.ttl:
            del self._cache[pair]
            return None
        return price

    def _store(self, pair: str, price: float) -> None:
        self._cache[pair] = (price, self._clock())

    async def get_price(self, symbol: str) -> float | None:
        """Get the latest price for a symbol, or None if unavailable."""
        pair = to_pair(symbol)
        cached = self._cached(pair)
        if cached is not None:
            return cached

        try:
            price = await self.client.get_price(pair)
        except MarketDataError as e:
            logger.warning("Price lookup failed for %s: %s", symbol, e)
            return None

        self._store(pair, price)
        return price

    async def get_prices(self, symbols: Iterable[str]) -> dict[str, float]:
        """
        Get latest prices for several symbols at once.

        Fetches the full ticker list in one call and falls back to
        per-symbol lookups if that fails.

        Returns:
            Mapping of requested symbol to price; unknown symbols are omitted
        """
        symbols = list(symbols)
        if not symbols:
            return {}

        try:
            all_prices = await self.client.get_prices()
        except MarketDataError as e:
            logger.warning("Bulk price lookup failed, falling back to single lookups: %s", e)
            result = {}
            for symbol in symbols:
                price = await self.get_price(symbol)
                if price is not None:
                    result[symbol] = price
            return result

        result = {}
        for symbol in symbols:
            pair = to_pair(symbol)
            if pair in all_prices:
                result[symbol] = all_prices[pair]
                self._store(pair, all_prices[pair])
        return result

    def clear(self) -> None:
        self._cache.clear()
