"""Investment goal monitoring against live prices."""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterable

from market_scanner.app.clients import MarketDataError
from market_scanner.app.services.signal_service import SignalService
from market_scanner.core.models import (
    EntryAlert,
    InvestmentGoal,
    MarketType,
    Recommendation,
)
from market_scanner.core.probability import analyze_entry_probability

logger = logging.getLogger(__name__)


class InvestmentService:
    """Checks limit-entry goals against current prices."""

    def __init__(
        self,
        signal_service: SignalService,
        ttl: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.signal_service = signal_service
        self.ttl = ttl
        self._clock = clock
        self._prices: dict[tuple[str, MarketType], tuple[float, float]] = {}

    async def get_current_price(self, symbol: str, market: MarketType) -> float | None:
        """Current price from a live search, cached for ``ttl`` seconds."""
        self._evict_expired()
        key = (symbol.upper(), market)
        entry = self._prices.get(key)
        if entry is not None:
            return entry[0]

        try:
            signal = await self.signal_service.search(symbol, market)
        except MarketDataError as e:
            logger.warning("Error fetching price for %s: %s", symbol, e)
            return None

        self._prices[key] = (signal.price, self._clock())
        return signal.price

    def _evict_expired(self) -> None:
        now = self._clock()
        expired = [
            key for key, (_, cached_at) in self._prices.items() if now - cached_at >= self.ttl
        ]
        for key in expired:
            del self._prices[key]

    async def check_entry_alerts(self, goals: Iterable[InvestmentGoal]) -> list[EntryAlert]:
        """
        Evaluate every goal with a target entry price.

        Returns:
            Alerts whose recommendation is not WAIT; goals without a target
            entry or without a current price are skipped
        """
        triggered = []
        for goal in goals:
            if goal.target_entry_price is None:
                continue

            current_price = await self.get_current_price(goal.symbol, goal.market_type)
            if current_price is None:
                continue

            alert = analyze_entry_probability(
                symbol=goal.symbol,
                current_price=current_price,
                target_entry_price=goal.target_entry_price,
            )
            if alert.recommendation != Recommendation.WAIT:
                triggered.append(alert)

        return triggered
