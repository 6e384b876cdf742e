"""Signal change detection between fetch cycles.

Decides which freshly fetched signals are worth alerting on: a symbol is
reported when its classification flips, or when it shows up for the first
time already classified BUY or SELL.
"""

from __future__ import annotations

import logging
from typing import Iterable

from market_scanner.core.models import MarketType, Signal, SignalType

logger = logging.getLogger(__name__)


def has_signal_changed(previous: Signal | None, current: Signal) -> bool:
    """Check if ``current`` differs from the last-seen signal for its symbol."""
    if previous is None:
        return current.signal_type != SignalType.HOLD
    return previous.signal_type != current.signal_type


def should_notify(signal: Signal) -> bool:
    """Only actionable classifications are notified."""
    return signal.signal_type in (SignalType.BUY, SignalType.SELL)


class SignalChangeDetector:
    """Remembers the last snapshot per market and reports changes."""

    def __init__(self) -> None:
        self._previous: dict[MarketType, dict[str, Signal]] = {}

    def update(self, market: MarketType, signals: Iterable[Signal]) -> list[Signal]:
        """
        Compare a new snapshot against the previous one and store it.

        Args:
            market: Market the snapshot belongs to
            signals: Latest signals for that market

        Returns:
            Changed signals that should be notified, in input order
        """
        signals = list(signals)
        previous = self._previous.get(market, {})

        changed = [
            signal
            for signal in signals
            if has_signal_changed(previous.get(signal.symbol), signal) and should_notify(signal)
        ]

        self._previous[market] = {s.symbol: s for s in signals}
        if changed:
            logger.debug(
                "%s: %d of %d signals changed", market.value, len(changed), len(signals)
            )
        return changed

    def previous(self, market: MarketType) -> dict[str, Signal]:
        """Last stored snapshot for a market, keyed by symbol."""
        return dict(self._previous.get(market, {}))

    def clear(self) -> None:
        """Forget all stored snapshots."""
        self._previous.clear()
