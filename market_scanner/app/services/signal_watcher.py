"""One fetch-and-compare cycle for signal change alerts.

Fetches both markets, diffs them against the previous cycle and hands
every changed BUY/SELL signal to the registered callbacks. Scheduling the
cycle is left to the caller.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from market_scanner.app.clients import MarketDataError
from market_scanner.app.services.signal_service import SignalService
from market_scanner.core.models import MarketType, Signal
from market_scanner.core.notify import SignalChangeDetector

logger = logging.getLogger(__name__)

SignalCallback = Callable[[Signal], Awaitable[None]]


class SignalWatcher:
    """Detects classification changes between fetches and dispatches them."""

    def __init__(
        self,
        signal_service: SignalService,
        detector: SignalChangeDetector | None = None,
    ):
        self.signal_service = signal_service
        self.detector = detector or SignalChangeDetector()
        self._callbacks: list[SignalCallback] = []
        self._checking = False

    def on_signal(self, callback: SignalCallback) -> None:
        """Register callback for changed signals."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def off_signal(self, callback: SignalCallback) -> None:
        """Unregister callback for changed signals."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    @property
    def is_checking(self) -> bool:
        return self._checking

    async def check_once(self) -> list[Signal]:
        """
        Fetch signals for both markets and dispatch the changed ones.

        A call made while another check is still running returns immediately.
        A failed fetch keeps the previous snapshot so changes are not lost.

        Returns:
            Changed signals that were dispatched
        """
        if self._checking:
            logger.debug("Signal check already running, skipping")
            return []

        self._checking = True
        try:
            crypto = await self.signal_service.get_crypto_signals()
            thai = await self.signal_service.get_thai_signals()
        except MarketDataError as e:
            logger.warning("Signal check failed: %s", e)
            return []
        finally:
            self._checking = False

        changed = self.detector.update(MarketType.CRYPTO, crypto)
        changed += self.detector.update(MarketType.THAI_STOCK, thai)

        logger.info(
            "Signal check complete. Crypto: %d, Thai: %d, changed: %d",
            len(crypto), len(thai), len(changed),
        )

        for signal in changed:
            for callback in self._callbacks:
                try:
                    await callback(signal)
                except Exception as e:
                    logger.error(f"Signal callback error for {signal.symbol}: {e}")

        return changed

    def clear_history(self) -> None:
        self.detector.clear()
