"""Signal retrieval and live refresh.

Feed signals are a periodic snapshot. For crypto, each signal is refreshed
from Binance: price fields from the 24h ticker and indicators recomputed
from recent klines. Refresh failures degrade gracefully to the values
already at hand instead of failing the whole request.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from market_scanner.app.clients import (
    BinanceSpotClient,
    MarketDataError,
    SignalFeedClient,
    SymbolNotFoundError,
    Ticker24h,
    YahooFinanceClient,
    close_all,
    to_pair,
)
from market_scanner.app.clients.yahoo import strip_suffix
from market_scanner.app.config import Settings, get_settings
from market_scanner.core.indicators import macd_series, rsi_series
from market_scanner.core.models import ChartData, MarketType, PriceBar, Signal, SignalType
from market_scanner.core.signals import IndicatorSnapshot, compute

logger = logging.getLogger(__name__)

# Concurrent kline requests during a refresh
MAX_CONCURRENT_REFRESH = 10


class SignalService:
    """Builds signals from the feed and live market data."""

    def __init__(
        self,
        feed: SignalFeedClient,
        binance: BinanceSpotClient,
        yahoo: YahooFinanceClient,
        settings: Settings | None = None,
    ):
        self.feed = feed
        self.binance = binance
        self.yahoo = yahoo
        self.settings = settings or get_settings()

    async def close(self) -> None:
        """Close all underlying HTTP clients."""
        await close_all(self.feed, self.binance, self.yahoo)

    def _compute(self, closes: list[float]) -> IndicatorSnapshot:
        s = self.settings
        return compute(
            closes,
            rsi_period=s.rsi_period,
            fast=s.macd_fast,
            slow=s.macd_slow,
            signal_period=s.macd_signal,
        )

    # ------------------------------------------------------------------
    # Feed signals
    # ------------------------------------------------------------------

    async def get_crypto_signals(self, limit: int | None = None) -> list[Signal]:
        """Fetch crypto signals from the feed and refresh them from Binance."""
        signals = await self.feed.get_signals(MarketType.CRYPTO, limit)
        return await self.refresh_crypto_signals(signals)

    async def get_thai_signals(self, limit: int | None = None) -> list[Signal]:
        """Fetch Thai stock signals from the feed."""
        return await self.feed.get_signals(MarketType.THAI_STOCK, limit)

    async def get_signals(self, market: MarketType, limit: int | None = None) -> list[Signal]:
        if market == MarketType.CRYPTO:
            return await self.get_crypto_signals(limit)
        return await self.get_thai_signals(limit)

    async def refresh_crypto_signals(self, signals: list[Signal]) -> list[Signal]:
        """
        Refresh prices and indicators of crypto signals with live data.

        Returns the input unchanged when the ticker list cannot be fetched.
        """
        if not signals:
            return signals

        try:
            tickers = await self.binance.get_all_tickers_24h()
        except MarketDataError as e:
            logger.warning("Realtime refresh skipped, ticker fetch failed: %s", e)
            return signals

        semaphore = asyncio.Semaphore(MAX_CONCURRENT_REFRESH)

        async def refresh(signal: Signal) -> Signal:
            ticker = tickers.get(to_pair(signal.symbol))
            if ticker is None:
                return signal
            async with semaphore:
                return await self._refresh_one(signal, ticker)

        return list(await asyncio.gather(*(refresh(s) for s in signals)))

    async def _refresh_one(self, signal: Signal, ticker: Ticker24h) -> Signal:
        try:
            bars = await self.binance.get_klines(
                ticker.symbol,
                interval=self.settings.kline_interval,
                limit=self.settings.kline_limit,
            )
        except MarketDataError as e:
            logger.debug("Kline fetch failed for %s, refreshing price only: %s", signal.symbol, e)
            extra = dict(signal.additional_data or {})
            extra.update(high24h=ticker.high_price, low24h=ticker.low_price)
            return signal.model_copy(
                update={
                    "price": ticker.last_price,
                    "change_percent": ticker.price_change_percent,
                    "volume": ticker.volume,
                    "timestamp": datetime.now(timezone.utc),
                    "additional_data": extra,
                }
            )

        snapshot = self._compute([bar.close for bar in bars])
        return self._crypto_signal(signal.symbol, ticker, snapshot)

    def _crypto_signal(self, symbol: str, ticker: Ticker24h, snapshot: IndicatorSnapshot) -> Signal:
        return Signal(
            symbol=symbol,
            price=ticker.last_price,
            change_percent=ticker.price_change_percent,
            signal_type=snapshot.signal,
            confidence=snapshot.confidence,
            rsi=snapshot.rsi,
            macd=snapshot.macd.macd,
            macd_signal=snapshot.macd.signal,
            volume=ticker.volume,
            market_type=MarketType.CRYPTO,
            additional_data={
                "high24h": ticker.high_price,
                "low24h": ticker.low_price,
                "histogram": snapshot.macd.histogram,
            },
        )

    # ------------------------------------------------------------------
    # Live search
    # ------------------------------------------------------------------

    async def search_crypto(self, symbol: str) -> Signal:
        """
        Build a signal for any Binance symbol from live data.

        Raises:
            SymbolNotFoundError: Binance does not list the symbol
            MarketDataError: Binance request failed
        """
        pair = to_pair(symbol)
        ticker, bars = await asyncio.gather(
            self.binance.get_ticker_24h(pair),
            self.binance.get_klines(
                pair,
                interval=self.settings.kline_interval,
                limit=self.settings.kline_limit,
            ),
        )
        snapshot = self._compute([bar.close for bar in bars])
        return self._crypto_signal(symbol.upper(), ticker, snapshot)

    async def search_thai(self, symbol: str) -> Signal:
        """
        Build a signal for a SET symbol from Yahoo Finance.

        Indicators are only computed with enough closes; otherwise the
        signal carries neutral values.

        Raises:
            SymbolNotFoundError: Yahoo does not know the symbol
            MarketDataError: Yahoo request failed
        """
        chart = await self.yahoo.get_chart(
            symbol,
            interval=self.settings.kline_interval,
            range_=self.settings.thai_chart_range,
        )
        closes = chart.closes

        rsi_value = 50.0
        macd_value = 0.0
        macd_signal = 0.0
        signal_type = SignalType.HOLD
        confidence = 0.5
        if len(closes) >= self.settings.thai_min_closes:
            snapshot = self._compute(closes)
            rsi_value = snapshot.rsi
            macd_value = snapshot.macd.macd
            macd_signal = snapshot.macd.signal
            signal_type = snapshot.signal
            confidence = snapshot.confidence

        return Signal(
            symbol=strip_suffix(symbol),
            price=chart.price,
            change_percent=chart.change_percent,
            signal_type=signal_type,
            confidence=confidence,
            rsi=rsi_value,
            macd=macd_value,
            macd_signal=macd_signal,
            volume=chart.volume,
            market_type=MarketType.THAI_STOCK,
        )

    async def search(self, symbol: str, market: MarketType) -> Signal:
        if market == MarketType.CRYPTO:
            return await self.search_crypto(symbol)
        return await self.search_thai(symbol)

    # ------------------------------------------------------------------
    # Detail and charts
    # ------------------------------------------------------------------

    async def get_signal_detail(self, symbol: str, market: MarketType) -> Signal:
        """
        Find the signal for one symbol.

        Raises:
            SymbolNotFoundError: The symbol is not in the feed
        """
        if not self.feed.is_static:
            return await self.feed.get_signal(symbol, market)

        wanted = {symbol.lower(), symbol.lower().replace("/usdt", "")}
        for signal in await self.get_signals(market):
            if signal.symbol.lower() in wanted:
                return signal
        raise SymbolNotFoundError(f"Symbol not found: {symbol}", source="signal feed", symbol=symbol)

    async def get_chart_data(self, symbol: str, market: MarketType) -> ChartData:
        """Price bars with RSI and MACD overlays."""
        if not self.feed.is_static:
            return await self.feed.get_chart(symbol, market)

        if market == MarketType.CRYPTO:
            bars = await self.binance.get_klines(
                symbol,
                interval=self.settings.kline_interval,
                limit=self.settings.chart_kline_limit,
            )
        else:
            chart = await self.yahoo.get_chart(
                symbol, interval=self.settings.kline_interval, range_="7d"
            )
            bars = chart.bars
        return self.build_chart(bars)

    def build_chart(self, bars: list[PriceBar]) -> ChartData:
        closes = [bar.close for bar in bars]
        s = self.settings
        macd_line, signal_line = macd_series(closes, s.macd_fast, s.macd_slow, s.macd_signal)
        return ChartData(
            prices=bars,
            rsi=rsi_series(closes, s.rsi_period),
            macd=macd_line,
            macd_signal=signal_line,
        )
