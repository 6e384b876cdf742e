"""Technical indicators (pure math, no I/O)."""

from market_scanner.core.indicators.indicators import (
    RSI_NEUTRAL,
    MacdResult,
    ema,
    macd,
    macd_series,
    rsi,
    rsi_series,
)

__all__ = [
    "RSI_NEUTRAL",
    "MacdResult",
    "ema",
    "macd",
    "macd_series",
    "rsi",
    "rsi_series",
]
