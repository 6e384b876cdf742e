"""BUY/SELL/HOLD classification from RSI and MACD.

Three independent rules award buy or sell points:

- RSI: below 30 strong buy (+2), below 40 buy (+1),
  above 70 strong sell (+2), above 60 sell (+1)
- MACD vs signal line, strengthened when the histogram agrees (+2/+1)
- Histogram sign alone (+1)

A side wins only with a lead of at least two points. Confidence is the
winner's share of all points, clamped to [0.5, 0.95]; HOLD is always 0.5.

This module is pure business logic with no I/O dependencies.
"""

from typing import Sequence

from pydantic import BaseModel, ConfigDict

from market_scanner.core.indicators import MacdResult, macd, rsi
from market_scanner.core.models import SignalType

HOLD_CONFIDENCE = 0.5
MIN_CONFIDENCE = 0.5
MAX_CONFIDENCE = 0.95


class Classification(BaseModel):
    """Outcome of scoring one indicator snapshot."""

    model_config = ConfigDict(frozen=True)

    signal: SignalType
    confidence: float
    buy_score: int = 0
    sell_score: int = 0


class IndicatorSnapshot(BaseModel):
    """Latest indicator values and their classification."""

    model_config = ConfigDict(frozen=True)

    rsi: float
    macd: MacdResult
    signal: SignalType
    confidence: float


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def classify(
    rsi_value: float,
    macd_value: float,
    macd_signal: float,
    histogram: float,
) -> Classification:
    """
    Score indicator values into a trade classification.

    Args:
        rsi_value: RSI in [0, 100]
        macd_value: MACD line value
        macd_signal: Signal line value
        histogram: MACD minus signal

    Returns:
        Classification with signal, confidence and raw scores
    """
    buy_score = 0
    sell_score = 0

    if rsi_value < 30:
        buy_score += 2  # oversold
    elif rsi_value < 40:
        buy_score += 1
    elif rsi_value > 70:
        sell_score += 2  # overbought
    elif rsi_value > 60:
        sell_score += 1

    if macd_value > macd_signal and histogram > 0:
        buy_score += 2
    elif macd_value > macd_signal:
        buy_score += 1
    elif macd_value < macd_signal and histogram < 0:
        sell_score += 2
    elif macd_value < macd_signal:
        sell_score += 1

    if histogram > 0:
        buy_score += 1
    elif histogram < 0:
        sell_score += 1

    total = buy_score + sell_score
    if buy_score > sell_score + 1:
        signal = SignalType.BUY
        confidence = _clamp(buy_score / total, MIN_CONFIDENCE, MAX_CONFIDENCE)
    elif sell_score > buy_score + 1:
        signal = SignalType.SELL
        confidence = _clamp(sell_score / total, MIN_CONFIDENCE, MAX_CONFIDENCE)
    else:
        signal = SignalType.HOLD
        confidence = HOLD_CONFIDENCE

    return Classification(
        signal=signal,
        confidence=confidence,
        buy_score=buy_score,
        sell_score=sell_score,
    )


def compute(
    prices: Sequence[float],
    rsi_period: int = 14,
    fast: int = 12,
    slow: int = 26,
    signal_period: int = 9,
) -> IndicatorSnapshot:
    """
    Compute RSI, MACD and the resulting classification for a price series.

    Short series degrade to RSI 50 and zero MACD, which classify as HOLD.

    Args:
        prices: Closing prices, oldest first
        rsi_period: RSI period
        fast: Fast EMA period
        slow: Slow EMA period
        signal_period: MACD signal line period

    Returns:
        IndicatorSnapshot
    """
    rsi_value = rsi(prices, rsi_period)
    macd_result = macd(prices, fast, slow, signal_period)
    result = classify(rsi_value, macd_result.macd, macd_result.signal, macd_result.histogram)
    return IndicatorSnapshot(
        rsi=rsi_value,
        macd=macd_result,
        signal=result.signal,
        confidence=result.confidence,
    )
