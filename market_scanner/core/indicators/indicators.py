"""Technical indicators for signal generation.

All functions take a series of closing prices ordered oldest first and
are pure: short series fall back to neutral values (RSI 50, MACD 0, empty
EMA) instead of raising.
"""

from typing import Sequence

import numpy as np
from pydantic import BaseModel, ConfigDict

RSI_NEUTRAL = 50.0
RSI_MAX = 100.0


class MacdResult(BaseModel):
    """Latest MACD line, signal line and histogram."""

    model_config = ConfigDict(frozen=True)

    macd: float = 0.0
    signal: float = 0.0
    histogram: float = 0.0


def _to_array(values: Sequence[float]) -> np.ndarray:
    return np.array([float(v) for v in values], dtype=np.float64)


def ema(values: Sequence[float], period: int) -> list[float]:
    """
    Calculate Exponential Moving Average.

    The first value is the simple mean of the first ``period`` prices,
    each following value is ``(price - prev) * k + prev`` with
    ``k = 2 / (period + 1)``.

    Args:
        values: Sequence of price values
        period: EMA period

    Returns:
        List of ``len(values) - period + 1`` EMA values, or an empty list
        if there are fewer than ``period`` values
    """
    if period < 1 or len(values) < period:
        return []

    arr = _to_array(values)
    multiplier = 2.0 / (period + 1)

    result = np.empty(len(arr) - period + 1, dtype=np.float64)
    result[0] = arr[:period].sum() / period

    for i in range(period, len(arr)):
        prev = result[i - period]
        result[i - period + 1] = (arr[i] - prev) * multiplier + prev

    return result.tolist()


def rsi_series(values: Sequence[float], period: int = 14) -> list[float]:
    """
    Calculate the RSI after the seed average and after every smoothing step.

    Average gain/loss are seeded with the simple mean of the first
    ``period`` deltas, then smoothed with Wilder's method:
    ``avg = (avg * (period - 1) + new) / period``.

    Args:
        values: Sequence of price values
        period: RSI period

    Returns:
        List of ``len(values) - period`` RSI values, or an empty list
        if there are fewer than ``period + 1`` values
    """
    if period < 1 or len(values) < period + 1:
        return []

    deltas = np.diff(_to_array(values))
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    avg_gain = float(gains[:period].sum() / period)
    avg_loss = float(losses[:period].sum() / period)
    result = [_rsi_value(avg_gain, avg_loss)]

    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + float(gain)) / period
        avg_loss = (avg_loss * (period - 1) + float(loss)) / period
        result.append(_rsi_value(avg_gain, avg_loss))

    return result


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    # No losses reads as 100, including a series that never moved.
    if avg_loss == 0:
        return RSI_MAX
    rs = avg_gain / avg_loss
    return RSI_MAX - (RSI_MAX / (1 + rs))


def rsi(values: Sequence[float], period: int = 14) -> float:
    """
    Calculate the latest Relative Strength Index.

    Args:
        values: Sequence of price values
        period: RSI period

    Returns:
        RSI in [0, 100], or 50.0 if there are fewer than ``period + 1`` values
    """
    series = rsi_series(values, period)
    if not series:
        return RSI_NEUTRAL
    return series[-1]


def macd_series(
    values: Sequence[float],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> tuple[list[float], list[float]]:
    """
    Calculate the MACD line and its signal line.

    The MACD line starts at price index ``slow - 1`` where both EMAs are
    defined; each point is ``ema_fast - ema_slow`` at the same price index.
    The signal line is the EMA of the MACD line.

    Returns:
        Tuple of (macd_line, signal_line). The signal line is shorter than
        the MACD line by ``signal - 1`` points and may be empty.
    """
    ema_fast = ema(values, fast)
    ema_slow = ema(values, slow)
    if not ema_fast or not ema_slow:
        return [], []

    offset = slow - fast
    macd_line = [
        ema_fast[k + offset] - slow_value
        for k, slow_value in enumerate(ema_slow)
        if 0 <= k + offset < len(ema_fast)
    ]
    return macd_line, ema(macd_line, signal)


def macd(
    values: Sequence[float],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> MacdResult:
    """
    Calculate the latest MACD(fast, slow, signal).

    Args:
        values: Sequence of price values
        fast: Fast EMA period
        slow: Slow EMA period
        signal: Signal line EMA period

    Returns:
        MacdResult, all zeros if there are fewer than ``slow + signal`` values
    """
    if len(values) < slow + signal:
        return MacdResult()

    macd_line, signal_line = macd_series(values, fast, slow, signal)
    if not macd_line:
        return MacdResult()

    current_macd = macd_line[-1]
    current_signal = signal_line[-1] if signal_line else 0.0
    return MacdResult(
        macd=current_macd,
        signal=current_signal,
        histogram=current_macd - current_signal,
    )
