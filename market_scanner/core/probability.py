"""Limit-entry probability estimate.

Treats price as a random walk scaled by historical volatility: the gap
between the current price and a lower target is expressed in units of the
expected 14-day move and mapped through the standard normal CDF. Recent
selling pressure nudges the estimate upward.

This module is pure business logic with no I/O dependencies.
"""

import math
from datetime import datetime, timezone
from typing import Sequence

import numpy as np

from market_scanner.core.models import EntryAlert, Recommendation

TRADING_DAYS_PER_YEAR = 252
HORIZON_DAYS = 14
DEFAULT_VOLATILITY = 0.05
MIN_HISTORY = 14
MAX_PROBABILITY = 0.95
SELLING_PRESSURE_WEIGHT = 0.3
ALMOST_THERE_PROBABILITY = 0.6
ALMOST_THERE_DISTANCE = 0.1

# Abramowitz & Stegun 7.1.26
_A1 = 0.254829592
_A2 = -0.284496736
_A3 = 1.421413741
_A4 = -1.453152027
_A5 = 1.061405429
_P = 0.3275911


def normal_cdf(z: float) -> float:
    """Standard normal CDF via the Abramowitz-Stegun erf approximation."""
    if z == 0:
        return 0.5

    sign = -1.0 if z < 0 else 1.0
    x = abs(z) / math.sqrt(2)

    t = 1.0 / (1.0 + _P * x)
    y = 1.0 - (((((_A5 * t + _A4) * t) + _A3) * t + _A2) * t + _A1) * t * math.exp(-x * x)

    return 0.5 * (1.0 + sign * y)


def calculate_volatility(prices: Sequence[float]) -> float:
    """
    Annualized volatility of simple returns.

    Population standard deviation of period returns scaled by sqrt(252).
    Returns are skipped where the previous price is not positive.

    Returns:
        Annualized volatility, or 0.05 when no return can be formed
    """
    if len(prices) < 2:
        return DEFAULT_VOLATILITY

    arr = np.array([float(p) for p in prices], dtype=np.float64)
    prev = arr[:-1]
    valid = prev > 0
    if not valid.any():
        return DEFAULT_VOLATILITY

    returns = (arr[1:][valid] - prev[valid]) / prev[valid]
    return float(np.std(returns)) * math.sqrt(TRADING_DAYS_PER_YEAR)


def calculate_selling_pressure(prices: Sequence[float]) -> float:
    """
    Momentum of the last 3 prices against the 4 before them.

    Falling prices read as positive selling pressure.

    Returns:
        Value in [-1, 1]; 0 with fewer than 7 prices
    """
    if len(prices) < 7:
        return 0.0

    recent_avg = sum(prices[-3:]) / 3
    older_avg = sum(prices[-7:-3]) / 4
    if older_avg == 0:
        return 0.0

    momentum = (recent_avg - older_avg) / older_avg
    return max(-1.0, min(1.0, -momentum * 10))


def analyze_entry_probability(
    symbol: str,
    current_price: float,
    target_entry_price: float,
    historical_prices: Sequence[float] | None = None,
    now: datetime | None = None,
) -> EntryAlert:
    """
    Estimate the chance of price reaching ``target_entry_price`` within 14 days.

    Args:
        symbol: Symbol the alert is for
        current_price: Latest price
        target_entry_price: Limit entry the user is waiting for
        historical_prices: Recent closes, oldest first; volatility and selling
            pressure are only measured with at least 14 points
        now: Alert timestamp, defaults to the current UTC time

    Returns:
        EntryAlert with probability clamped to [0, 0.95]
    """
    volatility = DEFAULT_VOLATILITY
    selling_pressure = 0.0
    if historical_prices is not None and len(historical_prices) >= MIN_HISTORY:
        volatility = calculate_volatility(historical_prices)
        selling_pressure = calculate_selling_pressure(historical_prices)

    distance = 0.0
    if current_price > 0:
        distance = (current_price - target_entry_price) / current_price

    daily_volatility = volatility / math.sqrt(TRADING_DAYS_PER_YEAR)
    expected_move = daily_volatility * math.sqrt(HORIZON_DAYS)

    if distance > 0:
        if expected_move > 0:
            probability = normal_cdf(-distance / expected_move)
        else:
            probability = 0.0
        if selling_pressure > 0:
            probability *= 1 + selling_pressure * SELLING_PRESSURE_WEIGHT
    else:
        probability = 1.0

    probability = max(0.0, min(MAX_PROBABILITY, probability))

    if current_price <= target_entry_price:
        recommendation = Recommendation.BUY_NOW
    elif probability >= ALMOST_THERE_PROBABILITY and distance <= ALMOST_THERE_DISTANCE:
        recommendation = Recommendation.ALMOST_THERE
    else:
        recommendation = Recommendation.WAIT

    return EntryAlert(
        symbol=symbol,
        current_price=current_price,
        target_entry_price=target_entry_price,
        reach_probability=probability,
        volatility=volatility,
        selling_pressure=selling_pressure,
        recommendation=recommendation,
        timestamp=now or datetime.now(timezone.utc),
    )
