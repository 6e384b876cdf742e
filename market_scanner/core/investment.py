"""Goal-based investment calculators and entry heuristics.

- Required entry price and buy-today vs buy-at-target roadmap
- Patience meter: wait for a better entry or buy now
- 5x potential score from market cap, sector and indicators

This module is pure business logic with no I/O dependencies.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable

from market_scanner.core.models import (
    InvestmentGoal,
    InvestmentRoadmap,
    PatienceAction,
    PatienceMeter,
    PotentialScore,
    Signal,
    Tier,
)

logger = logging.getLogger(__name__)

PREDICTION_YEARS = 5
FIVE_X = 5.0

COIN_CATEGORIES: dict[str, str] = {
    # AI
    "FET": "AI", "AGIX": "AI", "OCEAN": "AI", "RNDR": "AI", "TAO": "AI",
    "AKT": "AI", "RLC": "AI",
    # DeFi
    "AAVE": "DeFi", "UNI": "DeFi", "MKR": "DeFi", "SNX": "DeFi",
    "CRV": "DeFi", "COMP": "DeFi", "SUSHI": "DeFi", "YFI": "DeFi",
    "1INCH": "DeFi", "BAL": "DeFi", "LDO": "DeFi",
    # Layer 1
    "ETH": "Layer1", "SOL": "Layer1", "ADA": "Layer1", "AVAX": "Layer1",
    "DOT": "Layer1", "ATOM": "Layer1", "NEAR": "Layer1", "APT": "Layer1",
    "SUI": "Layer1", "SEI": "Layer1", "ICP": "Layer1",
    # Layer 2
    "MATIC": "Layer2", "ARB": "Layer2", "OP": "Layer2", "IMX": "Layer2",
    "STX": "Layer2", "LRC": "Layer2", "SKL": "Layer2",
    # Gaming & metaverse
    "AXS": "Gaming", "SAND": "Gaming", "MANA": "Gaming", "GALA": "Gaming",
    "ENJ": "Gaming", "APE": "Gaming", "GMT": "Gaming",
    # Meme
    "DOGE": "Meme", "SHIB": "Meme", "PEPE": "Meme", "FLOKI": "Meme",
    "BONK": "Meme", "WIF": "Meme",
    # Infrastructure
    "LINK": "Oracle", "GRT": "Indexing", "FIL": "Storage", "AR": "Storage",
    "THETA": "Streaming", "HBAR": "Enterprise",
}

# Approximate market caps in billions of USD
ESTIMATED_MARKET_CAPS: dict[str, float] = {
    "BTC": 1000, "ETH": 300, "BNB": 50, "SOL": 40, "XRP": 30,
    "ADA": 15, "DOGE": 12, "AVAX": 10, "DOT": 8, "LINK": 8,
    "MATIC": 7, "SHIB": 5, "UNI": 5, "ATOM": 4, "LTC": 6,
    "NEAR": 3, "APT": 3, "ARB": 2, "OP": 2, "FET": 1.5,
    "RNDR": 1.5, "INJ": 1.5, "SUI": 1.2, "SEI": 0.8, "TIA": 1,
    "AGIX": 0.5, "OCEAN": 0.3, "TAO": 0.4, "AKT": 0.2, "RLC": 0.15,
    "PEPE": 1, "WIF": 0.8, "BONK": 0.6, "FLOKI": 0.5,
}
DEFAULT_MARKET_CAP = 1.0

CATEGORY_SCORES: dict[str, tuple[float, str | None]] = {
    "AI": (25, "AI sector - strongest narrative"),
    "Layer2": (20, "Layer 2 - scaling demand"),
    "DeFi": (18, "DeFi - still has growth runway"),
    "Gaming": (15, "Gaming/Metaverse - waiting on adoption"),
    "Layer1": (12, "Layer 1 - crowded field"),
    "Meme": (8, "Meme - high risk/reward"),
}
DEFAULT_CATEGORY_SCORE = 10

CATEGORY_GROWTH_RATES: dict[str, float] = {
    "AI": 0.50,
    "Layer2": 0.40,
    "Gaming": 0.35,
    "DeFi": 0.30,
    "Layer1": 0.25,
    "Meme": 0.20,
}
DEFAULT_GROWTH_RATE = 0.15


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


# =============================================================================
# Goal-based tracking
# =============================================================================

def calculate_required_entry_price(
    predicted_price: float,
    initial_capital: float,
    target_profit: float,
) -> float:
    """Entry price at which ``predicted_price`` turns capital into capital + profit."""
    required_multiplier = (initial_capital + target_profit) / initial_capital
    return predicted_price / required_multiplier


def calculate_profit_potential(
    entry_price: float,
    predicted_price: float,
    capital_invested: float,
) -> float:
    """Profit from buying at ``entry_price`` and holding to ``predicted_price``."""
    if entry_price <= 0:
        return 0.0
    units = capital_invested / entry_price
    return units * predicted_price - capital_invested


def calculate_percent_return(entry_price: float, exit_price: float) -> float:
    if entry_price <= 0:
        return 0.0
    return (exit_price - entry_price) / entry_price * 100


def generate_roadmap(
    goal: InvestmentGoal,
    current_price: float,
    predicted_price: float,
) -> InvestmentRoadmap:
    """
    Compare buying today against buying at the goal's target entry.

    The target entry is the goal's own ``target_entry_price`` or, when unset,
    the entry required to reach the profit target at ``predicted_price``.
    """
    target_entry = goal.target_entry_price
    if target_entry is None:
        target_entry = calculate_required_entry_price(
            predicted_price, goal.initial_capital, goal.target_profit
        )

    profit_today = calculate_profit_potential(current_price, predicted_price, goal.initial_capital)
    profit_at_target = calculate_profit_potential(
        target_entry, predicted_price, goal.initial_capital
    )

    return InvestmentRoadmap(
        symbol=goal.symbol,
        current_price=current_price,
        target_entry_price=target_entry,
        predicted_price=predicted_price,
        initial_capital=goal.initial_capital,
        target_profit=goal.target_profit,
        profit_if_buy_today=profit_today,
        percent_if_buy_today=calculate_percent_return(current_price, predicted_price),
        reaches_goal_if_buy_today=profit_today >= goal.target_profit,
        profit_if_buy_at_target=profit_at_target,
        percent_if_buy_at_target=calculate_percent_return(target_entry, predicted_price),
        reaches_goal_if_buy_at_target=profit_at_target >= goal.target_profit,
    )


# =============================================================================
# Patience meter
# =============================================================================

def analyze_patience_meter(
    signal: Signal,
    target_entry_price: float,
    now: datetime | None = None,
) -> PatienceMeter:
    """
    Decide whether to wait for ``target_entry_price`` or buy now.

    Starts from a neutral 50 and adds points for reasons to wait
    (overbought RSI, price far above target, bearish MACD, a 24h spike)
    and removes them for reasons to buy. 50 or more means WAIT.
    """
    now = now or datetime.now(timezone.utc)
    factors: list[str] = []
    score = 50.0

    rsi_text = f"{signal.rsi:.1f}"
    if signal.rsi > 70:
        score += 25
        factors.append(f"RSI overbought ({rsi_text}) - wait")
    elif signal.rsi < 30:
        score -= 25
        factors.append(f"RSI oversold ({rsi_text}) - attractive")
    elif signal.rsi > 60:
        score += 10
        factors.append(f"RSI elevated ({rsi_text})")
    elif signal.rsi < 40:
        score -= 10
        factors.append(f"RSI low ({rsi_text})")

    if target_entry_price > 0:
        distance = (signal.price - target_entry_price) / target_entry_price * 100
        if distance > 20:
            score += 20
            factors.append(f"Price {distance:.1f}% above target - wait")
        elif distance > 10:
            score += 10
            factors.append(f"Price {distance:.1f}% above target")
        elif distance <= 0:
            score -= 30
            factors.append("Price reached target")
        elif distance <= 5:
            score -= 15
            factors.append(f"Price {distance:.1f}% from target")

    if signal.macd < signal.macd_signal:
        score += 10
        factors.append("MACD bearish - may fall further")
    else:
        score -= 5
        factors.append("MACD bullish")

    change_text = f"{signal.change_percent:.1f}%"
    if signal.change_percent > 10:
        score += 15
        factors.append(f"Up {change_text} in 24h - beware FOMO")
    elif signal.change_percent < -10:
        score -= 10
        factors.append(f"Down {change_text} in 24h - possible opportunity")

    score = _clamp(score, 0, 100)

    fomo_risk = 0.0
    if signal.change_percent > 5:
        fomo_risk = _clamp(signal.change_percent / 20, 0, 1)
    if signal.rsi > 60:
        fomo_risk += _clamp((signal.rsi - 60) / 40, 0, 0.5)
    fomo_risk = _clamp(fomo_risk, 0, 1)

    if score >= 70:
        reason = "Overbought - buying now carries high risk"
    elif score >= 50:
        reason = "Not the best moment yet - wait for a better entry"
    elif score >= 30:
        reason = "Getting interesting - consider scaling in"
    else:
        reason = "Good timing - price is attractive against the target"

    return PatienceMeter(
        symbol=signal.symbol,
        action=PatienceAction.WAIT if score >= 50 else PatienceAction.BUY,
        patience_score=score,
        reason=reason,
        factors=factors,
        fomo_risk=fomo_risk,
        optimal_entry_time=now + timedelta(days=round(score / 10)),
    )


# =============================================================================
# 5x potential filter
# =============================================================================

def base_symbol(symbol: str) -> str:
    """Strip the quote currency: ``fet/usdt`` -> ``FET``."""
    return symbol.upper().replace("/", "").replace("USDT", "")


def estimate_growth_rate(category: str, market_cap_billions: float) -> float:
    """Annual growth estimate from sector, boosted for small caps."""
    rate = CATEGORY_GROWTH_RATES.get(category, DEFAULT_GROWTH_RATE)

    if market_cap_billions < 0.5:
        rate *= 1.5
    elif market_cap_billions < 2:
        rate *= 1.2
    elif market_cap_billions > 50:
        rate *= 0.6

    return rate


def _tier(score: float) -> Tier:
    if score >= 80:
        return Tier.S
    if score >= 60:
        return Tier.A
    if score >= 40:
        return Tier.B
    return Tier.C


def calculate_5x_potential(
    signal: Signal,
    growth_rate_override: float | None = None,
) -> PotentialScore:
    """
    Score a coin for a 5x move over five years.

    Args:
        signal: Latest signal for the coin
        growth_rate_override: Annual growth rate (fraction) to use instead of
            the sector estimate

    Returns:
        PotentialScore with score clamped to [0, 100]
    """
    symbol = base_symbol(signal.symbol)
    category = COIN_CATEGORIES.get(symbol, "Unknown")
    market_cap = ESTIMATED_MARKET_CAPS.get(symbol, DEFAULT_MARKET_CAP)

    score = 0.0
    reasons: list[str] = []

    if market_cap < 0.5:
        score += 30
        reasons.append("Low cap (under $500M) - high potential")
    elif market_cap < 2:
        score += 25
        reasons.append("Mid-low cap (under $2B) - good growth room")
    elif market_cap < 10:
        score += 15
        reasons.append("Mid cap - steady growth")
    else:
        score += 5
        reasons.append("Large cap - stable but limited upside")

    category_points, category_reason = CATEGORY_SCORES.get(
        category, (DEFAULT_CATEGORY_SCORE, None)
    )
    score += category_points
    if category_reason:
        reasons.append(category_reason)

    if signal.rsi < 30:
        score += 15
        reasons.append("RSI oversold - good entry")
    elif signal.rsi < 40:
        score += 10
        reasons.append("RSI low - not overheated")
    elif signal.rsi > 70:
        score -= 10
        reasons.append("RSI overbought - wait for a correction")

    if signal.change_percent < -15:
        score += 12
        reasons.append("Heavy drop - possible DCA opportunity")
    elif signal.change_percent < -5:
        score += 5
    elif signal.change_percent > 20:
        score -= 8
        reasons.append("Sharp rally - beware FOMO")

    if growth_rate_override is not None:
        growth_rate = growth_rate_override
    else:
        growth_rate = estimate_growth_rate(category, market_cap)

    multiplier = (1 + growth_rate) ** PREDICTION_YEARS
    five_year_price = signal.price * multiplier

    if multiplier >= 10:
        score += 15
    elif multiplier >= 5:
        score += 10
    elif multiplier >= 3:
        score += 5

    score = _clamp(score, 0, 100)

    name = symbol
    if signal.additional_data and signal.additional_data.get("name"):
        name = str(signal.additional_data["name"])

    return PotentialScore(
        symbol=symbol,
        name=name,
        category=category,
        current_price=signal.price,
        market_cap=market_cap * 1e9,
        potential_score=score,
        growth_rate=growth_rate * 100,
        five_year_prediction=five_year_price,
        potential_multiplier=multiplier,
        tier=_tier(score),
        reason=", ".join(reasons),
    )


def scan_5x_potential(signals: Iterable[Signal], top_n: int = 10) -> list[PotentialScore]:
    """Return the ``top_n`` coins with 5x potential, best score first."""
    scores: list[PotentialScore] = []

    for signal in signals:
        try:
            score = calculate_5x_potential(signal)
        except (ValueError, ArithmeticError) as e:
            logger.warning("Skipping %s in 5x scan: %s", signal.symbol, e)
            continue
        if score.has_5x_potential:
            scores.append(score)

    scores.sort(key=lambda s: s.potential_score, reverse=True)
    return scores[:top_n]
