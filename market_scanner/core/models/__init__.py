"""Data models."""

from market_scanner.core.models.chart import ChartData, PriceBar
from market_scanner.core.models.fear_greed import FearGreedIndex
from market_scanner.core.models.investment import (
    EntryAlert,
    InvestmentGoal,
    InvestmentRoadmap,
    PatienceAction,
    PatienceMeter,
    PotentialScore,
    Recommendation,
    Tier,
)
from market_scanner.core.models.signal import MarketType, Signal, SignalType

__all__ = [
    "ChartData",
    "PriceBar",
    "FearGreedIndex",
    "EntryAlert",
    "InvestmentGoal",
    "InvestmentRoadmap",
    "PatienceAction",
    "PatienceMeter",
    "PotentialScore",
    "Recommendation",
    "Tier",
    "MarketType",
    "Signal",
    "SignalType",
]
