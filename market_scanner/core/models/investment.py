"""Goal-based investment models.

View models layered on top of a Signal and the user's declared goal
(capital, target profit, target entry price). None of them carry state
beyond what is needed to present a calculation.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field

from market_scanner.core.models.signal import MarketType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Recommendation(str, Enum):
    """Limit-entry recommendation."""

    WAIT = "WAIT"
    ALMOST_THERE = "ALMOST_THERE"
    BUY_NOW = "BUY_NOW"


class PatienceAction(str, Enum):
    """Patience meter verdict."""

    WAIT = "WAIT"
    BUY = "BUY"


class Tier(str, Enum):
    """5x potential tier, S being the strongest."""

    S = "S"
    A = "A"
    B = "B"
    C = "C"


class InvestmentGoal(BaseModel):
    """User goal: grow ``initial_capital`` by ``target_profit``."""

    id: str = ""
    symbol: str
    market_type: MarketType = MarketType.CRYPTO
    initial_capital: float = Field(gt=0)
    target_profit: float = 0.0
    timeframe_years: int = 3
    target_entry_price: float | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime | None = None

    @property
    def total_target(self) -> float:
        """Capital plus target profit."""
        return self.initial_capital + self.target_profit

    @property
    def required_multiplier(self) -> float:
        """Return multiple needed to reach the target (e.g. 5.0 for 5x)."""
        return self.total_target / self.initial_capital

    @property
    def required_return_percent(self) -> float:
        return (self.required_multiplier - 1) * 100


class EntryAlert(BaseModel):
    """Probability of price dipping to a limit entry within the horizon."""

    symbol: str
    current_price: float
    target_entry_price: float
    reach_probability: float  # 0-1
    volatility: float  # annualized
    selling_pressure: float  # -1 to 1
    recommendation: Recommendation = Recommendation.WAIT
    timestamp: datetime = Field(default_factory=_utcnow)

    @property
    def distance_percent(self) -> float:
        """Distance from current price down to the target, in percent of target."""
        if self.target_entry_price == 0:
            return 0.0
        return (self.current_price - self.target_entry_price) / self.target_entry_price * 100

    @property
    def is_at_target(self) -> bool:
        return self.current_price <= self.target_entry_price


class InvestmentRoadmap(BaseModel):
    """Buy-today vs buy-at-target comparison for one goal."""

    symbol: str
    current_price: float
    target_entry_price: float
    predicted_price: float
    initial_capital: float
    target_profit: float

    profit_if_buy_today: float
    percent_if_buy_today: float
    reaches_goal_if_buy_today: bool

    profit_if_buy_at_target: float
    percent_if_buy_at_target: float
    reaches_goal_if_buy_at_target: bool

    @property
    def profit_difference(self) -> float:
        return self.profit_if_buy_at_target - self.profit_if_buy_today

    @property
    def percent_difference(self) -> float:
        return self.percent_if_buy_at_target - self.percent_if_buy_today


class PotentialScore(BaseModel):
    """Heuristic score for a coin's chance of a 5x move over five years."""

    symbol: str
    name: str
    category: str
    current_price: float
    market_cap: float  # USD
    potential_score: float  # 0-100
    growth_rate: float  # annual, percent
    five_year_prediction: float
    potential_multiplier: float
    tier: Tier
    reason: str = ""

    @property
    def has_5x_potential(self) -> bool:
        return self.potential_multiplier >= 5.0


class PatienceMeter(BaseModel):
    """Whether to wait for a better entry or buy now."""

    symbol: str
    action: PatienceAction
    patience_score: float  # 0-100, 100 = wait
    reason: str
    factors: list[str] = Field(default_factory=list)
    fomo_risk: float = 0.0  # 0-1
    optimal_entry_time: datetime

    @property
    def should_wait(self) -> bool:
        return self.action == PatienceAction.WAIT
