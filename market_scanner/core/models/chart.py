"""Price bar and chart data models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PriceBar(BaseModel):
    """OHLCV bar."""

    model_config = ConfigDict(frozen=True)

    time: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    @property
    def is_bullish(self) -> bool:
        """Check if this is a bullish (green) bar."""
        return self.close > self.open

    @property
    def range_size(self) -> float:
        """Get the full range (high - low) of the bar."""
        return self.high - self.low


def _float_list(values: Any) -> list[float]:
    if not values:
        return []
    return [float(v) if v is not None else 0.0 for v in values]


class ChartData(BaseModel):
    """Price bars with indicator overlays for charting."""

    prices: list[PriceBar] = Field(default_factory=list)
    rsi: list[float] = Field(default_factory=list)
    macd: list[float] = Field(default_factory=list)
    macd_signal: list[float] = Field(default_factory=list)

    @classmethod
    def from_feed(cls, data: dict[str, Any]) -> "ChartData":
        return cls(
            prices=[PriceBar(**bar) for bar in data.get("prices") or []],
            rsi=_float_list(data.get("rsi")),
            macd=_float_list(data.get("macd")),
            macd_signal=_float_list(data.get("macd_signal")),
        )

    @property
    def closes(self) -> list[float]:
        """Closing prices, oldest first."""
        return [bar.close for bar in self.prices]
