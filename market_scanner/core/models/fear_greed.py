"""Crypto Fear & Greed index model."""

from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import BaseModel

BUY_ZONE_MAX = 35
SELL_ZONE_MIN = 75


def _to_int(value: Any, default: int) -> int:
    try:
        return int(str(value))
    except (TypeError, ValueError):
        return default


class FearGreedIndex(BaseModel):
    """Market sentiment from 0 (extreme fear) to 100 (extreme greed)."""

    value: int = 50
    classification: str = "Neutral"
    timestamp: datetime
    next_update: datetime | None = None

    @classmethod
    def from_api(cls, payload: dict[str, Any], now: datetime | None = None) -> "FearGreedIndex":
        """
        Parse an alternative.me response.

        Accepts either the full ``{"data": [...]}`` envelope or a single
        data entry. Numeric fields arrive as strings.
        """
        now = now or datetime.now(timezone.utc)
        entries = payload.get("data")
        data = entries[0] if entries else payload

        next_update = None
        if data.get("time_until_update") is not None:
            next_update = now + timedelta(seconds=_to_int(data["time_until_update"], 0))

        return cls(
            value=_to_int(data.get("value"), 50),
            classification=data.get("value_classification") or "Neutral",
            timestamp=datetime.fromtimestamp(_to_int(data.get("timestamp"), 0), tz=timezone.utc),
            next_update=next_update,
        )

    @property
    def suggestion(self) -> str:
        if self.value <= 25:
            return "Potential buying opportunity"
        if self.value <= 45:
            return "Market is fearful - watch for entries"
        if self.value <= 55:
            return "Neutral market sentiment"
        if self.value <= 75:
            return "Market getting greedy - be cautious"
        return "Extreme greed - consider taking profits"

    @property
    def is_buy_zone(self) -> bool:
        return self.value <= BUY_ZONE_MAX

    @property
    def is_sell_zone(self) -> bool:
        return self.value >= SELL_ZONE_MIN
