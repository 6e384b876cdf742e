"""Signal data models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class SignalType(str, Enum):
    """Trade classification."""

    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


class MarketType(str, Enum):
    """Market a symbol is traded on."""

    CRYPTO = "crypto"
    THAI_STOCK = "thai_stock"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _first(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first non-null value among the given keys."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return default


class Signal(BaseModel):
    """Indicator snapshot and classification for one symbol.

    Recomputed on every fetch; the upstream feed or live ticker is the
    source of truth, so signals are never persisted.
    """

    symbol: str
    price: float = 0.0
    change_percent: float = 0.0  # 24h change in percent
    signal_type: SignalType = SignalType.HOLD
    confidence: float = 0.5
    rsi: float = 50.0
    macd: float = 0.0
    macd_signal: float = 0.0
    volume: float = 0.0
    market_type: MarketType = MarketType.CRYPTO
    timestamp: datetime = Field(default_factory=_utcnow)
    additional_data: dict[str, Any] | None = None

    @field_validator("signal_type", mode="before")
    @classmethod
    def _normalize_signal_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().upper()
            if value not in SignalType.__members__:
                return SignalType.HOLD
        return value

    @classmethod
    def from_feed(
        cls,
        data: dict[str, Any],
        market_type: MarketType | str | None = None,
    ) -> "Signal":
        """
        Build a signal from a feed record.

        Feed records come from several producers and use different keys for
        the same field; MACD may be a number or a ``{macd, signal}`` object.

        Args:
            data: Raw JSON record
            market_type: Overrides the record's own market type when given

        Returns:
            Parsed Signal
        """
        macd_value = 0.0
        macd_signal_value = 0.0
        raw_macd = data.get("macd")
        if isinstance(raw_macd, dict):
            macd_value = raw_macd.get("macd") or 0.0
            macd_signal_value = raw_macd.get("signal") or 0.0
        elif raw_macd is not None:
            macd_value = raw_macd
            macd_signal_value = _first(data, "macd_signal", "macdSignal", default=0.0)

        payload: dict[str, Any] = {
            "symbol": data.get("symbol") or "",
            "price": _first(data, "price", default=0.0),
            "change_percent": _first(
                data, "change_24h", "change_percent", "changePercent", default=0.0
            ),
            "signal_type": _first(data, "signal", "signalType", default=SignalType.HOLD),
            "confidence": _first(
                data, "strength", "confidence", "up_probability", default=0.5
            ),
            "rsi": _first(data, "rsi", default=50.0),
            "macd": macd_value,
            "macd_signal": macd_signal_value,
            "volume": _first(data, "volume_24h", "volume", default=0.0),
            "market_type": market_type
            or _first(data, "market_type", "marketType", default=MarketType.CRYPTO),
            "additional_data": _first(data, "additional_data", "additionalData"),
        }
        timestamp = data.get("timestamp")
        if timestamp is not None:
            payload["timestamp"] = timestamp
        return cls(**payload)

    def to_feed(self) -> dict[str, Any]:
        """Serialize using the feed's snake_case keys."""
        return {
            "symbol": self.symbol,
            "price": self.price,
            "change_percent": self.change_percent,
            "signal": self.signal_type.value,
            "confidence": self.confidence,
            "rsi": self.rsi,
            "macd": self.macd,
            "macd_signal": self.macd_signal,
            "volume": self.volume,
            "market_type": self.market_type.value,
            "timestamp": self.timestamp.isoformat(),
            "additional_data": self.additional_data,
        }

    @property
    def histogram(self) -> float:
        """MACD histogram, preferring the value computed alongside the signal."""
        if self.additional_data and self.additional_data.get("histogram") is not None:
            return float(self.additional_data["histogram"])
        return self.macd - self.macd_signal

    @property
    def is_bullish(self) -> bool:
        return self.signal_type == SignalType.BUY

    @property
    def is_bearish(self) -> bool:
        return self.signal_type == SignalType.SELL
