"""Tests for data models."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from market_scanner.core.models import (
    ChartData,
    EntryAlert,
    FearGreedIndex,
    InvestmentGoal,
    MarketType,
    PriceBar,
    Signal,
    SignalType,
)


class TestSignal:
    """Tests for the Signal model."""

    def test_from_feed_snake_case(self):
        """Test a record from the static feed."""
        signal = Signal.from_feed(
            {
                "symbol": "BTC",
                "price": 43000.5,
                "change_24h": 2.5,
                "signal": "buy",
                "strength": 0.8,
                "rsi": 28.0,
                "macd": {"macd": 120.0, "signal": 100.0},
                "volume_24h": 1500.0,
            }
        )

        assert signal.symbol == "BTC"
        assert signal.change_percent == 2.5
        assert signal.signal_type == SignalType.BUY
        assert signal.confidence == 0.8
        assert signal.macd == 120.0
        assert signal.macd_signal == 100.0
        assert signal.volume == 1500.0
        assert signal.market_type == MarketType.CRYPTO

    def test_from_feed_camel_case(self):
        """Test a record using camelCase keys and a numeric MACD."""
        signal = Signal.from_feed(
            {
                "symbol": "PTT",
                "price": 35.25,
                "changePercent": -1.2,
                "signalType": "SELL",
                "confidence": 0.7,
                "macd": -0.3,
                "macdSignal": -0.1,
                "volume": 10000,
                "marketType": "thai_stock",
                "additionalData": {"name": "PTT PCL"},
            }
        )

        assert signal.change_percent == -1.2
        assert signal.signal_type == SignalType.SELL
        assert signal.confidence == 0.7
        assert signal.macd == -0.3
        assert signal.macd_signal == -0.1
        assert signal.market_type == MarketType.THAI_STOCK
        assert signal.additional_data == {"name": "PTT PCL"}

    def test_from_feed_defaults(self):
        """Test missing fields get neutral defaults."""
        signal = Signal.from_feed({"symbol": "ETH"})

        assert signal.price == 0.0
        assert signal.signal_type == SignalType.HOLD
        assert signal.confidence == 0.5
        assert signal.rsi == 50.0
        assert signal.macd == 0.0

    def test_from_feed_up_probability(self):
        """Test up_probability is used when no other confidence is present."""
        signal = Signal.from_feed({"symbol": "ETH", "up_probability": 0.65})
        assert signal.confidence == 0.65

    def test_market_type_override(self):
        """Test an explicit market type wins over the record."""
        signal = Signal.from_feed(
            {"symbol": "PTT", "market_type": "crypto"}, market_type=MarketType.THAI_STOCK
        )
        assert signal.market_type == MarketType.THAI_STOCK

    def test_unknown_signal_type(self):
        """Test unknown classifications read as HOLD."""
        assert Signal(symbol="BTC", signal_type="STRONG_BUY").signal_type == SignalType.HOLD
        assert Signal(symbol="BTC", signal_type=" sell ").signal_type == SignalType.SELL

    def test_histogram(self):
        """Test histogram prefers the stored value."""
        signal = Signal(symbol="BTC", macd=2.0, macd_signal=1.5)
        assert signal.histogram == pytest.approx(0.5)

        signal = Signal(
            symbol="BTC", macd=2.0, macd_signal=1.5, additional_data={"histogram": 0.3}
        )
        assert signal.histogram == 0.3

    def test_to_feed(self):
        """Test feed serialization keys."""
        signal = Signal(symbol="BTC", signal_type=SignalType.BUY, price=100.0)
        data = signal.to_feed()

        assert data["signal"] == "BUY"
        assert data["market_type"] == "crypto"
        assert data["price"] == 100.0
        assert Signal.from_feed(data).signal_type == SignalType.BUY

    def test_bullish_bearish(self):
        assert Signal(symbol="BTC", signal_type=SignalType.BUY).is_bullish
        assert Signal(symbol="BTC", signal_type=SignalType.SELL).is_bearish
        assert not Signal(symbol="BTC").is_bullish


class TestChartData:
    """Tests for chart data."""

    def test_from_feed(self):
        """Test chart parsing with null overlay points."""
        chart = ChartData.from_feed(
            {
                "prices": [
                    {
                        "time": "2024-01-01T00:00:00Z",
                        "open": 1.0,
                        "high": 2.0,
                        "low": 0.5,
                        "close": 1.5,
                        "volume": 10.0,
                    }
                ],
                "rsi": [55.0, None],
                "macd": [0.1],
            }
        )

        assert chart.closes == [1.5]
        assert chart.prices[0].is_bullish
        assert chart.prices[0].range_size == 1.5
        assert chart.rsi == [55.0, 0.0]
        assert chart.macd == [0.1]
        assert chart.macd_signal == []

    def test_price_bar_is_frozen(self):
        """Test price bars are immutable."""
        bar = PriceBar(
            time=datetime(2024, 1, 1, tzinfo=timezone.utc), open=1, high=1, low=1, close=1
        )
        with pytest.raises(ValidationError):
            bar.close = 2.0


class TestInvestmentModels:
    """Tests for investment models."""

    def test_goal_multiplier(self):
        """Test required multiplier and return."""
        goal = InvestmentGoal(symbol="BTC", initial_capital=1000, target_profit=4000)

        assert goal.total_target == 5000
        assert goal.required_multiplier == 5.0
        assert goal.required_return_percent == 400.0

    def test_goal_requires_positive_capital(self):
        """Test zero capital is rejected."""
        with pytest.raises(ValidationError):
            InvestmentGoal(symbol="BTC", initial_capital=0)

    def test_entry_alert_distance(self):
        """Test distance to target in percent of target."""
        alert = EntryAlert(
            symbol="BTC",
            current_price=110.0,
            target_entry_price=100.0,
            reach_probability=0.2,
            volatility=0.5,
            selling_pressure=0.0,
        )
        assert alert.distance_percent == pytest.approx(10.0)
        assert not alert.is_at_target

    def test_entry_alert_zero_target(self):
        """Test a zero target has zero distance."""
        alert = EntryAlert(
            symbol="BTC",
            current_price=110.0,
            target_entry_price=0.0,
            reach_probability=0.0,
            volatility=0.5,
            selling_pressure=0.0,
        )
        assert alert.distance_percent == 0.0


class TestFearGreedIndex:
    """Tests for Fear & Greed parsing."""

    NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_from_envelope(self):
        """Test parsing the full API response."""
        index = FearGreedIndex.from_api(
            {
                "name": "Fear and Greed Index",
                "data": [
                    {
                        "value": "20",
                        "value_classification": "Extreme Fear",
                        "timestamp": "1704067200",
                        "time_until_update": "3600",
                    }
                ],
            },
            now=self.NOW,
        )

        assert index.value == 20
        assert index.classification == "Extreme Fear"
        assert index.timestamp == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert index.next_update == self.NOW + timedelta(hours=1)
        assert index.is_buy_zone
        assert not index.is_sell_zone
        assert index.suggestion == "Potential buying opportunity"

    def test_from_single_entry(self):
        """Test parsing a bare data entry."""
        index = FearGreedIndex.from_api(
            {"value": "80", "value_classification": "Extreme Greed", "timestamp": "0"}
        )

        assert index.value == 80
        assert index.is_sell_zone
        assert index.next_update is None
        assert index.suggestion.startswith("Extreme greed")

    def test_bad_value_defaults(self):
        """Test unparseable values fall back to neutral."""
        index = FearGreedIndex.from_api({"data": [{"value": "n/a"}]})

        assert index.value == 50
        assert index.classification == "Neutral"
        assert index.suggestion == "Neutral market sentiment"

    @pytest.mark.parametrize(
        "value,buy,sell",
        [(35, True, False), (36, False, False), (74, False, False), (75, False, True)],
    )
    def test_zones(self, value, buy, sell):
        """Test buy and sell zone boundaries."""
        index = FearGreedIndex(value=value, timestamp=self.NOW)

        assert index.is_buy_zone is buy
        assert index.is_sell_zone is sell
