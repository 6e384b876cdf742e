"""Tests for market-data HTTP clients."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import httpx
import pytest

from market_scanner.app.clients import (
    BinanceSpotClient,
    FearGreedClient,
    MarketDataError,
    RateLimiter,
    SignalFeedClient,
    SymbolNotFoundError,
    YahooFinanceClient,
    close_all,
    to_pair,
    to_yahoo_symbol,
)
from market_scanner.app.clients.yahoo import parse_chart, strip_suffix
from market_scanner.core.models import MarketType, SignalType


def mock_http(handler, base_url):
    """Create an AsyncClient answering every request with ``handler``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=base_url)


def binance_client(handler):
    return BinanceSpotClient(
        rate_limiter=RateLimiter(calls_per_minute=600000),
        http_client=mock_http(handler, BinanceSpotClient.BASE_URL),
    )


TICKER = {
    "symbol": "BTCUSDT",
    "priceChange": "1000.00",
    "priceChangePercent": "2.50",
    "lastPrice": "41000.00",
    "highPrice": "42000.00",
    "lowPrice": "39000.00",
    "volume": "12345.6",
}


class TestSymbolHelpers:
    """Tests for symbol normalization."""

    def test_to_pair(self):
        assert to_pair("btc") == "BTCUSDT"
        assert to_pair("BTC/USDT") == "BTCUSDT"
        assert to_pair("ethusdt") == "ETHUSDT"

    def test_yahoo_symbol(self):
        assert to_yahoo_symbol("ptt") == "PTT.BK"
        assert to_yahoo_symbol("PTT.BK") == "PTT.BK"
        assert strip_suffix("ptt.bk") == "PTT"


class TestBinanceSpotClient:
    """Tests for BinanceSpotClient."""

    @pytest.mark.asyncio
    async def test_get_ticker_24h(self):
        """Test ticker parsing from string numbers."""

        def handler(request):
            assert request.url.path == "/api/v3/ticker/24hr"
            assert request.url.params["symbol"] == "BTCUSDT"
            return httpx.Response(200, json=TICKER)

        async with binance_client(handler) as client:
            ticker = await client.get_ticker_24h("btc")

        assert ticker.symbol == "BTCUSDT"
        assert ticker.last_price == 41000.0
        assert ticker.price_change_percent == 2.5
        assert ticker.high_price == 42000.0
        assert ticker.volume == 12345.6

    @pytest.mark.asyncio
    async def test_get_all_tickers(self):
        """Test tickers are keyed by pair."""

        def handler(request):
            assert "symbol" not in request.url.params
            return httpx.Response(200, json=[TICKER, {**TICKER, "symbol": "ETHUSDT"}])

        async with binance_client(handler) as client:
            tickers = await client.get_all_tickers_24h()

        assert set(tickers) == {"BTCUSDT", "ETHUSDT"}

    @pytest.mark.asyncio
    async def test_get_klines(self):
        """Test kline parsing and the limit cap."""

        def handler(request):
            assert request.url.params["symbol"] == "ETHUSDT"
            assert request.url.params["interval"] == "1h"
            assert request.url.params["limit"] == "1000"
            return httpx.Response(
                200,
                json=[
                    [1704067200000, "1.0", "2.0", "0.5", "1.5", "10.0", 1704070799999],
                    [1704070800000, "1.5", "2.5", "1.0", "2.0", "20.0", 1704074399999],
                ],
            )

        async with binance_client(handler) as client:
            bars = await client.get_klines("ETH", limit=5000)

        assert len(bars) == 2
        assert bars[0].time == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert bars[0].close == 1.5
        assert bars[1].volume == 20.0

    @pytest.mark.asyncio
    async def test_get_prices(self):
        """Test bulk price lookup."""

        def handler(request):
            return httpx.Response(200, json=[{"symbol": "BTCUSDT", "price": "41000.5"}])

        async with binance_client(handler) as client:
            assert await client.get_prices() == {"BTCUSDT": 41000.5}

    @pytest.mark.asyncio
    async def test_invalid_symbol(self):
        """Test Binance's invalid symbol code maps to SymbolNotFoundError."""

        def handler(request):
            return httpx.Response(400, json={"code": -1121, "msg": "Invalid symbol."})

        async with binance_client(handler) as client:
            with pytest.raises(SymbolNotFoundError) as exc_info:
                await client.get_price("NOPE")

        assert exc_info.value.symbol == "NOPEUSDT"
        assert exc_info.value.source == "binance"

    @pytest.mark.asyncio
    async def test_other_bad_request(self):
        """Test other 400 errors stay generic."""

        def handler(request):
            return httpx.Response(400, json={"code": -1100, "msg": "Illegal characters"})

        async with binance_client(handler) as client:
            with pytest.raises(MarketDataError) as exc_info:
                await client.get_price("BTC")

        assert not isinstance(exc_info.value, SymbolNotFoundError)

    @pytest.mark.asyncio
    async def test_server_error(self):
        """Test 5xx responses raise MarketDataError."""

        def handler(request):
            return httpx.Response(503, text="unavailable")

        async with binance_client(handler) as client:
            with pytest.raises(MarketDataError):
                await client.get_all_tickers_24h()

    @pytest.mark.asyncio
    async def test_transport_error(self):
        """Test connection failures raise MarketDataError."""

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with binance_client(handler) as client:
            with pytest.raises(MarketDataError):
                await client.get_price("BTC")

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        """Test a non-JSON body raises MarketDataError."""

        def handler(request):
            return httpx.Response(200, content=b"<html>maintenance</html>")

        async with binance_client(handler) as client:
            with pytest.raises(MarketDataError):
                await client.get_price("BTC")


def yahoo_payload(closes, price=35.0, previous_close=34.0):
    timestamps = [1704067200 + i * 3600 for i in range(len(closes))]
    return {
        "chart": {
            "result": [
                {
                    "meta": {"regularMarketPrice": price, "previousClose": previous_close},
                    "timestamp": timestamps,
                    "indicators": {
                        "quote": [
                            {
                                "open": closes,
                                "high": closes,
                                "low": closes,
                                "close": closes,
                                "volume": [100 if c is not None else None for c in closes],
                            }
                        ]
                    },
                }
            ],
            "error": None,
        }
    }


class TestYahooFinanceClient:
    """Tests for YahooFinanceClient."""

    def test_parse_chart_drops_null_rows(self):
        """Test rows without a close are skipped."""
        chart = parse_chart("PTT.BK", yahoo_payload([34.0, None, 35.0]))

        assert chart.closes == [34.0, 35.0]
        assert chart.volume == 200.0
        assert chart.change_percent == pytest.approx(100 / 34)

    def test_parse_chart_no_result(self):
        """Test an empty result means an unknown symbol."""
        with pytest.raises(SymbolNotFoundError):
            parse_chart("NOPE.BK", {"chart": {"result": None, "error": {"code": "Not Found"}}})

    @pytest.mark.asyncio
    async def test_get_chart(self):
        """Test the request targets the .BK symbol."""

        def handler(request):
            assert request.url.path == "/v8/finance/chart/PTT.BK"
            assert request.url.params["range"] == "1mo"
            return httpx.Response(200, json=yahoo_payload([34.0, 35.0]))

        client = YahooFinanceClient(http_client=mock_http(handler, YahooFinanceClient.BASE_URL))
        async with client:
            chart = await client.get_chart("ptt")

        assert chart.symbol == "PTT.BK"
        assert chart.price == 35.0
        assert len(chart.bars) == 2

    @pytest.mark.asyncio
    async def test_not_found(self):
        """Test 404 maps to SymbolNotFoundError."""

        def handler(request):
            return httpx.Response(404, json={"chart": {"result": None}})

        client = YahooFinanceClient(http_client=mock_http(handler, YahooFinanceClient.BASE_URL))
        async with client:
            with pytest.raises(SymbolNotFoundError):
                await client.get_chart("NOPE")


FEED_RECORD = {
    "symbol": "BTC",
    "price": 41000.0,
    "change_24h": 2.5,
    "signal": "BUY",
    "strength": 0.8,
    "rsi": 28.0,
    "macd": {"macd": 120.0, "signal": 100.0},
}


class TestSignalFeedClient:
    """Tests for SignalFeedClient."""

    STATIC_URL = "https://example.github.io/market-scanner-api/data"
    REST_URL = "http://localhost:8000"

    def feed(self, handler, base_url):
        return SignalFeedClient(base_url, http_client=mock_http(handler, base_url))

    @pytest.mark.asyncio
    async def test_static_feed(self):
        """Test static snapshots are read from JSON files."""

        def handler(request):
            assert request.url.path == "/market-scanner-api/data/thai_signals.json"
            return httpx.Response(200, json=[{**FEED_RECORD, "symbol": "PTT"}])

        async with self.feed(handler, self.STATIC_URL) as feed:
            assert feed.is_static
            signals = await feed.get_signals(MarketType.THAI_STOCK)

        assert len(signals) == 1
        assert signals[0].symbol == "PTT"
        assert signals[0].market_type == MarketType.THAI_STOCK
        assert signals[0].signal_type == SignalType.BUY

    @pytest.mark.asyncio
    async def test_rest_feed_limit(self):
        """Test the REST backend receives the limit and it is enforced locally."""

        def handler(request):
            assert request.url.path == "/api/crypto/signals"
            assert request.url.params["limit"] == "2"
            return httpx.Response(200, json=[FEED_RECORD] * 3)

        async with self.feed(handler, self.REST_URL) as feed:
            assert not feed.is_static
            signals = await feed.get_signals(MarketType.CRYPTO, limit=2)

        assert len(signals) == 2

    @pytest.mark.asyncio
    async def test_not_a_list(self):
        """Test a non-list payload raises MarketDataError."""

        def handler(request):
            return httpx.Response(200, json={"error": "maintenance"})

        async with self.feed(handler, self.STATIC_URL) as feed:
            with pytest.raises(MarketDataError):
                await feed.get_signals(MarketType.CRYPTO)

    @pytest.mark.asyncio
    async def test_malformed_records_skipped(self):
        """Test records that fail validation are dropped and the rest are kept."""

        def handler(request):
            return httpx.Response(
                200, json=[{"symbol": "ETH", "price": "n/a"}, "garbage", FEED_RECORD]
            )

        async with self.feed(handler, self.STATIC_URL) as feed:
            signals = await feed.get_signals(MarketType.CRYPTO)

        assert [s.symbol for s in signals] == ["BTC"]

    @pytest.mark.asyncio
    async def test_malformed_single_signal(self):
        """Test a malformed detail record raises MarketDataError."""

        def handler(request):
            return httpx.Response(200, json={"symbol": "BTC", "price": "n/a"})

        async with self.feed(handler, self.REST_URL) as feed:
            with pytest.raises(MarketDataError) as exc_info:
                await feed.get_signal("BTC", MarketType.CRYPTO)

        assert exc_info.value.symbol == "BTC"
        assert exc_info.value.source == "signal feed"

    @pytest.mark.asyncio
    async def test_malformed_chart(self):
        """Test chart data with an invalid bar raises MarketDataError."""

        def handler(request):
            return httpx.Response(200, json={"prices": [{"close": "n/a"}]})

        async with self.feed(handler, self.REST_URL) as feed:
            with pytest.raises(MarketDataError):
                await feed.get_chart("BTC", MarketType.CRYPTO)

    @pytest.mark.asyncio
    async def test_get_signal_not_found(self):
        """Test a 404 for one symbol maps to SymbolNotFoundError."""

        def handler(request):
            assert request.url.path == "/api/crypto/signal/NOPE"
            return httpx.Response(404, json={"detail": "Not found"})

        async with self.feed(handler, self.REST_URL) as feed:
            with pytest.raises(SymbolNotFoundError):
                await feed.get_signal("NOPE", MarketType.CRYPTO)

    @pytest.mark.asyncio
    async def test_get_chart(self):
        """Test chart data from the REST backend."""

        def handler(request):
            assert request.url.path == "/api/thai/chart/PTT"
            return httpx.Response(200, json={"prices": [], "rsi": [50.0], "macd": []})

        async with self.feed(handler, self.REST_URL) as feed:
            chart = await feed.get_chart("PTT", MarketType.THAI_STOCK)

        assert chart.rsi == [50.0]

    @pytest.mark.asyncio
    async def test_check_connection(self):
        """Test the health check reports reachability."""

        def healthy(request):
            assert request.url.path.endswith("/health.json")
            return httpx.Response(200, json={"status": "ok"})

        def down(request):
            return httpx.Response(503)

        async with self.feed(healthy, self.STATIC_URL) as feed:
            assert await feed.check_connection() is True
        async with self.feed(down, self.STATIC_URL) as feed:
            assert await feed.check_connection() is False


class TestFearGreedClient:
    """Tests for FearGreedClient."""

    @pytest.mark.asyncio
    async def test_get_index(self):
        """Test the index is fetched from the API root."""

        def handler(request):
            assert request.url.path == "/fng/"
            return httpx.Response(
                200,
                json={"data": [{"value": "62", "value_classification": "Greed", "timestamp": "0"}]},
            )

        client = FearGreedClient(http_client=mock_http(handler, FearGreedClient.URL))
        async with client:
            index = await client.get_index()

        assert index.value == 62
        assert index.classification == "Greed"


class TestCloseAll:
    """Tests for close_all."""

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_others(self):
        """Test every client is closed even when one raises."""
        first = FearGreedClient()
        first.close = AsyncMock(side_effect=RuntimeError("boom"))
        second = FearGreedClient()
        second.close = AsyncMock()

        await close_all(first, second)

        first.close.assert_awaited_once()
        second.close.assert_awaited_once()
