"""Yahoo Finance chart client for Thai (SET) equities."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import httpx

from market_scanner.app.clients.base import BaseHttpClient
from market_scanner.app.clients.errors import SymbolNotFoundError
from market_scanner.core.models import PriceBar

SET_SUFFIX = ".BK"

# Yahoo rejects requests without a browser-like agent
_HEADERS = {"User-Agent": "Mozilla/5.0 (compatible; market-scanner/0.1)"}


def to_yahoo_symbol(symbol: str) -> str:
    """``ptt`` -> ``PTT.BK``."""
    upper = symbol.strip().upper()
    return upper if upper.endswith(SET_SUFFIX) else f"{upper}{SET_SUFFIX}"


def strip_suffix(symbol: str) -> str:
    """``PTT.BK`` -> ``PTT``."""
    return symbol.strip().upper().removesuffix(SET_SUFFIX)


@dataclass
class YahooChart:
    """Parsed chart response."""

    symbol: str
    price: float
    previous_close: float
    bars: list[PriceBar] = field(default_factory=list)
    volume: float = 0.0

    @property
    def change_percent(self) -> float:
        if self.previous_close <= 0:
            return 0.0
        return (self.price - self.previous_close) / self.previous_close * 100

    @property
    def closes(self) -> list[float]:
        return [bar.close for bar in self.bars]


def _at(values: list[Any], index: int) -> float:
    if index < len(values) and values[index] is not None:
        return float(values[index])
    return 0.0


def parse_chart(symbol: str, data: dict[str, Any]) -> YahooChart:
    """Parse a ``/v8/finance/chart`` payload, dropping rows without a close."""
    results = (data.get("chart") or {}).get("result") or []
    if not results:
        raise SymbolNotFoundError(f"Unknown Yahoo symbol: {symbol}", source="yahoo", symbol=symbol)
    result = results[0]

    meta = result.get("meta") or {}
    timestamps = result.get("timestamp") or []
    quotes = ((result.get("indicators") or {}).get("quote") or [{}])[0]
    opens = quotes.get("open") or []
    highs = quotes.get("high") or []
    lows = quotes.get("low") or []
    closes = quotes.get("close") or []
    volumes = quotes.get("volume") or []

    bars = []
    for i, ts in enumerate(timestamps):
        if ts is None or i >= len(closes) or closes[i] is None:
            continue
        bars.append(
            PriceBar(
                time=datetime.fromtimestamp(ts, tz=timezone.utc),
                open=_at(opens, i),
                high=_at(highs, i),
                low=_at(lows, i),
                close=float(closes[i]),
                volume=_at(volumes, i),
            )
        )

    price = float(meta.get("regularMarketPrice") or 0.0)
    previous_close = float(meta.get("previousClose") or meta.get("chartPreviousClose") or price)
    total_volume = sum(float(v) for v in volumes if v is not None)

    return YahooChart(
        symbol=symbol,
        price=price,
        previous_close=previous_close,
        bars=bars,
        volume=total_volume,
    )


class YahooFinanceClient(BaseHttpClient):
    """Yahoo Finance v8 chart API client."""

    SOURCE = "yahoo"
    BASE_URL = "https://query1.finance.yahoo.com"

    def __init__(
        self,
        base_url: str = BASE_URL,
        timeout: float = 15.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        super().__init__(base_url, timeout=timeout, headers=_HEADERS, http_client=http_client)

    def _raise_for_status_error(self, error: httpx.HTTPStatusError, symbol: str | None) -> None:
        if error.response.status_code == 404:
            raise SymbolNotFoundError(
                f"Unknown Yahoo symbol: {symbol}", source=self.SOURCE, symbol=symbol
            ) from error

    async def get_chart(
        self,
        symbol: str,
        interval: str = "1h",
        range_: str = "1mo",
    ) -> YahooChart:
        """
        Fetch chart bars for a SET symbol.

        Args:
            symbol: SET symbol with or without the ``.BK`` suffix
            interval: Bar interval (e.g., "1h")
            range_: Lookback range (e.g., "7d", "1mo")

        Returns:
            YahooChart with bars oldest first
        """
        yahoo_symbol = to_yahoo_symbol(symbol)
        data = await self._request(
            "GET",
            f"/v8/finance/chart/{yahoo_symbol}",
            {"interval": interval, "range": range_},
            symbol=yahoo_symbol,
        )
        return parse_chart(yahoo_symbol, data)
