"""Market-data clients."""

from market_scanner.app.clients.base import close_all
from market_scanner.app.clients.binance_spot import (
    BinanceSpotClient,
    RateLimiter,
    Ticker24h,
    to_pair,
)
from market_scanner.app.clients.errors import MarketDataError, SymbolNotFoundError
from market_scanner.app.clients.fear_greed import FearGreedClient
from market_scanner.app.clients.signal_feed import SignalFeedClient
from market_scanner.app.clients.yahoo import YahooChart, YahooFinanceClient, to_yahoo_symbol

__all__ = [
    "BinanceSpotClient",
    "RateLimiter",
    "Ticker24h",
    "to_pair",
    "MarketDataError",
    "SymbolNotFoundError",
    "FearGreedClient",
    "SignalFeedClient",
    "YahooChart",
    "YahooFinanceClient",
    "to_yahoo_symbol",
    "close_all",
]
