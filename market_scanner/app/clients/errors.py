"""Market-data client errors."""


class MarketDataError(Exception):
    """Upstream market-data request failed or returned unusable data."""

    def __init__(self, message: str, source: str = "", symbol: str | None = None):
        super().__init__(message)
        self.source = source
        self.symbol = symbol


class SymbolNotFoundError(MarketDataError):
    """Upstream does not know the requested symbol."""
