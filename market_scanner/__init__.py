"""Market Scanner: trading signals for crypto and Thai equities."""

__version__ = "0.1.0"
