"""Application configuration."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SCANNER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Signal feed (static JSON on GitHub Pages, or a REST backend)
    feed_base_url: str = "https://sittiponpu774.github.io/market-scanner-api/data"

    # Market data sources
    binance_base_url: str = "https://api.binance.com"
    yahoo_base_url: str = "https://query1.finance.yahoo.com"
    fear_greed_url: str = "https://api.alternative.me/fng/"
    http_timeout: float = 15.0

    # Indicator inputs
    kline_interval: str = "1h"
    kline_limit: int = 100
    chart_kline_limit: int = 168
    thai_chart_range: str = "1mo"
    thai_min_closes: int = 30

    # Indicator periods
    rsi_period: int = 14
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9

    # Cache TTLs (seconds)
    price_cache_ttl: float = 5.0
    investment_price_cache_ttl: float = 30.0

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
