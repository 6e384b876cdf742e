"""Main application entry point."""

import logging
from contextlib import asynccontextmanager

# Configure logging FIRST, before any other imports
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)

# Reduce noise from third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("asyncio").setLevel(logging.WARNING)

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from market_scanner import __version__
from market_scanner.app.api import router
from market_scanner.app.clients import (
    BinanceSpotClient,
    FearGreedClient,
    MarketDataError,
    SignalFeedClient,
    SymbolNotFoundError,
    YahooFinanceClient,
    close_all,
)
from market_scanner.app.config import get_settings
from market_scanner.app.services import (
    InvestmentService,
    PriceService,
    SignalService,
    SignalWatcher,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    logger.info("Starting Market Scanner (feed: %s)", settings.feed_base_url)

    binance = BinanceSpotClient(settings.binance_base_url, timeout=settings.http_timeout)
    signal_service = SignalService(
        feed=SignalFeedClient(settings.feed_base_url, timeout=settings.http_timeout),
        binance=binance,
        yahoo=YahooFinanceClient(settings.yahoo_base_url, timeout=settings.http_timeout),
        settings=settings,
    )
    fear_greed_client = FearGreedClient(settings.fear_greed_url, timeout=settings.http_timeout)

    app.state.signal_service = signal_service
    app.state.price_service = PriceService(binance, ttl=settings.price_cache_ttl)
    app.state.investment_service = InvestmentService(
        signal_service, ttl=settings.investment_price_cache_ttl
    )
    app.state.fear_greed_client = fear_greed_client
    app.state.signal_watcher = SignalWatcher(signal_service)

    try:
        yield
    finally:
        logger.info("Shutting down...")
        await close_all(signal_service, fear_greed_client)
        logger.info("Shutdown complete")


# Create FastAPI app with orjson for faster JSON serialization
app = FastAPI(
    title="Market Scanner",
    description="Trading signals for crypto and Thai equities",
    version=__version__,
    lifespan=lifespan,
    default_response_class=ORJSONResponse,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api")


@app.exception_handler(SymbolNotFoundError)
async def symbol_not_found_handler(request: Request, exc: SymbolNotFoundError):
    return ORJSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(MarketDataError)
async def market_data_error_handler(request: Request, exc: MarketDataError):
    logger.warning("Upstream error on %s: %s", request.url.path, exc)
    return ORJSONResponse(
        status_code=502,
        content={"detail": f"Upstream {exc.source or 'market data'} unavailable"},
    )


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Market Scanner",
        "version": __version__,
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


def main():
    """Run the application."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "market_scanner.app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
