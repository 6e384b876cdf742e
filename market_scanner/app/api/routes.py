"""REST API routes."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, Field

from market_scanner import __version__
from market_scanner.app.clients import FearGreedClient
from market_scanner.app.services import (
    InvestmentService,
    PriceService,
    SignalService,
    SignalWatcher,
)
from market_scanner.core.investment import (
    analyze_patience_meter,
    generate_roadmap,
    scan_5x_potential,
)
from market_scanner.core.models import (
    ChartData,
    EntryAlert,
    FearGreedIndex,
    InvestmentGoal,
    InvestmentRoadmap,
    MarketType,
    PatienceMeter,
    PotentialScore,
    Signal,
)
from market_scanner.core.probability import analyze_entry_probability
from market_scanner.core.signals import IndicatorSnapshot, compute

logger = logging.getLogger(__name__)

router = APIRouter()

_MARKETS = {
    "crypto": MarketType.CRYPTO,
    "thai": MarketType.THAI_STOCK,
}


# Request models
class IndicatorRequest(BaseModel):
    """Closing prices, oldest first."""

    prices: list[float]
    rsi_period: int = Field(14, ge=1)
    fast: int = Field(12, ge=1)
    slow: int = Field(26, ge=1)
    signal_period: int = Field(9, ge=1)


class RoadmapRequest(BaseModel):
    goal: InvestmentGoal
    current_price: float = Field(gt=0)
    predicted_price: float = Field(gt=0)


class EntryAlertRequest(BaseModel):
    symbol: str
    current_price: float
    target_entry_price: float
    historical_prices: Optional[list[float]] = None


class PatienceRequest(BaseModel):
    signal: Signal
    target_entry_price: float


class PotentialScanRequest(BaseModel):
    """Signals to scan; the live crypto signals are used when omitted."""

    signals: Optional[list[Signal]] = None
    top_n: int = Field(10, ge=1, le=100)


class SystemStatus(BaseModel):
    """System status response."""

    status: str
    version: str
    feed_url: str
    feed_static: bool
    feed_reachable: bool


# Dependencies, resolved from app.state set up in the lifespan
def get_signal_service(request: Request) -> SignalService:
    return request.app.state.signal_service


def get_price_service(request: Request) -> PriceService:
    return request.app.state.price_service


def get_investment_service(request: Request) -> InvestmentService:
    return request.app.state.investment_service


def get_signal_watcher(request: Request) -> SignalWatcher:
    return request.app.state.signal_watcher


def get_fear_greed_client(request: Request) -> FearGreedClient:
    return request.app.state.fear_greed_client


def _market(name: str) -> MarketType:
    market = _MARKETS.get(name.lower())
    if market is None:
        raise HTTPException(status_code=404, detail=f"Unknown market: {name}")
    return market


@router.get("/status", response_model=SystemStatus)
async def get_status(service: SignalService = Depends(get_signal_service)):
    """Get system status."""
    return SystemStatus(
        status="running",
        version=__version__,
        feed_url=service.feed.base_url,
        feed_static=service.feed.is_static,
        feed_reachable=await service.feed.check_connection(),
    )


@router.get("/crypto/signals", response_model=list[Signal])
async def get_crypto_signals(
    limit: Optional[int] = Query(None, ge=1, le=1000, description="Maximum signals to return"),
    service: SignalService = Depends(get_signal_service),
):
    """Get crypto signals refreshed with live Binance data."""
    return await service.get_crypto_signals(limit)


@router.get("/thai/signals", response_model=list[Signal])
async def get_thai_signals(
    limit: Optional[int] = Query(None, ge=1, le=1000, description="Maximum signals to return"),
    service: SignalService = Depends(get_signal_service),
):
    """Get Thai stock signals."""
    return await service.get_thai_signals(limit)


@router.get("/crypto/prices")
async def get_crypto_prices(
    symbols: str = Query(..., description="Comma-separated symbols, e.g. BTC,ETH"),
    prices: PriceService = Depends(get_price_service),
) -> dict[str, float]:
    """Get latest prices for several crypto symbols."""
    wanted = [s.strip() for s in symbols.split(",") if s.strip()]
    return await prices.get_prices(wanted)


@router.get("/{market}/signal/{symbol}", response_model=Signal)
async def get_signal(
    market: str,
    symbol: str,
    service: SignalService = Depends(get_signal_service),
):
    """Get the feed signal for one symbol."""
    return await service.get_signal_detail(symbol, _market(market))


@router.get("/{market}/search/{symbol}", response_model=Signal)
async def search_signal(
    market: str,
    symbol: str,
    service: SignalService = Depends(get_signal_service),
):
    """Build a signal for any symbol from live market data."""
    return await service.search(symbol, _market(market))


@router.get("/{market}/chart/{symbol}", response_model=ChartData)
async def get_chart(
    market: str,
    symbol: str,
    service: SignalService = Depends(get_signal_service),
):
    """Get price bars with RSI and MACD overlays."""
    return await service.get_chart_data(symbol, _market(market))


@router.post("/indicators", response_model=IndicatorSnapshot)
async def compute_indicators(request: IndicatorRequest):
    """Compute RSI, MACD and the classification for a price series."""
    return compute(
        request.prices,
        rsi_period=request.rsi_period,
        fast=request.fast,
        slow=request.slow,
        signal_period=request.signal_period,
    )


@router.post("/investment/roadmap", response_model=InvestmentRoadmap)
async def investment_roadmap(request: RoadmapRequest):
    """Compare buying today with buying at the goal's target entry."""
    return generate_roadmap(request.goal, request.current_price, request.predicted_price)


@router.post("/investment/entry-alert", response_model=EntryAlert)
async def entry_alert(request: EntryAlertRequest):
    """Estimate the chance of reaching a limit entry within 14 days."""
    return analyze_entry_probability(
        symbol=request.symbol,
        current_price=request.current_price,
        target_entry_price=request.target_entry_price,
        historical_prices=request.historical_prices,
    )


@router.post("/investment/patience", response_model=PatienceMeter)
async def patience_meter(request: PatienceRequest):
    """Wait for the target entry or buy now."""
    return analyze_patience_meter(request.signal, request.target_entry_price)


@router.post("/potential/scan", response_model=list[PotentialScore])
async def potential_scan(
    request: PotentialScanRequest,
    service: SignalService = Depends(get_signal_service),
):
    """Rank coins with 5x potential."""
    signals = request.signals
    if signals is None:
        signals = await service.get_crypto_signals()
    return scan_5x_potential(signals, top_n=request.top_n)


@router.get("/fear-greed", response_model=FearGreedIndex)
async def fear_greed(client: FearGreedClient = Depends(get_fear_greed_client)):
    """Get the crypto Fear & Greed index."""
    return await client.get_index()


@router.post("/investment/alerts", response_model=list[EntryAlert])
async def entry_alerts(
    goals: list[InvestmentGoal],
    service: InvestmentService = Depends(get_investment_service),
):
    """Check goals with a target entry against live prices."""
    return await service.check_entry_alerts(goals)


@router.post("/signals/check", response_model=list[Signal])
async def check_signal_changes(watcher: SignalWatcher = Depends(get_signal_watcher)):
    """Run one change-detection cycle and return the signals that changed."""
    return await watcher.check_once()
