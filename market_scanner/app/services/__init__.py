"""Business services."""

from market_scanner.app.services.investment_service import InvestmentService
from market_scanner.app.services.price_service import PriceService
from market_scanner.app.services.signal_service import SignalService
from market_scanner.app.services.signal_watcher import SignalCallback, SignalWatcher

__all__ = [
    "InvestmentService",
    "PriceService",
    "SignalService",
    "SignalCallback",
    "SignalWatcher",
]
