"""API endpoints."""

from market_scanner.app.api.routes import router

__all__ = ["router"]
