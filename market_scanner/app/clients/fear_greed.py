"""alternative.me Crypto Fear & Greed index client."""

import httpx

from market_scanner.app.clients.base import BaseHttpClient
from market_scanner.core.models import FearGreedIndex


class FearGreedClient(BaseHttpClient):
    """Free API, no key required."""

    SOURCE = "fear & greed"
    URL = "https://api.alternative.me/fng/"

    def __init__(
        self,
        url: str = URL,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        super().__init__(url, timeout=timeout, http_client=http_client)

    async def get_index(self) -> FearGreedIndex:
        """Fetch the latest index value."""
        data = await self._request("GET", "")
        return FearGreedIndex.from_api(data)
