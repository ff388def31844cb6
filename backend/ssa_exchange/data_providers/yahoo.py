"""
Yahoo Finance Chart Source

Fetches the last traded USD price for public-market symbols from the
Yahoo Finance chart endpoint (free, no API key required).

Example API call:
GET https://query1.finance.yahoo.com/v8/finance/chart/AAPL?interval=1d&range=1d
Response: {"chart": {"result": [{"meta": {"regularMarketPrice": 189.2, "previousClose": 187.9, ...}}]}}
"""
import httpx
from decimal import Decimal, InvalidOperation
from typing import Optional
from loguru import logger


YAHOO_CHART_API_BASE = "https://query1.finance.yahoo.com/v8/finance/chart"

# Exchange symbols -> Yahoo Finance tickers
SYMBOL_MAP = {
    "GOOG": "GOOGL",
    "AAPL": "AAPL",
    "TSLA": "TSLA",
    "NVDA": "NVDA",
    "HOOD": "HOOD",
}


class YahooChartSource:
    """
    Live USD price source backed by the Yahoo chart API.

    Never raises: any transport or payload problem is logged and reported
    as None so the caller can fall back to its static table.
    """

    def __init__(self, api_base: str = YAHOO_CHART_API_BASE, timeout: float = 5.0):
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout

    def _yahoo_symbol(self, symbol: str) -> str:
        return SYMBOL_MAP.get(symbol, symbol)

    async def fetch_usd_price(self, symbol: str) -> Optional[Decimal]:
        """
        Fetch the regular market price for a symbol.

        Returns:
            Price in USD, or None when the source is unavailable
        """
        url = f"{self.api_base}/{self._yahoo_symbol(symbol)}"
        params = {"interval": "1d", "range": "1d"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(f"HTTP error fetching {symbol} price: {e.response.status_code}")
            return None
        except httpx.RequestError as e:
            logger.warning(f"Request error fetching {symbol} price: {e}")
            return None
        except ValueError as e:
            logger.warning(f"Malformed price payload for {symbol}: {e}")
            return None

        return self.parse_price(symbol, data)

    @staticmethod
    def parse_price(symbol: str, data) -> Optional[Decimal]:
        """Extract chart.result[0].meta.regularMarketPrice."""
        try:
            price = data["chart"]["result"][0]["meta"]["regularMarketPrice"]
        except (KeyError, IndexError, TypeError):
            logger.warning(f"No price data found for {symbol}")
            return None

        if price is None or isinstance(price, bool):
            logger.warning(f"No price data found for {symbol}")
            return None

        try:
            value = Decimal(str(price))
        except (InvalidOperation, ValueError):
            logger.warning(f"Unparseable price for {symbol}: {price!r}")
            return None

        if not value.is_finite() or value <= 0:
            logger.warning(f"Rejected non-positive price for {symbol}: {value}")
            return None
        return value
