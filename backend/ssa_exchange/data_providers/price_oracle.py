"""
SSA Exchange - Price Oracle

Quotes a price per whole unit for every tradable symbol:
- Public stocks: live USD price (fallback table on any failure), converted
  to the settlement currency with the fixed FX table.
- Private stocks: fixed USDC price table, passed through unchanged.

Quotes are floored to the ledger's 6-decimal resolution so the decimal
price and its fixed-point form always agree.

Live quotes are kept in a short in-memory TTL cache; set
PRICE_CACHE_TTL_SECONDS=0 to disable it.
"""
import asyncio
import time
from decimal import Decimal
from typing import Callable, Mapping, Optional, Protocol
from loguru import logger

from ssa_exchange.core.trading.fixed_point import floor_to_quantum
from ssa_exchange.core.trading.symbols import (
    Market,
    PRIVATE_STOCK_PRICES,
    market_of,
    normalize_symbol,
)
from ssa_exchange.utils.currency import USDC, get_usd_rate


# Static USD prices used whenever the live source is unavailable
FALLBACK_USD_PRICES: dict[str, Decimal] = {
    "GOOG": Decimal("150.25"),
    "AAPL": Decimal("189.20"),
    "TSLA": Decimal("220.40"),
    "NVDA": Decimal("128.51"),
    "HOOD": Decimal("10.93"),
}


class LivePriceSource(Protocol):
    async def fetch_usd_price(self, symbol: str) -> Optional[Decimal]:
        ...


class PriceOracle:
    """
    Price oracle for public and private symbols.

    Usage:
        oracle = PriceOracle(live_source=YahooChartSource())
        price = await oracle.get_price("AAPL", "INR")
    """

    def __init__(
        self,
        live_source: Optional[LivePriceSource] = None,
        fx_rates: Optional[Mapping[str, Decimal]] = None,
        cache_ttl: float = 0.0,
        timeout: Optional[float] = None,
        fallback_prices: Optional[Mapping[str, Decimal]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.live_source = live_source
        self.fx_rates = fx_rates
        self.cache_ttl = cache_ttl
        self.timeout = timeout
        self.fallback_prices = dict(fallback_prices or FALLBACK_USD_PRICES)
        self._clock = clock
        self._cache: dict[str, tuple[float, Decimal]] = {}

    async def get_price(self, symbol: str, currency: Optional[str] = None) -> Decimal:
        """
        Price per whole unit.

        Args:
            symbol: Tradable symbol
            currency: Settlement currency for public stocks (ignored for
                private stocks, which are always USDC)

        Raises:
            UnknownSymbolError: symbol is not supported
            UnsupportedCurrencyError: no FX rate for `currency`
        """
        symbol = normalize_symbol(symbol)
        market = market_of(symbol)

        if market == Market.PRIVATE:
            return PRIVATE_STOCK_PRICES[symbol]

        rate = get_usd_rate(currency or "USD", self.fx_rates)
        usd_price = await self.get_usd_price(symbol)
        return floor_to_quantum(usd_price * rate)

    def quote_currency(self, symbol: str, currency: Optional[str] = None) -> str:
        if market_of(symbol) == Market.PRIVATE:
            return USDC
        return (currency or "USD").upper()

    async def get_usd_price(self, symbol: str) -> Decimal:
        """USD price for a public symbol; never raises for a known symbol."""
        cached = self._cache_get(symbol)
        if cached is not None:
            return cached

        price = await self._fetch_live(symbol)
        if price is None:
            price = self.fallback_prices[symbol]
            logger.warning(f"Using fallback price for {symbol}: {price} USD")
            return price

        self._cache_put(symbol, price)
        return price

    async def _fetch_live(self, symbol: str) -> Optional[Decimal]:
        if self.live_source is None:
            return None
        try:
            fetch = self.live_source.fetch_usd_price(symbol)
            if self.timeout:
                return await asyncio.wait_for(fetch, timeout=self.timeout)
            return await fetch
        except asyncio.TimeoutError:
            logger.warning(f"Live price for {symbol} timed out after {self.timeout}s")
        except Exception as e:
            logger.warning(f"Live price source failed for {symbol}: {e}")
        return None

    def _cache_get(self, symbol: str) -> Optional[Decimal]:
        if self.cache_ttl <= 0:
            return None
        entry = self._cache.get(symbol)
        if entry is None:
            return None
        stored_at, price = entry
        if self._clock() - stored_at > self.cache_ttl:
            del self._cache[symbol]
            return None
        return price

    def _cache_put(self, symbol: str, price: Decimal) -> None:
        if self.cache_ttl > 0:
            self._cache[symbol] = (self._clock(), price)
