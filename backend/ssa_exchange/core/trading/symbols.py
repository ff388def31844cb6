"""
SSA Exchange - Tradable Symbols

Public-market stock coins are priced from the market-data source in the
account's settlement currency. Private-market tokens trade against USDC at
a fixed price table.
"""
from decimal import Decimal
import enum

from ssa_exchange.utils.exceptions import UnknownSymbolError


class Market(str, enum.Enum):
    """Market a symbol trades on."""
    PUBLIC = "public"
    PRIVATE = "private"


# Ledger coin modules for public stock coins
STOCK_MODULES: dict[str, str] = {
    "GOOG": "GOOGCoin",
    "AAPL": "AAPLCoin",
    "TSLA": "TSLACoin",
    "NVDA": "NVDACoin",
    "HOOD": "HOODCoin",
}

PUBLIC_STOCKS: tuple[str, ...] = tuple(STOCK_MODULES)

# Private market token prices in USDC
PRIVATE_STOCK_PRICES: dict[str, Decimal] = {
    "STRIPE": Decimal("0.45"),
    "OPENAI": Decimal("0.50"),
    "DATABRICKS": Decimal("0.35"),
    "SPACEX": Decimal("0.40"),
}

PRIVATE_STOCK_MODULES: dict[str, str] = {
    "STRIPE": "STRIPECoin",
    "OPENAI": "OPENAICoin",
    "DATABRICKS": "DATABRICKSCoin",
    "SPACEX": "SPACEXCoin",
}


def normalize_symbol(symbol: str) -> str:
    return (symbol or "").strip().upper()


def market_of(symbol: str) -> Market:
    """Return the market for a symbol or raise UnknownSymbolError."""
    symbol = normalize_symbol(symbol)
    if symbol in STOCK_MODULES:
        return Market.PUBLIC
    if symbol in PRIVATE_STOCK_PRICES:
        return Market.PRIVATE
    raise UnknownSymbolError(symbol)


def require_symbol(symbol: str, market: Market) -> str:
    """Normalize a symbol and check it belongs to the expected market."""
    normalized = normalize_symbol(symbol)
    if not normalized or market_of(normalized) != market:
        raise UnknownSymbolError(normalized)
    return normalized


def list_private_stocks() -> list[dict]:
    """Private market listing with prices and ledger modules."""
    return [
        {
            "symbol": symbol,
            "price": price,
            "module": PRIVATE_STOCK_MODULES[symbol],
        }
        for symbol, price in PRIVATE_STOCK_PRICES.items()
    ]
