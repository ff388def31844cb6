"""
Currency Conversion

Public stock prices arrive in USD and are converted to the account's
settlement currency with a fixed rate table (configured via FX_RATES).
Private market tokens are quoted in USDC and are never converted.
"""
from decimal import Decimal
from typing import Mapping, Optional

from ssa_exchange.config import settings
from ssa_exchange.utils.exceptions import UnsupportedCurrencyError

USDC = "USDC"

# Fiat coins the ledger can mint, burn and settle public trades in
SETTLEMENT_CURRENCIES = ["INR", "EUR", "CNY"]

# Everything the ledger holds a currency balance for
LEDGER_CURRENCIES = SETTLEMENT_CURRENCIES + [USDC]

CURRENCY_SIGNS = {
    "INR": "₹",
    "EUR": "€",
    "CNY": "¥",
    USDC: "$",
}


def normalize_currency(currency: Optional[str]) -> str:
    return (currency or "").strip().upper()


def require_settlement_currency(currency: Optional[str]) -> str:
    """Validate a public-market settlement currency."""
    code = normalize_currency(currency) or settings.DEFAULT_BASE_CURRENCY
    if code not in SETTLEMENT_CURRENCIES:
        raise UnsupportedCurrencyError(code)
    return code


def require_ledger_currency(currency: Optional[str]) -> str:
    """Validate a currency the ledger can mint or report."""
    code = normalize_currency(currency)
    if code not in LEDGER_CURRENCIES:
        raise UnsupportedCurrencyError(code)
    return code


def get_usd_rate(currency: str, rates: Optional[Mapping[str, Decimal]] = None) -> Decimal:
    """Units of `currency` per 1 USD."""
    table = rates if rates is not None else settings.FX_RATES
    code = normalize_currency(currency)
    rate = table.get(code)
    if rate is None:
        raise UnsupportedCurrencyError(code)
    return Decimal(rate)


def format_amount(amount: Decimal, currency: str) -> str:
    sign = CURRENCY_SIGNS.get(currency, "")
    return f"{sign}{amount:.2f}" if sign else f"{amount:.2f} {currency}"
