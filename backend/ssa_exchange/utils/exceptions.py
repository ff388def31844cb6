"""
SSA Exchange - Custom Exceptions
Application-specific exceptions with HTTP error handling
"""
from decimal import Decimal
from typing import Optional, Any, Dict
from fastapi import status


class ExchangeException(Exception):
    """Base exception for SSA Exchange."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str = "An error occurred",
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


# =========================
# Validation Exceptions
# =========================

class ValidationError(ExchangeException):
    """Request rejected before any external call."""

    status_code = status.HTTP_400_BAD_REQUEST


class MissingFieldError(ValidationError):
    """Required request field missing or empty."""

    def __init__(self, message: str = "Missing required fields"):
        super().__init__(message=message, code="MISSING_FIELDS")


class UnknownSymbolError(ValidationError):
    """Symbol is not tradable on this exchange."""

    def __init__(self, symbol: str = ""):
        message = f"Unknown stock symbol: {symbol}" if symbol else "Unknown stock symbol"
        super().__init__(message=message, code="UNKNOWN_SYMBOL", details={"symbol": symbol})


class UnsupportedCurrencyError(ValidationError):
    """Settlement currency has no rate or ledger coin."""

    def __init__(self, currency: str = ""):
        message = f"Unsupported currency: {currency}" if currency else "Unsupported currency"
        super().__init__(message=message, code="UNSUPPORTED_CURRENCY", details={"currency": currency})


class CurrencyMismatchError(ValidationError):
    """Public trades must settle in the account's base currency."""

    def __init__(self, currency: str, base_currency: str):
        super().__init__(
            message=f"Account trades in {base_currency}, not {currency}",
            code="CURRENCY_MISMATCH",
            details={"currency": currency, "baseCurrency": base_currency},
        )


class InvalidQuantityError(ValidationError):
    """Non-positive amount or share quantity."""

    def __init__(self, message: str = "Amount must be greater than 0"):
        super().__init__(message=message, code="INVALID_QUANTITY")


class AmountTooLowError(ValidationError):
    """Spend amount does not cover a single whole unit."""

    def __init__(self, symbol: str, minimum_required: Decimal, provided: Decimal, currency: str):
        message = (
            f"Amount too low. Need at least {minimum_required:.4f} {currency} to buy 1 {symbol} "
            f"(including fee). You provided {provided:.4f} {currency}."
        )
        super().__init__(
            message=message,
            code="AMOUNT_TOO_LOW",
            details={
                "minimumRequired": minimum_required,
                "provided": provided,
                "currency": currency,
            },
        )
        self.minimum_required = minimum_required
        self.provided = provided


class InsufficientPositionError(ValidationError):
    """Sell quantity exceeds the recorded position."""

    def __init__(self, symbol: str, requested: Decimal, available: Decimal):
        message = f"Insufficient {symbol} position: requested {requested}, available {available}"
        super().__init__(
            message=message,
            code="INSUFFICIENT_POSITION",
            details={"symbol": symbol, "requested": requested, "available": available},
        )


class PositionNotFoundError(ExchangeException):
    """No position row for (account, symbol)."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, symbol: str = ""):
        message = f"No position found for {symbol}" if symbol else "Position not found"
        super().__init__(message=message, code="POSITION_NOT_FOUND")


# =========================
# Settlement Exceptions
# =========================

class SettlementError(ExchangeException):
    """Ledger settlement failed; nothing was recorded."""

    def __init__(self, message: str = "Settlement failed", code: str = "SETTLEMENT_FAILED"):
        super().__init__(message=message, code=code)


class LedgerRejectedError(SettlementError):
    """Ledger refused the operation (e.g. overdraft)."""

    def __init__(self, message: str = "Ledger rejected the transaction"):
        super().__init__(message=message, code="LEDGER_REJECTED")


class LedgerTimeoutError(SettlementError):
    """Ledger did not reach finality in time."""

    def __init__(self, timeout: float):
        super().__init__(
            message=f"Ledger did not confirm the transaction within {timeout:g}s",
            code="LEDGER_TIMEOUT",
        )


# =========================
# Store Exceptions
# =========================

class StoreError(ExchangeException):
    """Database related errors."""
    pass


class StoreUnavailableError(StoreError):
    """Connection pool exhausted or database unreachable; safe to retry."""

    retryable = True

    def __init__(self, message: str = "Database temporarily unavailable"):
        super().__init__(message=message, code="STORE_UNAVAILABLE")


# =========================
# Configuration Exceptions
# =========================

class ConfigurationError(ExchangeException):
    """Deployment is misconfigured."""
    pass


class MissingFeeWalletError(ConfigurationError):
    """No fee-recipient account configured."""

    def __init__(self, message: str = "ADMIN_FEE_WALLET not configured"):
        super().__init__(message=message, code="MISSING_FEE_WALLET")
