"""
Unit Tests - Exceptions
"""
from decimal import Decimal

from ssa_exchange.utils.exceptions import (
    AmountTooLowError,
    ExchangeException,
    InsufficientPositionError,
    LedgerRejectedError,
    LedgerTimeoutError,
    MissingFeeWalletError,
    PositionNotFoundError,
    SettlementError,
    StoreUnavailableError,
    UnknownSymbolError,
    ValidationError,
)


class TestStatusCodes:

    def test_validation_errors_are_bad_requests(self):
        for exc in (
            UnknownSymbolError("MSFT"),
            InsufficientPositionError("AAPL", Decimal("6"), Decimal("4")),
            AmountTooLowError("AAPL", Decimal("17045.028"), Decimal("1000"), "INR"),
        ):
            assert isinstance(exc, ValidationError)
            assert exc.status_code == 400

    def test_not_found(self):
        assert PositionNotFoundError("AAPL").status_code == 404

    def test_settlement_errors(self):
        assert isinstance(LedgerRejectedError(), SettlementError)
        assert LedgerRejectedError().status_code == 500
        assert LedgerTimeoutError(30).message == "Ledger did not confirm the transaction within 30s"

    def test_store_unavailable_is_retryable(self):
        exc = StoreUnavailableError()
        assert exc.status_code == 500
        assert exc.retryable is True

    def test_missing_fee_wallet(self):
        exc = MissingFeeWalletError()
        assert isinstance(exc, ExchangeException)
        assert exc.code == "MISSING_FEE_WALLET"
        assert exc.status_code == 500


class TestMessages:

    def test_amount_too_low_reports_minimum(self):
        exc = AmountTooLowError("AAPL", Decimal("17045.028"), Decimal("1000"), "INR")

        assert exc.message == (
            "Amount too low. Need at least 17045.0280 INR to buy 1 AAPL "
            "(including fee). You provided 1000.0000 INR."
        )
        assert exc.details["minimumRequired"] == Decimal("17045.028")
        assert exc.details["currency"] == "INR"

    def test_unknown_symbol_message(self):
        assert UnknownSymbolError("MSFT").message == "Unknown stock symbol: MSFT"
        assert UnknownSymbolError().message == "Unknown stock symbol"
