"""
Unit Tests - Exchange Service
End-to-end trade flow against the paper ledger and an in-memory store.
"""
import asyncio
import pytest
from decimal import Decimal
from unittest.mock import AsyncMock
from loguru import logger

from ssa_exchange.core.trading.fixed_point import FixedPoint, to_fixed_point
from ssa_exchange.core.trading.service import ExchangeService, parse_amount
from ssa_exchange.core.trading.symbols import Market
from ssa_exchange.db.models.transaction import TransactionType
from ssa_exchange.ledger.paper import PaperLedger
from ssa_exchange.utils.exceptions import (
    AmountTooLowError,
    CurrencyMismatchError,
    InsufficientPositionError,
    InvalidQuantityError,
    LedgerRejectedError,
    LedgerTimeoutError,
    MissingFeeWalletError,
    MissingFieldError,
    StoreUnavailableError,
    UnknownSymbolError,
    UnsupportedCurrencyError,
)

ALICE = "0xa11ce"
BOB = "0xb0b"
FEE_WALLET = "0xfee"


async def balance(ledger, address, coin) -> FixedPoint:
    return await ledger.get_balance(address, coin)


class TestParseAmount:

    @pytest.mark.parametrize("value,expected", [
        ("100", Decimal("100")),
        (0.1, Decimal("0.1")),
        (5, Decimal("5")),
        (Decimal("2.5"), Decimal("2.5")),
    ])
    def test_valid(self, value, expected):
        assert parse_amount(value) == expected

    @pytest.mark.parametrize("value", [None, ""])
    def test_missing(self, value):
        with pytest.raises(MissingFieldError):
            parse_amount(value)

    @pytest.mark.parametrize("value", ["abc", "0", "-1", True, "NaN", "Infinity"])
    def test_invalid(self, value):
        with pytest.raises(InvalidQuantityError):
            parse_amount(value)


class TestBuy:

    @pytest.mark.asyncio
    async def test_buy_settles_and_records(self, exchange_service, ledger, store, mint):
        await mint(ALICE, "INR", "200000")

        result = await exchange_service.buy(ALICE, "AAPL", "175000", "INR")

        assert result.fill.fill_quantity == Decimal("10")
        assert result.fill.fee_amount == Decimal("170")
        assert result.fill.total_debit == Decimal("170450")
        assert result.bookkeeping_recorded
        assert result.position.current_quantity == Decimal("10")

        assert await balance(ledger, ALICE, "AAPL") == to_fixed_point(Decimal("10"))
        assert await balance(ledger, ALICE, "INR") == to_fixed_point(Decimal("29550"))
        assert await balance(ledger, FEE_WALLET, "INR") == to_fixed_point(Decimal("170"))

        transactions = await store.get_transactions(ALICE)
        assert len(transactions) == 1
        assert transactions[0].tx_hash == result.tx_hash

    @pytest.mark.asyncio
    async def test_amount_too_low_never_reaches_ledger(self, exchange_service, ledger, mint):
        await mint(ALICE, "INR", "200000")
        receipts_before = len(ledger.receipts)

        with pytest.raises(AmountTooLowError) as exc_info:
            await exchange_service.buy(ALICE, "AAPL", "1000", "INR")

        assert exc_info.value.details["minimumRequired"] == Decimal("17045.028")
        assert len(ledger.receipts) == receipts_before

    @pytest.mark.asyncio
    async def test_ledger_rejection_records_nothing(self, exchange_service, store):
        with pytest.raises(LedgerRejectedError):
            await exchange_service.buy(ALICE, "AAPL", "175000", "INR")

        assert await store.get_transactions(ALICE) == []
        assert await store.get_position(ALICE, "AAPL") is None

    @pytest.mark.asyncio
    async def test_ledger_timeout_records_nothing(self, oracle, store):
        slow_ledger = PaperLedger()
        await slow_ledger.mint(ALICE, "INR", to_fixed_point(Decimal("200000")))
        slow_ledger.latency = 0.5
        service = ExchangeService(slow_ledger, oracle, store, fee_wallet=FEE_WALLET, ledger_timeout=0.05)

        with pytest.raises(LedgerTimeoutError) as exc_info:
            await service.buy(ALICE, "AAPL", "175000", "INR")

        assert exc_info.value.code == "LEDGER_TIMEOUT"
        assert await store.get_transactions(ALICE) == []
        assert await slow_ledger.get_balance(ALICE, "AAPL") == FixedPoint.zero()

    @pytest.mark.asyncio
    async def test_bookkeeping_failure_keeps_settled_trade(self, exchange_service, ledger, store, reconciliation, mint, monkeypatch):
        """Once the ledger settles, a store failure is queued rather than raised."""
        await mint(ALICE, "INR", "200000")
        monkeypatch.setattr(store, "record_buy", AsyncMock(side_effect=StoreUnavailableError()))

        messages = []
        sink_id = logger.add(messages.append, level="WARNING")
        try:
            result = await exchange_service.buy(ALICE, "AAPL", "175000", "INR")
        finally:
            logger.remove(sink_id)

        events = [m.record["extra"].get("event") for m in messages]
        assert "bookkeeping_failed" in events

        assert result.tx_hash
        assert not result.bookkeeping_recorded
        assert await balance(ledger, ALICE, "AAPL") == to_fixed_point(Decimal("10"))

        pending = reconciliation.drain()
        assert len(pending) == 1
        assert pending[0].operation == "buy"
        assert pending[0].tx_hash == result.tx_hash
        assert pending[0].payload["quantity"] == "10"
        assert "unavailable" in pending[0].error.lower()

    @pytest.mark.asyncio
    async def test_missing_fee_wallet(self, ledger, oracle, store, mint):
        await mint(ALICE, "INR", "200000")
        service = ExchangeService(ledger, oracle, store, fee_wallet="")

        with pytest.raises(MissingFeeWalletError):
            await service.buy(ALICE, "AAPL", "175000", "INR")
        assert await balance(ledger, ALICE, "AAPL") == FixedPoint.zero()

    @pytest.mark.asyncio
    async def test_input_validation(self, exchange_service):
        with pytest.raises(MissingFieldError):
            await exchange_service.buy("", "AAPL", "100", "INR")
        with pytest.raises(UnknownSymbolError):
            await exchange_service.buy(ALICE, "MSFT", "100", "INR")
        with pytest.raises(UnknownSymbolError):
            await exchange_service.buy(ALICE, "STRIPE", "100", "INR")
        with pytest.raises(InvalidQuantityError):
            await exchange_service.buy(ALICE, "AAPL", "-5", "INR")
        with pytest.raises(UnsupportedCurrencyError):
            await exchange_service.buy(ALICE, "AAPL", "100", "USD")

    @pytest.mark.asyncio
    async def test_currency_defaults_to_account_base(self, exchange_service, ledger, mint):
        """An account created by a EUR mint settles later trades in EUR."""
        await exchange_service.mint(ALICE, "EUR", "1000")

        result = await exchange_service.buy(ALICE, "HOOD", "100")

        assert result.fill.currency == "EUR"
        assert result.fill.unit_price == Decimal("10.0556")
        assert result.fill.fill_quantity == Decimal("9")

    @pytest.mark.asyncio
    async def test_currency_defaults_for_new_account(self, exchange_service, mint):
        await mint(BOB, "INR", "100000")
        result = await exchange_service.buy(BOB, "HOOD", "5000")
        assert result.fill.currency == "INR"

    @pytest.mark.asyncio
    async def test_private_buy_settles_in_usdc(self, exchange_service, ledger, store, mint):
        await mint(ALICE, "USDC", "100")

        result = await exchange_service.buy(ALICE, "stripe", "10", "INR", market=Market.PRIVATE)

        assert result.market == Market.PRIVATE
        assert result.fill.currency == "USDC"
        assert result.fill.fill_quantity == Decimal("22")
        assert await balance(ledger, ALICE, "STRIPE") == to_fixed_point(Decimal("22"))
        position = await store.get_position(ALICE, "STRIPE")
        assert position.market == Market.PRIVATE


class TestSell:

    @pytest.mark.asyncio
    async def test_sell_realizes_pnl(self, exchange_service, ledger, mint):
        await mint(ALICE, "INR", "200000")
        await exchange_service.buy(ALICE, "AAPL", "175000", "INR")

        result = await exchange_service.sell(ALICE, "AAPL", "2.5", "INR")

        assert result.fill.gross_proceeds == Decimal("42570")
        assert result.fill.fee_amount == Decimal("42")
        assert result.fill.net_proceeds == Decimal("42528")
        assert result.realized_pnl == pytest.approx(Decimal("-42"))
        assert result.outcome.position.current_quantity == Decimal("7.5")
        assert await balance(ledger, ALICE, "AAPL") == to_fixed_point(Decimal("7.5"))

    @pytest.mark.asyncio
    async def test_trades_stay_in_account_base_currency(self, exchange_service, ledger, store, mint):
        """An INR account cannot blend EUR fills into its cost basis."""
        await mint(ALICE, "INR", "20000")
        await mint(ALICE, "EUR", "200")
        await exchange_service.buy(ALICE, "AAPL", "20000", "INR")
        receipts_before = len(ledger.receipts)

        with pytest.raises(CurrencyMismatchError) as exc_info:
            await exchange_service.buy(ALICE, "AAPL", "200", "EUR")
        assert exc_info.value.status_code == 400
        assert exc_info.value.details == {"currency": "EUR", "baseCurrency": "INR"}
        with pytest.raises(CurrencyMismatchError):
            await exchange_service.sell(ALICE, "AAPL", "1", "EUR")

        assert len(ledger.receipts) == receipts_before
        assert await balance(ledger, ALICE, "EUR") == to_fixed_point(Decimal("200"))
        assert len(await store.get_transactions(ALICE)) == 1

        result = await exchange_service.sell(ALICE, "AAPL", "1")

        assert result.fill.currency == "INR"
        assert result.fill.net_proceeds == Decimal("17011")
        assert result.outcome.cost_of_sold == pytest.approx(Decimal("17028"))
        assert result.realized_pnl == pytest.approx(Decimal("-17"))

    @pytest.mark.asyncio
    async def test_oversell_rejected_before_settlement(self, exchange_service, ledger, mint):
        await mint(ALICE, "INR", "200000")
        await exchange_service.buy(ALICE, "AAPL", "175000", "INR")
        receipts_before = len(ledger.receipts)

        with pytest.raises(InsufficientPositionError):
            await exchange_service.sell(ALICE, "AAPL", "11", "INR")

        assert len(ledger.receipts) == receipts_before
        assert await balance(ledger, ALICE, "AAPL") == to_fixed_point(Decimal("10"))

    @pytest.mark.asyncio
    async def test_sell_without_position(self, exchange_service):
        with pytest.raises(InsufficientPositionError):
            await exchange_service.sell(BOB, "TSLA", "1", "INR")

    @pytest.mark.asyncio
    async def test_concurrent_sells_do_not_oversell(self, exchange_service, ledger, store, mint):
        """Two sells of 6 against 10 units: exactly one settles."""
        await mint(ALICE, "INR", "200000")
        await exchange_service.buy(ALICE, "AAPL", "175000", "INR")

        results = await asyncio.gather(
            exchange_service.sell(ALICE, "AAPL", "6", "INR"),
            exchange_service.sell(ALICE, "AAPL", "6", "INR"),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, Exception)]
        assert len(failures) == 1
        assert isinstance(failures[0], InsufficientPositionError)

        assert await balance(ledger, ALICE, "AAPL") == to_fixed_point(Decimal("4"))
        position = await store.get_position(ALICE, "AAPL")
        assert position.current_quantity == Decimal("4")

    @pytest.mark.asyncio
    async def test_concurrent_buys_both_recorded(self, exchange_service, store, mint):
        await mint(ALICE, "INR", "400000")

        await asyncio.gather(
            exchange_service.buy(ALICE, "AAPL", "175000", "INR"),
            exchange_service.buy(ALICE, "AAPL", "175000", "INR"),
        )

        position = await store.get_position(ALICE, "AAPL")
        assert position.current_quantity == Decimal("20")
        assert len(await store.get_transactions(ALICE)) == 2


class TestCurrencyOperations:

    @pytest.mark.asyncio
    async def test_mint_and_burn(self, exchange_service, ledger, store):
        minted = await exchange_service.mint(ALICE, "inr", "1000.5")
        assert minted.operation == TransactionType.MINT
        assert minted.currency == "INR"
        assert minted.scaled_amount == FixedPoint(1_000_500_000)

        await exchange_service.burn(ALICE, "INR", "0.5")

        assert await exchange_service.get_balance(ALICE, "INR") == Decimal("1000")
        balances = await store.get_currency_balances(ALICE)
        assert balances[0].balance == pytest.approx(Decimal("1000"))

    @pytest.mark.asyncio
    async def test_burn_more_than_held(self, exchange_service, store):
        await exchange_service.mint(ALICE, "CNY", "5")
        with pytest.raises(LedgerRejectedError):
            await exchange_service.burn(ALICE, "CNY", "6")
        assert len(await store.get_transactions(ALICE)) == 1

    @pytest.mark.asyncio
    async def test_unsupported_currency(self, exchange_service):
        with pytest.raises(UnsupportedCurrencyError):
            await exchange_service.mint(ALICE, "GBP", "5")
        with pytest.raises(MissingFieldError):
            await exchange_service.mint(ALICE, "", "5")

    @pytest.mark.asyncio
    async def test_below_smallest_unit(self, exchange_service):
        with pytest.raises(InvalidQuantityError):
            await exchange_service.mint(ALICE, "INR", "0.0000001")


class TestReads:

    @pytest.mark.asyncio
    async def test_get_price(self, exchange_service):
        assert await exchange_service.get_price("aapl", "INR") == ("AAPL", Decimal("17028"), "INR")
        assert await exchange_service.get_price("SPACEX", market=Market.PRIVATE) == ("SPACEX", Decimal("0.40"), "USDC")

    @pytest.mark.asyncio
    async def test_get_balances(self, exchange_service, mint):
        await mint(ALICE, "EUR", "12.34")
        balances = await exchange_service.get_balances(ALICE, ["INR", "EUR"])
        assert balances == {"INR": Decimal("0"), "EUR": Decimal("12.34")}
