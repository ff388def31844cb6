"""
Unit Tests - Paper Ledger
"""
import asyncio
import pytest
from decimal import Decimal

from ssa_exchange.core.trading.fixed_point import FixedPoint, to_fixed_point
from ssa_exchange.ledger.paper import PaperLedger
from ssa_exchange.utils.exceptions import InvalidQuantityError, LedgerRejectedError

FEE_WALLET = "0xfee"
ALICE = "0xa11ce"


def fp(value: str) -> FixedPoint:
    return to_fixed_point(Decimal(value))


@pytest.fixture
def ledger():
    return PaperLedger(module_address="0x1")


class TestCurrencyCoins:

    @pytest.mark.asyncio
    async def test_mint_then_burn(self, ledger):
        await ledger.mint(ALICE, "inr", fp("1000"))
        await ledger.burn(ALICE, "INR", fp("250.5"))

        assert await ledger.get_balance(ALICE, "INR") == fp("749.5")

    @pytest.mark.asyncio
    async def test_burn_more_than_balance_rejected(self, ledger):
        await ledger.mint(ALICE, "EUR", fp("10"))
        with pytest.raises(LedgerRejectedError):
            await ledger.burn(ALICE, "EUR", fp("10.000001"))
        assert await ledger.get_balance(ALICE, "EUR") == fp("10")

    @pytest.mark.asyncio
    async def test_mint_requires_positive_amount(self, ledger):
        with pytest.raises(InvalidQuantityError):
            await ledger.mint(ALICE, "INR", FixedPoint.zero())

    @pytest.mark.asyncio
    async def test_plain_numbers_refused(self, ledger):
        with pytest.raises(TypeError):
            await ledger.mint(ALICE, "INR", 100)

    @pytest.mark.asyncio
    async def test_receipts_carry_module_function(self, ledger):
        tx_hash = await ledger.mint(ALICE, "CNY", fp("1"))

        receipt = ledger.last_receipt()
        assert receipt.tx_hash == tx_hash
        assert receipt.function == "0x1::CNYCoin::mint_coins"
        assert tx_hash.startswith("0x") and len(tx_hash) == 66


class TestSettlement:

    @pytest.mark.asyncio
    async def test_settle_buy_moves_every_leg(self, ledger):
        await ledger.mint(ALICE, "INR", fp("200000"))

        await ledger.settle_buy(ALICE, "AAPL", fp("10"), fp("17028"), fp("170"), FEE_WALLET, "INR")

        assert await ledger.get_balance(ALICE, "INR") == fp("29550")
        assert await ledger.get_balance(ALICE, "AAPL") == fp("10")
        assert await ledger.get_balance(FEE_WALLET, "INR") == fp("170")
        assert ledger.last_receipt().function == "0x1::ExchangeV2::buy_stock"

    @pytest.mark.asyncio
    async def test_settle_buy_overdraft_changes_nothing(self, ledger):
        await ledger.mint(ALICE, "INR", fp("170449"))

        with pytest.raises(LedgerRejectedError):
            await ledger.settle_buy(ALICE, "AAPL", fp("10"), fp("17028"), fp("170"), FEE_WALLET, "INR")

        assert await ledger.get_balance(ALICE, "INR") == fp("170449")
        assert await ledger.get_balance(ALICE, "AAPL") == FixedPoint.zero()
        assert await ledger.get_balance(FEE_WALLET, "INR") == FixedPoint.zero()

    @pytest.mark.asyncio
    async def test_settle_sell_credits_net(self, ledger):
        await ledger.mint(ALICE, "INR", fp("200000"))
        await ledger.settle_buy(ALICE, "AAPL", fp("10"), fp("17028"), fp("170"), FEE_WALLET, "INR")

        await ledger.settle_sell(ALICE, "AAPL", fp("2.5"), fp("17028"), fp("42"), FEE_WALLET, "INR")

        assert await ledger.get_balance(ALICE, "AAPL") == fp("7.5")
        assert await ledger.get_balance(ALICE, "INR") == fp("29550") + fp("42528")
        assert await ledger.get_balance(FEE_WALLET, "INR") == fp("212")

    @pytest.mark.asyncio
    async def test_settle_sell_without_shares_rejected(self, ledger):
        with pytest.raises(LedgerRejectedError):
            await ledger.settle_sell(ALICE, "TSLA", fp("1"), fp("100"), fp("0"), FEE_WALLET, "INR")

    @pytest.mark.asyncio
    async def test_fee_above_gross_rejected(self, ledger):
        await ledger.mint(ALICE, "INR", fp("1000"))
        await ledger.settle_buy(ALICE, "HOOD", fp("1"), fp("100"), fp("0"), FEE_WALLET, "INR")

        with pytest.raises(LedgerRejectedError):
            await ledger.settle_sell(ALICE, "HOOD", fp("1"), fp("100"), fp("101"), FEE_WALLET, "INR")

    @pytest.mark.asyncio
    async def test_get_balances(self, ledger):
        await ledger.mint(ALICE, "INR", fp("5"))
        balances = await ledger.get_balances(ALICE, ["INR", "EUR"])
        assert balances == {"INR": fp("5"), "EUR": FixedPoint.zero()}

    @pytest.mark.asyncio
    async def test_latency_delays_finality(self):
        ledger = PaperLedger(latency=0.5)
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(ledger.mint(ALICE, "INR", fp("1")), timeout=0.01)
        assert await ledger.get_balance(ALICE, "INR") == FixedPoint.zero()


class TestBookkeeping:

    @pytest.mark.asyncio
    async def test_reads_do_not_create_accounts(self, ledger):
        await ledger.mint(ALICE, "INR", fp("5"))
        accounts_before = len(ledger._balances)

        assert await ledger.get_balance("0xnobody", "INR") == FixedPoint.zero()
        await ledger.get_balances("0xstranger", ["INR", "EUR", "AAPL"])

        assert len(ledger._balances) == accounts_before
        assert "0xnobody" not in ledger._balances

    @pytest.mark.asyncio
    async def test_receipts_bounded(self):
        ledger = PaperLedger(max_receipts=2)
        hashes = [await ledger.mint(ALICE, "INR", fp("1")) for _ in range(3)]

        assert [receipt.tx_hash for receipt in ledger.receipts] == hashes[1:]
        assert ledger.last_receipt().tx_hash == hashes[-1]
        assert await ledger.get_balance(ALICE, "INR") == fp("3")
