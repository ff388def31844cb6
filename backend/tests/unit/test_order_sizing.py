"""
Unit Tests - Order Sizing
Tests for buy/sell fill calculation and the fee schedule.
"""
import pytest
from decimal import Decimal

from ssa_exchange.core.trading.order_sizing import OrderSizer, floor_fee
from ssa_exchange.utils.exceptions import AmountTooLowError, InvalidQuantityError


@pytest.fixture
def sizer():
    return OrderSizer(fee_rate=Decimal("0.001"))


class TestSizeBuy:
    """Tests for buy sizing."""

    def test_whole_unit_fill(self, sizer):
        """spend 1000 at 90 -> 11 units, 990 gross, fee floor(0.99) = 0, change 10."""
        fill = sizer.size_buy("AAPL", Decimal("1000"), Decimal("90"), "INR")

        assert fill.unit_price_with_fee == Decimal("90.090")
        assert fill.fill_quantity == Decimal("11")
        assert fill.gross_cost == Decimal("990")
        assert fill.fee_amount == Decimal("0")
        assert fill.total_debit == Decimal("990")
        assert fill.change == Decimal("10")

    def test_budget_below_one_unit(self, sizer):
        """spend 50 at 90 cannot buy a whole unit."""
        with pytest.raises(AmountTooLowError) as exc_info:
            sizer.size_buy("AAPL", Decimal("50"), Decimal("90"), "INR")

        assert exc_info.value.minimum_required == Decimal("90.090")
        assert exc_info.value.provided == Decimal("50")
        assert exc_info.value.details["currency"] == "INR"

    def test_fee_charged_on_gross(self, sizer):
        """Fee is floor(gross * rate) in whole currency units."""
        fill = sizer.size_buy("AAPL", Decimal("175000"), Decimal("17028"), "INR")

        assert fill.fill_quantity == Decimal("10")
        assert fill.gross_cost == Decimal("170280")
        assert fill.fee_amount == Decimal("170")
        assert fill.total_debit == Decimal("170450")

    @pytest.mark.parametrize("spend,price", [
        ("1000", "90"),
        ("99999.99", "17028.45"),
        ("1", "0.45"),
        ("12345", "1352.7"),
    ])
    def test_total_debit_never_exceeds_spend(self, sizer, spend, price):
        fill = sizer.size_buy("X", Decimal(spend), Decimal(price), "INR")

        assert fill.fill_quantity == fill.fill_quantity.to_integral_value()
        assert fill.fill_quantity >= 1
        assert fill.total_debit <= fill.spend_amount
        assert fill.change >= 0

    def test_rejects_non_positive_spend(self, sizer):
        with pytest.raises(InvalidQuantityError):
            sizer.size_buy("AAPL", Decimal("0"), Decimal("90"), "INR")

    def test_fixed_point_views(self, sizer):
        fill = sizer.size_buy("STRIPE", Decimal("10"), Decimal("0.45"), "USDC")

        assert fill.fill_quantity == Decimal("22")
        assert fill.quantity_fp.units == 22_000_000
        assert fill.unit_price_fp.units == 450_000


class TestSizeSell:
    """Tests for sell sizing."""

    def test_sell_proceeds(self, sizer):
        """sell 5 at 100 -> gross 500, fee floor(0.5) = 0, net 500."""
        fill = sizer.size_sell("AAPL", Decimal("5"), Decimal("100"), "INR")

        assert fill.gross_proceeds == Decimal("500")
        assert fill.fee_amount == Decimal("0")
        assert fill.net_proceeds == Decimal("500")

    def test_fractional_quantity(self, sizer):
        fill = sizer.size_sell("AAPL", Decimal("2.5"), Decimal("17028"), "INR")

        assert fill.share_quantity == Decimal("2.5")
        assert fill.gross_proceeds == Decimal("42570")
        assert fill.fee_amount == Decimal("42")
        assert fill.net_proceeds == Decimal("42528")

    def test_quantity_truncated_to_ledger_resolution(self, sizer):
        fill = sizer.size_sell("AAPL", Decimal("1.0000009"), Decimal("10"), "INR")
        assert fill.share_quantity == Decimal("1.000000")

    @pytest.mark.parametrize("quantity", ["0", "-1", "0.0000001"])
    def test_rejects_non_positive_quantity(self, sizer, quantity):
        with pytest.raises(InvalidQuantityError):
            sizer.size_sell("AAPL", Decimal(quantity), Decimal("100"), "INR")

    @pytest.mark.parametrize("quantity,price", [("3", "17028"), ("0.333333", "1352.7"), ("1000", "0.45")])
    def test_net_never_exceeds_gross(self, sizer, quantity, price):
        fill = sizer.size_sell("X", Decimal(quantity), Decimal(price), "INR")

        assert fill.net_proceeds <= fill.gross_proceeds
        assert fill.fee_amount == floor_fee(fill.gross_proceeds, Decimal("0.001"))


class TestFeeSchedule:
    """Tests for the fee rate configuration."""

    def test_rejects_rate_of_one_or_more(self):
        with pytest.raises(ValueError):
            OrderSizer(fee_rate=Decimal("1"))

    def test_zero_fee(self):
        fill = OrderSizer(fee_rate=Decimal("0")).size_buy("AAPL", Decimal("900"), Decimal("90"), "INR")
        assert fill.fill_quantity == Decimal("10")
        assert fill.fee_amount == Decimal("0")

    def test_floor_fee(self):
        assert floor_fee(Decimal("1999"), Decimal("0.001")) == Decimal("1")
        assert floor_fee(Decimal("999.99"), Decimal("0.001")) == Decimal("0")
