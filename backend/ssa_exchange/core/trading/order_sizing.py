"""
SSA Exchange - Order Sizing

Turns a spend budget (buy) or a share quantity (sell) into an exact fill:

BUY
    unit_price_with_fee = price * (1 + fee_rate)
    fill_quantity       = floor(spend / unit_price_with_fee)   whole units only
    gross_cost          = fill_quantity * price
    fee                 = floor(gross_cost * fee_rate)
    total_debit         = gross_cost + fee
    change              = spend - total_debit               informational

SELL
    gross_proceeds = quantity * price                         fractional quantities allowed
    fee            = floor(gross_proceeds * fee_rate)
    net_proceeds   = gross_proceeds - fee

Fees are floored to whole currency units (FEE_QUANTUM). Share quantities and
proceeds are truncated to the ledger's 6-decimal resolution. All arithmetic
is Decimal.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_FLOOR
from typing import Optional

from ssa_exchange.core.trading.fixed_point import (
    FixedPoint,
    floor_to_quantum,
    to_fixed_point,
)
from ssa_exchange.utils.exceptions import AmountTooLowError, InvalidQuantityError

DEFAULT_FEE_RATE = Decimal("0.001")
FEE_QUANTUM = Decimal("1")


def floor_fee(amount: Decimal, fee_rate: Decimal, quantum: Decimal = FEE_QUANTUM) -> Decimal:
    """floor(amount * fee_rate) at the given quantum."""
    return (amount * fee_rate).quantize(quantum, rounding=ROUND_FLOOR)


@dataclass(frozen=True)
class BuyFill:
    """Sized buy order."""
    symbol: str
    currency: str
    spend_amount: Decimal
    unit_price: Decimal
    unit_price_with_fee: Decimal
    fee_rate: Decimal
    fill_quantity: Decimal
    gross_cost: Decimal
    fee_amount: Decimal
    total_debit: Decimal
    change: Decimal

    @property
    def quantity_fp(self) -> FixedPoint:
        return to_fixed_point(self.fill_quantity)

    @property
    def unit_price_fp(self) -> FixedPoint:
        return to_fixed_point(self.unit_price)

    @property
    def fee_fp(self) -> FixedPoint:
        return to_fixed_point(self.fee_amount)


@dataclass(frozen=True)
class SellFill:
    """Sized sell order."""
    symbol: str
    currency: str
    share_quantity: Decimal
    unit_price: Decimal
    fee_rate: Decimal
    gross_proceeds: Decimal
    fee_amount: Decimal
    net_proceeds: Decimal

    @property
    def quantity_fp(self) -> FixedPoint:
        return to_fixed_point(self.share_quantity)

    @property
    def unit_price_fp(self) -> FixedPoint:
        return to_fixed_point(self.unit_price)

    @property
    def fee_fp(self) -> FixedPoint:
        return to_fixed_point(self.fee_amount)


class OrderSizer:
    """
    Order Sizing Engine

    Pure calculation: the caller supplies the quoted price, the sizer
    applies the fee schedule and the truncation policy.
    """

    def __init__(self, fee_rate: Decimal = DEFAULT_FEE_RATE, fee_quantum: Decimal = FEE_QUANTUM):
        if fee_rate < 0 or fee_rate >= 1:
            raise ValueError(f"fee_rate must be in [0, 1), got {fee_rate}")
        self.fee_rate = Decimal(fee_rate)
        self.fee_quantum = fee_quantum

    def size_buy(
        self,
        symbol: str,
        spend_amount: Decimal,
        unit_price: Decimal,
        currency: str,
        fee_rate: Optional[Decimal] = None,
    ) -> BuyFill:
        """
        Size a buy for a spend budget.

        Raises:
            InvalidQuantityError: spend or price not positive
            AmountTooLowError: budget does not cover one whole unit incl. fee
        """
        rate = self.fee_rate if fee_rate is None else Decimal(fee_rate)
        spend_amount = Decimal(spend_amount)
        if spend_amount <= 0:
            raise InvalidQuantityError("Amount must be greater than 0")
        if unit_price <= 0:
            raise InvalidQuantityError(f"Invalid price for {symbol}: {unit_price}")

        unit_price_with_fee = unit_price * (1 + rate)
        fill_quantity = (spend_amount / unit_price_with_fee).to_integral_value(rounding=ROUND_FLOOR)

        if fill_quantity < 1:
            raise AmountTooLowError(
                symbol=symbol,
                minimum_required=unit_price_with_fee,
                provided=spend_amount,
                currency=currency,
            )

        gross_cost = fill_quantity * unit_price
        fee_amount = floor_fee(gross_cost, rate, self.fee_quantum)
        total_debit = gross_cost + fee_amount

        return BuyFill(
            symbol=symbol,
            currency=currency,
            spend_amount=spend_amount,
            unit_price=unit_price,
            unit_price_with_fee=unit_price_with_fee,
            fee_rate=rate,
            fill_quantity=fill_quantity,
            gross_cost=gross_cost,
            fee_amount=fee_amount,
            total_debit=total_debit,
            change=spend_amount - total_debit,
        )

    def size_sell(
        self,
        symbol: str,
        share_quantity: Decimal,
        unit_price: Decimal,
        currency: str,
        fee_rate: Optional[Decimal] = None,
    ) -> SellFill:
        """
        Size a sell of `share_quantity` units.

        Raises:
            InvalidQuantityError: quantity not positive at 6-decimal resolution
        """
        rate = self.fee_rate if fee_rate is None else Decimal(fee_rate)
        share_quantity = Decimal(share_quantity)
        if share_quantity <= 0:
            raise InvalidQuantityError("Share quantity must be greater than 0")

        share_quantity = floor_to_quantum(share_quantity)
        if share_quantity <= 0:
            raise InvalidQuantityError("Share quantity is below the smallest tradable unit (0.000001)")
        if unit_price <= 0:
            raise InvalidQuantityError(f"Invalid price for {symbol}: {unit_price}")

        gross_proceeds = floor_to_quantum(share_quantity * unit_price)
        fee_amount = floor_fee(gross_proceeds, rate, self.fee_quantum)

        return SellFill(
            symbol=symbol,
            currency=currency,
            share_quantity=share_quantity,
            unit_price=unit_price,
            fee_rate=rate,
            gross_proceeds=gross_proceeds,
            fee_amount=fee_amount,
            net_proceeds=gross_proceeds - fee_amount,
        )
