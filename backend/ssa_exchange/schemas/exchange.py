"""
SSA Exchange - Trade Schemas
"""
from decimal import Decimal
from typing import Optional
from pydantic import AliasChoices, Field

from ssa_exchange.core.trading.service import BuyResult, SellResult
from ssa_exchange.schemas.base import CamelModel, Money, SuccessResponse


class TradeRequest(CamelModel):
    """Buy: `amount` is the spend budget. Sell: `amount` is the share quantity."""
    user_address: str = Field(..., validation_alias=AliasChoices("userAddress", "user_address"))
    stock: str = Field(..., validation_alias=AliasChoices("stock", "symbol"))
    amount: Decimal
    currency: Optional[str] = None


class BuyResponse(SuccessResponse):
    tx_hash: str
    stock: str
    stock_amount: Money
    price_per_stock: Money
    total_spent: Money
    fee_amount: Money
    change: Money
    currency: str

    @classmethod
    def from_result(cls, result: BuyResult) -> "BuyResponse":
        fill = result.fill
        return cls(
            tx_hash=result.tx_hash,
            stock=fill.symbol,
            stock_amount=fill.fill_quantity,
            price_per_stock=fill.unit_price,
            total_spent=fill.total_debit,
            fee_amount=fill.fee_amount,
            change=fill.change,
            currency=fill.currency,
        )


class SellResponse(SuccessResponse):
    tx_hash: str
    stock: str
    stocks_sold: Money
    price_per_stock: Money
    gross_amount: Money
    fee_amount: Money
    net_received: Money
    currency: str

    @classmethod
    def from_result(cls, result: SellResult) -> "SellResponse":
        fill = result.fill
        return cls(
            tx_hash=result.tx_hash,
            stock=fill.symbol,
            stocks_sold=fill.share_quantity,
            price_per_stock=fill.unit_price,
            gross_amount=fill.gross_proceeds,
            fee_amount=fill.fee_amount,
            net_received=fill.net_proceeds,
            currency=fill.currency,
        )


class PriceResponse(SuccessResponse):
    stock: str
    price: Money
    currency: str
