"""
SSA Exchange - Private Market Schemas
"""
from ssa_exchange.core.portfolio.valuation import PrivateHolding
from ssa_exchange.schemas.base import CamelModel, Money, SuccessResponse
from ssa_exchange.schemas.portfolio import TransactionSchema


class PrivateStockSchema(CamelModel):
    symbol: str
    price: Money
    module: str


class PrivateStocksResponse(SuccessResponse):
    stocks: list[PrivateStockSchema]


class PrivatePriceResponse(SuccessResponse):
    symbol: str
    price: Money
    currency: str


class PrivateBalanceResponse(SuccessResponse):
    address: str
    symbol: str
    balance: Money


class PrivateHoldingSchema(CamelModel):
    symbol: str
    quantity: Money
    total_cost_basis: Money
    average_cost: Money
    realized_pnl: Money
    current_price: Money
    current_value: Money

    @classmethod
    def from_holding(cls, h: PrivateHolding) -> "PrivateHoldingSchema":
        return cls(
            symbol=h.symbol,
            quantity=h.quantity,
            total_cost_basis=h.total_cost_basis,
            average_cost=h.average_cost,
            realized_pnl=h.realized_pnl,
            current_price=h.current_price,
            current_value=h.current_value,
        )


class PrivatePortfolioResponse(SuccessResponse):
    address: str
    portfolio: list[PrivateHoldingSchema]


class PrivateTransactionsResponse(SuccessResponse):
    address: str
    transactions: list[TransactionSchema]
