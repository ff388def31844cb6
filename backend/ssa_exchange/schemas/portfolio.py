"""
SSA Exchange - Portfolio Schemas
"""
from datetime import datetime
from typing import Optional

from ssa_exchange.core.portfolio.valuation import PortfolioSummary, PositionValuation
from ssa_exchange.db.models.transaction import Transaction
from ssa_exchange.schemas.base import CamelModel, Money, SuccessResponse


class PositionSchema(CamelModel):
    stock_symbol: str
    current_quantity: Money
    current_price: Money
    current_value: Money
    total_cost_basis: Money
    average_cost_per_share: Money
    unrealized_pnl: Money
    unrealized_pnl_percent: Money
    realized_pnl: Money
    total_pnl: Money
    base_currency: str

    @classmethod
    def from_valuation(cls, p: PositionValuation) -> "PositionSchema":
        return cls(
            stock_symbol=p.symbol,
            current_quantity=p.current_quantity,
            current_price=p.current_price,
            current_value=p.current_value,
            total_cost_basis=p.total_cost_basis,
            average_cost_per_share=p.average_cost_per_share,
            unrealized_pnl=p.unrealized_pnl,
            unrealized_pnl_percent=p.unrealized_pnl_percent,
            realized_pnl=p.realized_pnl,
            total_pnl=p.total_pnl,
            base_currency=p.base_currency,
        )


class SummarySchema(CamelModel):
    total_value: Money
    total_cost_basis: Money
    total_unrealized_pnl: Money
    total_realized_pnl: Money
    total_pnl: Money
    total_pnl_percent: Money

    @classmethod
    def from_summary(cls, s: PortfolioSummary) -> "SummarySchema":
        return cls(
            total_value=s.total_value,
            total_cost_basis=s.total_cost_basis,
            total_unrealized_pnl=s.total_unrealized_pnl,
            total_realized_pnl=s.total_realized_pnl,
            total_pnl=s.total_pnl,
            total_pnl_percent=s.total_pnl_percent,
        )


class PortfolioResponse(SuccessResponse):
    address: str
    base_currency: str
    positions: list[PositionSchema]
    summary: SummarySchema


class TransactionSchema(CamelModel):
    type: str
    stock_symbol: Optional[str] = None
    currency_symbol: Optional[str] = None
    market: Optional[str] = None
    quantity: Money
    price_per_share: Optional[Money] = None
    total_value: Money
    fee_amount: Money
    realized_pnl: Optional[Money] = None
    tx_hash: str
    status: str
    timestamp: Optional[datetime] = None

    @classmethod
    def from_model(cls, tx: Transaction) -> "TransactionSchema":
        return cls(
            type=tx.transaction_type.value,
            stock_symbol=tx.stock_symbol,
            currency_symbol=tx.currency_symbol,
            market=tx.market.value if tx.market is not None else None,
            quantity=tx.quantity,
            price_per_share=tx.price_per_unit,
            total_value=tx.total_value,
            fee_amount=tx.fee_amount,
            realized_pnl=tx.realized_pnl,
            tx_hash=tx.tx_hash,
            status=tx.status.value,
            timestamp=tx.created_at,
        )


class TransactionsResponse(SuccessResponse):
    address: str
    transactions: list[TransactionSchema]


class StockPositionSchema(CamelModel):
    current_quantity: Money
    current_value: Money
    total_cost_basis: Money
    average_cost_per_share: Money


class StockPnlSchema(CamelModel):
    unrealized_pnl: Money
    unrealized_pnl_percent: Money
    realized_pnl: Money
    total_pnl: Money
    total_pnl_percent: Money


class StockDetailResponse(SuccessResponse):
    stock_symbol: str
    current_price: Money
    position: StockPositionSchema
    pnl: StockPnlSchema
    base_currency: str
    transactions: list[TransactionSchema]


class UserInfoResponse(SuccessResponse):
    exists: bool
    base_currency: str
    id: Optional[int] = None
    wallet_address: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
