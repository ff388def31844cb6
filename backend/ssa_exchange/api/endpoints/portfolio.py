"""
SSA Exchange - Portfolio Endpoints

Holdings valued at live prices, P&L and transaction history.
"""
from fastapi import APIRouter, Depends, Query

from ssa_exchange.core.portfolio.accounting import PositionAccountingStore
from ssa_exchange.core.portfolio.valuation import PortfolioValuationService
from ssa_exchange.dependencies import get_accounting_store, get_valuation_service
from ssa_exchange.schemas.portfolio import (
    PortfolioResponse,
    PositionSchema,
    StockDetailResponse,
    StockPnlSchema,
    StockPositionSchema,
    SummarySchema,
    TransactionSchema,
    TransactionsResponse,
    UserInfoResponse,
)

router = APIRouter()


@router.get("/{address}", response_model=PortfolioResponse)
async def get_portfolio(
    address: str,
    valuation: PortfolioValuationService = Depends(get_valuation_service),
):
    """Portfolio overview with P&L. Only symbols with a ledger balance are listed."""
    portfolio = await valuation.get_portfolio(address)
    return PortfolioResponse(
        address=portfolio.address,
        base_currency=portfolio.base_currency,
        positions=[PositionSchema.from_valuation(p) for p in portfolio.positions],
        summary=SummarySchema.from_summary(portfolio.summary),
    )


@router.get("/{address}/stock/{stock}", response_model=StockDetailResponse)
async def get_stock_position(
    address: str,
    stock: str,
    valuation: PortfolioValuationService = Depends(get_valuation_service),
):
    """Detailed position for one stock with its transaction history."""
    detail = await valuation.get_stock_detail(address, stock)
    p = detail.position
    return StockDetailResponse(
        stock_symbol=detail.symbol,
        current_price=p.current_price,
        position=StockPositionSchema(
            current_quantity=p.current_quantity,
            current_value=p.current_value,
            total_cost_basis=p.total_cost_basis,
            average_cost_per_share=p.average_cost_per_share,
        ),
        pnl=StockPnlSchema(
            unrealized_pnl=p.unrealized_pnl,
            unrealized_pnl_percent=p.unrealized_pnl_percent,
            realized_pnl=p.realized_pnl,
            total_pnl=p.total_pnl,
            total_pnl_percent=detail.total_pnl_percent,
        ),
        base_currency=detail.base_currency,
        transactions=[TransactionSchema.from_model(tx) for tx in detail.transactions],
    )


@router.get("/{address}/transactions", response_model=TransactionsResponse)
async def get_transactions(
    address: str,
    limit: int = Query(50, ge=1, le=500),
    store: PositionAccountingStore = Depends(get_accounting_store),
):
    """Newest-first transaction history."""
    transactions = await store.get_transactions(address, limit=limit)
    return TransactionsResponse(
        address=address,
        transactions=[TransactionSchema.from_model(tx) for tx in transactions],
    )


@router.get("/{address}/user-info", response_model=UserInfoResponse)
async def get_user_info(
    address: str,
    valuation: PortfolioValuationService = Depends(get_valuation_service),
):
    """Account info; unknown accounts report the default base currency."""
    user = await valuation.store.get_user(address)
    if user is None:
        return UserInfoResponse(exists=False, base_currency=valuation.default_currency)

    return UserInfoResponse(
        exists=True,
        id=user.id,
        wallet_address=user.wallet_address,
        base_currency=user.base_currency,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )
