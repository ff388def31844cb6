"""
SSA Exchange - Private Market Endpoints

Private company tokens trade against USDC at a fixed price table.
"""
from fastapi import APIRouter, Depends

from ssa_exchange.core.portfolio.valuation import PortfolioValuationService
from ssa_exchange.core.trading.service import ExchangeService
from ssa_exchange.core.trading.symbols import Market, list_private_stocks, require_symbol
from ssa_exchange.dependencies import get_exchange_service, get_valuation_service
from ssa_exchange.schemas.exchange import BuyResponse, SellResponse, TradeRequest
from ssa_exchange.schemas.portfolio import TransactionSchema
from ssa_exchange.schemas.private_market import (
    PrivateBalanceResponse,
    PrivateHoldingSchema,
    PrivatePortfolioResponse,
    PrivatePriceResponse,
    PrivateStockSchema,
    PrivateStocksResponse,
    PrivateTransactionsResponse,
)

router = APIRouter()


@router.get("/stocks", response_model=PrivateStocksResponse)
async def get_private_stocks():
    """All private tokens with their USDC price and ledger module."""
    return PrivateStocksResponse(stocks=[PrivateStockSchema(**s) for s in list_private_stocks()])


@router.get("/price/{symbol}", response_model=PrivatePriceResponse)
async def get_private_price(
    symbol: str,
    service: ExchangeService = Depends(get_exchange_service),
):
    symbol, price, currency = await service.get_price(symbol, market=Market.PRIVATE)
    return PrivatePriceResponse(symbol=symbol, price=price, currency=currency)


@router.get("/balance/{address}/{symbol}", response_model=PrivateBalanceResponse)
async def get_private_balance(
    address: str,
    symbol: str,
    service: ExchangeService = Depends(get_exchange_service),
):
    """Ledger balance of a private token."""
    symbol = require_symbol(symbol, Market.PRIVATE)
    balance = await service.get_balance(address, symbol)
    return PrivateBalanceResponse(address=address, symbol=symbol, balance=balance)


@router.post("/buy", response_model=BuyResponse)
async def buy_private_stock(
    request: TradeRequest,
    service: ExchangeService = Depends(get_exchange_service),
):
    """Spend `amount` USDC on whole private tokens."""
    result = await service.buy(request.user_address, request.stock, request.amount, market=Market.PRIVATE)
    return BuyResponse.from_result(result)


@router.post("/sell", response_model=SellResponse)
async def sell_private_stock(
    request: TradeRequest,
    service: ExchangeService = Depends(get_exchange_service),
):
    """Sell `amount` private tokens for USDC."""
    result = await service.sell(request.user_address, request.stock, request.amount, market=Market.PRIVATE)
    return SellResponse.from_result(result)


@router.get("/portfolio/{address}", response_model=PrivatePortfolioResponse)
async def get_private_portfolio(
    address: str,
    valuation: PortfolioValuationService = Depends(get_valuation_service),
):
    holdings = await valuation.get_private_portfolio(address)
    return PrivatePortfolioResponse(
        address=address,
        portfolio=[PrivateHoldingSchema.from_holding(h) for h in holdings],
    )


@router.get("/transactions/{address}", response_model=PrivateTransactionsResponse)
async def get_private_transactions(
    address: str,
    valuation: PortfolioValuationService = Depends(get_valuation_service),
):
    """Latest 50 private market trades."""
    transactions = await valuation.store.get_transactions(address, limit=50, market=Market.PRIVATE)
    return PrivateTransactionsResponse(
        address=address,
        transactions=[TransactionSchema.from_model(tx) for tx in transactions],
    )
