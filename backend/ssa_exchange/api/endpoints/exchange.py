"""
SSA Exchange - Public Market Endpoints

Buy and sell public stock coins against the fiat settlement coins.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query

from ssa_exchange.core.trading.service import ExchangeService
from ssa_exchange.dependencies import get_exchange_service
from ssa_exchange.schemas.exchange import BuyResponse, PriceResponse, SellResponse, TradeRequest

router = APIRouter()


@router.post("/buy", response_model=BuyResponse)
async def buy_stock(
    request: TradeRequest,
    service: ExchangeService = Depends(get_exchange_service),
):
    """
    Spend `amount` of the settlement currency on whole stock units.

    The fee is charged on top of the fill; unspent budget is reported as
    `change`.
    """
    result = await service.buy(request.user_address, request.stock, request.amount, request.currency)
    return BuyResponse.from_result(result)


@router.post("/sell", response_model=SellResponse)
async def sell_stock(
    request: TradeRequest,
    service: ExchangeService = Depends(get_exchange_service),
):
    """Sell `amount` stock units; fractional quantities are allowed."""
    result = await service.sell(request.user_address, request.stock, request.amount, request.currency)
    return SellResponse.from_result(result)


@router.get("/price/{stock}", response_model=PriceResponse)
async def get_stock_price(
    stock: str,
    currency: Optional[str] = Query(None, description="Settlement currency (INR, EUR, CNY)"),
    service: ExchangeService = Depends(get_exchange_service),
):
    """Current price per unit in the requested currency."""
    symbol, price, quote_currency = await service.get_price(stock, currency)
    return PriceResponse(stock=symbol, price=price, currency=quote_currency)
