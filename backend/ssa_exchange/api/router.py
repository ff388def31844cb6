"""
SSA Exchange - API Router
"""
from fastapi import APIRouter

from ssa_exchange.api.endpoints import currency, exchange, portfolio, private_market
from ssa_exchange.schemas.base import ErrorResponse

# Failed requests share one body shape
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Validation error"},
    500: {"model": ErrorResponse, "description": "Settlement or store error"},
}

api_router = APIRouter(responses=ERROR_RESPONSES)

api_router.include_router(exchange.router, prefix="/exchange", tags=["Exchange"])
api_router.include_router(portfolio.router, prefix="/portfolio", tags=["Portfolio"])
api_router.include_router(private_market.router, prefix="/private", tags=["Private Market"])
api_router.include_router(currency.router, prefix="/currency", tags=["Currency"])
