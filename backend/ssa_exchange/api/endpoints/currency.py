"""
SSA Exchange - Currency Endpoints

Mint and burn fiat settlement coins and read their ledger balances.
"""
from fastapi import APIRouter, Depends

from ssa_exchange.core.trading.service import ExchangeService
from ssa_exchange.dependencies import get_exchange_service
from ssa_exchange.schemas.currency import (
    CurrencyBalanceResponse,
    CurrencyBalancesResponse,
    CurrencyOperationResponse,
    CurrencyRequest,
)
from ssa_exchange.utils.currency import SETTLEMENT_CURRENCIES, format_amount, require_ledger_currency

router = APIRouter()


@router.post("/mint", response_model=CurrencyOperationResponse)
async def mint_currency(
    request: CurrencyRequest,
    service: ExchangeService = Depends(get_exchange_service),
):
    """Issue currency coins to a wallet."""
    result = await service.mint(request.user_address, request.currency, request.amount)
    return CurrencyOperationResponse(
        tx_hash=result.tx_hash,
        currency=result.currency,
        amount=result.amount,
        scaled_amount=int(result.scaled_amount),
    )


@router.post("/burn", response_model=CurrencyOperationResponse)
async def burn_currency(
    request: CurrencyRequest,
    service: ExchangeService = Depends(get_exchange_service),
):
    """Redeem currency coins from a wallet."""
    result = await service.burn(request.user_address, request.currency, request.amount)
    return CurrencyOperationResponse(
        tx_hash=result.tx_hash,
        currency=result.currency,
        amount=result.amount,
        scaled_amount=int(result.scaled_amount),
    )


@router.get("/balance/{currency}/{address}", response_model=CurrencyBalanceResponse)
async def get_currency_balance(
    currency: str,
    address: str,
    service: ExchangeService = Depends(get_exchange_service),
):
    currency = require_ledger_currency(currency)
    balance = await service.get_balance(address, currency)
    return CurrencyBalanceResponse(
        currency=currency,
        address=address,
        balance=balance,
        balance_formatted=f"{balance:.2f} {currency}",
    )


@router.get("/balances/{address}", response_model=CurrencyBalancesResponse)
async def get_all_balances(
    address: str,
    service: ExchangeService = Depends(get_exchange_service),
):
    """Ledger balances for every fiat settlement coin."""
    balances = await service.get_balances(address, SETTLEMENT_CURRENCIES)
    return CurrencyBalancesResponse(
        address=address,
        balances=balances,
        formatted={currency: format_amount(amount, currency) for currency, amount in balances.items()},
    )
