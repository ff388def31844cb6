"""
SSA Exchange - Currency Schemas
"""
from decimal import Decimal
from pydantic import AliasChoices, Field

from ssa_exchange.schemas.base import CamelModel, Money, SuccessResponse


class CurrencyRequest(CamelModel):
    currency: str
    user_address: str = Field(..., validation_alias=AliasChoices("userAddress", "user_address"))
    amount: Decimal


class CurrencyOperationResponse(SuccessResponse):
    tx_hash: str
    currency: str
    amount: Money
    scaled_amount: int


class CurrencyBalanceResponse(SuccessResponse):
    currency: str
    address: str
    balance: Money
    balance_formatted: str


class CurrencyBalancesResponse(SuccessResponse):
    address: str
    balances: dict[str, Money]
    formatted: dict[str, str]
