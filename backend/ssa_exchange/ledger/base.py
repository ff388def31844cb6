"""
Ledger Adapter Interface

The ledger is the system of record for coin balances. This module defines
the contract the exchange settles against; every amount crossing it is a
FixedPoint (6 implied decimals). Every call returns only after the ledger
reports finality, or raises.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass

from ssa_exchange.core.trading.fixed_point import FixedPoint


@dataclass(frozen=True)
class LedgerReceipt:
    """Finalized ledger transaction."""
    tx_hash: str
    function: str
    success: bool = True


class LedgerAdapter(ABC):
    """
    Abstract ledger adapter.

    Implementations must block until finality and raise
    LedgerRejectedError when the ledger refuses an operation.
    """

    @abstractmethod
    async def settle_buy(
        self,
        account: str,
        symbol: str,
        fill_quantity: FixedPoint,
        unit_price: FixedPoint,
        fee: FixedPoint,
        fee_wallet: str,
        currency: str,
    ) -> str:
        """
        Debit `fill_quantity * unit_price + fee` of `currency` from the
        account, credit `fill_quantity` of `symbol`, pay `fee` to the fee
        wallet. Returns the transaction hash.
        """

    @abstractmethod
    async def settle_sell(
        self,
        account: str,
        symbol: str,
        share_quantity: FixedPoint,
        unit_price: FixedPoint,
        fee: FixedPoint,
        fee_wallet: str,
        currency: str,
    ) -> str:
        """
        Debit `share_quantity` of `symbol`, credit
        `share_quantity * unit_price - fee` of `currency`, pay `fee` to the
        fee wallet. Returns the transaction hash.
        """

    @abstractmethod
    async def get_balance(self, account: str, symbol: str) -> FixedPoint:
        """Balance of a stock coin or currency coin."""

    @abstractmethod
    async def mint(self, account: str, currency: str, amount: FixedPoint) -> str:
        """Issue currency coins to an account."""

    @abstractmethod
    async def burn(self, account: str, currency: str, amount: FixedPoint) -> str:
        """Redeem currency coins from an account."""

    async def get_balances(self, account: str, symbols: list[str]) -> dict[str, FixedPoint]:
        """Balances for several symbols."""
        return {symbol: await self.get_balance(account, symbol) for symbol in symbols}

    async def close(self) -> None:
        """Release client resources."""
