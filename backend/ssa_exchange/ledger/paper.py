"""
Paper Ledger

In-process ledger used for local runs and tests. Keeps a balance book of
FixedPoint amounts per (account, coin), applies each operation atomically
under one asyncio lock and hands back a generated transaction hash.
"""
import asyncio
import secrets
from collections import defaultdict, deque
from typing import Optional
from loguru import logger

from ssa_exchange.core.trading.fixed_point import SCALE, FixedPoint
from ssa_exchange.ledger.base import LedgerAdapter, LedgerReceipt
from ssa_exchange.utils.exceptions import LedgerRejectedError, InvalidQuantityError


def _notional(quantity: FixedPoint, unit_price: FixedPoint) -> FixedPoint:
    """quantity * price in micro-units, floored."""
    return FixedPoint(quantity.units * unit_price.units // SCALE)


class PaperLedger(LedgerAdapter):
    """
    Paper ledger.

    Balances live in memory only. `latency` delays every write, which
    lets callers exercise their timeout handling. Only the newest
    `max_receipts` receipts are kept.
    """

    def __init__(self, module_address: str = "0x1", latency: float = 0.0, max_receipts: int = 10_000):
        self.module_address = module_address
        self.latency = latency
        self._balances: dict[str, dict[str, FixedPoint]] = defaultdict(dict)
        self._lock = asyncio.Lock()
        self.receipts: deque[LedgerReceipt] = deque(maxlen=max_receipts)

    # ==================== READ ====================

    async def get_balance(self, account: str, symbol: str) -> FixedPoint:
        return self._balance(account, symbol.upper())

    def _balance(self, account: str, coin: str) -> FixedPoint:
        return self._balances.get(account, {}).get(coin, FixedPoint.zero())

    # ==================== WRITE ====================

    async def mint(self, account: str, currency: str, amount: FixedPoint) -> str:
        self._require_positive(amount, "mint amount")
        async with self._lock:
            await self._finality()
            self._credit(account, currency.upper(), amount)
            return self._commit(f"{currency.upper()}Coin::mint_coins")

    async def burn(self, account: str, currency: str, amount: FixedPoint) -> str:
        self._require_positive(amount, "burn amount")
        async with self._lock:
            await self._finality()
            self._debit(account, currency.upper(), amount)
            return self._commit(f"{currency.upper()}Coin::burn_coins")

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
        self._require_positive(fill_quantity, "fill quantity")
        symbol, currency = symbol.upper(), currency.upper()
        gross = _notional(fill_quantity, unit_price)

        async with self._lock:
            await self._finality()
            # Validate every leg before touching balances
            total = gross + fee
            if self._balance(account, currency) < total:
                raise LedgerRejectedError(
                    f"Insufficient {currency} balance: need {total.units} micro-units, "
                    f"have {self._balance(account, currency).units}"
                )
            self._debit(account, currency, total)
            self._credit(fee_wallet, currency, fee)
            self._credit(account, symbol, fill_quantity)
            return self._commit("ExchangeV2::buy_stock")

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
        self._require_positive(share_quantity, "share quantity")
        symbol, currency = symbol.upper(), currency.upper()
        gross = _notional(share_quantity, unit_price)
        if fee > gross:
            raise LedgerRejectedError("Fee exceeds gross proceeds")

        async with self._lock:
            await self._finality()
            if self._balance(account, symbol) < share_quantity:
                raise LedgerRejectedError(
                    f"Insufficient {symbol} balance: need {share_quantity.units} micro-units, "
                    f"have {self._balance(account, symbol).units}"
                )
            self._debit(account, symbol, share_quantity)
            self._credit(account, currency, gross - fee)
            self._credit(fee_wallet, currency, fee)
            return self._commit("ExchangeV2::sell_stock")

    # ==================== INTERNAL ====================

    async def _finality(self) -> None:
        if self.latency > 0:
            await asyncio.sleep(self.latency)

    @staticmethod
    def _require_positive(amount: FixedPoint, label: str) -> None:
        if not isinstance(amount, FixedPoint):
            raise TypeError(f"{label} must be FixedPoint, got {type(amount).__name__}")
        if not amount.is_positive():
            raise InvalidQuantityError(f"{label} must be greater than 0")

    def _credit(self, account: str, coin: str, amount: FixedPoint) -> None:
        self._balances[account][coin] = self._balance(account, coin) + amount

    def _debit(self, account: str, coin: str, amount: FixedPoint) -> None:
        current = self._balance(account, coin)
        if current < amount:
            raise LedgerRejectedError(
                f"Insufficient {coin} balance: need {amount.units} micro-units, have {current.units}"
            )
        self._balances[account][coin] = current - amount

    def _commit(self, function: str) -> str:
        tx_hash = "0x" + secrets.token_hex(32)
        self.receipts.append(LedgerReceipt(tx_hash=tx_hash, function=f"{self.module_address}::{function}"))
        logger.debug(f"[LEDGER] {function} committed: {tx_hash}")
        return tx_hash

    def last_receipt(self) -> Optional[LedgerReceipt]:
        return self.receipts[-1] if self.receipts else None
