"""
SSA Exchange - Trading Service

Runs a trade end to end:

    validate -> quote (PriceOracle) -> size (OrderSizer)
             -> settle (LedgerAdapter) -> record (PositionAccountingStore)

Each (account, symbol) pair is serialized by a keyed lock held from the
position check through settlement and bookkeeping. Once the ledger has
settled, the trade is final: bookkeeping failures are logged and queued
for reconciliation instead of failing the request.
"""
import asyncio
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Awaitable, Optional, Union
from loguru import logger

from ssa_exchange.core.portfolio.accounting import PositionAccountingStore, PositionSnapshot, SellOutcome
from ssa_exchange.core.trading.fixed_point import FixedPoint, from_fixed_point, to_fixed_point
from ssa_exchange.core.trading.locks import KeyedLock
from ssa_exchange.core.trading.order_sizing import BuyFill, OrderSizer, SellFill
from ssa_exchange.core.trading.reconciliation import PendingBookkeeping, ReconciliationQueue
from ssa_exchange.core.trading.symbols import Market, require_symbol
from ssa_exchange.data_providers.price_oracle import PriceOracle
from ssa_exchange.db.models.transaction import TransactionType
from ssa_exchange.ledger.base import LedgerAdapter
from ssa_exchange.utils.currency import (
    USDC,
    normalize_currency,
    require_ledger_currency,
    require_settlement_currency,
)
from ssa_exchange.utils.exceptions import (
    CurrencyMismatchError,
    InsufficientPositionError,
    InvalidQuantityError,
    MissingFeeWalletError,
    MissingFieldError,
    SettlementError,
    LedgerTimeoutError,
)

AmountLike = Union[Decimal, int, str]


@dataclass(frozen=True)
class BuyResult:
    tx_hash: str
    market: Market
    fill: BuyFill
    position: Optional[PositionSnapshot] = None

    @property
    def bookkeeping_recorded(self) -> bool:
        return self.position is not None


@dataclass(frozen=True)
class SellResult:
    tx_hash: str
    market: Market
    fill: SellFill
    outcome: Optional[SellOutcome] = None

    @property
    def bookkeeping_recorded(self) -> bool:
        return self.outcome is not None

    @property
    def realized_pnl(self) -> Optional[Decimal]:
        return self.outcome.realized_pnl if self.outcome else None


@dataclass(frozen=True)
class CurrencyResult:
    tx_hash: str
    operation: TransactionType
    currency: str
    amount: Decimal
    scaled_amount: FixedPoint


def parse_amount(value: Any, field_name: str = "amount") -> Decimal:
    """Request amount to Decimal. Floats go through str() so 0.1 stays 0.1."""
    if value is None or value == "":
        raise MissingFieldError(f"Missing required field: {field_name}")
    if isinstance(value, bool):
        raise InvalidQuantityError(f"Invalid {field_name}: {value}")
    try:
        amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidQuantityError(f"Invalid {field_name}: {value}")
    if not amount.is_finite() or amount <= 0:
        raise InvalidQuantityError(f"{field_name.capitalize()} must be greater than 0")
    return amount


class ExchangeService:
    """
    Exchange Service

    Usage:
        service = ExchangeService(ledger, oracle, store, fee_wallet="0xfee")
        result = await service.buy("0xabc", "AAPL", Decimal("100000"), "INR")
    """

    def __init__(
        self,
        ledger: LedgerAdapter,
        oracle: PriceOracle,
        store: PositionAccountingStore,
        fee_wallet: Optional[str],
        sizer: Optional[OrderSizer] = None,
        ledger_timeout: Optional[float] = 30.0,
        reconciliation: Optional[ReconciliationQueue] = None,
        default_currency: str = "INR",
    ):
        self.ledger = ledger
        self.oracle = oracle
        self.store = store
        self.fee_wallet = fee_wallet
        self.sizer = sizer or OrderSizer()
        self.ledger_timeout = ledger_timeout
        self.reconciliation = reconciliation if reconciliation is not None else ReconciliationQueue()
        self.default_currency = default_currency
        self._locks = KeyedLock()

    # ==================== TRADES ====================

    async def buy(
        self,
        wallet_address: str,
        symbol: str,
        amount: AmountLike,
        currency: Optional[str] = None,
        market: Market = Market.PUBLIC,
    ) -> BuyResult:
        """
        Spend `amount` of the settlement currency on whole units of `symbol`.

        Raises:
            ValidationError: bad input, amount below one unit
            MissingFeeWalletError: fee wallet not configured
            SettlementError: ledger rejected or timed out (nothing recorded)
        """
        wallet_address = self._require_address(wallet_address)
        symbol = require_symbol(symbol, market)
        spend = parse_amount(amount)
        fee_wallet = self._require_fee_wallet()
        currency = await self._resolve_currency(wallet_address, currency, market)

        async with self._locks.hold((wallet_address, symbol)):
            price = await self.oracle.get_price(symbol, currency)
            fill = self.sizer.size_buy(symbol, spend, price, currency)

            logger.info(
                f"[BUY] {wallet_address} {fill.fill_quantity} {symbol} @ {price} {currency} "
                f"(spend={spend}, fee={fill.fee_amount})"
            )

            tx_hash = await self._settle(
                "buy",
                self.ledger.settle_buy(
                    wallet_address,
                    symbol,
                    fill.quantity_fp,
                    fill.unit_price_fp,
                    fill.fee_fp,
                    fee_wallet,
                    currency,
                ),
            )

            position = await self._bookkeep(
                PendingBookkeeping(
                    operation="buy",
                    wallet_address=wallet_address,
                    symbol=symbol,
                    tx_hash=tx_hash,
                    payload={
                        "market": market.value,
                        "quantity": str(fill.fill_quantity),
                        "unit_price": str(fill.unit_price),
                        "fee_amount": str(fill.fee_amount),
                        "currency": currency,
                    },
                    error="",
                ),
                self.store.record_buy(
                    wallet_address,
                    symbol,
                    market,
                    fill.fill_quantity,
                    fill.unit_price,
                    fill.fee_amount,
                    tx_hash,
                    currency,
                    base_currency=self._base_currency_for(currency, market),
                ),
            )

        logger.info(f"[BUY] Settled {symbol} for {wallet_address}: {tx_hash}")
        return BuyResult(tx_hash=tx_hash, market=market, fill=fill, position=position)

    async def sell(
        self,
        wallet_address: str,
        symbol: str,
        amount: AmountLike,
        currency: Optional[str] = None,
        market: Market = Market.PUBLIC,
    ) -> SellResult:
        """
        Sell `amount` units of `symbol` for the settlement currency.

        Raises:
            ValidationError: bad input or quantity above the recorded position
            MissingFeeWalletError: fee wallet not configured
            SettlementError: ledger rejected or timed out (nothing recorded)
        """
        wallet_address = self._require_address(wallet_address)
        symbol = require_symbol(symbol, market)
        quantity = parse_amount(amount)
        fee_wallet = self._require_fee_wallet()
        currency = await self._resolve_currency(wallet_address, currency, market)

        async with self._locks.hold((wallet_address, symbol)):
            price = await self.oracle.get_price(symbol, currency)
            fill = self.sizer.size_sell(symbol, quantity, price, currency)

            position = await self.store.get_position(wallet_address, symbol)
            available = Decimal(position.current_quantity) if position is not None else Decimal("0")
            if fill.share_quantity > available:
                raise InsufficientPositionError(symbol, fill.share_quantity, available)

            logger.info(
                f"[SELL] {wallet_address} {fill.share_quantity} {symbol} @ {price} {currency} "
                f"(gross={fill.gross_proceeds}, fee={fill.fee_amount})"
            )

            tx_hash = await self._settle(
                "sell",
                self.ledger.settle_sell(
                    wallet_address,
                    symbol,
                    fill.quantity_fp,
                    fill.unit_price_fp,
                    fill.fee_fp,
                    fee_wallet,
                    currency,
                ),
            )

            outcome = await self._bookkeep(
                PendingBookkeeping(
                    operation="sell",
                    wallet_address=wallet_address,
                    symbol=symbol,
                    tx_hash=tx_hash,
                    payload={
                        "market": market.value,
                        "quantity": str(fill.share_quantity),
                        "unit_price": str(fill.unit_price),
                        "gross_proceeds": str(fill.gross_proceeds),
                        "fee_amount": str(fill.fee_amount),
                        "net_proceeds": str(fill.net_proceeds),
                        "currency": currency,
                    },
                    error="",
                ),
                self.store.record_sell(
                    wallet_address,
                    symbol,
                    market,
                    fill.share_quantity,
                    fill.unit_price,
                    fill.gross_proceeds,
                    fill.fee_amount,
                    fill.net_proceeds,
                    tx_hash,
                    currency,
                    base_currency=self._base_currency_for(currency, market),
                ),
            )

        logger.info(f"[SELL] Settled {symbol} for {wallet_address}: {tx_hash}")
        return SellResult(tx_hash=tx_hash, market=market, fill=fill, outcome=outcome)

    # ==================== CURRENCY ====================

    async def mint(self, wallet_address: str, currency: str, amount: AmountLike) -> CurrencyResult:
        return await self._currency_event(TransactionType.MINT, wallet_address, currency, amount)

    async def burn(self, wallet_address: str, currency: str, amount: AmountLike) -> CurrencyResult:
        return await self._currency_event(TransactionType.BURN, wallet_address, currency, amount)

    async def _currency_event(
        self,
        operation: TransactionType,
        wallet_address: str,
        currency: str,
        amount: AmountLike,
    ) -> CurrencyResult:
        wallet_address = self._require_address(wallet_address)
        if not normalize_currency(currency):
            raise MissingFieldError("Missing required fields: currency, userAddress, amount")
        currency = require_ledger_currency(currency)
        value = parse_amount(amount)
        scaled = to_fixed_point(value)
        if not scaled.is_positive():
            raise InvalidQuantityError("Amount is below the smallest unit (0.000001)")

        label = operation.value
        logger.info(f"[{label} {currency}] {value} {currency} for {wallet_address}")

        if operation == TransactionType.MINT:
            call = self.ledger.mint(wallet_address, currency, scaled)
        else:
            call = self.ledger.burn(wallet_address, currency, scaled)
        tx_hash = await self._settle(label.lower(), call)

        await self._bookkeep(
            PendingBookkeeping(
                operation=label.lower(),
                wallet_address=wallet_address,
                symbol=currency,
                tx_hash=tx_hash,
                payload={"amount": str(value)},
                error="",
            ),
            self.store.record_currency_event(
                wallet_address,
                currency,
                from_fixed_point(scaled),
                operation,
                tx_hash,
                base_currency=currency if currency != USDC else None,
            ),
        )
        return CurrencyResult(
            tx_hash=tx_hash,
            operation=operation,
            currency=currency,
            amount=value,
            scaled_amount=scaled,
        )

    # ==================== READS ====================

    async def get_price(self, symbol: str, currency: Optional[str] = None, market: Market = Market.PUBLIC) -> tuple[str, Decimal, str]:
        """(symbol, price, quote currency)"""
        symbol = require_symbol(symbol, market)
        if market == Market.PRIVATE:
            return symbol, await self.oracle.get_price(symbol), USDC
        currency = require_settlement_currency(currency or self.default_currency)
        return symbol, await self.oracle.get_price(symbol, currency), currency

    async def get_balance(self, wallet_address: str, symbol: str) -> Decimal:
        """Ledger balance of a stock or currency coin."""
        balance = await self.ledger.get_balance(self._require_address(wallet_address), symbol.upper())
        return from_fixed_point(balance)

    async def get_balances(self, wallet_address: str, symbols: list[str]) -> dict[str, Decimal]:
        balances = await self.ledger.get_balances(self._require_address(wallet_address), symbols)
        return {symbol: from_fixed_point(value) for symbol, value in balances.items()}

    # ==================== INTERNAL ====================

    @staticmethod
    def _require_address(wallet_address: Optional[str]) -> str:
        address = (wallet_address or "").strip()
        if not address:
            raise MissingFieldError("Missing required field: userAddress")
        return address

    def _require_fee_wallet(self) -> str:
        if not self.fee_wallet:
            raise MissingFeeWalletError()
        return self.fee_wallet

    async def _resolve_currency(self, wallet_address: str, currency: Optional[str], market: Market) -> str:
        """Account base currency; an explicit currency must match it once the account exists."""
        if market == Market.PRIVATE:
            return USDC
        user = await self.store.get_user(wallet_address)
        if normalize_currency(currency):
            requested = require_settlement_currency(currency)
            if user is not None and requested != normalize_currency(user.base_currency):
                raise CurrencyMismatchError(requested, user.base_currency)
            return requested
        base = user.base_currency if user is not None else self.default_currency
        return require_settlement_currency(base)

    @staticmethod
    def _base_currency_for(currency: str, market: Market) -> Optional[str]:
        return currency if market == Market.PUBLIC else None

    async def _settle(self, operation: str, call: Awaitable[str]) -> str:
        """Await a ledger call under the configured timeout."""
        try:
            if self.ledger_timeout:
                return await asyncio.wait_for(call, timeout=self.ledger_timeout)
            return await call
        except asyncio.TimeoutError:
            logger.error(f"[LEDGER] {operation} timed out after {self.ledger_timeout}s")
            raise LedgerTimeoutError(self.ledger_timeout)
        except SettlementError as e:
            logger.error(f"[LEDGER] {operation} rejected: {e.message}")
            raise

    async def _bookkeep(self, pending: PendingBookkeeping, call: Awaitable[Any]) -> Any:
        """
        Record a settled operation. Failures are logged and queued; the
        ledger result stands either way.
        """
        try:
            return await call
        except Exception as e:
            logger.bind(
                event="bookkeeping_failed",
                operation=pending.operation,
                wallet_address=pending.wallet_address,
                symbol=pending.symbol,
                tx_hash=pending.tx_hash,
            ).warning(f"Failed to record {pending.operation} {pending.tx_hash}: {e}")
            self.reconciliation.push(
                PendingBookkeeping(
                    operation=pending.operation,
                    wallet_address=pending.wallet_address,
                    symbol=pending.symbol,
                    tx_hash=pending.tx_hash,
                    payload=pending.payload,
                    error=str(e),
                )
            )
            return None
