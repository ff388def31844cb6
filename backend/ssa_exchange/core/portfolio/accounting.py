"""
SSA Exchange - Position Accounting Store

Average-cost bookkeeping on top of the transaction log.

BUY
    total_cost_basis += fill * price
    current_quantity += fill
    average          = total_cost_basis / current_quantity

SELL
    cost_of_sold         = share_quantity * average
    realized             = net_proceeds - cost_of_sold
    current_quantity    -= share_quantity
    total_cost_basis    -= cost_of_sold        (clamped at 0, reset at zero quantity)
    realized_profit_loss += realized

Every record_* call is one database transaction covering the user upsert,
the transaction insert and the position (or currency balance) update. The
position row is locked with SELECT ... FOR UPDATE for the duration.
"""
import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_EVEN
from typing import AsyncIterator, Optional
from loguru import logger
from sqlalchemy.exc import DBAPIError, OperationalError, TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ssa_exchange.config import settings
from ssa_exchange.core.trading.fixed_point import QUANTUM
from ssa_exchange.core.trading.symbols import Market
from ssa_exchange.db.models.currency_balance import CurrencyBalance
from ssa_exchange.db.models.position import PortfolioPosition
from ssa_exchange.db.models.transaction import Transaction, TransactionStatus, TransactionType
from ssa_exchange.db.models.user import User
from ssa_exchange.db.repositories import (
    CurrencyBalanceRepository,
    PositionRepository,
    TransactionRepository,
    UserRepository,
)
from ssa_exchange.utils.exceptions import (
    CurrencyMismatchError,
    InsufficientPositionError,
    InvalidQuantityError,
    StoreUnavailableError,
)

AVERAGE_QUANTUM = Decimal(1).scaleb(-12)
ZERO = Decimal("0")


@dataclass(frozen=True)
class PositionSnapshot:
    """Position aggregates after an update."""
    symbol: str
    market: Market
    current_quantity: Decimal
    total_cost_basis: Decimal
    average_cost_per_share: Decimal
    realized_profit_loss: Decimal

    @classmethod
    def from_model(cls, position: PortfolioPosition) -> "PositionSnapshot":
        return cls(
            symbol=position.stock_symbol,
            market=position.market,
            current_quantity=Decimal(position.current_quantity),
            total_cost_basis=Decimal(position.total_cost_basis),
            average_cost_per_share=Decimal(position.average_cost_per_share),
            realized_profit_loss=Decimal(position.realized_profit_loss),
        )


@dataclass(frozen=True)
class SellOutcome:
    position: PositionSnapshot
    cost_of_sold: Decimal
    realized_pnl: Decimal


def _average(total_cost_basis: Decimal, quantity: Decimal) -> Decimal:
    if quantity <= 0:
        return ZERO
    return (total_cost_basis / quantity).quantize(AVERAGE_QUANTUM, rounding=ROUND_HALF_EVEN)


def apply_buy(position: PortfolioPosition, quantity: Decimal, cost: Decimal) -> None:
    """Add `quantity` units bought for `cost` (fees excluded) to the position."""
    if quantity <= 0:
        raise InvalidQuantityError("Buy quantity must be greater than 0")

    position.total_cost_basis = Decimal(position.total_cost_basis or 0) + cost
    position.current_quantity = Decimal(position.current_quantity or 0) + quantity
    position.average_cost_per_share = _average(position.total_cost_basis, position.current_quantity)


def apply_sell(position: PortfolioPosition, quantity: Decimal, net_proceeds: Decimal) -> tuple[Decimal, Decimal]:
    """
    Remove `quantity` units sold for `net_proceeds` from the position.

    Returns:
        (cost_of_sold, realized_pnl)

    Raises:
        InsufficientPositionError: quantity exceeds the recorded position
    """
    current_quantity = Decimal(position.current_quantity or 0)
    total_cost_basis = Decimal(position.total_cost_basis or 0)
    if quantity <= 0:
        raise InvalidQuantityError("Share quantity must be greater than 0")
    if quantity > current_quantity:
        raise InsufficientPositionError(position.stock_symbol, quantity, current_quantity)

    if quantity == current_quantity:
        cost_of_sold = total_cost_basis
    else:
        average = Decimal(position.average_cost_per_share or 0)
        cost_of_sold = (quantity * average).quantize(QUANTUM, rounding=ROUND_HALF_EVEN)

    realized = net_proceeds - cost_of_sold
    remaining = current_quantity - quantity

    if remaining == 0:
        position.total_cost_basis = ZERO
    else:
        position.total_cost_basis = max(total_cost_basis - cost_of_sold, ZERO)
    position.current_quantity = remaining
    position.average_cost_per_share = _average(position.total_cost_basis, remaining)
    position.realized_profit_loss = Decimal(position.realized_profit_loss or 0) + realized

    return cost_of_sold, realized


def _check_base_currency(user: User, base_currency: Optional[str]) -> None:
    # Cost basis and realized P&L are kept in the account base currency only.
    if base_currency is not None and user.base_currency != base_currency:
        raise CurrencyMismatchError(base_currency, user.base_currency)

class PositionAccountingStore:
    """
    Position Accounting Store

    Usage:
        store = PositionAccountingStore(async_session_maker)
        snapshot = await store.record_buy(address, "AAPL", Market.PUBLIC, qty, price, fee, tx_hash, "INR")
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self.session_maker() as session:
                async with session.begin():
                    yield session
        except (OperationalError, PoolTimeoutError, asyncio.TimeoutError, ConnectionError) as e:
            logger.error(f"[STORE] Database unavailable: {e}")
            raise StoreUnavailableError() from e
        except DBAPIError as e:
            if e.connection_invalidated:
                raise StoreUnavailableError() from e
            raise

    # ==================== WRITE ====================

    async def record_buy(
        self,
        wallet_address: str,
        symbol: str,
        market: Market,
        quantity: Decimal,
        unit_price: Decimal,
        fee_amount: Decimal,
        tx_hash: str,
        settlement_currency: str,
        base_currency: Optional[str] = None,
    ) -> PositionSnapshot:
        """Log a settled buy and fold it into the position."""
        cost = quantity * unit_price

        async with self._transaction() as session:
            user = await UserRepository(session).upsert(
                wallet_address, base_currency or settings.DEFAULT_BASE_CURRENCY
            )
            _check_base_currency(user, base_currency)
            positions = PositionRepository(session)
            position = await positions.get_by_symbol(user.id, symbol, for_update=True)
            if position is None:
                position = await positions.create(user.id, symbol, market)

            await TransactionRepository(session).add(
                Transaction(
                    user_id=user.id,
                    transaction_type=TransactionType.BUY,
                    market=market,
                    stock_symbol=symbol,
                    quantity=quantity,
                    price_per_unit=unit_price,
                    total_value=cost,
                    fee_amount=fee_amount,
                    settlement_currency=settlement_currency,
                    tx_hash=tx_hash,
                    status=TransactionStatus.SUCCESS,
                )
            )
            apply_buy(position, quantity, cost)
            await session.flush()
            snapshot = PositionSnapshot.from_model(position)

        logger.info(
            f"[STORE] BUY {quantity} {symbol} @ {unit_price} {settlement_currency} "
            f"-> qty={snapshot.current_quantity} basis={snapshot.total_cost_basis}"
        )
        return snapshot

    async def record_sell(
        self,
        wallet_address: str,
        symbol: str,
        market: Market,
        quantity: Decimal,
        unit_price: Decimal,
        gross_proceeds: Decimal,
        fee_amount: Decimal,
        net_proceeds: Decimal,
        tx_hash: str,
        settlement_currency: str,
        base_currency: Optional[str] = None,
    ) -> SellOutcome:
        """
        Log a settled sell and realize P&L against the average cost.

        Raises:
            InsufficientPositionError: no position or not enough recorded units
            CurrencyMismatchError: account base currency differs from `base_currency`
        """
        async with self._transaction() as session:
            user = await UserRepository(session).upsert(
                wallet_address, base_currency or settings.DEFAULT_BASE_CURRENCY
            )
            _check_base_currency(user, base_currency)
            position = await PositionRepository(session).get_by_symbol(user.id, symbol, for_update=True)
            if position is None:
                raise InsufficientPositionError(symbol, quantity, ZERO)

            cost_of_sold, realized = apply_sell(position, quantity, net_proceeds)

            await TransactionRepository(session).add(
                Transaction(
                    user_id=user.id,
                    transaction_type=TransactionType.SELL,
                    market=market,
                    stock_symbol=symbol,
                    quantity=quantity,
                    price_per_unit=unit_price,
                    total_value=gross_proceeds,
                    fee_amount=fee_amount,
                    realized_pnl=realized,
                    settlement_currency=settlement_currency,
                    tx_hash=tx_hash,
                    status=TransactionStatus.SUCCESS,
                )
            )
            await session.flush()
            snapshot = PositionSnapshot.from_model(position)

        logger.info(
            f"[STORE] SELL {quantity} {symbol} @ {unit_price} {settlement_currency} "
            f"realized={realized} -> qty={snapshot.current_quantity}"
        )
        return SellOutcome(position=snapshot, cost_of_sold=cost_of_sold, realized_pnl=realized)

    async def record_currency_event(
        self,
        wallet_address: str,
        currency: str,
        amount: Decimal,
        transaction_type: TransactionType,
        tx_hash: str,
        base_currency: Optional[str] = None,
    ) -> Decimal:
        """Log a MINT or BURN and update the mirrored balance. Returns the new balance."""
        if transaction_type not in (TransactionType.MINT, TransactionType.BURN):
            raise ValueError(f"Not a currency event: {transaction_type}")

        async with self._transaction() as session:
            user = await UserRepository(session).upsert(
                wallet_address, base_currency or settings.DEFAULT_BASE_CURRENCY
            )
            await TransactionRepository(session).add(
                Transaction(
                    user_id=user.id,
                    transaction_type=transaction_type,
                    currency_symbol=currency,
                    quantity=amount,
                    total_value=amount,
                    tx_hash=tx_hash,
                    status=TransactionStatus.SUCCESS,
                )
            )
            balance = await CurrencyBalanceRepository(session).get_or_create(user.id, currency)
            current = Decimal(balance.balance or 0)
            if transaction_type == TransactionType.MINT:
                balance.balance = current + amount
            else:
                balance.balance = max(current - amount, ZERO)
            await session.flush()
            new_balance = Decimal(balance.balance)

        logger.info(f"[STORE] {transaction_type.value} {amount} {currency} for {wallet_address}")
        return new_balance

    # ==================== READ ====================

    async def get_user(self, wallet_address: str) -> Optional[User]:
        async with self._transaction() as session:
            return await UserRepository(session).get_by_address(wallet_address)

    async def get_position(self, wallet_address: str, symbol: str) -> Optional[PortfolioPosition]:
        async with self._transaction() as session:
            user = await UserRepository(session).get_by_address(wallet_address)
            if user is None:
                return None
            return await PositionRepository(session).get_by_symbol(user.id, symbol)

    async def get_positions(
        self,
        wallet_address: str,
        market: Optional[Market] = None,
        open_only: bool = False,
    ) -> list[PortfolioPosition]:
        async with self._transaction() as session:
            user = await UserRepository(session).get_by_address(wallet_address)
            if user is None:
                return []
            return await PositionRepository(session).get_all_by_user(user.id, market, open_only)

    async def get_transactions(
        self,
        wallet_address: str,
        limit: Optional[int] = 50,
        symbol: Optional[str] = None,
        market: Optional[Market] = None,
    ) -> list[Transaction]:
        """Newest-first transaction log for an account (empty if unknown)."""
        async with self._transaction() as session:
            user = await UserRepository(session).get_by_address(wallet_address)
            if user is None:
                return []
            return await TransactionRepository(session).get_by_user(
                user.id, limit=limit, symbol=symbol, market=market
            )

    async def get_currency_balances(self, wallet_address: str) -> list[CurrencyBalance]:
        async with self._transaction() as session:
            user = await UserRepository(session).get_by_address(wallet_address)
            if user is None:
                return []
            return await CurrencyBalanceRepository(session).get_all_by_user(user.id)
