"""
SSA Exchange - Portfolio Valuation Service

Read-time join of ledger balances, live prices and recorded cost basis.
Nothing here writes; calling it twice with the same inputs gives the same
numbers.

Per position:
    current_value          = ledger_balance * price
    unrealized_pnl         = current_value - total_cost_basis
    unrealized_pnl_percent = unrealized_pnl / total_cost_basis * 100   (0 if no basis)
    total_pnl              = unrealized_pnl + realized_pnl
"""
import asyncio
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional
from loguru import logger

from ssa_exchange.core.portfolio.accounting import PositionAccountingStore
from ssa_exchange.core.trading.fixed_point import from_fixed_point
from ssa_exchange.core.trading.symbols import Market, PUBLIC_STOCKS, market_of, normalize_symbol
from ssa_exchange.data_providers.price_oracle import PriceOracle
from ssa_exchange.db.models.position import PortfolioPosition
from ssa_exchange.db.models.transaction import Transaction, TransactionType
from ssa_exchange.ledger.base import LedgerAdapter
from ssa_exchange.utils.exceptions import PositionNotFoundError, SettlementError

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def percent_of(amount: Decimal, base: Decimal) -> Decimal:
    if base <= 0:
        return ZERO
    return amount / base * HUNDRED


@dataclass(frozen=True)
class PositionValuation:
    """Valued position in the account's base currency."""
    symbol: str
    current_quantity: Decimal
    current_price: Decimal
    current_value: Decimal
    total_cost_basis: Decimal
    average_cost_per_share: Decimal
    unrealized_pnl: Decimal
    unrealized_pnl_percent: Decimal
    realized_pnl: Decimal
    total_pnl: Decimal
    base_currency: str


@dataclass(frozen=True)
class PortfolioSummary:
    total_value: Decimal = ZERO
    total_cost_basis: Decimal = ZERO
    total_unrealized_pnl: Decimal = ZERO
    total_realized_pnl: Decimal = ZERO
    total_pnl: Decimal = ZERO
    total_pnl_percent: Decimal = ZERO

    @classmethod
    def from_positions(cls, positions: list[PositionValuation]) -> "PortfolioSummary":
        total_cost_basis = sum((p.total_cost_basis for p in positions), ZERO)
        total_unrealized = sum((p.unrealized_pnl for p in positions), ZERO)
        total_realized = sum((p.realized_pnl for p in positions), ZERO)
        total_pnl = total_unrealized + total_realized
        return cls(
            total_value=sum((p.current_value for p in positions), ZERO),
            total_cost_basis=total_cost_basis,
            total_unrealized_pnl=total_unrealized,
            total_realized_pnl=total_realized,
            total_pnl=total_pnl,
            total_pnl_percent=percent_of(total_pnl, total_cost_basis),
        )


@dataclass(frozen=True)
class PortfolioValuation:
    address: str
    base_currency: str
    positions: list[PositionValuation] = field(default_factory=list)
    summary: PortfolioSummary = field(default_factory=PortfolioSummary)


@dataclass(frozen=True)
class StockDetail:
    """Single position with its trade history."""
    symbol: str
    base_currency: str
    position: PositionValuation
    total_pnl_percent: Decimal
    transactions: list[Transaction]


@dataclass(frozen=True)
class PrivateHolding:
    symbol: str
    quantity: Decimal
    total_cost_basis: Decimal
    average_cost: Decimal
    realized_pnl: Decimal
    current_price: Decimal
    current_value: Decimal


def value_position(
    symbol: str,
    ledger_balance: Decimal,
    price: Decimal,
    position: Optional[PortfolioPosition],
    base_currency: str,
) -> PositionValuation:
    """Value one holding. A missing position row means no recorded cost basis."""
    total_cost_basis = Decimal(position.total_cost_basis) if position is not None else ZERO
    average_cost = Decimal(position.average_cost_per_share) if position is not None else ZERO
    realized = Decimal(position.realized_profit_loss) if position is not None else ZERO

    current_value = ledger_balance * price
    unrealized = current_value - total_cost_basis
    return PositionValuation(
        symbol=symbol,
        current_quantity=ledger_balance,
        current_price=price,
        current_value=current_value,
        total_cost_basis=total_cost_basis,
        average_cost_per_share=average_cost,
        unrealized_pnl=unrealized,
        unrealized_pnl_percent=percent_of(unrealized, total_cost_basis),
        realized_pnl=realized,
        total_pnl=unrealized + realized,
        base_currency=base_currency,
    )


class PortfolioValuationService:
    """
    Portfolio Valuation Service

    Usage:
        valuation = PortfolioValuationService(ledger, oracle, store)
        portfolio = await valuation.get_portfolio("0xabc")
    """

    def __init__(
        self,
        ledger: LedgerAdapter,
        oracle: PriceOracle,
        store: PositionAccountingStore,
        default_currency: str = "INR",
    ):
        self.ledger = ledger
        self.oracle = oracle
        self.store = store
        self.default_currency = default_currency

    async def get_base_currency(self, address: str) -> str:
        user = await self.store.get_user(address)
        return user.base_currency if user is not None else self.default_currency

    async def get_portfolio(self, address: str) -> PortfolioValuation:
        """
        Value every public symbol the account holds on the ledger.

        Symbols with a zero ledger balance are omitted. A symbol whose
        ledger read fails is logged and skipped; store and price errors
        propagate.
        """
        base_currency = await self.get_base_currency(address)
        recorded = {
            p.stock_symbol: p
            for p in await self.store.get_positions(address, market=Market.PUBLIC)
        }

        async def _value(symbol: str) -> Optional[PositionValuation]:
            try:
                balance = from_fixed_point(await self.ledger.get_balance(address, symbol))
                if balance <= 0:
                    return None
                price = await self.oracle.get_price(symbol, base_currency)
                return value_position(symbol, balance, price, recorded.get(symbol), base_currency)
            except SettlementError as e:
                logger.error(f"Error valuing {symbol} for {address}: {e}")
                return None

        results = await asyncio.gather(*(_value(symbol) for symbol in PUBLIC_STOCKS))
        positions = [p for p in results if p is not None]

        return PortfolioValuation(
            address=address,
            base_currency=base_currency,
            positions=positions,
            summary=PortfolioSummary.from_positions(positions),
        )

    async def get_stock_detail(self, address: str, symbol: str) -> StockDetail:
        """
        Detailed position plus transaction history.

        totalPnlPercent here is measured against everything ever spent on
        buys, so it stays meaningful after partial sells.

        Raises:
            UnknownSymbolError: symbol is not tradable
            PositionNotFoundError: no recorded position for the account
        """
        symbol = normalize_symbol(symbol)
        market_of(symbol)

        position = await self.store.get_position(address, symbol)
        if position is None:
            raise PositionNotFoundError(symbol)

        base_currency = await self.get_base_currency(address)
        quote_currency = self.oracle.quote_currency(symbol, base_currency)
        price = await self.oracle.get_price(symbol, base_currency)
        balance = from_fixed_point(await self.ledger.get_balance(address, symbol))
        transactions = await self.store.get_transactions(address, limit=None, symbol=symbol)

        valued = value_position(symbol, balance, price, position, quote_currency)
        historical_cost = sum(
            (Decimal(tx.total_value) for tx in transactions if tx.transaction_type == TransactionType.BUY),
            ZERO,
        )
        return StockDetail(
            symbol=symbol,
            base_currency=quote_currency,
            position=valued,
            total_pnl_percent=percent_of(valued.total_pnl, historical_cost),
            transactions=transactions,
        )

    async def get_private_portfolio(self, address: str) -> list[PrivateHolding]:
        """Private holdings from the recorded positions at the fixed price table."""
        holdings = []
        for position in await self.store.get_positions(address, market=Market.PRIVATE, open_only=True):
            quantity = Decimal(position.current_quantity)
            price = await self.oracle.get_price(position.stock_symbol)
            holdings.append(
                PrivateHolding(
                    symbol=position.stock_symbol,
                    quantity=quantity,
                    total_cost_basis=Decimal(position.total_cost_basis),
                    average_cost=Decimal(position.average_cost_per_share),
                    realized_pnl=Decimal(position.realized_profit_loss),
                    current_price=price,
                    current_value=quantity * price,
                )
            )
        return holdings
