"""
Position Repository

Database operations for portfolio positions.
"""
from decimal import Decimal
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_

from ssa_exchange.core.trading.symbols import Market
from ssa_exchange.db.models.position import PortfolioPosition


class PositionRepository:
    """
    Repository for PortfolioPosition database operations.

    Provides low-level reads and row creation. Cost-basis arithmetic lives
    in PositionAccountingStore.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, user_id: int, symbol: str, market: Market) -> PortfolioPosition:
        """Create an empty position."""
        position = PortfolioPosition(
            user_id=user_id,
            stock_symbol=symbol.upper(),
            market=market,
            current_quantity=Decimal("0"),
            total_cost_basis=Decimal("0"),
            average_cost_per_share=Decimal("0"),
            realized_profit_loss=Decimal("0"),
        )
        self.db.add(position)
        await self.db.flush()
        return position

    async def get_by_symbol(
        self,
        user_id: int,
        symbol: str,
        for_update: bool = False,
    ) -> Optional[PortfolioPosition]:
        """Get position by user and symbol, optionally locking the row."""
        stmt = select(PortfolioPosition).where(
            and_(
                PortfolioPosition.user_id == user_id,
                PortfolioPosition.stock_symbol == symbol.upper(),
            )
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_all_by_user(
        self,
        user_id: int,
        market: Optional[Market] = None,
        open_only: bool = False,
    ) -> list[PortfolioPosition]:
        """Get all positions for a user, ordered by symbol."""
        stmt = select(PortfolioPosition).where(PortfolioPosition.user_id == user_id)
        if market is not None:
            stmt = stmt.where(PortfolioPosition.market == market)
        if open_only:
            stmt = stmt.where(PortfolioPosition.current_quantity > 0)
        result = await self.db.execute(stmt.order_by(PortfolioPosition.stock_symbol))
        return list(result.scalars().all())
