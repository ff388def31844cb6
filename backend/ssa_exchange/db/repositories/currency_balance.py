"""
Currency Balance Repository
"""
from decimal import Decimal
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_

from ssa_exchange.db.models.currency_balance import CurrencyBalance


class CurrencyBalanceRepository:
    """Repository for the mirrored currency balances."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(
        self,
        user_id: int,
        currency: str,
        for_update: bool = False,
    ) -> Optional[CurrencyBalance]:
        stmt = select(CurrencyBalance).where(
            and_(
                CurrencyBalance.user_id == user_id,
                CurrencyBalance.currency_symbol == currency.upper(),
            )
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_create(self, user_id: int, currency: str) -> CurrencyBalance:
        """Locked balance row, created at zero if absent."""
        balance = await self.get(user_id, currency, for_update=True)
        if balance is None:
            balance = CurrencyBalance(
                user_id=user_id,
                currency_symbol=currency.upper(),
                balance=Decimal("0"),
            )
            self.db.add(balance)
            await self.db.flush()
        return balance

    async def get_all_by_user(self, user_id: int) -> list[CurrencyBalance]:
        result = await self.db.execute(
            select(CurrencyBalance)
            .where(CurrencyBalance.user_id == user_id)
            .order_by(CurrencyBalance.currency_symbol)
        )
        return list(result.scalars().all())
