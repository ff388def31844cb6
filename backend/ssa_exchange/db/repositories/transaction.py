"""
Transaction Repository

Append-only access to the transaction log.
"""
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from ssa_exchange.core.trading.symbols import Market
from ssa_exchange.db.models.transaction import Transaction, TransactionType


class TransactionRepository:
    """Repository for Transaction database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, transaction: Transaction) -> Transaction:
        """Append a transaction to the log."""
        self.db.add(transaction)
        await self.db.flush()
        return transaction

    async def get_by_user(
        self,
        user_id: int,
        limit: Optional[int] = 50,
        symbol: Optional[str] = None,
        market: Optional[Market] = None,
        transaction_type: Optional[TransactionType] = None,
    ) -> list[Transaction]:
        """Newest-first transaction history with optional filters."""
        stmt = select(Transaction).where(Transaction.user_id == user_id)
        if symbol:
            stmt = stmt.where(Transaction.stock_symbol == symbol.upper())
        if market is not None:
            stmt = stmt.where(Transaction.market == market)
        if transaction_type is not None:
            stmt = stmt.where(Transaction.transaction_type == transaction_type)

        stmt = stmt.order_by(Transaction.created_at.desc(), Transaction.id.desc())
        if limit:
            stmt = stmt.limit(limit)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())
