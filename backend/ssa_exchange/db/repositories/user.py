"""
User Repository

Database operations for wallet accounts.
"""
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite

from ssa_exchange.db.models.user import User

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class UserRepository:
    """
    Repository for User database operations.

    Writes flush only; the caller owns the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_address(self, wallet_address: str) -> Optional[User]:
        """Get user by wallet address."""
        result = await self.db.execute(
            select(User).where(User.wallet_address == wallet_address)
        )
        return result.scalar_one_or_none()

    async def upsert(self, wallet_address: str, base_currency: str = "INR") -> User:
        """
        Return the user for `wallet_address`, creating it if absent.

        Concurrent first writes for the same address converge on one row
        (INSERT ... ON CONFLICT DO NOTHING). An existing user keeps its
        base currency.
        """
        insert = _INSERT_BY_DIALECT.get(self.db.get_bind().dialect.name)
        if insert is not None:
            await self.db.execute(
                insert(User)
                .values(wallet_address=wallet_address, base_currency=base_currency)
                .on_conflict_do_nothing(index_elements=[User.wallet_address])
            )
            return await self.get_by_address(wallet_address)

        user = await self.get_by_address(wallet_address)
        if user is None:
            user = User(wallet_address=wallet_address, base_currency=base_currency)
            self.db.add(user)
            await self.db.flush()
        return user
