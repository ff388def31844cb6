"""
SSA Exchange - Data Repositories

Repository pattern implementations for database operations.
"""
from ssa_exchange.db.repositories.user import UserRepository
from ssa_exchange.db.repositories.position import PositionRepository
from ssa_exchange.db.repositories.transaction import TransactionRepository
from ssa_exchange.db.repositories.currency_balance import CurrencyBalanceRepository

__all__ = [
    "UserRepository",
    "PositionRepository",
    "TransactionRepository",
    "CurrencyBalanceRepository",
]
