"""
SSA Exchange - Database Models
"""
from ssa_exchange.db.models.user import User
from ssa_exchange.db.models.transaction import Transaction, TransactionType, TransactionStatus
from ssa_exchange.db.models.position import PortfolioPosition
from ssa_exchange.db.models.currency_balance import CurrencyBalance

__all__ = [
    "User",
    "Transaction",
    "TransactionType",
    "TransactionStatus",
    "PortfolioPosition",
    "CurrencyBalance",
]
