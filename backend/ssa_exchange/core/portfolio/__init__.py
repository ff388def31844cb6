"""
SSA Exchange - Portfolio Module

Position accounting and read-time valuation.
"""
from ssa_exchange.core.portfolio.accounting import PositionAccountingStore, PositionSnapshot, SellOutcome
from ssa_exchange.core.portfolio.valuation import PortfolioValuationService

__all__ = [
    "PositionAccountingStore",
    "PositionSnapshot",
    "SellOutcome",
    "PortfolioValuationService",
]
