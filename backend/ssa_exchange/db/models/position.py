"""
SSA Exchange - Portfolio Position Model

Average-cost bookkeeping per (user, symbol). The quantity mirrors the ledger
on a best-effort basis and is used for cost basis only; the ledger balance
is what the account actually holds.
"""
from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, UniqueConstraint, CheckConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship

from ssa_exchange.core.trading.symbols import Market
from ssa_exchange.db.database import Base


class PortfolioPosition(Base):
    """Stock position with cost basis and realized P&L."""

    __tablename__ = "portfolio_positions"
    __table_args__ = (
        UniqueConstraint("user_id", "stock_symbol", name="uq_position_user_symbol"),
        CheckConstraint("current_quantity >= 0", name="ck_positions_quantity_non_negative"),
        CheckConstraint("total_cost_basis >= 0", name="ck_positions_basis_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    stock_symbol = Column(String(20), nullable=False, index=True)
    market = Column(SQLEnum(Market), default=Market.PUBLIC, nullable=False)

    # Cost-currency values
    current_quantity = Column(Numeric(24, 6), default=Decimal("0"), nullable=False)
    total_cost_basis = Column(Numeric(24, 6), default=Decimal("0"), nullable=False)
    average_cost_per_share = Column(Numeric(30, 12), default=Decimal("0"), nullable=False)
    realized_profit_loss = Column(Numeric(24, 6), default=Decimal("0"), nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    last_updated = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="positions")

    def __repr__(self):
        return f"<PortfolioPosition {self.stock_symbol} qty={self.current_quantity}>"
