"""
SSA Exchange - Currency Balance Mirror

Best-effort mirror of minted/burned currency per user. The ledger stays
authoritative; trades do not touch this table.
"""
from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from ssa_exchange.db.database import Base


class CurrencyBalance(Base):
    """Mirrored currency balance."""

    __tablename__ = "currency_balances"
    __table_args__ = (
        UniqueConstraint("user_id", "currency_symbol", name="uq_currency_balance_user_currency"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    currency_symbol = Column(String(8), nullable=False)
    balance = Column(Numeric(24, 6), default=Decimal("0"), nullable=False)
    last_updated = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="currency_balances")

    def __repr__(self):
        return f"<CurrencyBalance {self.currency_symbol}={self.balance}>"
