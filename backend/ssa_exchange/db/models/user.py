"""
SSA Exchange - User Model
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from ssa_exchange.db.database import Base


class User(Base):
    """Wallet account, created implicitly on first write."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    wallet_address = Column(String(130), unique=True, index=True, nullable=False)

    # Preferences
    base_currency = Column(String(8), default="INR", nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    transactions = relationship("Transaction", back_populates="user", cascade="all, delete-orphan")
    positions = relationship("PortfolioPosition", back_populates="user", cascade="all, delete-orphan")
    currency_balances = relationship("CurrencyBalance", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.wallet_address}>"
