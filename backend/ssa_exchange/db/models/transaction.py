"""
SSA Exchange - Transaction Model

Append-only log: one row per balance-affecting operation, never updated.
"""
from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, CheckConstraint, Enum as SQLEnum, event
from sqlalchemy.orm import relationship
import enum

from ssa_exchange.core.trading.symbols import Market
from ssa_exchange.db.database import Base


class TransactionType(str, enum.Enum):
    """Transaction type."""
    BUY = "BUY"
    SELL = "SELL"
    MINT = "MINT"
    BURN = "BURN"


class TransactionStatus(str, enum.Enum):
    """Ledger outcome of the transaction."""
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class Transaction(Base):
    """Trade or currency transaction."""

    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint(
            "(stock_symbol IS NULL) <> (currency_symbol IS NULL)",
            name="ck_transactions_one_symbol",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    transaction_type = Column(SQLEnum(TransactionType), nullable=False)
    market = Column(SQLEnum(Market), nullable=True)  # NULL for currency operations

    # Exactly one of these is set
    stock_symbol = Column(String(20), nullable=True, index=True)
    currency_symbol = Column(String(8), nullable=True)

    # Quantities and prices
    quantity = Column(Numeric(24, 6), nullable=False)
    price_per_unit = Column(Numeric(24, 6), nullable=True)
    total_value = Column(Numeric(24, 6), nullable=False)
    fee_amount = Column(Numeric(24, 6), default=Decimal("0"), nullable=False)
    settlement_currency = Column(String(8), nullable=True)

    # P&L (sells only)
    realized_pnl = Column(Numeric(24, 6), nullable=True)

    # Ledger reference
    tx_hash = Column(String(130), nullable=False, index=True)
    status = Column(SQLEnum(TransactionStatus), default=TransactionStatus.SUCCESS, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    # Relationships
    user = relationship("User", back_populates="transactions")

    def __repr__(self):
        symbol = self.stock_symbol or self.currency_symbol
        return f"<Transaction {self.transaction_type.value} {symbol} qty={self.quantity}>"


@event.listens_for(Transaction, "before_update")
def _reject_transaction_update(mapper, connection, target):
    raise ValueError("Transactions are append-only and cannot be modified")
