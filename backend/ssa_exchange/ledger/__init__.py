"""
SSA Exchange - Ledger Adapters
"""
from ssa_exchange.ledger.base import LedgerAdapter, LedgerReceipt
from ssa_exchange.ledger.paper import PaperLedger

__all__ = ["LedgerAdapter", "LedgerReceipt", "PaperLedger"]
