"""
SSA Exchange - Reconciliation Queue

Holds settled ledger operations whose bookkeeping could not be written.
The ledger already reflects these; an operator (or a later job) replays
them into the accounting store.
"""
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional
from loguru import logger


@dataclass(frozen=True)
class PendingBookkeeping:
    """Settled operation missing from the accounting store."""
    operation: str
    wallet_address: str
    symbol: str
    tx_hash: str
    payload: dict[str, Any]
    error: str
    created_at: datetime = field(default_factory=datetime.utcnow)


class ReconciliationQueue:
    """Bounded in-memory queue; the oldest entry is dropped when full."""

    def __init__(self, maxlen: Optional[int] = 10_000):
        self._items: deque[PendingBookkeeping] = deque(maxlen=maxlen)

    def push(self, item: PendingBookkeeping) -> None:
        if self._items.maxlen is not None and len(self._items) == self._items.maxlen:
            dropped = self._items[0]
            logger.bind(event="reconciliation_overflow", tx_hash=dropped.tx_hash).error(
                f"Reconciliation queue full, dropping {dropped.operation} {dropped.tx_hash}"
            )
        self._items.append(item)

    def drain(self) -> list[PendingBookkeeping]:
        """Remove and return everything queued so far."""
        items = list(self._items)
        self._items.clear()
        return items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(list(self._items))
