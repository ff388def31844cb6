"""
SSA Exchange - Trading Engine Module

Core trading functionality including:
- Fixed-point conversion at the ledger boundary
- Order sizing and fees
- Settlement orchestration
"""
from ssa_exchange.core.trading.fixed_point import (
    FixedPoint,
    to_fixed_point,
    from_fixed_point,
)
from ssa_exchange.core.trading.order_sizing import (
    OrderSizer,
    BuyFill,
    SellFill,
)
from ssa_exchange.core.trading.symbols import Market

__all__ = [
    # Fixed point
    "FixedPoint",
    "to_fixed_point",
    "from_fixed_point",

    # Sizing
    "OrderSizer",
    "BuyFill",
    "SellFill",

    "Market",
]
