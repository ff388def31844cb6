"""
SSA Exchange - Market Data
"""
from ssa_exchange.data_providers.price_oracle import PriceOracle, FALLBACK_USD_PRICES
from ssa_exchange.data_providers.yahoo import YahooChartSource

__all__ = ["PriceOracle", "FALLBACK_USD_PRICES", "YahooChartSource"]
