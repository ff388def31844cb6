"""
SSA Exchange - Dependencies
Service container and dependency injection for FastAPI endpoints
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ssa_exchange.config import Settings
from ssa_exchange.core.portfolio.accounting import PositionAccountingStore
from ssa_exchange.core.portfolio.valuation import PortfolioValuationService
from ssa_exchange.core.trading.order_sizing import OrderSizer
from ssa_exchange.core.trading.reconciliation import ReconciliationQueue
from ssa_exchange.core.trading.service import ExchangeService
from ssa_exchange.data_providers.price_oracle import PriceOracle
from ssa_exchange.data_providers.yahoo import YahooChartSource
from ssa_exchange.ledger.base import LedgerAdapter
from ssa_exchange.ledger.paper import PaperLedger


@dataclass
class ServiceContainer:
    """Long-lived collaborators shared by all requests."""
    ledger: LedgerAdapter
    oracle: PriceOracle
    store: PositionAccountingStore
    exchange: ExchangeService
    valuation: PortfolioValuationService
    reconciliation: ReconciliationQueue

    async def close(self) -> None:
        await self.ledger.close()


def build_services(
    config: Settings,
    session_maker: async_sessionmaker[AsyncSession],
    ledger: Optional[LedgerAdapter] = None,
    oracle: Optional[PriceOracle] = None,
) -> ServiceContainer:
    """Wire the ledger, price oracle and accounting store into the services."""
    ledger = ledger or PaperLedger(module_address=config.LEDGER_MODULE_ADDRESS)
    if oracle is None:
        live_source = (
            YahooChartSource(config.PRICE_SOURCE_URL, timeout=config.PRICE_TIMEOUT_SECONDS)
            if config.ENABLE_LIVE_PRICES
            else None
        )
        oracle = PriceOracle(
            live_source=live_source,
            fx_rates=config.FX_RATES,
            cache_ttl=config.PRICE_CACHE_TTL_SECONDS,
            timeout=config.PRICE_TIMEOUT_SECONDS,
        )

    store = PositionAccountingStore(session_maker)
    reconciliation = ReconciliationQueue()
    exchange = ExchangeService(
        ledger=ledger,
        oracle=oracle,
        store=store,
        fee_wallet=config.ADMIN_FEE_WALLET.strip() or None,
        sizer=OrderSizer(fee_rate=config.FEE_PERCENTAGE),
        ledger_timeout=config.LEDGER_TIMEOUT_SECONDS,
        reconciliation=reconciliation,
        default_currency=config.DEFAULT_BASE_CURRENCY,
    )
    valuation = PortfolioValuationService(
        ledger=ledger,
        oracle=oracle,
        store=store,
        default_currency=config.DEFAULT_BASE_CURRENCY,
    )
    return ServiceContainer(
        ledger=ledger,
        oracle=oracle,
        store=store,
        exchange=exchange,
        valuation=valuation,
        reconciliation=reconciliation,
    )


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_exchange_service(request: Request) -> ExchangeService:
    """Exchange service dependency."""
    return get_services(request).exchange


def get_valuation_service(request: Request) -> PortfolioValuationService:
    """Portfolio valuation dependency."""
    return get_services(request).valuation


def get_accounting_store(request: Request) -> PositionAccountingStore:
    """Accounting store dependency."""
    return get_services(request).store
