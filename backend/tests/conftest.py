"""
SSA Exchange - Test Configuration
Shared fixtures and test configuration.
"""
import os
import sys
from decimal import Decimal
import pytest

# Add backend to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set test environment (before settings are imported)
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ADMIN_FEE_WALLET"] = "0xfee"
os.environ["ENABLE_LIVE_PRICES"] = "false"
os.environ["LOG_TO_FILE"] = "false"
os.environ["PRICE_CACHE_TTL_SECONDS"] = "0"

FEE_WALLET = "0xfee"
ALICE = "0xa11ce"
BOB = "0xb0b"

FX_RATES = {
    "USD": Decimal("1"),
    "INR": Decimal("90"),
    "CNY": Decimal("7.2"),
    "EUR": Decimal("0.92"),
}


# =========================
# Database Fixtures
# =========================

@pytest.fixture
async def db_engine():
    """In-memory SQLite engine with the full schema."""
    from sqlalchemy.ext.asyncio import create_async_engine
    from sqlalchemy.pool import StaticPool
    from ssa_exchange.db.database import init_db

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(db_engine):
    from ssa_exchange.db.database import create_session_maker
    return create_session_maker(db_engine)


@pytest.fixture
def store(session_maker):
    from ssa_exchange.core.portfolio.accounting import PositionAccountingStore
    return PositionAccountingStore(session_maker)


# =========================
# Collaborator Fixtures
# =========================

@pytest.fixture
def ledger():
    from ssa_exchange.ledger.paper import PaperLedger
    return PaperLedger(module_address="0x1")


@pytest.fixture
def oracle():
    """Oracle without a live source: public prices come from the fallback table."""
    from ssa_exchange.data_providers.price_oracle import PriceOracle
    return PriceOracle(live_source=None, fx_rates=FX_RATES)


@pytest.fixture
def reconciliation():
    from ssa_exchange.core.trading.reconciliation import ReconciliationQueue
    return ReconciliationQueue()


@pytest.fixture
def exchange_service(ledger, oracle, store, reconciliation):
    from ssa_exchange.core.trading.service import ExchangeService
    return ExchangeService(
        ledger=ledger,
        oracle=oracle,
        store=store,
        fee_wallet=FEE_WALLET,
        ledger_timeout=5.0,
        reconciliation=reconciliation,
    )


@pytest.fixture
def valuation_service(ledger, oracle, store):
    from ssa_exchange.core.portfolio.valuation import PortfolioValuationService
    return PortfolioValuationService(ledger=ledger, oracle=oracle, store=store)


@pytest.fixture
def mint(ledger):
    """Credit currency coins straight on the paper ledger."""
    from ssa_exchange.core.trading.fixed_point import to_fixed_point

    async def _mint(address: str, currency: str, amount: str):
        await ledger.mint(address, currency, to_fixed_point(Decimal(amount)))

    return _mint
