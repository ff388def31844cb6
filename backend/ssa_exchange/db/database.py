"""
SSA Exchange - Database Connection
"""
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from loguru import logger

from ssa_exchange.config import Settings, settings

# Base class for models
Base = declarative_base()


def create_engine_from_settings(config: Settings = settings) -> AsyncEngine:
    """Create the async engine with a bounded connection pool."""
    url = config.database_url
    if url.startswith("sqlite"):
        # SQLite drivers manage their own single-connection pool
        return create_async_engine(url, echo=False)

    return create_async_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        pool_size=config.DB_POOL_SIZE,
        max_overflow=config.DB_MAX_OVERFLOW,
        pool_timeout=config.DB_POOL_TIMEOUT,
        pool_recycle=config.DB_POOL_RECYCLE,
    )


def create_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_db(bind: AsyncEngine):
    """Initialize database tables."""
    async with bind.begin() as conn:
        # Import all models here to ensure they're registered
        from ssa_exchange.db.models import user, transaction, position, currency_balance  # noqa: F401

        # Create all tables
        await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created/verified")
