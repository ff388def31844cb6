"""
SSA Exchange - Configuration Settings
"""
from decimal import Decimal
from typing import Dict, List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
import json


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # =========================
    # Application Settings
    # =========================
    APP_NAME: str = "SSA Exchange"
    APP_ENV: str = "development"
    DEBUG: bool = True
    # Empty so the public contract paths (/exchange/buy, /portfolio/...) are served as-is
    API_PREFIX: str = ""

    # =========================
    # Server Configuration
    # =========================
    BACKEND_HOST: str = "0.0.0.0"
    BACKEND_PORT: int = 3001
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:3000"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",")]
        return v

    # =========================
    # Database - PostgreSQL
    # =========================
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "ssa_exchange"
    DB_USER: str = "ssa_admin"
    DB_PASSWORD: str = "ssa_secure_password_2024"
    # Direct DATABASE_URL from environment (overrides individual settings)
    DATABASE_URL: str = ""

    # Connection pool
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 0
    DB_POOL_TIMEOUT: float = 2.0  # seconds to wait for a free connection
    DB_POOL_RECYCLE: int = 30  # seconds before an idle connection is recycled

    @property
    def database_url(self) -> str:
        """Get the async database URL."""
        if self.DATABASE_URL:
            url = self.DATABASE_URL
            # Ensure it uses asyncpg driver
            if url.startswith("postgresql://"):
                url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
            return url
        return f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @property
    def database_url_sync(self) -> str:
        """Get the sync database URL for Alembic."""
        url = self.database_url
        if "+asyncpg" in url:
            url = url.replace("postgresql+asyncpg://", "postgresql://", 1)
        elif "+aiosqlite" in url:
            url = url.replace("sqlite+aiosqlite://", "sqlite://", 1)
        return url

    # =========================
    # Trading
    # =========================
    FEE_PERCENTAGE: Decimal = Decimal("0.001")  # 0.1% per trade
    ADMIN_FEE_WALLET: str = ""
    DEFAULT_BASE_CURRENCY: str = "INR"

    # Fixed USD -> settlement currency table
    FX_RATES: Dict[str, Decimal] = {
        "USD": Decimal("1.0"),
        "INR": Decimal("90.0"),
        "CNY": Decimal("7.2"),
        "EUR": Decimal("0.92"),
    }

    @field_validator("FX_RATES", mode="before")
    @classmethod
    def parse_fx_rates(cls, v):
        if isinstance(v, str):
            v = json.loads(v)
        if isinstance(v, dict):
            return {str(k).upper(): Decimal(str(rate)) for k, rate in v.items()}
        return v

    @field_validator("FEE_PERCENTAGE")
    @classmethod
    def check_fee_percentage(cls, v: Decimal) -> Decimal:
        if v < 0 or v >= 1:
            raise ValueError("FEE_PERCENTAGE must be a fraction in [0, 1)")
        return v

    # =========================
    # Ledger
    # =========================
    LEDGER_MODULE_ADDRESS: str = "0xebb91a4b81d7df2f2994095f2c6242096bbd4c18d78df312de70ddb8f25779a9"
    LEDGER_TIMEOUT_SECONDS: float = 30.0

    # =========================
    # Market Data
    # =========================
    ENABLE_LIVE_PRICES: bool = True
    PRICE_SOURCE_URL: str = "https://query1.finance.yahoo.com/v8/finance/chart"
    PRICE_TIMEOUT_SECONDS: float = 5.0
    PRICE_CACHE_TTL_SECONDS: float = 5.0  # 0 disables the quote cache

    # =========================
    # Logging
    # =========================
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = True

    @property
    def fee_wallet_configured(self) -> bool:
        return bool(self.ADMIN_FEE_WALLET.strip())


# Create global settings instance
settings = Settings()
