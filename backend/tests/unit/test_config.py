"""
Unit Tests - Configuration
Tests for application settings and config.
"""
import sys
import pytest
from decimal import Decimal
from loguru import logger
from pydantic import ValidationError

from ssa_exchange.config import Settings, settings
from ssa_exchange.utils.logger import configure_logging


class TestSettings:
    """Tests for Settings configuration class."""

    def test_default_app_name(self):
        settings = Settings()
        assert settings.APP_NAME == "SSA Exchange"

    def test_environment_from_env(self):
        """In the test run APP_ENV is set by conftest."""
        assert Settings().APP_ENV == "testing"

    def test_routes_served_without_prefix(self):
        assert Settings().API_PREFIX == ""

    def test_fee_defaults(self):
        settings = Settings()
        assert settings.FEE_PERCENTAGE == Decimal("0.001")
        assert settings.DEFAULT_BASE_CURRENCY == "INR"

    def test_fee_percentage_bounds(self):
        with pytest.raises(ValidationError):
            Settings(FEE_PERCENTAGE=Decimal("1"))
        with pytest.raises(ValidationError):
            Settings(FEE_PERCENTAGE=Decimal("-0.01"))

    def test_fee_wallet_configured(self):
        assert Settings(ADMIN_FEE_WALLET="0xfee").fee_wallet_configured is True
        assert Settings(ADMIN_FEE_WALLET="   ").fee_wallet_configured is False


class TestDatabaseUrl:

    def test_built_from_components(self):
        settings = Settings(
            DATABASE_URL="",
            DB_HOST="db",
            DB_PORT=5433,
            DB_NAME="exchange",
            DB_USER="user",
            DB_PASSWORD="pass",
        )
        assert settings.database_url == "postgresql+asyncpg://user:pass@db:5433/exchange"
        assert settings.database_url_sync == "postgresql://user:pass@db:5433/exchange"

    def test_plain_postgres_url_gets_async_driver(self):
        settings = Settings(DATABASE_URL="postgresql://u:p@host/db")
        assert settings.database_url == "postgresql+asyncpg://u:p@host/db"

    def test_sqlite_sync_url(self):
        settings = Settings(DATABASE_URL="sqlite+aiosqlite:///./exchange.db")
        assert settings.database_url_sync == "sqlite:///./exchange.db"


class TestParsedSettings:

    def test_cors_origins_comma_separated(self):
        settings = Settings(CORS_ORIGINS="http://a.test, http://b.test")
        assert settings.CORS_ORIGINS == ["http://a.test", "http://b.test"]

    def test_cors_origins_json(self):
        settings = Settings(CORS_ORIGINS='["http://a.test"]')
        assert settings.CORS_ORIGINS == ["http://a.test"]

    def test_fx_rates_from_json(self):
        settings = Settings(FX_RATES='{"usd": 1, "inr": 83.5}')
        assert settings.FX_RATES == {"USD": Decimal("1"), "INR": Decimal("83.5")}

    def test_fx_rates_from_env(self, monkeypatch):
        monkeypatch.setenv("FX_RATES", '{"eur": 0.9}')
        assert Settings().FX_RATES == {"EUR": Decimal("0.9")}


class TestLogging:
    """Tests for configure_logging sinks."""

    @pytest.fixture(autouse=True)
    def restore_default_sink(self):
        yield
        logger.remove()
        logger.add(sys.stderr)

    def test_file_sinks_written_to_log_dir(self, monkeypatch, tmp_path):
        monkeypatch.setattr(settings, "LOG_TO_FILE", True)
        monkeypatch.setattr(settings, "LOG_DIR", str(tmp_path / "logs"))

        configure_logging()
        logger.error("ledger unreachable")
        logger.complete()

        assert (tmp_path / "logs" / "app.log").exists()
        assert "ledger unreachable" in (tmp_path / "logs" / "error.log").read_text()

    def test_console_only(self, monkeypatch, tmp_path):
        monkeypatch.setattr(settings, "LOG_TO_FILE", False)
        monkeypatch.setattr(settings, "LOG_DIR", str(tmp_path / "logs"))

        configure_logging()

        assert not (tmp_path / "logs").exists()
