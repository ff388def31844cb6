"""
SSA Exchange - Main Application Entry Point
"""
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from ssa_exchange.config import Settings, settings
from ssa_exchange.api.router import api_router
from ssa_exchange.db.database import create_engine_from_settings, create_session_maker, init_db
from ssa_exchange.dependencies import ServiceContainer, build_services
from ssa_exchange.utils.exceptions import ExchangeException, MissingFeeWalletError
from ssa_exchange.utils.logger import configure_logging


def _error_response(status_code: int, message: str, code: Optional[str] = None, details: Optional[dict] = None) -> JSONResponse:
    body = {"success": False, "error": message}
    if code:
        body["code"] = code
    if details:
        # Decimals from exception details render as JSON numbers
        body.update({key: float(value) if isinstance(value, Decimal) else value for key, value in details.items()})
    return JSONResponse(status_code=status_code, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ExchangeException)
    async def exchange_exception_handler(request: Request, exc: ExchangeException):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
        return _error_response(exc.status_code, exc.message, exc.code, exc.details)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        fields = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
        message = f"Missing or invalid fields: {', '.join(fields)}" if fields else "Invalid request"
        return _error_response(400, message, "INVALID_REQUEST")

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"{request.method} {request.url.path} crashed: {exc}")
        return _error_response(500, str(exc) or "Internal server error")


def create_application(
    config: Settings = settings,
    services: Optional[ServiceContainer] = None,
    create_tables: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events handler."""
        configure_logging()
        logger.info(f"🚀 Starting {config.APP_NAME}...")

        if not config.fee_wallet_configured:
            # Trades fail with MissingFeeWalletError until this is set
            logger.error(f"⚠️ {MissingFeeWalletError().message}: buy and sell requests will be rejected")

        engine = None
        if services is None:
            engine = create_engine_from_settings(config)
            if create_tables:
                await init_db(engine)
                logger.info("✅ Database initialized")
            app.state.services = build_services(config, create_session_maker(engine))
        else:
            app.state.services = services

        logger.info(f"✅ {config.APP_NAME} started successfully!")

        yield

        logger.info(f"🛑 Shutting down {config.APP_NAME}...")
        await app.state.services.close()
        if engine is not None:
            await engine.dispose()
        pending = len(app.state.services.reconciliation)
        if pending:
            logger.warning(f"{pending} settled operations still await reconciliation")
        logger.info("👋 Goodbye!")

    app = FastAPI(
        title=config.APP_NAME,
        description="Tokenized stock exchange: trade settlement and portfolio accounting",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(api_router, prefix=config.API_PREFIX)

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint for load balancers."""
        return {
            "status": "healthy",
            "app": config.APP_NAME,
            "version": "1.0.0",
            "feeWalletConfigured": config.fee_wallet_configured,
        }

    return app


# Create the application instance
app = create_application()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "ssa_exchange.main:app",
        host=settings.BACKEND_HOST,
        port=settings.BACKEND_PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
