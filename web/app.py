"""
FastAPI application

App factory: router registration and ledger error mapping.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import AppConfig, get_settings
from core.ledger.errors import (
    AuthorizationError,
    LedgerError,
    NotFoundError,
    StateError,
    ValidationError,
)
from core.ledger.schema import init_ledger_schema
from web.routes import accounts, health, journal, reports

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

# Ledger error -> HTTP status
ERROR_STATUS: dict[type[LedgerError], int] = {
    ValidationError: 400,
    AuthorizationError: 403,
    NotFoundError: 404,
    StateError: 409,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """App lifecycle"""
    config: AppConfig = app.state.config

    # Startup: create the ledger schema (and default accounts)
    async with SQLiteAdapter(config.db_path) as db:
        await init_ledger_schema(db, seed_accounts=config.seed_default_accounts)

    logger.info("Ledger API started", extra={"db_path": str(config.db_path)})
    yield


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    """LedgerError -> JSON error response"""
    status_code = next(
        (code for error_type, code in ERROR_STATUS.items() if isinstance(exc, error_type)),
        400,
    )
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Create the FastAPI app

    Args:
        config: settings (None loads config/settings.yaml)

    Returns:
        FastAPI app
    """
    if config is None:
        config = get_settings().config

    app = FastAPI(
        title="Ledger API",
        description="Double-entry bookkeeping ledger for small business accounting",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.config = config

    # CORS (development)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(LedgerError, ledger_error_handler)

    # =========================================================================
    # API routers
    # =========================================================================

    app.include_router(health.router)
    app.include_router(accounts.router)
    app.include_router(journal.router)
    app.include_router(reports.router)

    return app
