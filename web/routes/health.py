"""
Health check endpoint

GET /health - server and database status
"""

import logging
import sqlite3

from fastapi import APIRouter, Depends

from adapters.db.sqlite_adapter import SQLiteAdapter
from web.dependencies import get_db
from web.models.responses import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(db: SQLiteAdapter = Depends(get_db)) -> HealthResponse:
    """Server status

    Returns:
        HealthResponse: status, version and database state
    """
    from web.app import API_VERSION

    try:
        await db.fetchone("SELECT 1")
        database = "ok"
    except sqlite3.Error as e:
        logger.error(f"Health check DB query failed: {e}")
        database = "error"

    return HealthResponse(
        status="ok" if database == "ok" else "degraded",
        version=API_VERSION,
        database=database,
    )
