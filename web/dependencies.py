"""
Dependency injection

Dependency management through FastAPI Depends.
One SQLiteAdapter per request, shared by every ledger component.
"""

from typing import AsyncGenerator

from fastapi import Depends, Header, Request

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import AppConfig
from core.ledger.accounts import AccountDirectory
from core.ledger.audit import AuditTrail
from core.ledger.balances import BalanceCalculator
from core.ledger.reports import ReportAggregator
from core.ledger.store import JournalEntryStore


def get_app_config(request: Request) -> AppConfig:
    """Settings the app was created with"""
    return request.app.state.config


async def get_db(
    config: AppConfig = Depends(get_app_config),
) -> AsyncGenerator[SQLiteAdapter, None]:
    """DB connection for one request"""
    async with SQLiteAdapter(config.db_path) as db:
        yield db


def get_actor(x_actor: str | None = Header(default=None)) -> str | None:
    """Acting user from the X-Actor header (audit, unlock)"""
    return x_actor


def get_accounts(db: SQLiteAdapter = Depends(get_db)) -> AccountDirectory:
    return AccountDirectory(db)


def get_journal_store(
    db: SQLiteAdapter = Depends(get_db),
    config: AppConfig = Depends(get_app_config),
) -> JournalEntryStore:
    return JournalEntryStore(db, privileged_actors=config.privileged_actors)


def get_balances(db: SQLiteAdapter = Depends(get_db)) -> BalanceCalculator:
    return BalanceCalculator(db)


def get_reports(db: SQLiteAdapter = Depends(get_db)) -> ReportAggregator:
    return ReportAggregator(db)


def get_audit_trail(db: SQLiteAdapter = Depends(get_db)) -> AuditTrail:
    return AuditTrail(db)
