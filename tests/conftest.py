"""
Shared pytest fixtures

Temporary ledger databases and helpers for posting entries.
"""

from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, AsyncGenerator, Awaitable, Callable

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.ledger.accounts import AccountDirectory
from core.ledger.balances import BalanceCalculator
from core.ledger.models import Account, JournalEntry, JournalEntryCreate, JournalLineInput
from core.ledger.reports import ReportAggregator
from core.ledger.schema import init_ledger_schema
from core.ledger.store import JournalEntryStore
from core.ledger.types import EntryType

# Fixed clock for default dates
TODAY = date(2024, 6, 30)

PRIVILEGED_ACTOR = "owner"


@pytest_asyncio.fixture
async def db(tmp_path: Path) -> AsyncGenerator[SQLiteAdapter, None]:
    """Ledger DB with schema and default chart of accounts"""
    adapter = SQLiteAdapter(tmp_path / "ledger.db")
    await adapter.connect()
    await init_ledger_schema(adapter)
    yield adapter
    await adapter.close()


@pytest_asyncio.fixture
async def accounts(db: SQLiteAdapter) -> dict[str, Account]:
    """Seeded accounts keyed by code"""
    return {a.code: a for a in await AccountDirectory(db).list()}


@pytest.fixture
def store(db: SQLiteAdapter) -> JournalEntryStore:
    """Store with a single privileged user and a fixed clock"""
    return JournalEntryStore(
        db,
        privileged_actors={PRIVILEGED_ACTOR},
        today=lambda: TODAY,
    )


@pytest.fixture
def balances(db: SQLiteAdapter) -> BalanceCalculator:
    return BalanceCalculator(db)


@pytest.fixture
def reports(db: SQLiteAdapter) -> ReportAggregator:
    return ReportAggregator(db, today=lambda: TODAY)


@pytest.fixture
def post(
    store: JournalEntryStore,
    accounts: dict[str, Account],
) -> Callable[..., Awaitable[JournalEntry]]:
    """Post an entry from (code, debit, credit[, flow_category]) tuples

    Example:
        await post("2024-01-15", "Rent", ("5600", "1500", 0), ("1100", 0, "1500"))
    """

    async def _post(
        entry_date: str | date,
        description: str,
        *postings: tuple[Any, ...],
        reference: str | None = None,
        entry_type: EntryType = EntryType.STANDARD,
        actor: str | None = None,
    ) -> JournalEntry:
        lines = []
        for posting in postings:
            code, debit, credit = posting[:3]
            flow_category = posting[3] if len(posting) > 3 else None
            lines.append(
                JournalLineInput(
                    account_id=accounts[code].id,
                    debit=Decimal(str(debit)),
                    credit=Decimal(str(credit)),
                    flow_category=flow_category,
                )
            )

        return await store.create(
            JournalEntryCreate(
                date=entry_date,
                description=description,
                reference=reference,
                entry_type=entry_type,
                lines=lines,
            ),
            actor=actor,
        )

    return _post


@pytest.fixture
def add_invoice(db: SQLiteAdapter) -> Callable[..., Awaitable[int]]:
    """Insert an invoice row (invoices are written by the invoicing module)

    Amounts are in minor units.
    """

    async def _add_invoice(
        number: str,
        customer: str,
        total: int,
        due_date: str,
        amount_paid: int = 0,
        status: str = "sent",
        journal_entry_id: int | None = None,
    ) -> int:
        row = await db.fetchone("SELECT id FROM customers WHERE name = ?", (customer,))
        if row is None:
            cursor = await db.execute("INSERT INTO customers (name) VALUES (?)", (customer,))
            customer_id = cursor.lastrowid
        else:
            customer_id = row["id"]

        cursor = await db.execute(
            """
            INSERT INTO invoices (
                number, customer_id, date, due_date, status,
                total, amount_paid, journal_entry_id
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (number, customer_id, due_date, due_date, status, total, amount_paid, journal_entry_id),
        )
        await db.commit()
        return cursor.lastrowid

    return _add_invoice
