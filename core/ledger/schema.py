"""
Double-entry schema initialization

Creates the ledger tables and indexes when the web app or scripts start.
CREATE ... IF NOT EXISTS keeps it safe to run on every start.

Money columns hold integer minor units (cents).
Dates are stored as YYYY-MM-DD strings.
"""

import logging
from typing import TYPE_CHECKING

from core.ledger.types import DEFAULT_ACCOUNTS

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


# Columns added after the first schema version: (table, column, definition)
_ADDED_COLUMNS: list[tuple[str, str, str]] = [
    ("accounts", "role", "TEXT"),
    ("journal_entries", "reversal_of", "INTEGER"),
    ("journal_entries", "updated_at", "TEXT"),
    ("journal_lines", "flow_category", "TEXT"),
    ("journal_lines", "line_order", "INTEGER NOT NULL DEFAULT 0"),
]


async def init_ledger_schema(db: "SQLiteAdapter", seed_accounts: bool = True) -> None:
    """Initialize the ledger schema (tables + indexes)

    Called on web/script startup. Existing tables are left alone
    (IF NOT EXISTS); missing newer columns are added.

    Args:
        db: SQLiteAdapter instance
        seed_accounts: insert the default chart of accounts
    """
    await _create_ledger_tables(db)
    await _create_collaborator_tables(db)
    await _add_missing_columns(db)
    await _create_indexes(db)
    await db.commit()

    if seed_accounts:
        await insert_default_accounts(db)

    logger.info("Ledger schema initialized", extra={"db_path": str(db.db_path)})


async def _create_ledger_tables(db: "SQLiteAdapter") -> None:
    """Ledger tables"""

    # accounts
    await db.execute("""
        CREATE TABLE IF NOT EXISTS accounts (
            id           INTEGER PRIMARY KEY AUTOINCREMENT,
            code         TEXT NOT NULL UNIQUE,
            name         TEXT NOT NULL,
            type         TEXT NOT NULL
                         CHECK (type IN ('asset', 'liability', 'equity', 'income', 'expense')),
            role         TEXT
                         CHECK (role IS NULL OR role IN ('cash', 'receivable', 'payable')),
            parent_id    INTEGER REFERENCES accounts(id),
            description  TEXT,
            is_active    INTEGER NOT NULL DEFAULT 1,
            created_at   TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # journal_entries
    await db.execute("""
        CREATE TABLE IF NOT EXISTS journal_entries (
            id           INTEGER PRIMARY KEY AUTOINCREMENT,
            date         TEXT NOT NULL,
            description  TEXT NOT NULL,
            reference    TEXT,
            entry_type   TEXT NOT NULL DEFAULT 'standard'
                         CHECK (entry_type IN ('standard', 'adjusting', 'closing', 'reversing')),
            is_locked    INTEGER NOT NULL DEFAULT 0,
            reversal_of  INTEGER,
            created_at   TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at   TEXT
        )
    """)

    # journal_lines: exactly one side positive
    await db.execute("""
        CREATE TABLE IF NOT EXISTS journal_lines (
            id             INTEGER PRIMARY KEY AUTOINCREMENT,
            entry_id       INTEGER NOT NULL
                           REFERENCES journal_entries(id) ON DELETE CASCADE,
            account_id     INTEGER NOT NULL REFERENCES accounts(id),
            debit          INTEGER NOT NULL DEFAULT 0 CHECK (debit >= 0),
            credit         INTEGER NOT NULL DEFAULT 0 CHECK (credit >= 0),
            description    TEXT,
            flow_category  TEXT,
            line_order     INTEGER NOT NULL DEFAULT 0,
            CHECK ((debit > 0 AND credit = 0) OR (credit > 0 AND debit = 0))
        )
    """)

    # audit_log: append-only
    await db.execute("""
        CREATE TABLE IF NOT EXISTS audit_log (
            id           INTEGER PRIMARY KEY AUTOINCREMENT,
            timestamp    TEXT NOT NULL,
            action       TEXT NOT NULL,
            entity_type  TEXT NOT NULL,
            entity_id    INTEGER,
            old_value    TEXT,
            new_value    TEXT,
            user         TEXT NOT NULL
        )
    """)

    logger.debug("Ledger tables created")


async def _create_collaborator_tables(db: "SQLiteAdapter") -> None:
    """Tables owned by the invoicing/expense/payment modules

    The ledger only reads them (receivables aging, delete guard).
    """

    await db.execute("""
        CREATE TABLE IF NOT EXISTS customers (
            id           INTEGER PRIMARY KEY AUTOINCREMENT,
            name         TEXT NOT NULL,
            email        TEXT,
            created_at   TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    await db.execute("""
        CREATE TABLE IF NOT EXISTS invoices (
            id                INTEGER PRIMARY KEY AUTOINCREMENT,
            number            TEXT NOT NULL UNIQUE,
            customer_id       INTEGER NOT NULL REFERENCES customers(id),
            date              TEXT NOT NULL,
            due_date          TEXT NOT NULL,
            status            TEXT NOT NULL DEFAULT 'draft'
                              CHECK (status IN ('draft', 'sent', 'partial', 'paid', 'overdue', 'cancelled')),
            total             INTEGER NOT NULL DEFAULT 0,
            amount_paid       INTEGER NOT NULL DEFAULT 0,
            journal_entry_id  INTEGER REFERENCES journal_entries(id),
            created_at        TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    await db.execute("""
        CREATE TABLE IF NOT EXISTS expenses (
            id                INTEGER PRIMARY KEY AUTOINCREMENT,
            date              TEXT NOT NULL,
            account_id        INTEGER NOT NULL REFERENCES accounts(id),
            amount            INTEGER NOT NULL,
            description       TEXT,
            journal_entry_id  INTEGER REFERENCES journal_entries(id),
            created_at        TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    await db.execute("""
        CREATE TABLE IF NOT EXISTS payments (
            id                INTEGER PRIMARY KEY AUTOINCREMENT,
            date              TEXT NOT NULL,
            type              TEXT NOT NULL CHECK (type IN ('received', 'sent')),
            amount            INTEGER NOT NULL,
            invoice_id        INTEGER REFERENCES invoices(id),
            journal_entry_id  INTEGER REFERENCES journal_entries(id),
            created_at        TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    logger.debug("Collaborator tables created")


async def _add_missing_columns(db: "SQLiteAdapter") -> None:
    """Add columns missing from databases created by an older schema"""
    for table, column, definition in _ADDED_COLUMNS:
        columns = {info["name"] for info in await db.get_table_info(table)}
        if column in columns:
            continue

        await db.execute(f"ALTER TABLE {table} ADD COLUMN {column} {definition}")
        logger.info(
            "Added missing column",
            extra={"table": table, "column": column},
        )


async def _create_indexes(db: "SQLiteAdapter") -> None:
    """Indexes"""
    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_journal_entries_date
        ON journal_entries(date)
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_journal_lines_entry
        ON journal_lines(entry_id)
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_journal_lines_account
        ON journal_lines(account_id)
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_invoices_status
        ON invoices(status)
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_audit_log_entity
        ON audit_log(entity_type, entity_id)
    """)


async def insert_default_accounts(db: "SQLiteAdapter") -> int:
    """Insert the default chart of accounts

    Accounts whose code already exists are skipped (INSERT OR IGNORE).

    Returns:
        Number of accounts inserted
    """
    inserted = 0
    async with db.transaction():
        for code, name, account_type, role in DEFAULT_ACCOUNTS:
            cursor = await db.execute(
                """
                INSERT OR IGNORE INTO accounts (code, name, type, role)
                VALUES (?, ?, ?, ?)
                """,
                (code, name, account_type, role),
            )
            inserted += cursor.rowcount

    logger.debug("Default accounts inserted", extra={"inserted": inserted})
    return inserted
