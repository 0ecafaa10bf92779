"""
Ledger database initialization

Creates the schema, seeds the default chart of accounts and optionally
tags legacy accounts with roles.

Usage:
    python -m scripts.init_db
    python -m scripts.init_db --db data/ledger.db --backfill-roles
"""

import argparse
import asyncio
import logging
from pathlib import Path

# Add the project root to the Python path
import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import get_settings
from core.ledger.accounts import AccountDirectory
from core.ledger.schema import init_ledger_schema

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

REQUIRED_TABLES = ("accounts", "journal_entries", "journal_lines", "audit_log")


async def main(db_path: Path, seed: bool, backfill_roles: bool) -> None:
    """Run the initialization

    Args:
        db_path: DB file path
        seed: insert the default chart of accounts
        backfill_roles: tag untagged accounts using the legacy code prefixes
    """
    logger.info(f"Initializing ledger database: {db_path}")

    async with SQLiteAdapter(db_path) as db:
        await init_ledger_schema(db, seed_accounts=seed)

        if backfill_roles:
            tagged = await AccountDirectory(db).backfill_roles()
            logger.info(f"Roles backfilled: {tagged} account(s)")

        missing = [t for t in REQUIRED_TABLES if not await db.table_exists(t)]
        if missing:
            raise RuntimeError(f"Schema verification failed, missing tables: {missing}")

        accounts = await AccountDirectory(db).list()
        logger.info(f"Initialization complete: {len(accounts)} account(s)")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Ledger database initialization"
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="DB file path (default: database.path from settings.yaml)",
    )
    parser.add_argument(
        "--no-seed",
        action="store_true",
        help="Do not insert the default chart of accounts",
    )
    parser.add_argument(
        "--backfill-roles",
        action="store_true",
        help="Tag accounts without a role using the legacy code prefixes",
    )
    args = parser.parse_args()

    asyncio.run(
        main(
            args.db or get_settings().db_path,
            seed=not args.no_seed,
            backfill_roles=args.backfill_roles,
        )
    )
