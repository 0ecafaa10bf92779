#!/usr/bin/env python3
"""Ledger health check script"""

import asyncio
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import get_settings
from core.ledger.balances import BalanceCalculator
from core.ledger.reports import ReportAggregator
from core.ledger.store import JournalEntryStore
from core.ledger.models import JournalEntryFilters
from core.utils.money import format_amount


async def main(db_path: Path) -> int:
    async with SQLiteAdapter(db_path) as db:
        balances = BalanceCalculator(db)
        check = await balances.verify_trial_balance()
        sheet = await ReportAggregator(db, balances).balance_sheet()
        recent = await JournalEntryStore(db).list(JournalEntryFilters(limit=5))

        print(f"DB Path: {db_path}")
        print(
            f"Trial balance: debits {format_amount(check.total_debits)}, "
            f"credits {format_amount(check.total_credits)} "
            f"-> {'OK' if check.is_balanced else 'OUT OF BALANCE'}"
        )
        print(
            f"Balance sheet ({sheet.date}): assets {format_amount(sheet.assets.total)}, "
            f"liabilities + equity "
            f"{format_amount(sheet.liabilities.total + sheet.equity.total)} "
            f"-> {'OK' if sheet.is_balanced else 'OUT OF BALANCE'}"
        )

        # Most recent entries
        print(f"\nRecent entries ({len(recent)}):")
        for e in recent:
            lock = " [locked]" if e.is_locked else ""
            print(f"  - #{e.id} {e.date} {e.description} {format_amount(e.total_debits)}{lock}")

        return 0 if check.is_balanced and sheet.is_balanced else 1


if __name__ == "__main__":
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else get_settings().db_path
    sys.exit(asyncio.run(main(path)))
