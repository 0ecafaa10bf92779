"""
Double-entry bookkeeping ledger

Journal entries, account balances and financial statements on SQLite.
Every component takes an explicit SQLiteAdapter.

Example:
```python
from core.ledger import JournalEntryStore, JournalEntryCreate, JournalLineInput

store = JournalEntryStore(db)

entry = await store.create(
    JournalEntryCreate(
        date="2024-01-15",
        description="Office rent",
        lines=[
            JournalLineInput(account_id=rent_id, debit="1500.00"),
            JournalLineInput(account_id=bank_id, credit="1500.00"),
        ],
    ),
    actor="alice",
)

# Balances and statements
balance = await BalanceCalculator(db).account_balance(bank_id)
sheet = await ReportAggregator(db).balance_sheet("2024-01-31")
```
"""

from core.ledger.accounts import AccountDirectory
from core.ledger.audit import AuditRecord, AuditTrail
from core.ledger.balances import (
    AccountActivity,
    BalanceCalculator,
    GeneralLedger,
    LedgerPosting,
    TrialBalanceCheck,
    TrialBalanceRow,
)
from core.ledger.errors import (
    AuthorizationError,
    LedgerError,
    NotFoundError,
    StateError,
    ValidationError,
)
from core.ledger.models import (
    Account,
    AccountRef,
    JournalEntry,
    JournalEntryCreate,
    JournalEntryFilters,
    JournalEntryUpdate,
    JournalLine,
    JournalLineInput,
)
from core.ledger.reports import (
    BalanceSheet,
    CashFlow,
    ExpenseCategory,
    ProfitLoss,
    ReceivablesAging,
    ReportAggregator,
)
from core.ledger.schema import init_ledger_schema
from core.ledger.store import JournalEntryStore
from core.ledger.types import (
    DEFAULT_ACCOUNTS,
    AccountRole,
    AccountType,
    AuditAction,
    EntryType,
    normal_balance,
)

__all__ = [
    # Components
    "AccountDirectory",
    "JournalEntryStore",
    "BalanceCalculator",
    "ReportAggregator",
    "AuditTrail",
    "init_ledger_schema",
    # Models
    "Account",
    "AccountRef",
    "JournalEntry",
    "JournalLine",
    "JournalEntryCreate",
    "JournalEntryUpdate",
    "JournalEntryFilters",
    "JournalLineInput",
    "AuditRecord",
    # Reports
    "AccountActivity",
    "TrialBalanceRow",
    "TrialBalanceCheck",
    "GeneralLedger",
    "LedgerPosting",
    "BalanceSheet",
    "ProfitLoss",
    "CashFlow",
    "ReceivablesAging",
    "ExpenseCategory",
    # Errors
    "LedgerError",
    "ValidationError",
    "StateError",
    "NotFoundError",
    "AuthorizationError",
    # Enum
    "AccountType",
    "AccountRole",
    "EntryType",
    "AuditAction",
    # Constants / rules
    "DEFAULT_ACCOUNTS",
    "normal_balance",
]
