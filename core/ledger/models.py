"""
Ledger data structures

Plain dataclasses passed across the ledger boundary. Money is Decimal (two
places) here; storage keeps integer minor units.
"""

import datetime as dt
from dataclasses import dataclass, field
from decimal import Decimal

from core.ledger.types import AccountRole, AccountType, EntryType


@dataclass
class Account:
    """Chart-of-accounts row"""

    id: int
    code: str
    name: str
    type: AccountType
    role: AccountRole | None = None
    parent_id: int | None = None
    description: str | None = None
    is_active: bool = True
    created_at: str | None = None


@dataclass
class AccountRef:
    """Account snapshot joined onto a journal line"""

    id: int
    code: str
    name: str
    type: AccountType


@dataclass
class JournalLine:
    """Persisted journal line"""

    id: int
    entry_id: int
    account_id: int
    debit: Decimal
    credit: Decimal
    description: str | None = None
    flow_category: str | None = None
    account: AccountRef | None = None


@dataclass
class JournalEntry:
    """Persisted journal entry with its lines

    total_debits == total_credits for every entry read from storage.
    """

    id: int
    date: dt.date
    description: str
    reference: str | None
    entry_type: EntryType
    is_locked: bool
    created_at: str
    lines: list[JournalLine] = field(default_factory=list)
    total_debits: Decimal = Decimal("0.00")
    total_credits: Decimal = Decimal("0.00")
    updated_at: str | None = None
    reversal_of: int | None = None


# -------------------------------------------------------------------------
# Inputs
# -------------------------------------------------------------------------


@dataclass
class JournalLineInput:
    """Line of a new or replaced entry

    Exactly one of debit/credit must be positive. flow_category optionally
    labels a cash posting for the cash flow statement.
    """

    account_id: int | None
    debit: Decimal | int | float | str = Decimal("0")
    credit: Decimal | int | float | str = Decimal("0")
    description: str | None = None
    flow_category: str | None = None


@dataclass
class JournalEntryCreate:
    """Data for a new entry"""

    date: dt.date | str | None
    description: str | None
    lines: list[JournalLineInput] = field(default_factory=list)
    reference: str | None = None
    entry_type: EntryType | str = EntryType.STANDARD
    reversal_of: int | None = None


@dataclass
class JournalEntryUpdate:
    """Partial update; None means "keep the current value"

    Lines, when given, replace the whole line set.
    """

    date: dt.date | str | None = None
    description: str | None = None
    reference: str | None = None
    lines: list[JournalLineInput] | None = None


@dataclass
class JournalEntryFilters:
    """list() filters (all optional, combined with AND)"""

    start_date: dt.date | str | None = None
    end_date: dt.date | str | None = None
    entry_type: EntryType | str | None = None
    is_locked: bool | None = None
    reference: str | None = None
    search: str | None = None
    account_id: int | None = None
    limit: int | None = None
    offset: int = 0


@dataclass
class NormalizedLine:
    """Validated line in minor units, ready to insert"""

    account_id: int
    debit: int
    credit: int
    description: str | None = None
    flow_category: str | None = None


@dataclass
class NormalizedEntry:
    """Validated entry, ready to insert"""

    date: dt.date
    description: str
    reference: str | None
    entry_type: EntryType
    lines: list[NormalizedLine]
    reversal_of: int | None = None
