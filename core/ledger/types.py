"""
Double-entry type definitions

Enums and constants used across the ledger, plus the normal-balance rule.
"""

from decimal import Decimal
from enum import Enum
from typing import TypeVar

# int minor units or Decimal
N = TypeVar("N", int, Decimal)


class AccountType(str, Enum):
    """Account type

    Inherits str so values serialize to JSON directly.
    The type fixes which side increases the balance.
    """

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    INCOME = "income"
    EXPENSE = "expense"

    @property
    def is_debit_normal(self) -> bool:
        """Debit increases the balance (asset, expense)"""
        return self in (AccountType.ASSET, AccountType.EXPENSE)


class AccountRole(str, Enum):
    """Explicit account role used by statements

    Replaces pattern-matching on account codes in every report.
    """

    CASH = "cash"  # asset: counted as cash in the balance sheet and cash flow
    RECEIVABLE = "receivable"  # asset
    PAYABLE = "payable"  # liability


class EntryType(str, Enum):
    """Journal entry type"""

    STANDARD = "standard"
    ADJUSTING = "adjusting"
    CLOSING = "closing"
    REVERSING = "reversing"


class AuditAction(str, Enum):
    """Ledger mutations recorded in the audit trail"""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    LOCK = "lock"
    UNLOCK = "unlock"


class InvoiceStatus(str, Enum):
    """Invoice status (invoices are owned by the invoicing module)"""

    DRAFT = "draft"
    SENT = "sent"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


# Invoices never shown in receivables aging
AGING_EXCLUDED_STATUSES: tuple[str, ...] = (
    InvoiceStatus.PAID.value,
    InvoiceStatus.CANCELLED.value,
)

# Roles allowed per account type
ROLE_ACCOUNT_TYPES: dict[AccountRole, AccountType] = {
    AccountRole.CASH: AccountType.ASSET,
    AccountRole.RECEIVABLE: AccountType.ASSET,
    AccountRole.PAYABLE: AccountType.LIABILITY,
}

# Legacy code-prefix convention, only used to backfill roles once
LEGACY_ROLE_PREFIXES: list[tuple[str, AccountType, AccountRole]] = [
    ("11", AccountType.ASSET, AccountRole.CASH),
    ("12", AccountType.ASSET, AccountRole.RECEIVABLE),
    ("21", AccountType.LIABILITY, AccountRole.PAYABLE),
]

# Tables whose rows point at a journal entry (delete guard)
ENTRY_REFERENCE_TABLES: tuple[str, ...] = ("invoices", "expenses", "payments")


# Default chart of accounts (seeded into a new database)
DEFAULT_ACCOUNTS: list[tuple[str, str, str, str | None]] = [
    # (code, name, type, role)
    ("1000", "Cash", "asset", "cash"),
    ("1100", "Bank Account", "asset", "cash"),
    ("1200", "Accounts Receivable", "asset", "receivable"),
    ("2000", "Accounts Payable", "liability", "payable"),
    ("2100", "Credit Card", "liability", None),
    ("2300", "Sales Tax Payable", "liability", None),
    ("3000", "Owner Equity", "equity", None),
    ("3100", "Retained Earnings", "equity", None),
    ("4000", "Sales Revenue", "income", None),
    ("4100", "Service Revenue", "income", None),
    ("4200", "Other Income", "income", None),
    ("5000", "Cost of Goods Sold", "expense", None),
    ("5100", "Advertising", "expense", None),
    ("5200", "Bank Fees", "expense", None),
    ("5300", "Insurance", "expense", None),
    ("5400", "Office Supplies", "expense", None),
    ("5500", "Professional Services", "expense", None),
    ("5600", "Rent", "expense", None),
    ("5700", "Software & Subscriptions", "expense", None),
    ("5800", "Travel", "expense", None),
    ("5900", "Utilities", "expense", None),
    ("6000", "Meals & Entertainment", "expense", None),
    ("6100", "Other Expenses", "expense", None),
]


def normal_balance(account_type: AccountType | str, debits: N, credits: N) -> N:
    """Balance of an account from its debit and credit totals

    asset/expense: debits - credits (debit normal)
    liability/equity/income: credits - debits (credit normal)

    Every balance in the ledger goes through this function.

    Args:
        account_type: account type
        debits: total debits (minor units or Decimal)
        credits: total credits (same unit as debits)

    Returns:
        Signed balance; positive means the account sits on its normal side
    """
    if AccountType(account_type).is_debit_normal:
        return debits - credits
    return credits - debits


def legacy_role(code: str, account_type: AccountType | str) -> AccountRole | None:
    """Role implied by the legacy code-prefix convention

    Example:
        >>> legacy_role("1150", "asset")
        <AccountRole.CASH: 'cash'>
    """
    account_type = AccountType(account_type)
    for prefix, prefix_type, role in LEGACY_ROLE_PREFIXES:
        if code.startswith(prefix) and account_type == prefix_type:
            return role
    return None
