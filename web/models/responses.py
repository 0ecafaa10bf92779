"""
Response schemas (Pydantic)

Money fields are Decimal and serialize as decimal strings ("1500.00").
"""

import datetime as dt
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from core.ledger.types import AccountRole, AccountType, AuditAction, EntryType


class HealthResponse(BaseModel):
    """Health check"""

    status: str = Field(default="ok", description="Service status")
    version: str = Field(..., description="API version")
    database: str = Field(..., description="Database status")


# =========================================================================
# Accounts
# =========================================================================


class AccountResponse(BaseModel):
    """Account"""

    id: int
    code: str
    name: str
    type: AccountType
    role: AccountRole | None = None
    parent_id: int | None = None
    description: str | None = None
    is_active: bool
    created_at: str | None = None


class AccountBalanceResponse(BaseModel):
    """Account balance"""

    account_id: int
    as_of: dt.date | None = Field(default=None, description="Balance date (None: all history)")
    balance: Decimal = Field(..., description="Normal-balance amount")


# =========================================================================
# Journal
# =========================================================================


class AccountRefResponse(BaseModel):
    id: int
    code: str
    name: str
    type: AccountType


class JournalLineResponse(BaseModel):
    """Journal line"""

    id: int
    entry_id: int
    account_id: int
    debit: Decimal
    credit: Decimal
    description: str | None = None
    flow_category: str | None = None
    account: AccountRefResponse | None = None


class JournalEntryResponse(BaseModel):
    """Journal entry with lines"""

    id: int
    date: dt.date
    description: str
    reference: str | None = None
    entry_type: EntryType
    is_locked: bool
    created_at: str
    updated_at: str | None = None
    reversal_of: int | None = Field(default=None, description="ID of the reversed entry")
    lines: list[JournalLineResponse] = Field(default_factory=list)
    total_debits: Decimal
    total_credits: Decimal


class AuditRecordResponse(BaseModel):
    """Audit trail row"""

    id: int
    timestamp: str
    action: AuditAction
    entity_type: str
    entity_id: int | None = None
    old_value: dict[str, Any] | None = None
    new_value: dict[str, Any] | None = None
    user: str


# =========================================================================
# Balances
# =========================================================================


class TrialBalanceRowResponse(BaseModel):
    account_id: int
    code: str
    name: str
    type: AccountType
    debit: Decimal
    credit: Decimal


class TrialBalanceCheckResponse(BaseModel):
    total_debits: Decimal
    total_credits: Decimal
    difference: Decimal = Field(..., description="total_debits - total_credits")
    is_balanced: bool


class LedgerPostingResponse(BaseModel):
    entry_id: int
    line_id: int
    date: dt.date
    description: str
    reference: str | None = None
    debit: Decimal
    credit: Decimal
    balance: Decimal = Field(..., description="Running balance")


class GeneralLedgerResponse(BaseModel):
    """Posting history of one account"""

    account: AccountResponse
    opening_balance: Decimal
    closing_balance: Decimal
    postings: list[LedgerPostingResponse] = Field(default_factory=list)


# =========================================================================
# Statements
# =========================================================================


class ReportItemResponse(BaseModel):
    code: str
    name: str
    amount: Decimal


class AssetSectionResponse(BaseModel):
    cash: Decimal
    receivables: Decimal
    other: Decimal
    total: Decimal
    items: list[ReportItemResponse]


class LiabilitySectionResponse(BaseModel):
    payables: Decimal
    other: Decimal
    total: Decimal
    items: list[ReportItemResponse]


class EquitySectionResponse(BaseModel):
    retained_earnings: Decimal
    other: Decimal
    total: Decimal
    items: list[ReportItemResponse]


class BalanceSheetResponse(BaseModel):
    """Balance sheet"""

    date: dt.date
    assets: AssetSectionResponse
    liabilities: LiabilitySectionResponse
    equity: EquitySectionResponse
    is_balanced: bool


class StatementSectionResponse(BaseModel):
    items: list[ReportItemResponse]
    total: Decimal


class ProfitLossResponse(BaseModel):
    """Profit & loss"""

    from_date: dt.date
    to_date: dt.date
    revenue: StatementSectionResponse
    expenses: StatementSectionResponse
    net_income: Decimal


class CashFlowItemResponse(BaseModel):
    description: str
    amount: Decimal


class CashFlowSectionResponse(BaseModel):
    items: list[CashFlowItemResponse]
    total: Decimal


class CashFlowResponse(BaseModel):
    """Cash flow"""

    from_date: dt.date
    to_date: dt.date
    opening_balance: Decimal
    inflows: CashFlowSectionResponse
    outflows: CashFlowSectionResponse
    net_change: Decimal
    closing_balance: Decimal


class AgingItemResponse(BaseModel):
    customer: str
    invoice: str
    amount: Decimal
    due_date: dt.date
    days_overdue: int


class AgingTotalsResponse(BaseModel):
    current: Decimal
    days_1_30: Decimal
    days_31_60: Decimal
    days_61_90: Decimal
    days_90_plus: Decimal
    total: Decimal


class ReceivablesAgingResponse(BaseModel):
    """Receivables aging"""

    as_of: dt.date
    current: list[AgingItemResponse]
    days_1_30: list[AgingItemResponse]
    days_31_60: list[AgingItemResponse]
    days_61_90: list[AgingItemResponse]
    days_90_plus: list[AgingItemResponse]
    totals: AgingTotalsResponse


class ExpenseCategoryResponse(BaseModel):
    category: str
    amount: Decimal
    percentage: int = Field(..., description="Share of period total (whole percent)")
