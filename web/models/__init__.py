"""
Web model package

Pydantic schema definitions
"""

from web.models.requests import (
    AccountCreateRequest,
    JournalEntryCreateRequest,
    JournalEntryUpdateRequest,
    JournalLineRequest,
    ReverseRequest,
)
from web.models.responses import (
    AccountBalanceResponse,
    AccountResponse,
    AuditRecordResponse,
    BalanceSheetResponse,
    CashFlowResponse,
    ExpenseCategoryResponse,
    GeneralLedgerResponse,
    HealthResponse,
    JournalEntryResponse,
    ProfitLossResponse,
    ReceivablesAgingResponse,
    TrialBalanceCheckResponse,
    TrialBalanceRowResponse,
)

__all__ = [
    # Requests
    "AccountCreateRequest",
    "JournalEntryCreateRequest",
    "JournalEntryUpdateRequest",
    "JournalLineRequest",
    "ReverseRequest",
    # Responses
    "AccountBalanceResponse",
    "AccountResponse",
    "AuditRecordResponse",
    "BalanceSheetResponse",
    "CashFlowResponse",
    "ExpenseCategoryResponse",
    "GeneralLedgerResponse",
    "HealthResponse",
    "JournalEntryResponse",
    "ProfitLossResponse",
    "ReceivablesAgingResponse",
    "TrialBalanceCheckResponse",
    "TrialBalanceRowResponse",
]
