"""
Report routes

Trial balance, general ledger and financial statements (read only)
"""

import datetime as dt
from dataclasses import asdict

from fastapi import APIRouter, Depends, Path, Query

from core.ledger.balances import BalanceCalculator
from core.ledger.reports import ReportAggregator
from web.dependencies import get_balances, get_reports
from web.models.responses import (
    BalanceSheetResponse,
    CashFlowResponse,
    ExpenseCategoryResponse,
    GeneralLedgerResponse,
    ProfitLossResponse,
    ReceivablesAgingResponse,
    TrialBalanceCheckResponse,
    TrialBalanceRowResponse,
)

router = APIRouter(prefix="/api/reports", tags=["Reports"])


@router.get("/trial-balance", response_model=list[TrialBalanceRowResponse])
async def get_trial_balance(
    as_of: dt.date | None = Query(default=None, description="As-of date"),
    balances: BalanceCalculator = Depends(get_balances),
):
    """Trial balance"""
    return await balances.trial_balance(as_of)


@router.get("/trial-balance/verify", response_model=TrialBalanceCheckResponse)
async def verify_trial_balance(
    as_of: dt.date | None = Query(default=None, description="As-of date"),
    balances: BalanceCalculator = Depends(get_balances),
):
    """Trial balance column check"""
    return await balances.verify_trial_balance(as_of)


@router.get("/general-ledger/{account_id}", response_model=GeneralLedgerResponse)
async def get_general_ledger(
    account_id: int = Path(..., description="Account ID"),
    start_date: dt.date | None = Query(default=None),
    end_date: dt.date | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=1000),
    include_opening_balance: bool = Query(
        default=False, description="Start the running balance from the prior balance"
    ),
    balances: BalanceCalculator = Depends(get_balances),
) -> GeneralLedgerResponse:
    """Posting history of an account with running balance"""
    ledger = await balances.general_ledger(
        account_id,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        include_opening_balance=include_opening_balance,
    )
    return GeneralLedgerResponse.model_validate(
        {**asdict(ledger), "closing_balance": ledger.closing_balance}
    )


@router.get("/balance-sheet", response_model=BalanceSheetResponse)
async def get_balance_sheet(
    as_of: dt.date | None = Query(default=None, description="As-of date (default: today)"),
    reports: ReportAggregator = Depends(get_reports),
):
    """Balance sheet"""
    return await reports.balance_sheet(as_of)


@router.get("/profit-loss", response_model=ProfitLossResponse)
async def get_profit_loss(
    from_date: dt.date = Query(..., description="From date (inclusive)"),
    to_date: dt.date = Query(..., description="To date (inclusive)"),
    reports: ReportAggregator = Depends(get_reports),
):
    """Profit & loss"""
    return await reports.profit_loss(from_date, to_date)


@router.get("/cash-flow", response_model=CashFlowResponse)
async def get_cash_flow(
    from_date: dt.date = Query(..., description="From date (inclusive)"),
    to_date: dt.date = Query(..., description="To date (inclusive)"),
    reports: ReportAggregator = Depends(get_reports),
):
    """Cash flow"""
    return await reports.cash_flow(from_date, to_date)


@router.get("/receivables-aging", response_model=ReceivablesAgingResponse)
async def get_receivables_aging(
    as_of: dt.date | None = Query(default=None, description="As-of date (default: today)"),
    reports: ReportAggregator = Depends(get_reports),
):
    """Receivables aging"""
    return await reports.receivables_aging(as_of)


@router.get("/expenses-by-category", response_model=list[ExpenseCategoryResponse])
async def get_expenses_by_category(
    from_date: dt.date = Query(..., description="From date (inclusive)"),
    to_date: dt.date = Query(..., description="To date (inclusive)"),
    reports: ReportAggregator = Depends(get_reports),
):
    """Expenses by category"""
    return await reports.expenses_by_category(from_date, to_date)
