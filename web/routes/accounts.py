"""
Accounts routes

Chart-of-accounts lookup and maintenance API
"""

import datetime as dt

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from core.ledger.accounts import AccountDirectory
from core.ledger.balances import BalanceCalculator
from core.ledger.models import Account
from core.ledger.types import AccountRole, AccountType
from web.dependencies import get_accounts, get_balances
from web.models.requests import AccountCreateRequest
from web.models.responses import AccountBalanceResponse, AccountResponse

router = APIRouter(prefix="/api/accounts", tags=["Accounts"])


@router.get("", response_model=list[AccountResponse])
async def list_accounts(
    type: AccountType | None = Query(default=None, description="Account type"),
    is_active: bool | None = Query(default=None, description="Active flag"),
    role: AccountRole | None = Query(default=None, description="Statement role"),
    search: str | None = Query(default=None, description="Code or name substring"),
    accounts: AccountDirectory = Depends(get_accounts),
) -> list[Account]:
    """Account list (ordered by code)"""
    return await accounts.list(
        account_type=type,
        is_active=is_active,
        role=role,
        search=search,
    )


@router.post("", response_model=AccountResponse, status_code=201)
async def create_account(
    request: AccountCreateRequest,
    accounts: AccountDirectory = Depends(get_accounts),
) -> Account:
    """Create an account"""
    return await accounts.create(
        code=request.code,
        name=request.name,
        account_type=request.type,
        role=request.role,
        parent_id=request.parent_id,
        description=request.description,
    )


@router.get("/{account_id}", response_model=AccountResponse)
async def get_account(
    account_id: int = Path(..., description="Account ID"),
    accounts: AccountDirectory = Depends(get_accounts),
) -> Account:
    """Account detail"""
    account = await accounts.get(account_id)

    if account is None:
        raise HTTPException(
            status_code=404,
            detail=f"Account not found: {account_id}",
        )

    return account


@router.get("/{account_id}/balance", response_model=AccountBalanceResponse)
async def get_account_balance(
    account_id: int = Path(..., description="Account ID"),
    as_of: dt.date | None = Query(default=None, description="Balance date"),
    balances: BalanceCalculator = Depends(get_balances),
) -> AccountBalanceResponse:
    """Normal-balance amount of an account"""
    balance = await balances.account_balance(account_id, as_of)
    return AccountBalanceResponse(account_id=account_id, as_of=as_of, balance=balance)


@router.post("/{account_id}/activate", response_model=AccountResponse)
async def activate_account(
    account_id: int = Path(..., description="Account ID"),
    accounts: AccountDirectory = Depends(get_accounts),
) -> Account:
    """Reactivate an account"""
    return await accounts.set_active(account_id, True)


@router.post("/{account_id}/deactivate", response_model=AccountResponse)
async def deactivate_account(
    account_id: int = Path(..., description="Account ID"),
    accounts: AccountDirectory = Depends(get_accounts),
) -> Account:
    """Deactivate an account (new postings are rejected)"""
    return await accounts.set_active(account_id, False)
