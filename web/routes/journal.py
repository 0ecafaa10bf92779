"""
Journal routes

Journal entry CRUD, lock/unlock and reversal API.
Mutations take the acting user from the X-Actor header.
"""

import datetime as dt

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, Response

from core.ledger.audit import AuditRecord, AuditTrail
from core.ledger.models import JournalEntry, JournalEntryFilters
from core.ledger.store import JournalEntryStore
from core.ledger.types import EntryType
from web.dependencies import get_actor, get_audit_trail, get_journal_store
from web.models.requests import (
    JournalEntryCreateRequest,
    JournalEntryUpdateRequest,
    ReverseRequest,
)
from web.models.responses import AuditRecordResponse, JournalEntryResponse

router = APIRouter(prefix="/api/journal", tags=["Journal"])


@router.get("", response_model=list[JournalEntryResponse])
async def list_entries(
    start_date: dt.date | None = Query(default=None, description="From date (inclusive)"),
    end_date: dt.date | None = Query(default=None, description="To date (inclusive)"),
    entry_type: EntryType | None = Query(default=None, description="Entry type"),
    is_locked: bool | None = Query(default=None, description="Lock state"),
    reference: str | None = Query(default=None, description="Reference substring"),
    search: str | None = Query(default=None, description="Description/reference search"),
    account_id: int | None = Query(default=None, description="Entries touching this account"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: JournalEntryStore = Depends(get_journal_store),
) -> list[JournalEntry]:
    """Journal entries, newest first"""
    return await store.list(
        JournalEntryFilters(
            start_date=start_date,
            end_date=end_date,
            entry_type=entry_type,
            is_locked=is_locked,
            reference=reference,
            search=search,
            account_id=account_id,
            limit=limit,
            offset=offset,
        )
    )


@router.post("", response_model=JournalEntryResponse, status_code=201)
async def create_entry(
    request: JournalEntryCreateRequest,
    actor: str | None = Depends(get_actor),
    store: JournalEntryStore = Depends(get_journal_store),
) -> JournalEntry:
    """Create a journal entry

    Rejected with 400 when the entry is invalid or unbalanced.
    """
    return await store.create(request.to_create(), actor=actor)


@router.get("/{entry_id}", response_model=JournalEntryResponse)
async def get_entry(
    entry_id: int = Path(..., description="Entry ID"),
    store: JournalEntryStore = Depends(get_journal_store),
) -> JournalEntry:
    """Journal entry detail"""
    entry = await store.get(entry_id)

    if entry is None:
        raise HTTPException(
            status_code=404,
            detail=f"Journal entry not found: {entry_id}",
        )

    return entry


@router.patch("/{entry_id}", response_model=JournalEntryResponse)
async def update_entry(
    request: JournalEntryUpdateRequest,
    entry_id: int = Path(..., description="Entry ID"),
    actor: str | None = Depends(get_actor),
    store: JournalEntryStore = Depends(get_journal_store),
) -> JournalEntry:
    """Update an unlocked entry (409 when locked)"""
    return await store.update(entry_id, request.to_update(), actor=actor)


@router.delete("/{entry_id}", status_code=204)
async def delete_entry(
    entry_id: int = Path(..., description="Entry ID"),
    actor: str | None = Depends(get_actor),
    store: JournalEntryStore = Depends(get_journal_store),
) -> Response:
    """Delete an unlocked, unreferenced entry (409 otherwise)"""
    await store.delete(entry_id, actor=actor)
    return Response(status_code=204)


@router.post("/{entry_id}/reverse", response_model=JournalEntryResponse, status_code=201)
async def reverse_entry(
    entry_id: int = Path(..., description="Entry ID"),
    request: ReverseRequest | None = Body(default=None),
    actor: str | None = Depends(get_actor),
    store: JournalEntryStore = Depends(get_journal_store),
) -> JournalEntry:
    """Create the reversing entry"""
    options = request or ReverseRequest()
    return await store.reverse(
        entry_id,
        date=options.date,
        description=options.description,
        actor=actor,
    )


@router.post("/{entry_id}/lock", response_model=JournalEntryResponse)
async def lock_entry(
    entry_id: int = Path(..., description="Entry ID"),
    actor: str | None = Depends(get_actor),
    store: JournalEntryStore = Depends(get_journal_store),
) -> JournalEntry:
    """Lock an entry"""
    return await store.lock(entry_id, actor=actor)


@router.post("/{entry_id}/unlock", response_model=JournalEntryResponse)
async def unlock_entry(
    entry_id: int = Path(..., description="Entry ID"),
    actor: str | None = Depends(get_actor),
    store: JournalEntryStore = Depends(get_journal_store),
) -> JournalEntry:
    """Unlock an entry (privileged users only, 403 otherwise)"""
    return await store.unlock(entry_id, actor=actor)


@router.get("/{entry_id}/history", response_model=list[AuditRecordResponse])
async def get_entry_history(
    entry_id: int = Path(..., description="Entry ID"),
    limit: int = Query(default=100, ge=1, le=500),
    audit_trail: AuditTrail = Depends(get_audit_trail),
) -> list[AuditRecord]:
    """Audit trail of an entry, newest first"""
    return await audit_trail.list(entity_id=entry_id, limit=limit)
