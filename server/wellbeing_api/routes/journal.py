"""Journal API routes."""
from fastapi import APIRouter, Depends, HTTPException, Query, Response

from checkin_core.models import JournalEntry, JournalEntryDraft, JournalEntryUpdate
from checkin_core.record_store import RecordStore

from ..session import get_record_store

router = APIRouter(prefix="/api/journal", tags=["Journal"])


@router.get("", response_model=list[JournalEntry], response_model_by_alias=True)
async def get_journal_entries(
    entry_type: str = Query(default="all", alias="type", description="Entry type filter or 'all'"),
    store: RecordStore = Depends(get_record_store),
):
    """Journal entries, newest first."""
    return store.get_entries_by_type(entry_type)


@router.get("/counts")
async def get_entry_counts(store: RecordStore = Depends(get_record_store)):
    return store.get_entry_counts()


@router.post("", response_model=JournalEntry, response_model_by_alias=True, status_code=201)
async def add_journal_entry(
    draft: JournalEntryDraft,
    store: RecordStore = Depends(get_record_store),
):
    return await store.add_journal_entry(draft)


@router.patch("/{entry_id}", response_model=JournalEntry, response_model_by_alias=True)
async def update_journal_entry(
    entry_id: str,
    updates: JournalEntryUpdate,
    store: RecordStore = Depends(get_record_store),
):
    """Edit an entry; only allowed within 24 hours of creation."""
    entry = store.get_entry_by_id(entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"Journal entry {entry_id} not found")
    if not store.can_edit_entry(entry.timestamp):
        raise HTTPException(status_code=409, detail="Journal entries can only be edited for 24 hours")
    return await store.update_journal_entry(entry_id, updates)


@router.delete("/{entry_id}", status_code=204)
async def delete_journal_entry(
    entry_id: str,
    store: RecordStore = Depends(get_record_store),
):
    await store.delete_journal_entry(entry_id)
    return Response(status_code=204)
