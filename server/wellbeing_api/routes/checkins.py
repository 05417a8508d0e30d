"""Check-in API routes."""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from checkin_core.models import CheckInDraft, CheckInRecord
from checkin_core.record_store import RecordStore

from ..session import get_record_store

router = APIRouter(prefix="/api/checkins", tags=["Check-ins"])


@router.get("", response_model=list[CheckInRecord], response_model_by_alias=True)
async def get_check_ins(
    start: Optional[str] = Query(default=None, description="Inclusive start date (YYYY-MM-DD)"),
    end: Optional[str] = Query(default=None, description="Inclusive end date (YYYY-MM-DD)"),
    store: RecordStore = Depends(get_record_store),
):
    """Check-ins in a date range, defaulting to today."""
    if start is None and end is None:
        return store.get_today_check_ins()
    today = store.today().isoformat()
    return store.get_check_ins_by_date_range(start or today, end or today)


@router.get("/today", response_model=list[CheckInRecord], response_model_by_alias=True)
async def get_today_check_ins(store: RecordStore = Depends(get_record_store)):
    return store.get_today_check_ins()


@router.post("", response_model=CheckInRecord, response_model_by_alias=True, status_code=201)
async def add_check_in(
    draft: CheckInDraft,
    store: RecordStore = Depends(get_record_store),
):
    """Save a check-in remotely, then add it to the local collection."""
    return await store.add_check_in(
        draft.slot, draft.mood, draft.stress, draft.energy, note=draft.note
    )
