"""Guided activity session routes (breathing, meditation, exercise)."""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from checkin_core.models import ActivitySession, ActivitySessionDraft
from checkin_core.record_store import RecordStore

from ..session import get_record_store

router = APIRouter(prefix="/api/activities", tags=["Activities"])


@router.get("", response_model=list[ActivitySession], response_model_by_alias=True)
async def get_activity_sessions(
    date: Optional[str] = Query(default=None, description="Only sessions on this date (YYYY-MM-DD)"),
    store: RecordStore = Depends(get_record_store),
):
    """Activity sessions recorded on this device."""
    return store.get_activity_sessions(date)


@router.post("", response_model=ActivitySession, response_model_by_alias=True, status_code=201)
async def add_activity_session(
    draft: ActivitySessionDraft,
    store: RecordStore = Depends(get_record_store),
):
    return store.add_activity_session(draft)
