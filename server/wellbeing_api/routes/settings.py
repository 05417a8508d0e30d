"""User settings API routes."""
from fastapi import APIRouter, Depends

from checkin_core.models import UserSettings
from checkin_core.record_store import RecordStore

from ..models.settings import SettingsUpdate
from ..session import get_record_store

router = APIRouter(prefix="/api/settings", tags=["Settings"])


@router.get("", response_model=UserSettings, response_model_by_alias=True)
async def get_user_settings(store: RecordStore = Depends(get_record_store)):
    return store.get_user_settings()


@router.patch("", response_model=UserSettings, response_model_by_alias=True)
async def update_user_settings(
    update: SettingsUpdate,
    store: RecordStore = Depends(get_record_store),
):
    """Apply a partial update. Weights are stored as given and normalized when scoring."""
    return store.update_user_settings(**update.model_dump(exclude_unset=True))
