"""Construction of the per-session record store and its FastAPI dependency."""
import logging
from typing import Optional

from fastapi import Request

from checkin_core.local_cache import SQLiteLocalCache
from checkin_core.record_store import RecordStore
from checkin_core.remote_store import (
    HttpRemoteRecordStore,
    InMemoryRemoteRecordStore,
    RemoteRecordStore,
)

from .config import Settings, get_settings

log = logging.getLogger(__name__)


def build_remote(settings: Settings) -> RemoteRecordStore:
    if settings.use_memory_remote:
        log.info("[API] Using in-memory remote record store")
        return InMemoryRemoteRecordStore()
    return HttpRemoteRecordStore(
        settings.remote_base_url,
        access_token=settings.access_token,
        timeout=settings.remote_timeout,
    )


def build_record_store(settings: Optional[Settings] = None) -> RecordStore:
    """Wire the cache and remote tiers into one record store for this session."""
    settings = settings or get_settings()
    return RecordStore(
        remote=build_remote(settings),
        cache=SQLiteLocalCache(settings.cache_path),
        user_id=settings.user_id,
    )


def get_record_store(request: Request) -> RecordStore:
    """FastAPI dependency returning the store created at startup."""
    return request.app.state.record_store
