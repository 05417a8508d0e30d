"""
Check-In Core Module.

Scores mood/stress/energy check-ins into daily and period wellbeing
scores, detects runs of tough days, and keeps the record collections in
sync between a local cache and the remote record store.
"""

from .errors import (
    AuthorizationError,
    RecordNotFoundError,
    RecordValidationError,
    RemoteUnavailableError,
    WellbeingError,
)
from .local_cache import LocalCache, MemoryLocalCache, SQLiteLocalCache
from .models import (
    ActivitySession,
    ActivitySessionDraft,
    CheckInRecord,
    DailyAggregate,
    JournalEntry,
    JournalEntryDraft,
    JournalEntryUpdate,
    ScoringSettings,
    ScoringWeights,
    Thresholds,
    UserSettings,
)
from .record_store import RecordStore, StoreState, StoreStatus
from .remote_store import HttpRemoteRecordStore, InMemoryRemoteRecordStore, RemoteRecordStore

__all__ = [
    "AuthorizationError",
    "RecordNotFoundError",
    "RecordValidationError",
    "RemoteUnavailableError",
    "WellbeingError",
    "LocalCache",
    "MemoryLocalCache",
    "SQLiteLocalCache",
    "ActivitySession",
    "ActivitySessionDraft",
    "CheckInRecord",
    "DailyAggregate",
    "JournalEntry",
    "JournalEntryDraft",
    "JournalEntryUpdate",
    "ScoringSettings",
    "ScoringWeights",
    "Thresholds",
    "UserSettings",
    "RecordStore",
    "StoreState",
    "StoreStatus",
    "HttpRemoteRecordStore",
    "InMemoryRemoteRecordStore",
    "RemoteRecordStore",
]
