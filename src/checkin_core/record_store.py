"""
Record Store Module.

Owns the in-memory check-in and journal collections and the user's
settings for one session, and is the only entry point consumers use
for derived values.

Lifecycle:
- uninitialized: constructed, nothing loaded
- loading: hydrating from the local cache
- ready: cached data available; after a successful remote fetch the
  collections are replaced by the remote result and re-cached

Reads degrade to cached data when the remote store fails. Writes go to
the remote store first and only touch local state once confirmed.
Activity sessions are the exception: they live in the local cache only.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from .errors import RecordValidationError, WellbeingError
from .local_cache import LocalCache
from .models import (
    SLOTS,
    ActivitySession,
    ActivitySessionDraft,
    CheckInDraft,
    CheckInRecord,
    DailyAggregate,
    JournalEntry,
    JournalEntryDraft,
    JournalEntryUpdate,
    UserSettings,
    parse_iso_date,
    parse_timestamp,
)
from .remote_store import RemoteRecordStore
from .scoring import (
    compute_completion_streak,
    compute_daily_aggregate,
    compute_daily_checkin_score,
    group_by_day,
    wellbeing_score_for_period,
)
from .tough_days import HeavyCardDecision, evaluate_heavy_card
from .user_settings import apply_settings_update, load_user_settings, save_user_settings, settings_key

logger = logging.getLogger(__name__)

# Journal entries stay editable for this long after creation
EDIT_WINDOW = timedelta(hours=24)


class StoreStatus(str, Enum):
    """Loading state of the record collections."""

    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


@dataclass(frozen=True)
class StoreState:
    """Immutable snapshot handed to subscribers and consumers."""

    status: StoreStatus = StoreStatus.UNINITIALIZED
    check_ins: Tuple[CheckInRecord, ...] = ()
    journal_entries: Tuple[JournalEntry, ...] = ()
    activity_sessions: Tuple[ActivitySession, ...] = ()
    user_settings: Optional[UserSettings] = None
    synced: bool = False
    sync_error: Optional[str] = None
    last_synced_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "status": self.status.value,
            "check_ins": len(self.check_ins),
            "journal_entries": len(self.journal_entries),
            "activity_sessions": len(self.activity_sessions),
            "synced": self.synced,
            "sync_error": self.sync_error,
            "last_synced_at": self.last_synced_at.isoformat() if self.last_synced_at else None,
        }


Listener = Callable[[StoreState], None]


def _newest_first(entries: Sequence[JournalEntry]) -> Tuple[JournalEntry, ...]:
    return tuple(sorted(entries, key=lambda e: parse_timestamp(e.timestamp), reverse=True))


class RecordStore:
    """
    Two-tier repository over a synchronous local cache and an async remote store.

    One instance is constructed per session and passed to whoever needs it.
    """

    def __init__(
        self,
        remote: RemoteRecordStore,
        cache: LocalCache,
        user_id: Optional[str],
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the store.

        Args:
            remote: Authoritative remote record store
            cache: Local key/value cache
            user_id: Authenticated user; None means remote calls will be refused
            clock: Returns the current aware UTC time (injectable for tests)
        """
        self.remote = remote
        self.cache = cache
        self.user_id = user_id
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._state = StoreState()
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # Observable store
    # ------------------------------------------------------------------

    def get_state(self) -> StoreState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for state changes. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception as e:
                logger.error(f"[STORE] Listener failed: {e}")

    # ------------------------------------------------------------------
    # Cache tier
    # ------------------------------------------------------------------

    @property
    def _check_ins_key(self) -> str:
        return f"checkIns:{self.user_id or 'local'}"

    @property
    def _journal_key(self) -> str:
        return f"journalEntries:{self.user_id or 'local'}"

    @property
    def _activity_key(self) -> str:
        return f"activitySessions:{self.user_id or 'local'}"

    def _read_cached(self, key: str, model: type) -> list:
        rows = self.cache.get_json(key, default=[])
        if not isinstance(rows, list):
            logger.error(f"[STORE] Ignoring cached {key}: expected a list")
            return []
        items = []
        for row in rows:
            try:
                items.append(model.model_validate(row))
            except ValidationError as e:
                logger.warning(f"[STORE] Skipping invalid cached row in {key}: {e}")
        return items

    def _write_cache(self) -> None:
        self.cache.set_json(
            self._check_ins_key, [r.model_dump(mode="json") for r in self._state.check_ins]
        )
        self.cache.set_json(
            self._journal_key, [e.model_dump(mode="json") for e in self._state.journal_entries]
        )

    def _persist_settings(self, settings: UserSettings) -> None:
        if not save_user_settings(self.cache, settings):
            logger.error("[SETTINGS] Failed to persist user settings")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def hydrate_from_cache(self) -> None:
        """Load cached records and settings; the store becomes provisionally ready."""
        self._set_state(status=StoreStatus.LOADING)

        check_ins = self._read_cached(self._check_ins_key, CheckInRecord)
        entries = self._read_cached(self._journal_key, JournalEntry)
        sessions = self._read_cached(self._activity_key, ActivitySession)
        settings = load_user_settings(self.cache, self.user_id)

        self._set_state(
            status=StoreStatus.READY,
            check_ins=tuple(check_ins),
            journal_entries=_newest_first(entries),
            activity_sessions=tuple(sessions),
            user_settings=settings,
            synced=False,
        )
        logger.info(
            f"[STORE] Hydrated {len(check_ins)} check-ins and "
            f"{len(entries)} journal entries from cache"
        )

    async def load(self) -> StoreState:
        """
        Hydrate from cache, then reconcile with the remote store.

        A successful remote read fully replaces local state. A failed one is
        logged and the cached data stays in place; this never raises.
        """
        self.hydrate_from_cache()

        try:
            check_ins = await self.remote.fetch_check_ins(self.user_id)
            entries = await self.remote.fetch_journal_entries(self.user_id)
        except (WellbeingError, ValidationError) as e:
            logger.error(f"[STORE] Remote load failed, keeping cached data: {e}")
            self._set_state(sync_error=f"{type(e).__name__}: {e}")
            return self._state

        self._set_state(
            check_ins=tuple(check_ins),
            journal_entries=_newest_first(entries),
            synced=True,
            sync_error=None,
            last_synced_at=self._clock(),
        )
        self._write_cache()
        logger.info(
            f"[STORE] Synced {len(check_ins)} check-ins and {len(entries)} journal entries"
        )
        return self._state

    # ------------------------------------------------------------------
    # Writes (confirm, then apply)
    # ------------------------------------------------------------------

    async def add_check_in(
        self,
        slot: str,
        mood: int,
        stress: int,
        energy: int,
        note: Optional[str] = None,
    ) -> CheckInRecord:
        """
        Record a check-in.

        Input is validated before the remote call. On remote failure the
        error propagates and the local collection is unchanged.
        """
        try:
            draft = CheckInDraft(slot=slot, mood=mood, stress=stress, energy=energy, note=note)
        except ValidationError as e:
            raise RecordValidationError(f"Invalid check-in: {e}") from e

        try:
            record = await self.remote.create_check_in(
                self.user_id, draft.slot, draft.mood, draft.stress, draft.energy, draft.note
            )
        except Exception as e:
            logger.error(f"[STORE] Failed to save check-in: {e}")
            raise

        self._set_state(check_ins=self._state.check_ins + (record,))
        self._write_cache()
        logger.info(f"[STORE] Added {record.slot} check-in {record.id}")
        return record

    async def add_journal_entry(self, draft: JournalEntryDraft) -> JournalEntry:
        try:
            entry = await self.remote.create_journal_entry(self.user_id, draft)
        except Exception as e:
            logger.error(f"[STORE] Failed to save journal entry: {e}")
            raise

        self._set_state(journal_entries=_newest_first(self._state.journal_entries + (entry,)))
        self._write_cache()
        return entry

    async def update_journal_entry(
        self, entry_id: str, updates: JournalEntryUpdate
    ) -> JournalEntry:
        try:
            updated = await self.remote.update_journal_entry(self.user_id, entry_id, updates)
        except Exception as e:
            logger.error(f"[STORE] Failed to update journal entry {entry_id}: {e}")
            raise

        entries = [updated if e.id == entry_id else e for e in self._state.journal_entries]
        self._set_state(journal_entries=_newest_first(entries))
        self._write_cache()
        return updated

    async def delete_journal_entry(self, entry_id: str) -> None:
        try:
            await self.remote.delete_journal_entry(self.user_id, entry_id)
        except Exception as e:
            logger.error(f"[STORE] Failed to delete journal entry {entry_id}: {e}")
            raise

        self._set_state(
            journal_entries=tuple(e for e in self._state.journal_entries if e.id != entry_id)
        )
        self._write_cache()

    # ------------------------------------------------------------------
    # Activity sessions (local cache only)
    # ------------------------------------------------------------------

    def add_activity_session(self, draft: ActivitySessionDraft) -> ActivitySession:
        """
        Stamp and keep a finished activity session.

        Sessions never reach the remote store. A failed cache write is
        logged and the session stays in memory for this session.
        """
        session = ActivitySession(
            **draft.model_dump(), timestamp=self._clock().isoformat()
        )
        sessions = self._state.activity_sessions + (session,)
        self._set_state(activity_sessions=sessions)

        if not self.cache.set_json(
            self._activity_key, [s.model_dump(mode="json") for s in sessions]
        ):
            logger.error(f"[STORE] Failed to cache activity session {session.id}")
        logger.info(f"[STORE] Added {session.type} session ({session.duration}s)")
        return session

    def load_activity_sessions(self) -> List[ActivitySession]:
        """Re-read activity sessions from the local cache."""
        sessions = self._read_cached(self._activity_key, ActivitySession)
        self._set_state(activity_sessions=tuple(sessions))
        return sessions

    def get_activity_sessions(self, day: Optional[str] = None) -> List[ActivitySession]:
        """All sessions, or only those on the given ISO date."""
        if day is None:
            return list(self._state.activity_sessions)
        wanted = parse_iso_date(day).isoformat()
        return [s for s in self._state.activity_sessions if s.date == wanted]

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def _settings(self) -> UserSettings:
        if self._state.user_settings is None:
            self._set_state(user_settings=load_user_settings(self.cache, self.user_id))
        return self._state.user_settings

    def get_user_settings(self) -> UserSettings:
        """Current settings, loading or creating them if not yet in memory."""
        return self._settings()

    def update_user_settings(self, **updates: Any) -> UserSettings:
        """Apply a validated partial update and persist it."""
        settings = apply_settings_update(self._settings(), updates)
        self._set_state(user_settings=settings)
        self._persist_settings(settings)
        return settings

    def mark_heavy_card_shown(self) -> UserSettings:
        return self.update_user_settings(last_heavy_card_shown_at=self._clock())

    def mark_heavy_card_dismissed(self) -> UserSettings:
        return self.update_user_settings(last_heavy_card_dismissed_at=self._clock())

    def clear_all_data(self) -> None:
        """Forget every record and the settings blob, locally only."""
        self.cache.remove(
            self._check_ins_key,
            self._journal_key,
            self._activity_key,
            settings_key(self.user_id),
        )
        self._set_state(
            check_ins=(),
            journal_entries=(),
            activity_sessions=(),
            user_settings=None,
            synced=False,
            sync_error=None,
            last_synced_at=None,
        )
        logger.info("[STORE] Cleared all local data")

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def today(self) -> date:
        return self._clock().astimezone(timezone.utc).date()

    def get_today_check_ins(self) -> List[CheckInRecord]:
        today = self.today()
        return [r for r in self._state.check_ins if r.day == today]

    def get_check_in_by_slot(self, slot: str) -> Optional[CheckInRecord]:
        """Today's first check-in for a slot, if any."""
        if slot not in SLOTS:
            return None
        for record in self.get_today_check_ins():
            if record.slot == slot:
                return record
        return None

    def get_check_ins_by_date_range(self, start: str, end: str) -> List[CheckInRecord]:
        start_day, end_day = parse_iso_date(start), parse_iso_date(end)
        return [r for r in self._state.check_ins if start_day <= r.day <= end_day]

    def get_daily_aggregates(self, dates: Sequence[str]) -> List[DailyAggregate]:
        """One aggregate per requested ISO date, in the order given."""
        settings = self._settings()
        days = [parse_iso_date(d) for d in dates]
        grouped = group_by_day(self._state.check_ins)
        return [compute_daily_aggregate(grouped.get(day, []), day, settings.scoring) for day in days]

    def get_daily_score(self) -> int:
        scoring = self._settings().scoring
        return compute_daily_checkin_score(
            self.get_today_check_ins(), scoring.weights, scoring.use_completion_multiplier
        )

    def get_wellbeing_score_for_period(self, period: str) -> int:
        return wellbeing_score_for_period(
            self._state.check_ins, period, self.today(), self._settings().scoring
        )

    def get_streak(self) -> int:
        return compute_completion_streak(self._state.check_ins, self.today())

    def evaluate_heavy_card(self) -> HeavyCardDecision:
        return evaluate_heavy_card(self._state.check_ins, self._settings(), self._clock())

    def should_show_heavy_card(self) -> bool:
        return self.evaluate_heavy_card().show

    # Journal helpers

    def get_entries_by_type(self, entry_type: str) -> List[JournalEntry]:
        if entry_type == "all":
            return list(self._state.journal_entries)
        return [e for e in self._state.journal_entries if e.type == entry_type]

    def get_entry_by_id(self, entry_id: str) -> Optional[JournalEntry]:
        for entry in self._state.journal_entries:
            if entry.id == entry_id:
                return entry
        return None

    def can_edit_entry(self, timestamp: str) -> bool:
        return self._clock() - parse_timestamp(timestamp) < EDIT_WINDOW

    def get_entry_counts(self) -> Dict[str, int]:
        entries = self._state.journal_entries
        counts = {"all": len(entries)}
        for entry_type in ("positive", "negative", "gratitude", "reflection"):
            counts[entry_type] = sum(1 for e in entries if e.type == entry_type)
        return counts
