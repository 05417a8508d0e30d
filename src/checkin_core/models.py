"""Record and settings models for check-ins, journal entries and scoring."""
import uuid
from datetime import date, datetime, timezone
from typing import Any, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import RecordValidationError

Slot = Literal["morning", "afternoon", "evening", "night"]
JournalType = Literal["positive", "negative", "gratitude", "free", "reflection"]
EmptyDayPolicy = Literal["include_as_zero", "exclude_from_average"]
Period = Literal["Week", "Month", "Year"]
ActivityType = Literal["breathing", "meditation", "exercise"]

SLOTS: tuple[str, ...] = ("morning", "afternoon", "evening", "night")
SLOTS_PER_DAY = len(SLOTS)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Naive timestamps are taken to be UTC, which is also the calendar-day
    boundary used for "today" everywhere in the core.
    """
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def record_day(timestamp_iso: str) -> date:
    """Calendar day (UTC) a record was created on."""
    return parse_timestamp(timestamp_iso).date()


def parse_iso_date(value: str) -> date:
    """Parse a YYYY-MM-DD string, rejecting anything malformed."""
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise RecordValidationError(f"Malformed ISO date: {value!r}") from e


class CheckInDraft(BaseModel):
    """Check-in answers as submitted, before the remote store assigns an id."""

    slot: Slot
    mood: int = Field(ge=1, le=5)
    stress: int = Field(ge=1, le=5)
    energy: int = Field(ge=1, le=5)
    note: Optional[str] = None


class CheckInRecord(BaseModel):
    """One slot check-in. Immutable once created."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    user_id: Optional[str] = None
    slot: Slot
    mood: int = Field(ge=1, le=5)
    stress: int = Field(ge=1, le=5)
    energy: int = Field(ge=1, le=5)
    note: Optional[str] = None
    timestamp_iso: str = Field(serialization_alias="timestampISO")

    @field_validator("timestamp_iso")
    @classmethod
    def _check_timestamp(cls, value: str) -> str:
        parse_timestamp(value)
        return value

    @property
    def day(self) -> date:
        return record_day(self.timestamp_iso)


class JournalMeta(BaseModel):
    """Structured prompts answered in a reflection entry."""

    event: Optional[str] = None
    thought: Optional[str] = None
    reframe: Optional[str] = None


class JournalEntryDraft(BaseModel):
    """Journal entry as submitted by the user."""

    type: JournalType
    title: str
    content: str
    mood: int = Field(ge=1, le=5)
    tags: list[str] = Field(default_factory=list)
    audio_uri: Optional[str] = None
    meta: Optional[JournalMeta] = None


class JournalEntryUpdate(BaseModel):
    """Partial update to an existing journal entry."""

    type: Optional[JournalType] = None
    title: Optional[str] = None
    content: Optional[str] = None
    mood: Optional[int] = Field(default=None, ge=1, le=5)
    tags: Optional[list[str]] = None
    audio_uri: Optional[str] = None
    meta: Optional[JournalMeta] = None


class JournalEntry(BaseModel):
    """Free-form diary entry."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    user_id: Optional[str] = None
    type: JournalType
    title: str
    content: str
    mood: int = Field(ge=1, le=5)
    tags: list[str] = Field(default_factory=list)
    audio_uri: Optional[str] = Field(default=None, serialization_alias="audioUri")
    timestamp: str
    meta: Optional[JournalMeta] = None

    @field_validator("timestamp")
    @classmethod
    def _check_timestamp(cls, value: str) -> str:
        parse_timestamp(value)
        return value

    @property
    def date(self) -> str:
        return record_day(self.timestamp).isoformat()


class ActivitySessionDraft(BaseModel):
    """A finished (or abandoned) guided activity, before it is stamped."""

    model_config = ConfigDict(populate_by_name=True)

    type: ActivityType
    duration: int = Field(ge=0, description="Length in seconds")
    completed: bool = True
    post_mood: Optional[int] = Field(default=None, ge=1, le=5, serialization_alias="postMood")
    post_stress: Optional[int] = Field(default=None, ge=1, le=5, serialization_alias="postStress")


class ActivitySession(ActivitySessionDraft):
    """Guided activity session. Kept in the local cache only."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: str

    @field_validator("timestamp")
    @classmethod
    def _check_timestamp(cls, value: str) -> str:
        parse_timestamp(value)
        return value

    @property
    def date(self) -> str:
        return record_day(self.timestamp).isoformat()


class ScoringWeights(BaseModel):
    """Per-axis weights for the slot score. Normalized sets sum to 1.0."""

    mood_weight: float = Field(default=0.50, ge=0, serialization_alias="moodWeight")
    energy_weight: float = Field(default=0.30, ge=0, serialization_alias="energyWeight")
    stress_weight: float = Field(default=0.20, ge=0, serialization_alias="stressWeight")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def total(self) -> float:
        return self.mood_weight + self.energy_weight + self.stress_weight


class ScoringSettings(BaseModel):
    """How slot scores are folded into daily and period scores."""

    model_config = ConfigDict(populate_by_name=True)

    weights: ScoringWeights = Field(default_factory=ScoringWeights)
    use_completion_multiplier: bool = Field(
        default=True, serialization_alias="useCompletionMultiplier"
    )
    empty_day_policy: EmptyDayPolicy = Field(
        default="include_as_zero", serialization_alias="emptyDayPolicy"
    )


class Thresholds(BaseModel):
    """Cutoffs for classifying a tough day and a tough streak."""

    model_config = ConfigDict(populate_by_name=True)

    mood_low_cutoff: float = Field(default=2.5, serialization_alias="moodLowCutoff")
    stress_high_cutoff: float = Field(default=3.5, serialization_alias="stressHighCutoff")
    energy_low_cutoff: float = Field(default=2.5, serialization_alias="energyLowCutoff")
    min_slots_per_day: int = Field(default=2, ge=0, serialization_alias="minSlotsPerDay")
    streak_days_required: int = Field(default=3, ge=1, serialization_alias="streakDaysRequired")


class UserSettings(BaseModel):
    """Per-user preferences, persisted as one JSON blob in the local cache."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    user_id: Optional[str] = Field(default=None, serialization_alias="userId")
    notif_morning: Optional[str] = Field(default="07:30", serialization_alias="notifMorning")
    notif_afternoon: Optional[str] = Field(default="12:30", serialization_alias="notifAfternoon")
    notif_evening: Optional[str] = Field(default="18:30", serialization_alias="notifEvening")
    notif_night: Optional[str] = Field(default="21:30", serialization_alias="notifNight")
    thresholds: Thresholds = Field(default_factory=Thresholds)
    scoring: ScoringSettings = Field(default_factory=ScoringSettings)
    last_heavy_card_shown_at: Optional[datetime] = Field(
        default=None, serialization_alias="lastHeavyCardShownAt"
    )
    last_heavy_card_dismissed_at: Optional[datetime] = Field(
        default=None, serialization_alias="lastHeavyCardDismissedAt"
    )

    @field_validator("last_heavy_card_shown_at", "last_heavy_card_dismissed_at")
    @classmethod
    def _as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class DailyAggregate(BaseModel):
    """Derived per-day summary. Averages are None when the day has no records."""

    model_config = ConfigDict(populate_by_name=True)

    date: str
    slots_count: int = Field(default=0, serialization_alias="slotsCount")
    mood_avg: Optional[float] = Field(default=None, serialization_alias="moodAvg")
    stress_avg: Optional[float] = Field(default=None, serialization_alias="stressAvg")
    energy_avg: Optional[float] = Field(default=None, serialization_alias="energyAvg")
    score: int = 0

    @property
    def has_data(self) -> bool:
        return self.slots_count > 0


def row_to_check_in(row: Mapping[str, Any]) -> CheckInRecord:
    """Convert a remote-store row to a CheckInRecord."""
    return CheckInRecord(
        id=str(row["id"]),
        user_id=row.get("user_id") or None,
        slot=row["slot"],
        mood=int(row["mood"]),
        stress=int(row["stress"]),
        energy=int(row["energy"]),
        note=row.get("note") or None,
        timestamp_iso=row["created_at"],
    )


def check_in_to_row(record: CheckInRecord) -> dict:
    """Convert a CheckInRecord to the remote-store row shape."""
    return {
        "id": record.id,
        "user_id": record.user_id,
        "slot": record.slot,
        "mood": record.mood,
        "stress": record.stress,
        "energy": record.energy,
        "note": record.note,
        "created_at": record.timestamp_iso,
    }


def row_to_journal_entry(row: Mapping[str, Any]) -> JournalEntry:
    """Convert a remote-store row to a JournalEntry."""
    return JournalEntry(
        id=str(row["id"]),
        user_id=row.get("user_id") or None,
        type=row["type"],
        title=row.get("title") or "",
        content=row.get("content") or "",
        mood=int(row["mood"]),
        tags=list(row.get("tags") or []),
        audio_uri=row.get("audio_uri") or None,
        timestamp=row["created_at"],
        meta=row.get("meta") or None,
    )


def journal_entry_to_row(entry: JournalEntry) -> dict:
    """Convert a JournalEntry to the remote-store row shape."""
    return {
        "id": entry.id,
        "user_id": entry.user_id,
        "type": entry.type,
        "title": entry.title,
        "content": entry.content,
        "mood": entry.mood,
        "tags": list(entry.tags),
        "audio_uri": entry.audio_uri,
        "created_at": entry.timestamp,
        "meta": entry.meta.model_dump() if entry.meta else None,
    }
