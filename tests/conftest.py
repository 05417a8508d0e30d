"""
Pytest fixtures for wellbeing check-in tests.
"""
import sys
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Ensure src/ is on sys.path so tests can import checkin_core.
ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Load environment variables
load_dotenv()

from checkin_core.local_cache import MemoryLocalCache  # noqa: E402
from checkin_core.models import CheckInRecord, SLOTS  # noqa: E402
from checkin_core.record_store import RecordStore  # noqa: E402
from checkin_core.remote_store import InMemoryRemoteRecordStore  # noqa: E402


# Fixed "now" for every time-dependent test: midday UTC
NOW = datetime(2025, 3, 14, 12, 0, tzinfo=timezone.utc)
USER_ID = "user-123"

# Hour of day each slot is recorded at
SLOT_HOURS = {"morning": 8, "afternoon": 13, "evening": 18, "night": 22}


class FixedClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def make_check_in(
    days_ago: int = 0,
    slot: str = "morning",
    mood: int = 3,
    stress: int = 3,
    energy: int = 3,
    note=None,
    now: datetime = NOW,
) -> CheckInRecord:
    """Build a check-in on the calendar day `days_ago` days before now."""
    day = (now - timedelta(days=days_ago)).date()
    created = datetime(day.year, day.month, day.day, SLOT_HOURS[slot], tzinfo=timezone.utc)
    return CheckInRecord(
        id=str(uuid.uuid4()),
        user_id=USER_ID,
        slot=slot,
        mood=mood,
        stress=stress,
        energy=energy,
        note=note,
        timestamp_iso=created.isoformat(),
    )


def make_day(days_ago: int, mood: int, stress: int, energy: int, slots: int = 4) -> list:
    """`slots` identical check-ins on one day."""
    return [
        make_check_in(days_ago, slot, mood=mood, stress=stress, energy=energy)
        for slot in SLOTS[:slots]
    ]


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def cache():
    return MemoryLocalCache()


@pytest.fixture
def remote(clock):
    return InMemoryRemoteRecordStore(clock=clock)


@pytest.fixture
def store(remote, cache, clock):
    """Record store wired to in-memory tiers and the fixed clock."""
    return RecordStore(remote=remote, cache=cache, user_id=USER_ID, clock=clock)
