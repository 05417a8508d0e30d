"""Derived wellbeing API routes used by the dashboard and home screen."""
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query

from checkin_core.models import DailyAggregate, Period
from checkin_core.record_store import RecordStore
from checkin_core.scoring import period_bounds

from ..models.wellbeing import DailyScore, HeavyCardStatus, PeriodScore, StreakSummary
from ..session import get_record_store

router = APIRouter(prefix="/api/wellbeing", tags=["Wellbeing"])


def _heavy_card_status(store: RecordStore) -> HeavyCardStatus:
    return HeavyCardStatus.model_validate(store.evaluate_heavy_card(), from_attributes=True)


@router.get("/aggregates", response_model=list[DailyAggregate], response_model_by_alias=True)
async def get_daily_aggregates(
    dates: Optional[list[str]] = Query(default=None, description="ISO dates (YYYY-MM-DD)"),
    store: RecordStore = Depends(get_record_store),
):
    """Per-day averages and scores. Defaults to the trailing week."""
    if not dates:
        today = store.today()
        dates = [(today - timedelta(days=offset)).isoformat() for offset in range(6, -1, -1)]
    return store.get_daily_aggregates(dates)


@router.get("/score", response_model=PeriodScore, response_model_by_alias=True)
async def get_period_score(
    period: Period = Query(default="Week"),
    store: RecordStore = Depends(get_record_store),
):
    """Wellbeing score for the week, month or year to date."""
    start, end = period_bounds(period, store.today())
    return PeriodScore(
        period=period,
        start_date=start.isoformat(),
        end_date=end.isoformat(),
        score=store.get_wellbeing_score_for_period(period),
        empty_day_policy=store.get_user_settings().scoring.empty_day_policy,
    )


@router.get("/daily-score", response_model=DailyScore, response_model_by_alias=True)
async def get_daily_score(store: RecordStore = Depends(get_record_store)):
    """Today's score from the check-ins recorded so far."""
    return DailyScore(
        date=store.today().isoformat(),
        score=store.get_daily_score(),
        slots_filled=len(store.get_today_check_ins()),
    )


@router.get("/streak", response_model=StreakSummary)
async def get_streak(store: RecordStore = Depends(get_record_store)):
    return StreakSummary(streak=store.get_streak())


@router.get("/heavy-card", response_model=HeavyCardStatus, response_model_by_alias=True)
async def get_heavy_card(store: RecordStore = Depends(get_record_store)):
    """Whether a run of tough days warrants the supportive card."""
    return _heavy_card_status(store)


@router.post("/heavy-card/shown", response_model=HeavyCardStatus, response_model_by_alias=True)
async def mark_heavy_card_shown(store: RecordStore = Depends(get_record_store)):
    store.mark_heavy_card_shown()
    return _heavy_card_status(store)


@router.post("/heavy-card/dismissed", response_model=HeavyCardStatus, response_model_by_alias=True)
async def mark_heavy_card_dismissed(store: RecordStore = Depends(get_record_store)):
    store.mark_heavy_card_dismissed()
    return _heavy_card_status(store)


@router.get("/status")
async def get_store_status(store: RecordStore = Depends(get_record_store)):
    """Load and sync state of the record store."""
    return store.get_state().to_dict()


@router.post("/sync")
async def sync_records(store: RecordStore = Depends(get_record_store)):
    """Reload from cache and reconcile with the remote store."""
    state = await store.load()
    return state.to_dict()
