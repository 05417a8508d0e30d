"""
Wellbeing Scoring Module.

Turns raw 1-5 check-in answers into 0-100 scores:

- slot score: weighted sum of the normalized mood, energy and stress axes
- daily score: mean slot score, optionally scaled by slot completion
- period score: mean of daily scores under an empty-day policy

Everything here is pure and safe to call repeatedly on the same snapshot.
"""

import logging
import math
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from .errors import RecordValidationError
from .models import (
    SLOTS_PER_DAY,
    CheckInRecord,
    DailyAggregate,
    EmptyDayPolicy,
    ScoringSettings,
    ScoringWeights,
    parse_iso_date,
)

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTS = ScoringWeights(mood_weight=0.50, energy_weight=0.30, stress_weight=0.20)

# Completion streaks never look further back than this
MAX_STREAK_DAYS = 365


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values."""
    return int(math.floor(value + 0.5))


def normalize_slot_value(value: int, is_inverted: bool = False) -> float:
    """
    Map a 1-5 answer onto 0-100.

    Stress is inverted so that a calmer answer scores higher.
    """
    if is_inverted:
        return ((5 - value) / 4) * 100
    return ((value - 1) / 4) * 100


def normalize_weights(weights: ScoringWeights) -> ScoringWeights:
    """Rescale weights to sum to 1.0, or fall back to defaults if they sum to 0."""
    total = weights.total
    if total == 0:
        return DEFAULT_WEIGHTS.model_copy()
    return ScoringWeights(
        mood_weight=weights.mood_weight / total,
        energy_weight=weights.energy_weight / total,
        stress_weight=weights.stress_weight / total,
    )


def compute_slot_score(
    mood: int,
    stress: int,
    energy: int,
    weights: ScoringWeights,
) -> float:
    """Weighted 0-100 score for a single check-in."""
    return (
        normalize_slot_value(mood) * weights.mood_weight
        + normalize_slot_value(energy) * weights.energy_weight
        + normalize_slot_value(stress, is_inverted=True) * weights.stress_weight
    )


def compute_daily_checkin_score(
    day_records: Sequence[CheckInRecord],
    weights: ScoringWeights,
    use_completion_multiplier: bool,
) -> int:
    """
    Score one day's check-ins.

    Args:
        day_records: All records created on the day (duplicates included)
        weights: Axis weights, normalized before use
        use_completion_multiplier: Scale by slots filled out of SLOTS_PER_DAY

    Returns:
        Integer score 0-100, 0 for an empty day
    """
    if not day_records:
        return 0

    weights = normalize_weights(weights)
    slot_scores = [
        compute_slot_score(r.mood, r.stress, r.energy, weights) for r in day_records
    ]
    avg_slot_score = sum(slot_scores) / len(slot_scores)

    # Duplicate slot submissions can push the count past SLOTS_PER_DAY
    multiplier = min(len(day_records) / SLOTS_PER_DAY, 1) if use_completion_multiplier else 1
    return round_half_up(avg_slot_score * multiplier)


def records_on(records: Iterable[CheckInRecord], day: date) -> List[CheckInRecord]:
    """Records whose creation date falls on the given calendar day."""
    return [r for r in records if r.day == day]


def group_by_day(records: Iterable[CheckInRecord]) -> Dict[date, List[CheckInRecord]]:
    """Bucket records by their creation date."""
    grouped: Dict[date, List[CheckInRecord]] = defaultdict(list)
    for record in records:
        grouped[record.day].append(record)
    return grouped


def compute_daily_aggregate(
    records: Iterable[CheckInRecord],
    day: date,
    settings: ScoringSettings,
) -> DailyAggregate:
    """Per-axis averages, slot count and score for one calendar day."""
    return _aggregate_day(day, records_on(records, day), settings)


def _aggregate_day(
    day: date,
    day_records: Sequence[CheckInRecord],
    settings: ScoringSettings,
) -> DailyAggregate:
    if not day_records:
        return DailyAggregate(date=day.isoformat(), slots_count=0, score=0)

    count = len(day_records)
    return DailyAggregate(
        date=day.isoformat(),
        slots_count=count,
        mood_avg=sum(r.mood for r in day_records) / count,
        stress_avg=sum(r.stress for r in day_records) / count,
        energy_avg=sum(r.energy for r in day_records) / count,
        score=compute_daily_checkin_score(
            day_records, settings.weights, settings.use_completion_multiplier
        ),
    )


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day from start to end inclusive."""
    if start > end:
        raise RecordValidationError(f"Range start {start} is after end {end}")
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def daily_aggregates_for_range(
    records: Sequence[CheckInRecord],
    start: date,
    end: date,
    settings: ScoringSettings,
) -> List[DailyAggregate]:
    """One aggregate per day of the inclusive range, oldest first."""
    days = list(iter_days(start, end))
    grouped = group_by_day(records)
    return [_aggregate_day(day, grouped.get(day, []), settings) for day in days]


def daily_scores_for_period(
    records: Sequence[CheckInRecord],
    start: str,
    end: str,
    settings: ScoringSettings,
) -> List[Optional[int]]:
    """
    Daily scores for every day between two ISO dates.

    Days without records are reported as None so the caller's empty-day
    policy can decide how to fold them in.
    """
    aggregates = daily_aggregates_for_range(
        records, parse_iso_date(start), parse_iso_date(end), settings
    )
    return [agg.score if agg.has_data else None for agg in aggregates]


def compute_period_wellbeing_score(
    daily_scores: Sequence[Optional[int]],
    empty_day_policy: EmptyDayPolicy = "include_as_zero",
) -> int:
    """Reduce a sequence of daily scores to one period score."""
    if not daily_scores:
        return 0

    if empty_day_policy == "include_as_zero":
        filled = [0 if s is None else s for s in daily_scores]
        return round_half_up(sum(filled) / len(filled))

    present = [s for s in daily_scores if s is not None]
    if not present:
        return 0
    return round_half_up(sum(present) / len(present))


def period_bounds(period: str, today: date) -> tuple[date, date]:
    """
    Inclusive date range for a reporting period ending today.

    Week is the trailing seven days, Month starts on the first of the
    month and Year on January 1st.
    """
    if period == "Week":
        return today - timedelta(days=6), today
    if period == "Month":
        return today.replace(day=1), today
    if period == "Year":
        return today.replace(month=1, day=1), today
    raise RecordValidationError(f"Unknown period: {period!r}")


def wellbeing_score_for_period(
    records: Sequence[CheckInRecord],
    period: str,
    today: date,
    settings: ScoringSettings,
) -> int:
    """Period score for Week, Month or Year ending today."""
    start, end = period_bounds(period, today)
    daily_scores = daily_scores_for_period(
        records, start.isoformat(), end.isoformat(), settings
    )
    score = compute_period_wellbeing_score(daily_scores, settings.empty_day_policy)
    logger.debug(
        f"[SCORING] {period} {start}..{end}: {score} "
        f"({sum(1 for s in daily_scores if s is not None)}/{len(daily_scores)} days with data)"
    )
    return score


def compute_completion_streak(
    records: Sequence[CheckInRecord],
    today: date,
    max_days: int = MAX_STREAK_DAYS,
) -> int:
    """Consecutive fully checked-in days counting back from today."""
    grouped = group_by_day(records)

    streak = 0
    for offset in range(max_days):
        if len(grouped.get(today - timedelta(days=offset), [])) < SLOTS_PER_DAY:
            break
        streak += 1
    return streak
