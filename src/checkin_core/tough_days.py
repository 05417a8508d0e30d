"""
Tough Day Detection Module.

Classifies days as "tough" from their averaged check-ins and decides when
the supportive heavy card should be offered. The card fires after a
trailing run of tough days and then stays quiet for a cool-down week,
whether the user dismissed it or merely saw it.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from .models import CheckInRecord, DailyAggregate, Thresholds, UserSettings
from .scoring import daily_aggregates_for_range

logger = logging.getLogger(__name__)

# Days examined when looking for a trailing streak, today included
WINDOW_DAYS = 7

HEAVY_CARD_COOLDOWN = timedelta(days=7)


@dataclass
class HeavyCardDecision:
    """Outcome of a heavy card check."""

    show: bool
    streak: int
    required: int
    in_cooldown: bool
    window: List[DailyAggregate] = field(default_factory=list)
    cooldown_until: Optional[datetime] = None


def is_tough_day(aggregate: DailyAggregate, thresholds: Thresholds) -> bool:
    """
    All four conditions must hold: low mood, high stress, low energy and
    enough check-ins. Days without data are never tough.
    """
    if not aggregate.has_data:
        return False
    return (
        aggregate.mood_avg <= thresholds.mood_low_cutoff
        and aggregate.stress_avg >= thresholds.stress_high_cutoff
        and aggregate.energy_avg <= thresholds.energy_low_cutoff
        and aggregate.slots_count >= thresholds.min_slots_per_day
    )


def trailing_tough_streak(
    aggregates: Sequence[DailyAggregate],
    thresholds: Thresholds,
) -> int:
    """
    Length of the tough run ending at the most recent day.

    Args:
        aggregates: Daily aggregates ordered oldest to newest

    Returns:
        Number of consecutive tough days counted back from the newest
        aggregate; 0 if the newest day is not tough
    """
    streak = 0
    for aggregate in reversed(aggregates):
        if not is_tough_day(aggregate, thresholds):
            break
        streak += 1
    return streak


def recent_window(
    records: Sequence[CheckInRecord],
    settings: UserSettings,
    now: datetime,
    window_days: int = WINDOW_DAYS,
) -> List[DailyAggregate]:
    """Daily aggregates for the last window_days days ending today."""
    today = now.date()
    return daily_aggregates_for_range(
        records, today - timedelta(days=window_days - 1), today, settings.scoring
    )


def cooldown_until(settings: UserSettings) -> Optional[datetime]:
    """When the most recent show/dismiss stops suppressing the card."""
    stamps = [
        ts
        for ts in (settings.last_heavy_card_shown_at, settings.last_heavy_card_dismissed_at)
        if ts is not None
    ]
    if not stamps:
        return None
    return max(stamps) + HEAVY_CARD_COOLDOWN


def evaluate_heavy_card(
    records: Sequence[CheckInRecord],
    settings: UserSettings,
    now: datetime,
) -> HeavyCardDecision:
    """Check streak and cool-down and report whether the card should show."""
    window = recent_window(records, settings, now)
    thresholds = settings.thresholds
    streak = trailing_tough_streak(window, thresholds)

    until = cooldown_until(settings)
    in_cooldown = until is not None and until > now

    show = streak >= thresholds.streak_days_required and not in_cooldown

    if streak >= thresholds.streak_days_required:
        logger.info(
            f"[TOUGH DAYS] {streak} consecutive tough days "
            f"(required {thresholds.streak_days_required}), "
            f"{'suppressed by cool-down' if in_cooldown else 'showing heavy card'}"
        )

    return HeavyCardDecision(
        show=show,
        streak=streak,
        required=thresholds.streak_days_required,
        in_cooldown=in_cooldown,
        window=window,
        cooldown_until=until if in_cooldown else None,
    )


def should_show_heavy_card(
    records: Sequence[CheckInRecord],
    settings: UserSettings,
    now: datetime,
) -> bool:
    """True when the supportive card should be offered right now."""
    return evaluate_heavy_card(records, settings, now).show
