"""
Unit tests for tough day classification and the heavy card.

Usage:
    pytest tests/test_tough_days.py -v
"""
from datetime import timedelta

import pytest

from checkin_core.models import DailyAggregate, Thresholds, UserSettings
from checkin_core.tough_days import (
    HEAVY_CARD_COOLDOWN,
    cooldown_until,
    evaluate_heavy_card,
    is_tough_day,
    recent_window,
    should_show_heavy_card,
    trailing_tough_streak,
)

from conftest import NOW, make_check_in, make_day


def tough(date: str = "2025-03-14", slots: int = 4) -> DailyAggregate:
    return DailyAggregate(
        date=date, slots_count=slots, mood_avg=2, stress_avg=4, energy_avg=2, score=20
    )


def fine(date: str = "2025-03-14") -> DailyAggregate:
    return DailyAggregate(
        date=date, slots_count=4, mood_avg=4, stress_avg=2, energy_avg=4, score=75
    )


def empty(date: str = "2025-03-14") -> DailyAggregate:
    return DailyAggregate(date=date)


def tough_records(days_ago_range):
    records = []
    for days_ago in days_ago_range:
        records += make_day(days_ago, mood=1, stress=5, energy=1, slots=4)
    return records


# ============================================================================
# Classification
# ============================================================================


class TestIsToughDay:
    """Test the conjunctive tough day rule."""

    def test_all_conditions_met(self):
        assert is_tough_day(tough(), Thresholds())

    def test_cutoffs_are_inclusive(self):
        agg = DailyAggregate(
            date="2025-03-14", slots_count=2, mood_avg=2.5, stress_avg=3.5, energy_avg=2.5
        )
        assert is_tough_day(agg, Thresholds())

    @pytest.mark.parametrize(
        "field,value",
        [("mood_avg", 3), ("stress_avg", 3), ("energy_avg", 3)],
    )
    def test_any_single_condition_failing_clears_the_day(self, field, value):
        agg = tough().model_copy(update={field: value})
        assert not is_tough_day(agg, Thresholds())

    def test_too_few_slots(self):
        assert not is_tough_day(tough(slots=1), Thresholds())
        assert is_tough_day(tough(slots=1), Thresholds(min_slots_per_day=1))

    def test_no_data_is_never_tough(self):
        assert not is_tough_day(empty(), Thresholds(min_slots_per_day=0))

    def test_custom_thresholds(self):
        agg = fine()
        lenient = Thresholds(mood_low_cutoff=4, stress_high_cutoff=2, energy_low_cutoff=4)
        assert is_tough_day(agg, lenient)


class TestTrailingStreak:
    """Test trailing streak counting."""

    def test_run_ending_today(self):
        aggregates = [fine(), tough(), tough(), tough()]
        assert trailing_tough_streak(aggregates, Thresholds()) == 3

    def test_non_tough_latest_day_resets(self):
        """Five tough days followed by a good day count as no streak."""
        aggregates = [tough()] * 5 + [fine()]

        assert trailing_tough_streak(aggregates, Thresholds()) == 0
        assert trailing_tough_streak(aggregates[:-1], Thresholds()) == 5

    def test_empty_day_breaks_run(self):
        aggregates = [tough(), tough(), empty(), tough()]
        assert trailing_tough_streak(aggregates, Thresholds()) == 1

    def test_no_aggregates(self):
        assert trailing_tough_streak([], Thresholds()) == 0


# ============================================================================
# Heavy card
# ============================================================================


class TestRecentWindow:
    """Test the seven-day aggregate window."""

    def test_window_is_seven_days_ending_today(self):
        window = recent_window([], UserSettings(), NOW)

        assert len(window) == 7
        assert window[0].date == "2025-03-08"
        assert window[-1].date == "2025-03-14"

    def test_records_land_on_their_day(self):
        records = [make_check_in(1, "morning", mood=5)]
        window = recent_window(records, UserSettings(), NOW)

        assert window[-2].slots_count == 1
        assert window[-2].mood_avg == 5
        assert not window[-1].has_data


class TestHeavyCard:
    """Test heavy card decisions and cool-down."""

    def test_shows_after_required_streak(self):
        records = tough_records(range(3))
        decision = evaluate_heavy_card(records, UserSettings(), NOW)

        assert decision.show is True
        assert decision.streak == 3
        assert decision.required == 3
        assert decision.in_cooldown is False
        assert decision.cooldown_until is None

    def test_short_streak(self):
        records = tough_records(range(2))
        assert should_show_heavy_card(records, UserSettings(), NOW) is False

    def test_good_day_today_hides_card(self):
        records = tough_records(range(1, 6)) + make_day(0, mood=4, stress=2, energy=4)
        decision = evaluate_heavy_card(records, UserSettings(), NOW)

        assert decision.show is False
        assert decision.streak == 0

    def test_recent_dismissal_suppresses(self):
        records = tough_records(range(5))
        settings = UserSettings(last_heavy_card_dismissed_at=NOW - timedelta(days=2))

        decision = evaluate_heavy_card(records, settings, NOW)

        assert decision.show is False
        assert decision.streak == 5
        assert decision.in_cooldown is True
        assert decision.cooldown_until == NOW + timedelta(days=5)

    def test_recent_show_suppresses(self):
        records = tough_records(range(5))
        settings = UserSettings(last_heavy_card_shown_at=NOW - timedelta(days=6, hours=23))

        assert should_show_heavy_card(records, settings, NOW) is False

    def test_cooldown_expires_after_a_week(self):
        records = tough_records(range(5))
        settings = UserSettings(
            last_heavy_card_shown_at=NOW - timedelta(days=8),
            last_heavy_card_dismissed_at=NOW - timedelta(days=7, minutes=1),
        )

        assert should_show_heavy_card(records, settings, NOW) is True

    def test_cooldown_uses_latest_stamp(self):
        settings = UserSettings(
            last_heavy_card_shown_at=NOW - timedelta(days=1),
            last_heavy_card_dismissed_at=NOW - timedelta(days=3),
        )
        assert cooldown_until(settings) == NOW - timedelta(days=1) + HEAVY_CARD_COOLDOWN
        assert cooldown_until(UserSettings()) is None

    def test_custom_streak_requirement(self):
        records = tough_records(range(2))
        settings = UserSettings(thresholds=Thresholds(streak_days_required=2))

        assert should_show_heavy_card(records, settings, NOW) is True

