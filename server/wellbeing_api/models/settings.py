"""User settings request models."""
from typing import Optional

from pydantic import BaseModel, Field

from checkin_core.models import EmptyDayPolicy


class WeightsUpdate(BaseModel):
    mood_weight: Optional[float] = Field(default=None, ge=0)
    energy_weight: Optional[float] = Field(default=None, ge=0)
    stress_weight: Optional[float] = Field(default=None, ge=0)


class ScoringUpdate(BaseModel):
    weights: Optional[WeightsUpdate] = None
    use_completion_multiplier: Optional[bool] = None
    empty_day_policy: Optional[EmptyDayPolicy] = None


class ThresholdsUpdate(BaseModel):
    mood_low_cutoff: Optional[float] = None
    stress_high_cutoff: Optional[float] = None
    energy_low_cutoff: Optional[float] = None
    min_slots_per_day: Optional[int] = Field(default=None, ge=0)
    streak_days_required: Optional[int] = Field(default=None, ge=1)


class SettingsUpdate(BaseModel):
    """Partial settings update; only fields that are sent are changed."""

    notif_morning: Optional[str] = None
    notif_afternoon: Optional[str] = None
    notif_evening: Optional[str] = None
    notif_night: Optional[str] = None
    thresholds: Optional[ThresholdsUpdate] = None
    scoring: Optional[ScoringUpdate] = None
