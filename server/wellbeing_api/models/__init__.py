"""Pydantic models for wellbeing API requests and responses."""
from .wellbeing import PeriodScore, DailyScore, StreakSummary, HeavyCardStatus
from .settings import SettingsUpdate, ScoringUpdate, ThresholdsUpdate, WeightsUpdate

__all__ = [
    "PeriodScore",
    "DailyScore",
    "StreakSummary",
    "HeavyCardStatus",
    "SettingsUpdate",
    "ScoringUpdate",
    "ThresholdsUpdate",
    "WeightsUpdate",
]
