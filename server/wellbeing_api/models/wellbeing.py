"""Derived wellbeing response models."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from checkin_core.models import DailyAggregate, Period


class PeriodScore(BaseModel):
    """Wellbeing score for a reporting period ending today."""

    model_config = ConfigDict(populate_by_name=True)

    period: Period
    start_date: str = Field(serialization_alias="startDate")
    end_date: str = Field(serialization_alias="endDate")
    score: int = Field(ge=0, le=100)
    empty_day_policy: str = Field(serialization_alias="emptyDayPolicy")


class DailyScore(BaseModel):
    """Today's score and how many slots are filled."""

    model_config = ConfigDict(populate_by_name=True)

    date: str
    score: int = Field(ge=0, le=100)
    slots_filled: int = Field(serialization_alias="slotsFilled")


class StreakSummary(BaseModel):
    """Consecutive fully checked-in days ending today."""

    streak: int = Field(ge=0)


class HeavyCardStatus(BaseModel):
    """Whether the supportive card should be offered."""

    model_config = ConfigDict(populate_by_name=True)

    show: bool
    streak: int
    required: int
    in_cooldown: bool = Field(serialization_alias="inCooldown")
    cooldown_until: Optional[datetime] = Field(default=None, serialization_alias="cooldownUntil")
    window: list[DailyAggregate] = Field(default_factory=list)
