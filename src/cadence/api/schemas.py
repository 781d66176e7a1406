from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from cadence.domain.models import CompletionSeries, CountSeries


class HeatmapRequest(BaseModel):
    year: int = Field(..., ge=2, le=9998)
    habits: list[CompletionSeries] = Field(default_factory=list)
    habit_id: Optional[str] = None
    include_inactive: Optional[bool] = None


class HabitsRequest(BaseModel):
    habits: list[CompletionSeries] = Field(default_factory=list)
    as_of: Optional[date] = None
    include_inactive: Optional[bool] = None


class TrendRequest(BaseModel):
    bad_habits: list[CountSeries] = Field(default_factory=list)
    recent_window_days: Optional[int] = Field(None, ge=1)
    prior_window_days: Optional[int] = Field(None, ge=1)
    as_of: Optional[date] = None
    include_inactive: Optional[bool] = None


class ImpactRequest(BaseModel):
    bad_habits: list[CountSeries] = Field(default_factory=list)
    window_days: Optional[int] = Field(None, ge=1)
    costs: dict[str, float] = Field(default_factory=dict, description="Per-unit cost by series id")
    as_of: Optional[date] = None
    include_inactive: Optional[bool] = None


class TrendLineRequest(BaseModel):
    bad_habits: list[CountSeries] = Field(default_factory=list)
    limit: Optional[int] = Field(None, ge=1, description="Points per series (default from engine settings)")
    as_of: Optional[date] = None
    include_inactive: Optional[bool] = None


class PerformanceRequest(BaseModel):
    habits: list[CompletionSeries] = Field(default_factory=list)
    start: date
    end: date
    as_of: Optional[date] = None
    include_inactive: Optional[bool] = None


class ComparisonRequest(BaseModel):
    habits: list[CompletionSeries] = Field(default_factory=list)
    weeks: Optional[int] = Field(None, ge=1, le=104)
    week_offset: int = Field(0, ge=0)
    as_of: Optional[date] = None
    start: Optional[date] = None
    end: Optional[date] = None
    include_inactive: Optional[bool] = None
