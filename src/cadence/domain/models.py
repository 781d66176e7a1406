from __future__ import annotations

import datetime as dt
import math
from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

Frequency = Literal["daily", "weekly", "monthly"]


def coerce_day(value: Any) -> dt.date:
    """
    Normalizes a record date to day granularity.
    Accepts date, datetime (time of day dropped) or an ISO-8601 string.
    """
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("date cannot be empty")
        try:
            return dt.date.fromisoformat(text)
        except ValueError:
            return dt.datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    raise ValueError(f"unsupported date value: {value!r}")


class CompletionRecord(BaseModel):
    """
    One day of a habit to build: done or not done.
    """
    model_config = ConfigDict(frozen=True)

    kind: Literal["completion"] = "completion"
    date: dt.date
    is_completed: bool = False
    notes: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> dt.date:
        return coerce_day(value)


class CountRecord(BaseModel):
    """
    One day of a habit to reduce: how many times it happened.
    """
    model_config = ConfigDict(frozen=True)

    kind: Literal["count"] = "count"
    date: dt.date
    value: float = Field(0.0, ge=0)
    notes: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> dt.date:
        return coerce_day(value)

    @field_validator("value")
    @classmethod
    def _finite_value(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("value must be a finite number")
        return value


Record = Union[CompletionRecord, CountRecord]


class RecordSeries(BaseModel):
    """
    Metadata shared by every tracked entity. Display fields are passed through untouched.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique within the caller's working set")
    name: str = ""
    color: Optional[str] = None
    category: Optional[str] = None
    frequency: Frequency = "daily"
    is_active: bool = True

    @field_validator("id", "name")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        return v.strip()

    @field_validator("id")
    @classmethod
    def check_id_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("id cannot be empty")
        return v


class CompletionSeries(RecordSeries):
    kind: Literal["completion"] = "completion"
    records: tuple[CompletionRecord, ...] = ()


class CountSeries(RecordSeries):
    kind: Literal["count"] = "count"
    records: tuple[CountRecord, ...] = ()
    target_reduction: Optional[float] = Field(None, ge=0, le=100, description="Goal, percent below the prior window")


AnySeries = Union[CompletionSeries, CountSeries]


class Intensity(str, Enum):
    """Completion-rate bucket handed to the presentation layer."""
    NONE = "none"
    VERY_LOW = "veryLow"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    FULL = "full"


class TrendStatus(str, Enum):
    IMPROVING = "improving"
    MODERATE = "moderate"
    NEEDS_ATTENTION = "needs_attention"
