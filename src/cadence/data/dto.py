from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple

from cadence.domain.models import Intensity, TrendStatus


@dataclass(frozen=True)
class GridSlot:
    """One cell of the year grid. Out-of-year slots are layout only."""
    date: date
    out_of_year: bool


@dataclass(frozen=True)
class WeekRow:
    index: int
    start: date  # Sunday
    days: Tuple[GridSlot, ...]
    month: Optional[int] = None  # 1-12 when a month label belongs on this row


@dataclass(frozen=True)
class EntityDetail:
    series_id: str
    name: str
    completed: bool
    color: Optional[str] = None


@dataclass(frozen=True)
class NoteEntry:
    series_id: str
    series_name: str
    text: str


@dataclass(frozen=True)
class CalendarDay:
    date: date
    completed_count: int
    total_count: int
    completion_rate: float  # 0-100
    intensity: Intensity
    per_entity_detail: Tuple[EntityDetail, ...] = ()
    notes: Tuple[NoteEntry, ...] = ()

    @property
    def is_empty_selection(self) -> bool:
        return self.total_count == 0


@dataclass(frozen=True)
class StreakResult:
    series_id: str
    length: int
    longest: int = 0


@dataclass(frozen=True)
class TrendResult:
    series_id: str
    recent_window_average: float
    prior_window_average: float
    percent_change: float  # >= 0, improvement only
    status: TrendStatus
    goal_achieved: bool = False


@dataclass(frozen=True)
class TrendPoint:
    """Represents a single point in a trend line."""
    day: int
    date: date
    value: float


@dataclass(frozen=True)
class ImpactProjection:
    series_id: str
    window_days: int
    per_unit_cost: float
    window_total: float
    monthly_projection: float
    yearly_projection: float


@dataclass(frozen=True)
class HealthImpact:
    series_id: str
    recent_average: float
    factor: float
    score: float  # 0..max_score


@dataclass
class HeatmapReport:
    """Everything a heatmap view needs for one year."""
    year: int
    series_ids: List[str]
    weeks: List[WeekRow]
    days: List[CalendarDay]
    overall_completion_rate: float
    empty_selection: bool


@dataclass
class WeeklyEntry:
    series_id: str
    name: str
    completed_days: int
    expected_days: int
    completion_rate: float


@dataclass
class WeeklyStats:
    week_start: date
    week_end: date
    entries: List[WeeklyEntry]
    overall_completion_rate: float


@dataclass
class WeekSpan:
    start: date
    end: date
    completed_days: Dict[str, int]  # series id -> completed days counted in the span
    counted_days: int


@dataclass
class WeeklyComparison:
    """Completed days per series for consecutive Sunday-Saturday weeks, oldest first."""
    series_ids: List[str]
    weeks: List[WeekSpan]


@dataclass
class SeriesPerformance:
    series_id: str
    name: str
    category: Optional[str]
    color: Optional[str]
    completed: int
    total: int
    completion_rate: float
    current_streak: int


@dataclass
class PerformanceReport:
    start: date
    end: date
    habits: List[SeriesPerformance]
    on_track: List[str] = field(default_factory=list)
    needs_attention: List[str] = field(default_factory=list)
    category_rates: Dict[str, float] = field(default_factory=dict)
    longest_active_streak: int = 0
    active_streaks: int = 0
    daily: List[CalendarDay] = field(default_factory=list)


@dataclass
class ReductionOverview:
    trends: List[TrendResult]
    impacts: List[ImpactProjection]
    improving_count: int
    total_monthly_cost: float
    total_yearly_cost: float
    health_impacts: List[HealthImpact] = field(default_factory=list)
    health_score: float = 100.0
