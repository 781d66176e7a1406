import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, TypeVar

from cadence.config import EngineSettings, Settings, settings
from cadence.data.dto import (
    HealthImpact,
    HeatmapReport,
    ImpactProjection,
    PerformanceReport,
    ReductionOverview,
    SeriesPerformance,
    StreakResult,
    TrendPoint,
    TrendResult,
    WeekSpan,
    WeeklyComparison,
    WeeklyEntry,
    WeeklyStats,
)
from cadence.domain.models import CompletionSeries, CountSeries, RecordSeries
from cadence.exceptions import InvalidInputError
from cadence.logic.aggregation import aggregate, aggregate_range, completion_rate, overall_completion_rate
from cadence.logic.calendar import build_year_grid
from cadence.logic.impact import health_impact, project_impact
from cadence.logic.streaks import streak_result
from cadence.logic.trends import MODERATE_THRESHOLD, check_window, compute_trend, trend_points

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")
S = TypeVar("S", bound=RecordSeries)

ON_TRACK_RATE = 80.0
NEEDS_ATTENTION_RATE = 50.0
UNCATEGORIZED = "uncategorized"

_EXPECTED_DAYS_PER_WEEK = {"daily": 7, "weekly": 1, "monthly": 1}


def week_bounds(day: date) -> tuple[date, date]:
    """Sunday..Saturday week containing ``day``."""
    start = day - timedelta(days=(day.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


class HabitAnalytics:
    """
    Batch facade over the pure engine functions.

    Resolves "today" for callers that omit ``as_of``, filters inactive series,
    guards input size and fans work out over a thread pool for large batches.
    Results always come back in input order.
    """

    def __init__(self, config: Optional[EngineSettings] = None, app_settings: Optional[Settings] = None):
        self.settings = app_settings or settings
        self.config = config or self.settings.engine

    # -- plumbing -----------------------------------------------------------

    def _guard(self, series: Sequence[RecordSeries]) -> None:
        if len(series) > self.config.max_series:
            raise InvalidInputError(
                f"Too many series in one call: {len(series)} > {self.config.max_series}"
            )

    def _select(self, series: Sequence[S], include_inactive: Optional[bool] = None) -> List[S]:
        self._guard(series)
        keep_inactive = self.config.include_inactive if include_inactive is None else include_inactive
        selected = [s for s in series if keep_inactive or s.is_active]
        if len(selected) != len(series):
            logger.debug(f"Skipped {len(series) - len(selected)} inactive series")
        return selected

    def _map(self, fn: Callable[[T], R], items: Sequence[T]) -> List[R]:
        if len(items) >= self.config.parallel_threshold and self.config.max_workers > 1:
            logger.debug(f"Parallel map over {len(items)} items with {self.config.max_workers} workers")
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                return list(executor.map(fn, items))
        return [fn(item) for item in items]

    @staticmethod
    def _today(as_of: Optional[date]) -> date:
        return as_of or date.today()

    # -- habits to build ------------------------------------------------------

    def heatmap(
        self,
        series: Sequence[CompletionSeries],
        year: int,
        habit_id: Optional[str] = None,
        include_inactive: Optional[bool] = None,
    ) -> HeatmapReport:
        selected = self._select(series, include_inactive)
        if habit_id is not None:
            selected = [s for s in selected if s.id == habit_id]
            if not selected:
                raise InvalidInputError(f"Unknown series id: {habit_id}")

        days = aggregate(selected, year)
        logger.info(f"Aggregated {len(selected)} series for {year}")
        return HeatmapReport(
            year=year,
            series_ids=[s.id for s in selected],
            weeks=build_year_grid(year),
            days=days,
            overall_completion_rate=overall_completion_rate(days),
            empty_selection=not selected,
        )

    def heatmaps(
        self,
        series: Sequence[CompletionSeries],
        years: Iterable[int],
        include_inactive: Optional[bool] = None,
    ) -> Dict[int, HeatmapReport]:
        selected = self._select(series, include_inactive)
        year_list = list(dict.fromkeys(years))
        reports = self._map(lambda y: self.heatmap(selected, y, include_inactive=True), year_list)
        return dict(zip(year_list, reports))

    def streaks(
        self,
        series: Sequence[CompletionSeries],
        as_of: Optional[date] = None,
        include_inactive: Optional[bool] = None,
    ) -> List[StreakResult]:
        today = self._today(as_of)
        selected = self._select(series, include_inactive)
        return self._map(lambda s: streak_result(s, as_of=today), selected)

    def weekly_completion(
        self,
        series: Sequence[CompletionSeries],
        as_of: Optional[date] = None,
        include_inactive: Optional[bool] = None,
    ) -> WeeklyStats:
        week_start, week_end = week_bounds(self._today(as_of))
        entries = []
        for item in self._select(series, include_inactive):
            done_days = {
                r.date for r in item.records
                if r.is_completed and week_start <= r.date <= week_end
            }
            expected = _EXPECTED_DAYS_PER_WEEK[item.frequency]
            rate = min(100.0, len(done_days) / expected * 100)
            entries.append(WeeklyEntry(
                series_id=item.id,
                name=item.name,
                completed_days=len(done_days),
                expected_days=expected,
                completion_rate=rate,
            ))

        overall = sum(e.completion_rate for e in entries) / len(entries) if entries else 0.0
        return WeeklyStats(week_start=week_start, week_end=week_end, entries=entries, overall_completion_rate=overall)

    def weekly_comparison(
        self,
        series: Sequence[CompletionSeries],
        weeks: Optional[int] = None,
        week_offset: int = 0,
        as_of: Optional[date] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        include_inactive: Optional[bool] = None,
    ) -> WeeklyComparison:
        """
        Completed days per series over ``weeks`` consecutive weeks. The newest
        week is the one containing ``as_of`` moved back ``week_offset`` weeks.
        When ``start`` or ``end`` is given only days inside that range count.
        """
        count = self.config.comparison_weeks if weeks is None else weeks
        check_window("weeks", count)
        if isinstance(week_offset, bool) or not isinstance(week_offset, int) or week_offset < 0:
            raise InvalidInputError(f"week_offset must be a non-negative integer, got {week_offset!r}")
        if start and end and start > end:
            raise InvalidInputError(f"start {start} is after end {end}")

        newest_start, _ = week_bounds(self._today(as_of) - timedelta(weeks=week_offset))
        first_start = newest_start - timedelta(weeks=count - 1)
        selected = self._select(series, include_inactive)
        done_by_series = {item.id: {r.date for r in item.records if r.is_completed} for item in selected}

        spans: List[WeekSpan] = []
        for index in range(count):
            week_start = first_start + timedelta(weeks=index)
            counted = [
                day for day in (week_start + timedelta(days=d) for d in range(7))
                if (start is None or day >= start) and (end is None or day <= end)
            ]
            spans.append(WeekSpan(
                start=week_start,
                end=week_start + timedelta(days=6),
                completed_days={
                    item.id: sum(1 for day in counted if day in done_by_series[item.id])
                    for item in selected
                },
                counted_days=len(counted),
            ))
        return WeeklyComparison(series_ids=[s.id for s in selected], weeks=spans)

    def performance(
        self,
        series: Sequence[CompletionSeries],
        start: date,
        end: date,
        as_of: Optional[date] = None,
        include_inactive: Optional[bool] = None,
    ) -> PerformanceReport:
        """
        Completion rate of each series over an inclusive date range, ranked
        best first, with on-track / needs-attention partitions and per-category rates.
        """
        if start > end:
            raise InvalidInputError(f"start {start} is after end {end}")
        today = self._today(as_of)
        span = (end - start).days + 1
        selected = self._select(series, include_inactive)
        streaks = {r.series_id: r for r in self.streaks(selected, as_of=today, include_inactive=True)}

        habits: List[SeriesPerformance] = []
        categories: Dict[str, List[int]] = {}
        for item in selected:
            done = len({r.date for r in item.records if r.is_completed and start <= r.date <= end})
            habits.append(SeriesPerformance(
                series_id=item.id,
                name=item.name,
                category=item.category,
                color=item.color,
                completed=done,
                total=span,
                completion_rate=completion_rate(done, span),
                current_streak=streaks[item.id].length,
            ))
            bucket = categories.setdefault(item.category or UNCATEGORIZED, [0, 0])
            bucket[0] += done
            bucket[1] += span

        habits.sort(key=lambda h: h.completion_rate, reverse=True)
        current = [r.length for r in streaks.values()]
        return PerformanceReport(
            start=start,
            end=end,
            habits=habits,
            on_track=[h.series_id for h in habits if h.completion_rate >= ON_TRACK_RATE],
            needs_attention=[h.series_id for h in habits if h.completion_rate < NEEDS_ATTENTION_RATE],
            category_rates={name: completion_rate(done, total) for name, (done, total) in categories.items()},
            longest_active_streak=max(current, default=0),
            active_streaks=sum(1 for length in current if length > 0),
            daily=aggregate_range(selected, start, end),
        )

    # -- habits to reduce -----------------------------------------------------

    def trends(
        self,
        series: Sequence[CountSeries],
        recent_window_days: Optional[int] = None,
        prior_window_days: Optional[int] = None,
        as_of: Optional[date] = None,
        include_inactive: Optional[bool] = None,
    ) -> List[TrendResult]:
        recent = self.config.recent_window_days if recent_window_days is None else recent_window_days
        prior = self.config.prior_window_days if prior_window_days is None else prior_window_days
        today = self._today(as_of)
        selected = self._select(series, include_inactive)
        return self._map(
            lambda s: compute_trend(s, recent_window_days=recent, prior_window_days=prior, as_of=today),
            selected,
        )

    def trend_lines(
        self,
        series: Sequence[CountSeries],
        limit: Optional[int] = None,
        as_of: Optional[date] = None,
        include_inactive: Optional[bool] = None,
    ) -> Dict[str, List[TrendPoint]]:
        """Chartable points per series id, latest ``limit`` records oldest first."""
        size = self.config.trend_points if limit is None else limit
        today = self._today(as_of)
        selected = self._select(series, include_inactive)
        lines = self._map(lambda s: trend_points(s, limit=size, as_of=today), selected)
        return {item.id: points for item, points in zip(selected, lines)}

    def cost_for(self, item: CountSeries, costs: Optional[Mapping[str, float]] = None) -> float:
        """Per-unit cost by series id, then by configured category keyword, then the configured default."""
        if costs and item.id in costs:
            return costs[item.id]
        return self.settings.cost_for(item.category, item.name)

    def impacts(
        self,
        series: Sequence[CountSeries],
        costs: Optional[Mapping[str, float]] = None,
        window_days: Optional[int] = None,
        as_of: Optional[date] = None,
        include_inactive: Optional[bool] = None,
    ) -> List[ImpactProjection]:
        today = self._today(as_of)
        window = self.config.impact_window_days if window_days is None else window_days
        selected = self._select(series, include_inactive)
        return self._map(
            lambda s: project_impact(s, window, self.cost_for(s, costs), as_of=today),
            selected,
        )

    def health_impacts(
        self,
        series: Sequence[CountSeries],
        as_of: Optional[date] = None,
        include_inactive: Optional[bool] = None,
    ) -> List[HealthImpact]:
        """Health score per series from its recent daily average and its category factor."""
        today = self._today(as_of)
        health = self.settings.health
        selected = self._select(series, include_inactive)
        return self._map(
            lambda s: health_impact(
                s,
                self.settings.health_factor_for(s.category, s.name),
                window_records=self.config.health_window_records,
                max_score=health.max_score,
                as_of=today,
            ),
            selected,
        )

    def reduction_overview(
        self,
        series: Sequence[CountSeries],
        costs: Optional[Mapping[str, float]] = None,
        window_days: Optional[int] = None,
        as_of: Optional[date] = None,
        include_inactive: Optional[bool] = None,
    ) -> ReductionOverview:
        trends = self.trends(series, as_of=as_of, include_inactive=include_inactive)
        impacts = self.impacts(series, costs=costs, window_days=window_days, as_of=as_of, include_inactive=include_inactive)
        health = self.health_impacts(series, as_of=as_of, include_inactive=include_inactive)
        mean_score = sum(h.score for h in health) / len(health) if health else 0.0
        return ReductionOverview(
            trends=trends,
            impacts=impacts,
            improving_count=sum(1 for t in trends if t.percent_change >= MODERATE_THRESHOLD),
            total_monthly_cost=sum(i.monthly_projection for i in impacts),
            total_yearly_cost=sum(i.yearly_projection for i in impacts),
            health_impacts=health,
            health_score=max(0.0, self.settings.health.max_score - mean_score),
        )
