import statistics
from datetime import date
from typing import List, Optional, Sequence

from cadence.data.dto import TrendPoint, TrendResult
from cadence.domain.models import CountRecord, CountSeries, TrendStatus
from cadence.exceptions import InvalidInputError

IMPROVING_THRESHOLD = 50.0
MODERATE_THRESHOLD = 20.0


def check_window(name: str, days: int) -> None:
    if isinstance(days, bool) or not isinstance(days, int) or days <= 0:
        raise InvalidInputError(f"{name} must be a positive integer, got {days!r}")


def newest_first(series: CountSeries, as_of: Optional[date] = None) -> List[CountRecord]:
    records = [r for r in series.records if as_of is None or r.date <= as_of]
    # Stable: records sharing a date keep their insertion order.
    return sorted(records, key=lambda r: r.date, reverse=True)


def window_average(records: Sequence[CountRecord]) -> float:
    if not records:
        return 0.0
    return statistics.mean(r.value for r in records)


def classify_status(percent_change: float) -> TrendStatus:
    if percent_change >= IMPROVING_THRESHOLD:
        return TrendStatus.IMPROVING
    if percent_change >= MODERATE_THRESHOLD:
        return TrendStatus.MODERATE
    return TrendStatus.NEEDS_ATTENTION


def compute_trend(
    series: CountSeries,
    recent_window_days: int = 7,
    prior_window_days: int = 7,
    as_of: Optional[date] = None,
) -> TrendResult:
    """
    Compares the latest window of records against the window right before it.

    Windows are counted in records, newest first; days without a record are
    simply absent. ``percent_change`` is the reduction from the prior average
    to the recent one and never goes below 0: a habit that got worse reports
    no progress rather than negative progress. An empty or all-zero prior
    window reports 0. ``goal_achieved`` compares the change with the
    series' ``target_reduction`` and is False when no target is set.
    """
    check_window("recent_window_days", recent_window_days)
    check_window("prior_window_days", prior_window_days)

    ordered = newest_first(series, as_of=as_of)
    recent = ordered[:recent_window_days]
    prior = ordered[recent_window_days:recent_window_days + prior_window_days]

    recent_avg = window_average(recent)
    prior_avg = window_average(prior)

    if not prior or prior_avg == 0:
        percent = 0.0
    else:
        percent = max(0.0, (prior_avg - recent_avg) / prior_avg * 100)

    return TrendResult(
        series_id=series.id,
        recent_window_average=recent_avg,
        prior_window_average=prior_avg,
        percent_change=percent,
        status=classify_status(percent),
        goal_achieved=series.target_reduction is not None and percent >= series.target_reduction,
    )


def trend_points(series: CountSeries, limit: int = 14, as_of: Optional[date] = None) -> List[TrendPoint]:
    """Latest ``limit`` records, oldest first, numbered from 1 for charting."""
    check_window("limit", limit)
    latest = newest_first(series, as_of=as_of)[:limit]
    return [
        TrendPoint(day=index, date=record.date, value=record.value)
        for index, record in enumerate(reversed(latest), start=1)
    ]
