import math
from datetime import date
from typing import Optional

from cadence.data.dto import HealthImpact, ImpactProjection
from cadence.domain.models import CountSeries
from cadence.exceptions import InvalidInputError
from cadence.logic.trends import check_window, newest_first, window_average

DAYS_PER_MONTH = 30
MONTHS_PER_YEAR = 12


def _check_amount(name: str, value: float) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value) or value < 0:
        raise InvalidInputError(f"{name} must be a finite non-negative number, got {value}")


def window_total(series: CountSeries, window_days: int, as_of: Optional[date] = None) -> float:
    """Sum of values recorded in the trailing ``window_days`` days, ``as_of`` included."""
    check_window("window_days", window_days)
    as_of = as_of or date.today()
    return sum(
        (r.value for r in series.records if 0 <= (as_of - r.date).days < window_days),
        0.0,
    )


def project_impact(
    series: CountSeries,
    window_days: int,
    per_unit_cost: float,
    as_of: Optional[date] = None,
) -> ImpactProjection:
    """
    Scales a trailing window total to monthly and yearly magnitudes.

    The cost per unit is the caller's decision; no category lookup happens here.
    """
    check_window("window_days", window_days)
    _check_amount("per_unit_cost", per_unit_cost)

    total = window_total(series, window_days, as_of=as_of)
    if window_days == DAYS_PER_MONTH:
        monthly = total * per_unit_cost
    else:
        monthly = total * (DAYS_PER_MONTH / window_days) * per_unit_cost

    return ImpactProjection(
        series_id=series.id,
        window_days=window_days,
        per_unit_cost=float(per_unit_cost),
        window_total=total,
        monthly_projection=monthly,
        yearly_projection=monthly * MONTHS_PER_YEAR,
    )


def health_impact(
    series: CountSeries,
    factor: float,
    window_records: int = 7,
    max_score: float = 100.0,
    as_of: Optional[date] = None,
) -> HealthImpact:
    """
    Average of the latest ``window_records`` records times ``factor``, capped at ``max_score``.
    """
    check_window("window_records", window_records)
    _check_amount("factor", factor)
    _check_amount("max_score", max_score)

    average = window_average(newest_first(series, as_of=as_of)[:window_records])
    return HealthImpact(
        series_id=series.id,
        recent_average=average,
        factor=float(factor),
        score=min(average * factor, max_score),
    )
