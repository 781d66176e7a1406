from datetime import date
from typing import Optional

from cadence.data.dto import StreakResult
from cadence.domain.models import CompletionSeries


def compute_streak(series: CompletionSeries, as_of: Optional[date] = None) -> int:
    """
    Length of the unbroken run of completed days ending on ``as_of``.

    Completed records are walked newest first; the record at position ``i``
    must be exactly ``i`` days before ``as_of``. The first mismatch ends the
    run, so a series without a record on ``as_of`` has a streak of 0 even if
    yesterday was completed. Records dated after ``as_of`` are not counted.
    A duplicate record for an already counted day ends the run as well.
    """
    as_of = as_of or date.today()
    completed = sorted(
        (r for r in series.records if r.is_completed and r.date <= as_of),
        key=lambda r: r.date,
        reverse=True,
    )

    streak = 0
    for record in completed:
        if (as_of - record.date).days != streak:
            break
        streak += 1
    return streak


def longest_streak(series: CompletionSeries) -> int:
    """Longest run of consecutive calendar days that each have a completed record."""
    days = sorted({r.date for r in series.records if r.is_completed})
    best = 0
    current = 0
    previous: Optional[date] = None
    for day in days:
        if previous is not None and (day - previous).days == 1:
            current += 1
        else:
            current = 1
        best = max(best, current)
        previous = day
    return best


def streak_result(series: CompletionSeries, as_of: Optional[date] = None) -> StreakResult:
    return StreakResult(
        series_id=series.id,
        length=compute_streak(series, as_of=as_of),
        longest=longest_streak(series),
    )
