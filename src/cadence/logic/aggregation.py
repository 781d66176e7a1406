from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence

from cadence.data.dto import CalendarDay, EntityDetail, NoteEntry
from cadence.domain.models import CompletionRecord, CompletionSeries
from cadence.exceptions import InvalidInputError
from cadence.logic.calendar import days_of_year
from cadence.logic.intensity import classify


def index_by_day(series: CompletionSeries) -> Dict[date, CompletionRecord]:
    """
    Maps each day to its record. With duplicates the first record in
    iteration order wins; later ones are ignored, never summed.
    """
    by_day: Dict[date, CompletionRecord] = {}
    for record in series.records:
        by_day.setdefault(record.date, record)
    return by_day


def find_record(series: CompletionSeries, day: date) -> Optional[CompletionRecord]:
    for record in series.records:
        if record.date == day:
            return record
    return None


def completion_rate(completed: int, total: int) -> float:
    if total == 0:
        return 0.0
    return completed / total * 100


def _check_series(series: Sequence[CompletionSeries]) -> None:
    for position, item in enumerate(series):
        if not isinstance(item, CompletionSeries):
            raise InvalidInputError(
                f"series #{position} must be a CompletionSeries, got {type(item).__name__}"
            )


def aggregate(series: Sequence[CompletionSeries], year: int) -> List[CalendarDay]:
    """
    Folds the selected series onto every actual day of ``year``.

    Every selected series counts toward each day's total, whether or not it has
    a record that day: a missing record is a miss, not an exemption. With no
    series selected every day is an empty selection with rate 0.
    Detail and notes follow the input order.
    """
    return _fold(series, days_of_year(year))


def aggregate_range(series: Sequence[CompletionSeries], start: date, end: date) -> List[CalendarDay]:
    """Same fold as ``aggregate`` over the inclusive range ``start``..``end``."""
    if start > end:
        raise InvalidInputError(f"start {start} is after end {end}")
    span = (end - start).days + 1
    return _fold(series, [start + timedelta(days=offset) for offset in range(span)])


def _fold(series: Sequence[CompletionSeries], dates: Sequence[date]) -> List[CalendarDay]:
    _check_series(series)
    indexes = [index_by_day(item) for item in series]
    total = len(series)

    days: List[CalendarDay] = []
    for day in dates:
        completed = 0
        detail: List[EntityDetail] = []
        notes: List[NoteEntry] = []
        for item, by_day in zip(series, indexes):
            record = by_day.get(day)
            done = bool(record and record.is_completed)
            if done:
                completed += 1
            detail.append(EntityDetail(series_id=item.id, name=item.name, completed=done, color=item.color))
            if record and record.notes and record.notes.strip():
                notes.append(NoteEntry(series_id=item.id, series_name=item.name, text=record.notes))

        rate = completion_rate(completed, total)
        days.append(CalendarDay(
            date=day,
            completed_count=completed,
            total_count=total,
            completion_rate=rate,
            intensity=classify(rate),
            per_entity_detail=tuple(detail),
            notes=tuple(notes),
        ))
    return days


def overall_completion_rate(days: Sequence[CalendarDay]) -> float:
    possible = sum(day.total_count for day in days)
    done = sum(day.completed_count for day in days)
    return completion_rate(done, possible)
