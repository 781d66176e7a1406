from datetime import date, timedelta
from typing import List

from cadence.data.dto import GridSlot, WeekRow
from cadence.exceptions import InvalidInputError

WEEKS_PER_GRID = 53
DAYS_PER_WEEK = 7


def _check_year(year: int) -> None:
    # Grid spills into the neighbouring years, which must stay representable.
    if isinstance(year, bool) or not isinstance(year, int) or not (date.min.year < year < date.max.year):
        raise InvalidInputError(f"year must be an integer between 2 and 9998, got {year!r}")


def grid_start(year: int) -> date:
    """Sunday on or before January 1 of ``year``."""
    _check_year(year)
    jan_first = date(year, 1, 1)
    # weekday(): Monday=0 .. Sunday=6
    return jan_first - timedelta(days=(jan_first.weekday() + 1) % 7)


def days_of_year(year: int) -> List[date]:
    """Every actual date of ``year``, in order (365 or 366 entries)."""
    _check_year(year)
    first = date(year, 1, 1)
    count = (date(year + 1, 1, 1) - first).days
    return [first + timedelta(days=offset) for offset in range(count)]


def build_year_grid(year: int) -> List[WeekRow]:
    """
    Builds the fixed 53x7 week-aligned layout for ``year``.

    The grid always starts on the Sunday on or before January 1 and always has
    53 rows, so the layout stays rectangular whatever weekday the year starts on.
    Slots whose date falls outside ``year`` are flagged ``out_of_year``.

    A row carries a month number when its Sunday is one of the first 7 days of
    that month inside ``year``.
    """
    start = grid_start(year)
    weeks: List[WeekRow] = []
    for week_index in range(WEEKS_PER_GRID):
        week_start = start + timedelta(days=week_index * DAYS_PER_WEEK)
        slots = tuple(
            GridSlot(date=day, out_of_year=day.year != year)
            for day in (week_start + timedelta(days=offset) for offset in range(DAYS_PER_WEEK))
        )
        month = week_start.month if week_start.year == year and week_start.day <= 7 else None
        weeks.append(WeekRow(index=week_index, start=week_start, days=slots, month=month))
    return weeks
