from datetime import date

import pytest

from cadence.domain.models import CompletionRecord, CompletionSeries, CountSeries, Intensity
from cadence.exceptions import InvalidInputError
from cadence.logic.aggregation import aggregate, aggregate_range, find_record, index_by_day, overall_completion_rate


def make_habit(series_id, records, name=None, color=None):
    return CompletionSeries(
        id=series_id,
        name=name or series_id.title(),
        color=color,
        records=[CompletionRecord(date=d, is_completed=done, notes=notes) for d, done, notes in records],
    )


def _day(days, target):
    return next(d for d in days if d.date == target)


@pytest.fixture
def habits():
    read = make_habit("read", [
        (date(2024, 3, 1), True, "chapter 3"),
        (date(2024, 3, 2), True, None),
        (date(2024, 3, 3), False, "too tired"),
    ], color="#00ff00")
    run = make_habit("run", [
        (date(2024, 3, 1), True, "   "),
        (date(2024, 3, 4), True, "intervals"),
    ])
    return [read, run]


@pytest.mark.parametrize("year, expected", [(2023, 365), (2024, 366)])
def test_one_entry_per_actual_day(habits, year, expected):
    days = aggregate(habits, year)
    assert len(days) == expected
    assert days[0].date == date(year, 1, 1)
    assert days[-1].date == date(year, 12, 31)
    for day in days:
        assert day.total_count == len(habits)
        assert 0 <= day.completed_count <= day.total_count


def test_every_selected_series_counts_toward_total(habits):
    days = aggregate(habits, 2024)

    both = _day(days, date(2024, 3, 1))
    assert both.completed_count == 2
    assert both.completion_rate == 100
    assert both.intensity == Intensity.FULL

    one = _day(days, date(2024, 3, 2))
    assert one.completed_count == 1
    assert one.completion_rate == 50
    assert one.intensity == Intensity.MEDIUM

    # "run" has no record on the 2nd: a miss, not an exemption
    assert one.total_count == 2

    none = _day(days, date(2024, 7, 1))
    assert none.completed_count == 0
    assert none.completion_rate == 0
    assert none.intensity == Intensity.NONE
    assert not none.is_empty_selection


def test_empty_selection_has_zero_rate():
    days = aggregate([], 2024)
    assert len(days) == 366
    for day in days:
        assert day.total_count == 0
        assert day.completion_rate == 0
        assert day.is_empty_selection
        assert day.per_entity_detail == ()


def test_detail_and_notes_follow_input_order(habits):
    days = aggregate(habits, 2024)
    first = _day(days, date(2024, 3, 1))
    assert [d.series_id for d in first.per_entity_detail] == ["read", "run"]
    assert first.per_entity_detail[0].color == "#00ff00"

    reversed_days = aggregate(list(reversed(habits)), 2024)
    assert [d.series_id for d in _day(reversed_days, date(2024, 3, 1)).per_entity_detail] == ["run", "read"]

    # blank notes are dropped, notes on missed days are kept
    assert [(n.series_name, n.text) for n in first.notes] == [("Read", "chapter 3")]
    missed = _day(days, date(2024, 3, 3))
    assert missed.completed_count == 0
    assert [n.text for n in missed.notes] == ["too tired"]


def test_aggregate_is_deterministic(habits):
    assert aggregate(habits, 2024) == aggregate(habits, 2024)


def test_single_series_selection(habits):
    days = aggregate(habits[:1], 2024)
    day = _day(days, date(2024, 3, 2))
    assert day.total_count == 1
    assert day.completion_rate == 100


def test_first_duplicate_wins():
    habit = make_habit("dup", [
        (date(2024, 5, 5), False, "first"),
        (date(2024, 5, 5), True, "second"),
    ])
    day = _day(aggregate([habit], 2024), date(2024, 5, 5))
    assert day.completed_count == 0
    assert [n.text for n in day.notes] == ["first"]

    assert index_by_day(habit)[date(2024, 5, 5)].notes == "first"
    assert find_record(habit, date(2024, 5, 5)).notes == "first"
    assert find_record(habit, date(2024, 5, 6)) is None


def test_records_outside_year_are_ignored():
    habit = make_habit("edge", [(date(2023, 12, 31), True, None), (date(2025, 1, 1), True, None)])
    days = aggregate([habit], 2024)
    assert sum(d.completed_count for d in days) == 0


def test_count_series_rejected():
    with pytest.raises(InvalidInputError):
        aggregate([CountSeries(id="coffee")], 2024)


def test_overall_completion_rate(habits):
    days = aggregate(habits, 2024)
    # 4 completions out of 2 series x 366 days
    assert overall_completion_rate(days) == pytest.approx(4 / 732 * 100)
    assert overall_completion_rate(aggregate([], 2024)) == 0


def test_aggregate_range_spans_year_boundary(habits):
    late = make_habit("late", [(date(2023, 12, 31), True, None), (date(2024, 1, 1), True, "new year")])
    days = aggregate_range(habits + [late], date(2023, 12, 30), date(2024, 1, 2))
    assert [d.date for d in days] == [date(2023, 12, 30), date(2023, 12, 31), date(2024, 1, 1), date(2024, 1, 2)]
    assert [d.completed_count for d in days] == [0, 1, 1, 0]
    assert days[1].total_count == 3
    assert days[2].completion_rate == pytest.approx(100 / 3)


def test_aggregate_range_single_day_and_bad_order(habits):
    [day] = aggregate_range(habits, date(2024, 3, 1), date(2024, 3, 1))
    assert day.completed_count == 2
    with pytest.raises(InvalidInputError):
        aggregate_range(habits, date(2024, 3, 2), date(2024, 3, 1))
