import random
from datetime import timedelta

import pytest

from cadence.domain.models import CountRecord, CountSeries, TrendStatus
from cadence.exceptions import InvalidInputError
from cadence.logic.trends import classify_status, compute_trend, trend_points

from conftest import AS_OF


def bad_habit(values, series_id="b1"):
    """Values newest first, one record per day ending on AS_OF."""
    return CountSeries(
        id=series_id,
        name="Smoking",
        records=[CountRecord(date=AS_OF - timedelta(days=i), value=v) for i, v in enumerate(values)],
    )


def test_reduction_from_five_to_two_is_improving():
    result = compute_trend(bad_habit([2] * 7 + [5] * 7))
    assert result.recent_window_average == 2
    assert result.prior_window_average == 5
    assert result.percent_change == pytest.approx(60)
    assert result.status == TrendStatus.IMPROVING


def test_zero_prior_average_reports_no_change():
    result = compute_trend(bad_habit([2] * 7 + [0] * 7))
    assert result.percent_change == 0
    assert result.status == TrendStatus.NEEDS_ATTENTION


def test_missing_prior_window_reports_no_change():
    result = compute_trend(bad_habit([1, 1, 1]))
    assert result.prior_window_average == 0
    assert result.percent_change == 0
    assert result.status == TrendStatus.NEEDS_ATTENTION


def test_getting_worse_is_clamped_to_zero():
    result = compute_trend(bad_habit([5] * 7 + [2] * 7))
    assert result.recent_window_average > result.prior_window_average
    assert result.percent_change == 0
    assert result.status == TrendStatus.NEEDS_ATTENTION


def test_moderate_reduction():
    result = compute_trend(bad_habit([3] * 7 + [4] * 7))
    assert result.percent_change == pytest.approx(25)
    assert result.status == TrendStatus.MODERATE


def test_windows_count_records_not_calendar_days():
    # Records every other day: the windows still hold 7 records each
    series = CountSeries(
        id="sparse",
        records=[CountRecord(date=AS_OF - timedelta(days=2 * i), value=1 if i < 7 else 4) for i in range(14)],
    )
    result = compute_trend(series)
    assert result.recent_window_average == 1
    assert result.prior_window_average == 4


def test_partial_prior_window_averages_what_exists():
    result = compute_trend(bad_habit([1] * 7 + [4, 2]))
    assert result.prior_window_average == 3
    assert result.percent_change == pytest.approx((3 - 1) / 3 * 100)


def test_insertion_order_does_not_matter():
    series = bad_habit([2] * 7 + [5] * 7)
    shuffled = list(series.records)
    random.Random(7).shuffle(shuffled)
    assert compute_trend(series.model_copy(update={"records": tuple(shuffled)})) == compute_trend(series)


def test_custom_window_sizes():
    result = compute_trend(bad_habit([1, 1, 3, 3, 3]), recent_window_days=2, prior_window_days=3)
    assert result.recent_window_average == 1
    assert result.prior_window_average == 3


def test_as_of_drops_later_records():
    series = bad_habit([9] * 3 + [2] * 7 + [5] * 7)
    result = compute_trend(series, as_of=AS_OF - timedelta(days=3))
    assert result.percent_change == pytest.approx(60)


@pytest.mark.parametrize("recent, prior", [(0, 7), (7, 0), (-1, 7), (7, 2.5), (True, 7)])
def test_invalid_windows_rejected(recent, prior):
    with pytest.raises(InvalidInputError):
        compute_trend(bad_habit([1]), recent_window_days=recent, prior_window_days=prior)


@pytest.mark.parametrize(
    "percent, status",
    [
        (100, TrendStatus.IMPROVING),
        (50, TrendStatus.IMPROVING),
        (49.9, TrendStatus.MODERATE),
        (20, TrendStatus.MODERATE),
        (19.99, TrendStatus.NEEDS_ATTENTION),
        (0, TrendStatus.NEEDS_ATTENTION),
    ],
)
def test_classify_status(percent, status):
    assert classify_status(percent) == status


def test_trend_points_are_oldest_first():
    points = trend_points(bad_habit(list(range(20))), limit=14)
    assert len(points) == 14
    assert [p.day for p in points] == list(range(1, 15))
    assert points[0].value == 13
    assert points[-1].value == 0
    assert points[-1].date == AS_OF


def test_goal_achieved_against_target_reduction():
    series = bad_habit([2] * 7 + [5] * 7)
    assert not compute_trend(series).goal_achieved

    reached = series.model_copy(update={"target_reduction": 60.0})
    assert compute_trend(reached).goal_achieved

    missed = series.model_copy(update={"target_reduction": 75.0})
    assert not compute_trend(missed).goal_achieved
