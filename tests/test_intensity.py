import pytest

from cadence.domain.models import Intensity
from cadence.exceptions import InvalidInputError
from cadence.logic.intensity import classify


@pytest.mark.parametrize(
    "rate, expected",
    [
        (0, Intensity.NONE),
        (0.01, Intensity.VERY_LOW),
        (19.9, Intensity.VERY_LOW),
        (20, Intensity.LOW),
        (39.99, Intensity.LOW),
        (40, Intensity.MEDIUM),
        (59.9, Intensity.MEDIUM),
        (60, Intensity.HIGH),
        (80, Intensity.HIGH),
        (99.9, Intensity.HIGH),
        (100, Intensity.FULL),
    ],
)
def test_classify_boundaries(rate, expected):
    assert classify(rate) == expected


def test_classify_is_monotonic():
    order = list(Intensity)
    previous = 0
    for step in range(0, 1001):
        bucket = order.index(classify(step / 10))
        assert bucket >= previous
        previous = bucket


def test_bucket_values_are_raw_tokens():
    assert [i.value for i in Intensity] == ["none", "veryLow", "low", "medium", "high", "full"]


@pytest.mark.parametrize("rate", [-0.1, 100.01, float("nan"), "50", None])
def test_classify_rejects_out_of_range(rate):
    with pytest.raises(InvalidInputError):
        classify(rate)
