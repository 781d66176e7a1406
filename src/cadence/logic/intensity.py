import math

from cadence.domain.models import Intensity
from cadence.exceptions import InvalidInputError

# Lower bounds, inclusive, checked top-down. 0 and 100 are handled exactly.
_BUCKETS = (
    (60.0, Intensity.HIGH),
    (40.0, Intensity.MEDIUM),
    (20.0, Intensity.LOW),
)


def classify(rate: float) -> Intensity:
    """
    Maps a completion rate (0-100) to its intensity bucket.

    0 -> none, (0, 20) -> veryLow, [20, 40) -> low, [40, 60) -> medium,
    [60, 100) -> high, 100 -> full.
    """
    if isinstance(rate, bool) or not isinstance(rate, (int, float)) or math.isnan(rate):
        raise InvalidInputError(f"completion rate must be a number, got {rate!r}")
    if rate < 0 or rate > 100:
        raise InvalidInputError(f"completion rate must be within 0..100, got {rate}")

    if rate == 0:
        return Intensity.NONE
    if rate == 100:
        return Intensity.FULL
    for lower, bucket in _BUCKETS:
        if rate >= lower:
            return bucket
    return Intensity.VERY_LOW
