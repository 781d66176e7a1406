from cadence.logic.aggregation import aggregate, aggregate_range, overall_completion_rate
from cadence.logic.calendar import build_year_grid, days_of_year
from cadence.logic.impact import health_impact, project_impact
from cadence.logic.intensity import classify
from cadence.logic.streaks import compute_streak, longest_streak, streak_result
from cadence.logic.trends import classify_status, compute_trend, trend_points

__all__ = [
    "aggregate",
    "aggregate_range",
    "build_year_grid",
    "classify",
    "classify_status",
    "compute_streak",
    "compute_trend",
    "days_of_year",
    "health_impact",
    "longest_streak",
    "overall_completion_rate",
    "project_impact",
    "streak_result",
    "trend_points",
]
