from fastapi import APIRouter, Depends

from cadence.api.deps import get_analytics
from cadence.api.schemas import (
    ComparisonRequest,
    HabitsRequest,
    HeatmapRequest,
    ImpactRequest,
    PerformanceRequest,
    TrendLineRequest,
    TrendRequest,
)
from cadence.services.analytics import HabitAnalytics

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.post("/heatmap")
def heatmap(req: HeatmapRequest, svc: HabitAnalytics = Depends(get_analytics)):
    return svc.heatmap(req.habits, req.year, habit_id=req.habit_id, include_inactive=req.include_inactive)


@router.post("/streaks")
def streaks(req: HabitsRequest, svc: HabitAnalytics = Depends(get_analytics)):
    return svc.streaks(req.habits, as_of=req.as_of, include_inactive=req.include_inactive)


@router.post("/weekly")
def weekly(req: HabitsRequest, svc: HabitAnalytics = Depends(get_analytics)):
    return svc.weekly_completion(req.habits, as_of=req.as_of, include_inactive=req.include_inactive)


@router.post("/weekly-comparison")
def weekly_comparison(req: ComparisonRequest, svc: HabitAnalytics = Depends(get_analytics)):
    return svc.weekly_comparison(
        req.habits,
        weeks=req.weeks,
        week_offset=req.week_offset,
        as_of=req.as_of,
        start=req.start,
        end=req.end,
        include_inactive=req.include_inactive,
    )


@router.post("/performance")
def performance(req: PerformanceRequest, svc: HabitAnalytics = Depends(get_analytics)):
    return svc.performance(
        req.habits, req.start, req.end, as_of=req.as_of, include_inactive=req.include_inactive
    )


@router.post("/trends")
def trends(req: TrendRequest, svc: HabitAnalytics = Depends(get_analytics)):
    return svc.trends(
        req.bad_habits,
        recent_window_days=req.recent_window_days,
        prior_window_days=req.prior_window_days,
        as_of=req.as_of,
        include_inactive=req.include_inactive,
    )


@router.post("/trend-lines")
def trend_lines(req: TrendLineRequest, svc: HabitAnalytics = Depends(get_analytics)):
    return svc.trend_lines(req.bad_habits, limit=req.limit, as_of=req.as_of, include_inactive=req.include_inactive)


@router.post("/impact")
def impact(req: ImpactRequest, svc: HabitAnalytics = Depends(get_analytics)):
    return svc.reduction_overview(
        req.bad_habits,
        costs=req.costs,
        window_days=req.window_days,
        as_of=req.as_of,
        include_inactive=req.include_inactive,
    )
