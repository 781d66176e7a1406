from typing import Optional

from cadence.services.analytics import HabitAnalytics

# Global/Cached instance; the service holds no per-request state
_analytics_instance: Optional[HabitAnalytics] = None


def get_analytics() -> HabitAnalytics:
    global _analytics_instance
    if _analytics_instance is None:
        _analytics_instance = HabitAnalytics()
    return _analytics_instance


def reset_analytics() -> None:
    global _analytics_instance
    _analytics_instance = None
