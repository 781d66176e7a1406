from cadence.services.analytics import HabitAnalytics

__all__ = ["HabitAnalytics"]
