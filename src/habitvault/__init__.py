"""HabitVault: habit scheduling, streaks and completion analytics."""

from __future__ import annotations

from .config import BaseConfig
from .domain.habit import Habit, HabitState, HabitStatus, Streak, TargetDays
from .services.analytics import AnalyticsWindow, aggregate
from .services.habit_log import set_status
from .services.habits import compute_streak
from .services.schedule import is_due
from .tracker import HabitTracker

__all__ = [
    "AnalyticsWindow",
    "BaseConfig",
    "Habit",
    "HabitState",
    "HabitStatus",
    "HabitTracker",
    "Streak",
    "TargetDays",
    "aggregate",
    "compute_streak",
    "is_due",
    "set_status",
]
