"""Domain types and repository protocols."""

from .habit import Habit, HabitState, HabitStatus, StatusLog, Streak, TargetDays, date_key

__all__ = ["Habit", "HabitState", "HabitStatus", "StatusLog", "Streak", "TargetDays", "date_key"]
