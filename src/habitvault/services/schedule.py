"""Schedule predicate deciding whether a habit is due on a calendar day."""

from __future__ import annotations

from datetime import date

from ..domain.habit import Habit, TargetDays

DAY_ABBREVIATIONS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def weekday_index(day: date) -> int:
    """Return the Sunday-based weekday index (0=Sunday .. 6=Saturday)."""

    return day.isoweekday() % 7


def is_due(habit: Habit, day: date) -> bool:
    """Return True when ``habit`` requires action on ``day``.

    A custom schedule with no selected days is never due.
    """

    if habit.target_days is TargetDays.EVERYDAY:
        return True
    index = weekday_index(day)
    if habit.target_days is TargetDays.WEEKDAYS:
        return 1 <= index <= 5
    if habit.target_days is TargetDays.CUSTOM:
        return index in habit.custom_days
    return False


def describe_schedule(habit: Habit) -> str:
    """Human label for a habit's schedule, e.g. ``"Mon, Wed, Fri"``."""

    if habit.target_days is TargetDays.EVERYDAY:
        return "Every day"
    if habit.target_days is TargetDays.WEEKDAYS:
        return "Weekdays"
    if not habit.custom_days:
        return "Custom days"
    return ", ".join(DAY_ABBREVIATIONS[d] for d in sorted(habit.custom_days) if 0 <= d <= 6)


__all__ = ["DAY_ABBREVIATIONS", "describe_schedule", "is_due", "weekday_index"]
