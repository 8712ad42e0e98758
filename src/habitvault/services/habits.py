"""Habit streak computation over a sparse status log."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Mapping, Optional

from ..domain.habit import Habit, HabitStatus, Streak, date_key
from .schedule import is_due


def extends_logged_run(habit: Habit, day: date, status: Optional[HabitStatus]) -> bool:
    """Return True when a logged day extends the longest-streak run.

    Any other logged day resets the run, including days the schedule does not
    require (a stray entry on an off day breaks the run). The backward walk for
    the current streak skips off days instead.
    """

    return is_due(habit, day) and status == HabitStatus.COMPLETED


def current_streak(
    habit: Habit, entries: Mapping[str, HabitStatus], *, today: date
) -> int:
    """Count completed due days walking backwards from ``today``."""

    count = 0
    cursor = today
    while cursor >= habit.start_date:
        if is_due(habit, cursor):
            if entries.get(date_key(cursor)) != HabitStatus.COMPLETED:
                break
            count += 1
        cursor -= timedelta(days=1)
    return count


def longest_logged_run(habit: Habit, entries: Mapping[str, HabitStatus]) -> int:
    """Longest run found scanning the logged dates in chronological order."""

    longest = 0
    run = 0
    for key in sorted(entries):
        day = date.fromisoformat(key)
        if day < habit.start_date:
            continue
        if extends_logged_run(habit, day, entries[key]):
            run += 1
            longest = max(longest, run)
        else:
            run = 0
    return longest


def compute_streak(
    habit: Habit,
    log: Mapping[str, Mapping[str, HabitStatus]],
    *,
    today: date | None = None,
) -> Streak:
    """Return the current and longest streak for ``habit``."""

    today = today or date.today()
    entries = log.get(habit.id) or {}

    current = current_streak(habit, entries, today=today)
    longest = max(longest_logged_run(habit, entries), current)
    return Streak(current=current, longest=longest)


def compute_streaks(
    habits: Iterable[Habit],
    log: Mapping[str, Mapping[str, HabitStatus]],
    *,
    today: date | None = None,
) -> dict[str, Streak]:
    """Streaks keyed by habit id, in habit order."""

    today = today or date.today()
    return {habit.id: compute_streak(habit, log, today=today) for habit in habits}


__all__ = [
    "compute_streak",
    "compute_streaks",
    "current_streak",
    "extends_logged_run",
    "longest_logged_run",
]
