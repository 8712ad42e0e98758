"""Windowed analytics over habits and their status log."""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Mapping, Optional, Sequence

from ..domain.habit import Habit, HabitStatus, Streak, date_key
from .habits import compute_streaks

ALL_TIME_MONTHS = 3


class AnalyticsWindow(str, Enum):
    """Time range an analytics snapshot covers, anchored to today."""

    WEEK = "week"
    MONTH = "month"
    ALL_TIME = "all"


@dataclass(frozen=True, slots=True)
class DailyCount:
    day: date
    completions: int = 0
    missed: int = 0


@dataclass(frozen=True, slots=True)
class HabitPerformance:
    """Per-habit counts inside the analytics window."""

    habit_id: str
    name: str
    completions: int
    missed: int

    @property
    def total(self) -> int:
        return self.completions + self.missed

    @property
    def completion_rate(self) -> int:
        return completion_rate(self.completions, self.missed)


@dataclass(frozen=True, slots=True)
class BestHabit:
    habit: Habit
    longest_streak: int


@dataclass(frozen=True, slots=True)
class AnalyticsSnapshot:
    """Aggregate view of all habits for one window."""

    window: AnalyticsWindow
    start: date
    end: date
    total_habits: int
    total_completions: int
    total_missed: int
    completion_rate: int
    best_habit: Optional[BestHabit]
    daily: list[DailyCount] = field(default_factory=list)
    habit_performance: list[HabitPerformance] = field(default_factory=list)


def completion_rate(completions: int, missed: int) -> int:
    """Percentage of completed check-ins rounded half-up; 0 when there are none."""

    total = completions + missed
    if total == 0:
        return 0
    pct = Decimal(completions) * 100 / Decimal(total)
    return int(pct.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _months_back(value: date, months: int) -> date:
    month_index = value.year * 12 + (value.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return value.replace(year=year, month=month, day=min(value.day, last_day))


def resolve_window(window: AnalyticsWindow, today: date) -> tuple[date, date]:
    """Return the inclusive (start, end) dates for ``window``.

    Weeks run Sunday through Saturday. The all-time window is a trailing
    three-month period ending today, not unbounded history.
    """

    if window is AnalyticsWindow.WEEK:
        start = today - timedelta(days=today.isoweekday() % 7)
        return start, start + timedelta(days=6)
    if window is AnalyticsWindow.MONTH:
        last_day = calendar.monthrange(today.year, today.month)[1]
        return today.replace(day=1), today.replace(day=last_day)
    return _months_back(today, ALL_TIME_MONTHS), today


def _count(entries: Mapping[str, HabitStatus]) -> tuple[int, int]:
    completions = sum(1 for status in entries.values() if status == HabitStatus.COMPLETED)
    missed = sum(1 for status in entries.values() if status == HabitStatus.MISSED)
    return completions, missed


def best_habit(habits: Sequence[Habit], streaks: Mapping[str, Streak]) -> Optional[BestHabit]:
    """Habit with the highest longest streak; the earliest habit wins ties."""

    if not habits:
        return None
    best = BestHabit(habit=habits[0], longest_streak=0)
    for habit in habits:
        longest = streaks.get(habit.id, Streak()).longest
        if longest > best.longest_streak:
            best = BestHabit(habit=habit, longest_streak=longest)
    return best


def daily_series(
    log: Mapping[str, Mapping[str, HabitStatus]], start: date, end: date
) -> list[DailyCount]:
    """Completed/missed counts across all habits for each day in [start, end]."""

    series = []
    day = start
    while day <= end:
        key = date_key(day)
        completions = missed = 0
        for entries in log.values():
            status = entries.get(key)
            if status == HabitStatus.COMPLETED:
                completions += 1
            elif status == HabitStatus.MISSED:
                missed += 1
        series.append(DailyCount(day=day, completions=completions, missed=missed))
        day += timedelta(days=1)
    return series


def habit_performance(
    habits: Sequence[Habit],
    log: Mapping[str, Mapping[str, HabitStatus]],
    start: date,
    end: date,
) -> list[HabitPerformance]:
    # ISO keys sort chronologically, so string bounds select the window
    lower, upper = date_key(start), date_key(end)
    rows = []
    for habit in habits:
        entries = log.get(habit.id) or {}
        in_window = {day: status for day, status in entries.items() if lower <= day <= upper}
        completions, missed = _count(in_window)
        rows.append(
            HabitPerformance(
                habit_id=habit.id, name=habit.name, completions=completions, missed=missed
            )
        )
    return rows


def aggregate(
    habits: Sequence[Habit],
    log: Mapping[str, Mapping[str, HabitStatus]],
    window: AnalyticsWindow = AnalyticsWindow.WEEK,
    *,
    today: date | None = None,
    streaks: Mapping[str, Streak] | None = None,
) -> AnalyticsSnapshot:
    """Build an analytics snapshot for ``window``.

    The headline completion rate covers every logged entry regardless of window.
    Pass ``streaks`` to reuse values already computed for the same ``today``.
    """

    today = today or date.today()
    window = AnalyticsWindow(window)
    if streaks is None:
        streaks = compute_streaks(habits, log, today=today)

    total_completions = total_missed = 0
    for entries in log.values():
        completions, missed = _count(entries)
        total_completions += completions
        total_missed += missed

    start, end = resolve_window(window, today)
    return AnalyticsSnapshot(
        window=window,
        start=start,
        end=end,
        total_habits=len(habits),
        total_completions=total_completions,
        total_missed=total_missed,
        completion_rate=completion_rate(total_completions, total_missed),
        best_habit=best_habit(habits, streaks),
        daily=daily_series(log, start, end),
        habit_performance=habit_performance(habits, log, start, end),
    )


def month_grid(
    habit_id: str,
    log: Mapping[str, Mapping[str, HabitStatus]],
    year: int,
    month: int,
) -> list[list[tuple[Optional[date], Optional[HabitStatus]]]]:
    """Sunday-first weeks of (day, status) cells for a heatmap of one month.

    Padding cells outside the month are ``(None, None)``.
    """

    entries = log.get(habit_id) or {}
    weeks = []
    for week in calendar.Calendar(firstweekday=calendar.SUNDAY).monthdatescalendar(year, month):
        row: list[tuple[Optional[date], Optional[HabitStatus]]] = []
        for day in week:
            if day.month != month:
                row.append((None, None))
            else:
                row.append((day, entries.get(date_key(day))))
        weeks.append(row)
    return weeks


__all__ = [
    "ALL_TIME_MONTHS",
    "AnalyticsSnapshot",
    "AnalyticsWindow",
    "BestHabit",
    "DailyCount",
    "HabitPerformance",
    "aggregate",
    "best_habit",
    "completion_rate",
    "daily_series",
    "habit_performance",
    "month_grid",
    "resolve_window",
]
