"""In-process owner of a user's habits and status log.

Mutations replace the tracker's state with new immutable values and return
it. Nothing is recomputed implicitly: call :meth:`HabitTracker.recompute`
after a mutation to get fresh streaks and analytics.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from typing import Callable, Iterable, Mapping, Optional

from .domain.habit import (
    Habit,
    HabitState,
    HabitStatus,
    HabitValidationError,
    StatusLog,
    Streak,
    TargetDays,
    validate_habit_fields,
)
from .logging_config import get_logger
from .services.analytics import AnalyticsSnapshot, AnalyticsWindow, aggregate
from .services.habit_log import remove_habit_entries, set_status, toggle_completion
from .services.habits import compute_streaks

logger = get_logger(__name__)

_UNSET = object()


class HabitNotFoundError(KeyError):
    """Raised when a mutation names a habit id the tracker does not hold."""

    def __str__(self) -> str:
        return f"Habit not found: {self.args[0]}"


@dataclass(frozen=True, slots=True)
class Recomputation:
    streaks: dict[str, Streak]
    analytics: AnalyticsSnapshot


def _new_habit_id() -> str:
    return f"habit-{uuid.uuid4().hex}"


class HabitTracker:
    """Single writer for a habit list and its status log."""

    def __init__(
        self,
        state: HabitState | None = None,
        *,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._state = state or HabitState()
        self._clock = clock

    @classmethod
    def from_data(
        cls,
        habits: Iterable[Habit],
        log: Mapping[str, Mapping[str, HabitStatus]],
        **kwargs,
    ) -> "HabitTracker":
        state = HabitState(
            habits=tuple(habits),
            log={hid: dict(entries) for hid, entries in log.items() if entries},
        )
        return cls(state, **kwargs)

    @property
    def state(self) -> HabitState:
        return self._state

    @property
    def habits(self) -> tuple[Habit, ...]:
        return self._state.habits

    @property
    def log(self) -> StatusLog:
        return self._state.log

    def today(self) -> date:
        return self._clock()

    def get(self, habit_id: str) -> Habit:
        for habit in self._state.habits:
            if habit.id == habit_id:
                return habit
        raise HabitNotFoundError(habit_id)

    def add_habit(
        self,
        name: str,
        *,
        target_days: TargetDays = TargetDays.EVERYDAY,
        custom_days: Iterable[int] = (),
        start_date: date | None = None,
        habit_id: str | None = None,
        created_at: datetime | None = None,
    ) -> Habit:
        """Create a habit; callers must recompute afterwards."""

        target_days = TargetDays(target_days)
        cleaned, days = validate_habit_fields(name, target_days, custom_days)
        habit = Habit(
            id=habit_id or _new_habit_id(),
            name=cleaned,
            target_days=target_days,
            custom_days=days,
            start_date=start_date or self.today(),
            created_at=created_at or datetime.now(timezone.utc),
        )
        self._state = replace(self._state, habits=self._state.habits + (habit,))
        logger.info("Habit created", extra={"habit_id": habit.id, "target_days": habit.target_days.value})
        return habit

    def update_habit(
        self,
        habit_id: str,
        *,
        name: Optional[str] = None,
        target_days: Optional[TargetDays] = None,
        custom_days: Iterable[int] | object = _UNSET,
        start_date: Optional[date] = None,
    ) -> Habit:
        """Update name, schedule or start date; id and created_at never change.

        Schedule changes apply retroactively to streaks on the next recompute.
        """

        existing = self.get(habit_id)
        new_target = TargetDays(target_days) if target_days is not None else existing.target_days
        new_days = existing.custom_days if custom_days is _UNSET else custom_days
        cleaned, days = validate_habit_fields(
            existing.name if name is None else name, new_target, new_days
        )
        updated = replace(
            existing,
            name=cleaned,
            target_days=new_target,
            custom_days=days,
            start_date=start_date or existing.start_date,
        )
        self._state = replace(
            self._state,
            habits=tuple(updated if h.id == habit_id else h for h in self._state.habits),
        )
        logger.info("Habit updated", extra={"habit_id": habit_id})
        return updated

    def delete_habit(self, habit_id: str) -> HabitState:
        """Remove a habit and cascade-delete its status entries."""

        self.get(habit_id)
        self._state = HabitState(
            habits=tuple(h for h in self._state.habits if h.id != habit_id),
            log=remove_habit_entries(self._state.log, habit_id),
        )
        logger.info("Habit deleted", extra={"habit_id": habit_id})
        return self._state

    def set_status(
        self, habit_id: str, status: HabitStatus, day: date | None = None
    ) -> HabitState:
        """Apply toggle semantics for (habit, day); defaults to today."""

        self.get(habit_id)
        day = day or self.today()
        self._state = replace(
            self._state,
            log=set_status(self._state.log, habit_id, day, HabitStatus(status)),
        )
        logger.debug(
            "Status toggled",
            extra={"habit_id": habit_id, "day": day.isoformat(), "status": HabitStatus(status).value},
        )
        return self._state

    def toggle_today(self, habit_id: str) -> HabitState:
        """Mark today completed, or flip an already completed today to missed."""

        self.get(habit_id)
        self._state = replace(
            self._state, log=toggle_completion(self._state.log, habit_id, self.today())
        )
        return self._state

    def recompute(
        self, window: AnalyticsWindow = AnalyticsWindow.WEEK, *, today: date | None = None
    ) -> Recomputation:
        """Derive streaks and analytics from scratch for the current state."""

        today = today or self.today()
        habits = list(self._state.habits)
        streaks = compute_streaks(habits, self._state.log, today=today)
        snapshot = aggregate(habits, self._state.log, window, today=today, streaks=streaks)
        return Recomputation(streaks=streaks, analytics=snapshot)


__all__ = [
    "HabitNotFoundError",
    "HabitState",
    "HabitTracker",
    "HabitValidationError",
    "Recomputation",
    "validate_habit_fields",
]
