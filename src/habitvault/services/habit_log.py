"""Status log mutations with toggle-to-unset semantics.

Every function returns a new log mapping and leaves its input untouched.
Inner mappings for other habits are shared with the input, so callers must
treat logs as immutable values.
"""

from __future__ import annotations

from datetime import date
from typing import Mapping, Optional

from ..domain.habit import HabitStatus, StatusLog, date_key


def status_on(
    log: Mapping[str, Mapping[str, HabitStatus]], habit_id: str, day: date
) -> Optional[HabitStatus]:
    """Return the recorded status, or None when the day is unrecorded."""

    return (log.get(habit_id) or {}).get(date_key(day))


def set_status(
    log: Mapping[str, Mapping[str, HabitStatus]],
    habit_id: str,
    day: date,
    status: HabitStatus,
) -> StatusLog:
    """Set ``status`` for (habit, day), or clear it if already set to ``status``."""

    key = date_key(day)
    entries = dict(log.get(habit_id) or {})
    if entries.get(key) == status:
        del entries[key]
    else:
        entries[key] = status

    updated: StatusLog = {hid: value for hid, value in log.items() if hid != habit_id}  # type: ignore[misc]
    if entries:
        updated[habit_id] = entries
    return updated


def toggle_completion(
    log: Mapping[str, Mapping[str, HabitStatus]], habit_id: str, day: date
) -> StatusLog:
    """Mark a day completed, or flip an already completed day to missed."""

    current = status_on(log, habit_id, day)
    target = HabitStatus.MISSED if current == HabitStatus.COMPLETED else HabitStatus.COMPLETED
    return set_status(log, habit_id, day, target)


def remove_habit_entries(
    log: Mapping[str, Mapping[str, HabitStatus]], habit_id: str
) -> StatusLog:
    """Drop every entry recorded for ``habit_id``."""

    return {hid: entries for hid, entries in log.items() if hid != habit_id}  # type: ignore[misc]


__all__ = ["remove_habit_entries", "set_status", "status_on", "toggle_completion"]
