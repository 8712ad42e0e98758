"""Plain-data habit types consumed by the scheduling and streak engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, Mapping


class TargetDays(str, Enum):
    """Recurrence configuration for a habit."""

    EVERYDAY = "everyday"
    WEEKDAYS = "weekdays"
    CUSTOM = "custom"


class HabitStatus(str, Enum):
    """Recorded outcome for a habit on a calendar day.

    An absent entry means the day is unrecorded, which is not the same as missed.
    """

    COMPLETED = "completed"
    MISSED = "missed"


# habit id -> ISO date string (YYYY-MM-DD) -> status
StatusLog = Dict[str, Dict[str, HabitStatus]]


class HabitValidationError(ValueError):
    """Raised when habit fields break the habit invariants."""


def validate_habit_fields(
    name: str, target_days: TargetDays, custom_days: Iterable[int]
) -> tuple[str, frozenset[int]]:
    """Return the cleaned (name, custom_days) or raise HabitValidationError.

    Custom days are kept only for custom schedules.
    """

    cleaned = (name or "").strip()
    if not cleaned:
        raise HabitValidationError("Please enter a habit name")

    days = frozenset(int(d) for d in custom_days or ())
    if target_days is TargetDays.CUSTOM:
        if not days:
            raise HabitValidationError(
                "Please select at least one day for your custom schedule"
            )
        invalid = sorted(d for d in days if not 0 <= d <= 6)
        if invalid:
            raise HabitValidationError(f"Custom days must be between 0 and 6, got {invalid}")
    else:
        days = frozenset()
    return cleaned, days


@dataclass(frozen=True, slots=True)
class Habit:
    """A recurring task definition."""

    id: str
    name: str
    target_days: TargetDays = TargetDays.EVERYDAY
    custom_days: frozenset[int] = field(default_factory=frozenset)
    start_date: date = field(default_factory=date.today)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-compatible form used for import/export."""

        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "targetDays": self.target_days.value,
            "startDate": self.start_date.isoformat(),
            "createdAt": self.created_at.isoformat(),
        }
        if self.target_days is TargetDays.CUSTOM:
            data["customDays"] = sorted(self.custom_days)
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "Habit":
        """Parse one exported habit, raising ValueError for anything malformed.

        The fields go through :func:`validate_habit_fields`, so stale
        ``customDays`` on a non-custom habit are dropped.
        """

        if not isinstance(data, Mapping):
            raise ValueError(f"Malformed habit entry: expected an object, got {data!r}")
        try:
            target_days = TargetDays(data.get("targetDays", TargetDays.EVERYDAY.value))
        except ValueError as exc:
            raise ValueError(f"Unknown targetDays value: {data.get('targetDays')!r}") from exc

        raw_days = data.get("customDays") or ()
        if not isinstance(raw_days, (list, tuple)):
            raise ValueError(f"Malformed habit entry: customDays must be a list, got {raw_days!r}")
        try:
            habit_id = data["id"]
            name = data["name"]
            start_date = date.fromisoformat(data["startDate"])
            created_raw = data.get("createdAt")
            created_at = (
                datetime.fromisoformat(created_raw) if created_raw else datetime.now(timezone.utc)
            )
            custom_days = [int(d) for d in raw_days]
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Malformed habit entry {data.get('id')!r}: {exc}") from exc
        if not isinstance(habit_id, str) or not habit_id:
            raise ValueError(f"Malformed habit entry: id must be a non-empty string, got {habit_id!r}")
        if not isinstance(name, str):
            raise ValueError(f"Malformed habit entry {habit_id!r}: name must be a string")

        cleaned, days = validate_habit_fields(name, target_days, custom_days)
        return cls(
            id=habit_id,
            name=cleaned,
            target_days=target_days,
            custom_days=days,
            start_date=start_date,
            created_at=created_at,
        )


@dataclass(frozen=True, slots=True)
class Streak:
    """Derived streak counts for a single habit."""

    current: int = 0
    longest: int = 0


@dataclass(frozen=True, slots=True)
class HabitState:
    """Habits and status log for one user, as handed to the engine."""

    habits: tuple[Habit, ...] = ()
    log: StatusLog = field(default_factory=dict)


def date_key(day: date) -> str:
    """Canonical StatusLog key for a calendar day."""

    return day.isoformat()


def log_to_dict(log: Mapping[str, Mapping[str, HabitStatus]]) -> dict[str, dict[str, str]]:
    """Serialize a status log to plain strings."""

    return {
        habit_id: {day: HabitStatus(status).value for day, status in entries.items()}
        for habit_id, entries in log.items()
        if entries
    }


def parse_date_key(key: Any) -> date:
    """Parse a StatusLog key, accepting only the canonical ``YYYY-MM-DD`` form."""

    try:
        day = date.fromisoformat(key)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid log date {key!r}, expected YYYY-MM-DD") from exc
    if date_key(day) != key:
        raise ValueError(f"Invalid log date {key!r}, expected YYYY-MM-DD")
    return day


def log_from_dict(data: Mapping[str, Any]) -> StatusLog:
    """Parse a serialized status log.

    Raises ValueError for per-habit values that are not objects, date keys
    not in ``YYYY-MM-DD`` form and unknown status literals.
    """

    log: StatusLog = {}
    for habit_id, entries in data.items():
        if not isinstance(entries, Mapping):
            raise ValueError(f"Log for habit {habit_id} must be an object, got {entries!r}")
        parsed: dict[str, HabitStatus] = {}
        for day, raw in entries.items():
            parse_date_key(day)
            try:
                parsed[day] = HabitStatus(raw)
            except ValueError as exc:
                raise ValueError(
                    f"Unknown status {raw!r} for habit {habit_id} on {day}"
                ) from exc
        if parsed:
            log[str(habit_id)] = parsed
    return log


__all__ = [
    "Habit",
    "HabitState",
    "HabitStatus",
    "HabitValidationError",
    "StatusLog",
    "Streak",
    "TargetDays",
    "date_key",
    "log_from_dict",
    "log_to_dict",
    "parse_date_key",
    "validate_habit_fields",
]
