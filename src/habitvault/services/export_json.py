"""JSON import/export of a user's habits and status log."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..domain.habit import Habit, HabitState, log_from_dict, log_to_dict


FORMAT_VERSION = 1


def state_to_dict(state: HabitState) -> dict[str, Any]:
    """Plain JSON-compatible form keyed the way persisted data is keyed."""

    return {
        "version": FORMAT_VERSION,
        "habits": [habit.to_dict() for habit in state.habits],
        "log": log_to_dict(state.log),
    }


def state_from_dict(data: Any) -> HabitState:
    """Parse a payload produced by :func:`state_to_dict`.

    Raises ValueError when the payload is not shaped like an export, when a
    habit fails validation or repeats an id, and when a log entry has a bad
    date key or status.
    """

    if not isinstance(data, dict):
        raise ValueError("Habit export must be a JSON object")
    habits_raw = data.get("habits", [])
    log_raw = data.get("log", {})
    if not isinstance(habits_raw, list) or not isinstance(log_raw, dict):
        raise ValueError("Habit export needs a 'habits' list and a 'log' object")

    habits = tuple(Habit.from_dict(item) for item in habits_raw)
    seen: set[str] = set()
    for habit in habits:
        if habit.id in seen:
            raise ValueError(f"Duplicate habit id in export: {habit.id}")
        seen.add(habit.id)
    return HabitState(habits=habits, log=log_from_dict(log_raw))


def export_state_json(*, state: HabitState, output_path: Path) -> Path:
    """Write ``state`` to ``output_path`` and return the path written."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as fh:
        json.dump(state_to_dict(state), fh, indent=2, sort_keys=True)
    return output_path


def import_state_json(path: Path) -> HabitState:
    with path.open(encoding="utf-8") as fh:
        try:
            data = json.load(fh)
        except json.JSONDecodeError as exc:
            raise ValueError(f"{path} is not valid JSON: {exc}") from exc
    return state_from_dict(data)


__all__ = [
    "FORMAT_VERSION",
    "export_state_json",
    "import_state_json",
    "state_from_dict",
    "state_to_dict",
]
