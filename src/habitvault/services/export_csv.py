"""CSV export helpers for the habit status log."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable, Mapping

from ..domain.habit import Habit, HabitStatus


def export_log_csv(
    *,
    habits: Iterable[Habit],
    log: Mapping[str, Mapping[str, HabitStatus]],
    output_path: Path,
) -> Path:
    """Write one row per status entry to ``output_path``.

    Columns are deterministic: habit_id, habit_name, date, status. Rows are
    ordered by date then habit id. Entries for habits missing from ``habits``
    keep an empty name.
    """

    headers = ["habit_id", "habit_name", "date", "status"]
    names = {habit.id: habit.name for habit in habits}
    rows = [
        {
            "habit_id": habit_id,
            "habit_name": names.get(habit_id, ""),
            "date": day,
            "status": HabitStatus(status).value,
        }
        for habit_id, entries in log.items()
        for day, status in entries.items()
    ]
    rows.sort(key=lambda row: (row["date"], row["habit_id"]))

    output_path.parent.mkdir(parents=True, exist_ok=True)
    # Use newline='' for csv on Windows
    with output_path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=headers, quoting=csv.QUOTE_MINIMAL)
        writer.writeheader()
        writer.writerows(rows)

    return output_path


__all__ = ["export_log_csv"]
