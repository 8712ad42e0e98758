"""Service module exports."""

from . import (
    analytics,
    export_csv,
    export_json,
    habit_log,
    habits,
    reports,
    schedule,
)

__all__ = [
    "analytics",
    "export_csv",
    "export_json",
    "habit_log",
    "habits",
    "reports",
    "schedule",
]
