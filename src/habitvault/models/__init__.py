"""SQLModel table exports."""

from .habit import HabitRecord, HabitStatusEntry

__all__ = ["HabitRecord", "HabitStatusEntry"]
