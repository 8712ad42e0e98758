"""Habit repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from ..habit import Habit, HabitStatus, StatusLog


class HabitRepository(Protocol):
    """Repository for persisting habits and their status log for one user."""

    def get_by_id(self, habit_id: str, *, user_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        ...

    def list_habits(self, *, user_id: int) -> list[Habit]:
        """List habits in creation order."""
        ...

    def get_log(self, *, user_id: int) -> StatusLog:
        """Return the full status log."""
        ...

    def create(self, habit: Habit, *, user_id: int) -> Habit:
        """Create a new habit."""
        ...

    def update(self, habit: Habit, *, user_id: int) -> Habit:
        """Update an existing habit."""
        ...

    def delete(self, habit_id: str, *, user_id: int) -> None:
        """Delete a habit and all of its status entries."""
        ...

    def upsert_entry(
        self, habit_id: str, occurred_on: date, status: HabitStatus, *, user_id: int
    ) -> None:
        """Insert or overwrite a status entry."""
        ...

    def delete_entry(self, habit_id: str, occurred_on: date, *, user_id: int) -> None:
        """Delete a status entry."""
        ...
