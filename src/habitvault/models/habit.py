"""SQLModel tables persisting habits and their status log."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import ClassVar

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel


class HabitRecord(SQLModel, table=True):
    """Stored habit definition owned by one user."""

    __tablename__: ClassVar[str] = "habit"

    id: str = Field(primary_key=True, max_length=64)
    user_id: int = Field(nullable=False, index=True)
    name: str = Field(nullable=False, max_length=80, index=True)
    target_days: str = Field(default="everyday", nullable=False, max_length=16)
    # Comma-separated Sunday-based weekday indices, e.g. "1,3,5"
    custom_days: str = Field(default="", max_length=32)
    start_date: date = Field(nullable=False)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )

    entries: list["HabitStatusEntry"] = Relationship(
        back_populates="habit",
        sa_relationship=relationship(
            "HabitStatusEntry", back_populates="habit", cascade="all, delete-orphan"
        ),
    )


class HabitStatusEntry(SQLModel, table=True):
    """Completed/missed status recorded for a habit on a calendar day."""

    __tablename__: ClassVar[str] = "habit_status_entry"

    habit_id: str = Field(foreign_key="habit.id", primary_key=True, max_length=64)
    occurred_on: date = Field(primary_key=True, index=True)
    user_id: int = Field(nullable=False, index=True)
    status: str = Field(nullable=False, max_length=16)

    habit: "HabitRecord" = Relationship(
        back_populates="entries",
        sa_relationship=relationship("HabitRecord", back_populates="entries"),
    )
