"""SQLModel implementation of the habit repository."""

from __future__ import annotations

from datetime import date
from typing import Optional

from sqlmodel import Session, select

from ...domain.habit import (
    Habit,
    HabitState,
    HabitStatus,
    StatusLog,
    TargetDays,
    date_key,
    parse_date_key,
)
from ...logging_config import get_logger
from ...models.habit import HabitRecord, HabitStatusEntry
from ..database import SessionFactory


logger = get_logger(__name__)


def _encode_days(days) -> str:
    return ",".join(str(d) for d in sorted(days))


def _decode_days(raw: str) -> frozenset[int]:
    return frozenset(int(part) for part in raw.split(",") if part.strip())


def record_to_habit(record: HabitRecord) -> Habit:
    """Convert a stored row into the engine's plain habit value."""

    return Habit(
        id=record.id,
        name=record.name,
        target_days=TargetDays(record.target_days),
        custom_days=_decode_days(record.custom_days),
        start_date=record.start_date,
        created_at=record.created_at,
    )


def _apply(record: HabitRecord, habit: Habit, user_id: int) -> HabitRecord:
    record.user_id = user_id
    record.name = habit.name
    record.target_days = habit.target_days.value
    record.custom_days = _encode_days(habit.custom_days)
    record.start_date = habit.start_date
    return record


class SQLModelHabitRepository:
    """SQLModel-based habit repository scoped per user."""

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def _get_record(self, session: Session, habit_id: str, user_id: int) -> Optional[HabitRecord]:
        return session.exec(
            select(HabitRecord).where(HabitRecord.id == habit_id, HabitRecord.user_id == user_id)
        ).first()

    def get_by_id(self, habit_id: str, *, user_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        with self.session_factory() as session:
            record = self._get_record(session, habit_id, user_id)
            return record_to_habit(record) if record else None

    def list_habits(self, *, user_id: int) -> list[Habit]:
        """List habits in creation order."""
        with self.session_factory() as session:
            statement = (
                select(HabitRecord)
                .where(HabitRecord.user_id == user_id)
                .order_by(HabitRecord.created_at, HabitRecord.id)  # type: ignore[arg-type]
            )
            return [record_to_habit(r) for r in session.exec(statement).all()]

    def get_log(self, *, user_id: int) -> StatusLog:
        """Return every status entry for the user as a nested mapping."""
        log: StatusLog = {}
        with self.session_factory() as session:
            rows = session.exec(
                select(HabitStatusEntry)
                .where(HabitStatusEntry.user_id == user_id)
                .order_by(HabitStatusEntry.occurred_on)  # type: ignore[arg-type]
            ).all()
            for row in rows:
                log.setdefault(row.habit_id, {})[date_key(row.occurred_on)] = HabitStatus(row.status)
        return log

    def load_state(self, *, user_id: int) -> HabitState:
        """Load habits and log together for a tracker."""
        return HabitState(
            habits=tuple(self.list_habits(user_id=user_id)),
            log=self.get_log(user_id=user_id),
        )

    def create(self, habit: Habit, *, user_id: int) -> Habit:
        """Create a new habit."""
        with self.session_factory() as session:
            record = _apply(HabitRecord(id=habit.id, created_at=habit.created_at), habit, user_id)
            session.add(record)
        logger.info("Habit persisted", extra={"habit_id": habit.id, "user_id": user_id})
        return habit

    def update(self, habit: Habit, *, user_id: int) -> Habit:
        """Update an existing habit."""
        with self.session_factory() as session:
            record = self._get_record(session, habit.id, user_id)
            if record is None:
                raise LookupError(f"Habit {habit.id} does not exist for user {user_id}")
            session.add(_apply(record, habit, user_id))
        return habit

    def delete(self, habit_id: str, *, user_id: int) -> None:
        """Delete a habit and its status entries."""
        with self.session_factory() as session:
            record = self._get_record(session, habit_id, user_id)
            if record:
                # entries go with the record via the delete-orphan cascade
                session.delete(record)
        logger.info("Habit removed", extra={"habit_id": habit_id, "user_id": user_id})

    def upsert_entry(
        self, habit_id: str, occurred_on: date, status: HabitStatus, *, user_id: int
    ) -> None:
        """Insert or overwrite a status entry."""
        with self.session_factory() as session:
            existing = session.get(HabitStatusEntry, (habit_id, occurred_on))
            if existing:
                existing.status = HabitStatus(status).value
                session.add(existing)
            else:
                session.add(
                    HabitStatusEntry(
                        habit_id=habit_id,
                        occurred_on=occurred_on,
                        user_id=user_id,
                        status=HabitStatus(status).value,
                    )
                )

    def delete_entry(self, habit_id: str, occurred_on: date, *, user_id: int) -> None:
        """Delete a status entry."""
        with self.session_factory() as session:
            entry = session.exec(
                select(HabitStatusEntry)
                .where(HabitStatusEntry.user_id == user_id)
                .where(HabitStatusEntry.habit_id == habit_id)
                .where(HabitStatusEntry.occurred_on == occurred_on)
            ).first()
            if entry:
                session.delete(entry)

    def save_state(self, state: HabitState, *, user_id: int) -> None:
        """Replace everything stored for ``user_id`` with ``state``.

        Assumes a single writer; there is no merge with concurrent edits.
        """
        known_ids = {habit.id for habit in state.habits}
        with self.session_factory() as session:
            for entry in session.exec(
                select(HabitStatusEntry).where(HabitStatusEntry.user_id == user_id)
            ).all():
                session.delete(entry)
            for record in session.exec(
                select(HabitRecord).where(HabitRecord.user_id == user_id)
            ).all():
                session.delete(record)
            session.flush()

            for habit in state.habits:
                session.add(
                    _apply(HabitRecord(id=habit.id, created_at=habit.created_at), habit, user_id)
                )
            session.flush()
            for habit_id, entries in state.log.items():
                if habit_id not in known_ids:
                    logger.warning("Skipping entries for unknown habit", extra={"habit_id": habit_id})
                    continue
                for key, status in entries.items():
                    session.add(
                        HabitStatusEntry(
                            habit_id=habit_id,
                            occurred_on=parse_date_key(key),
                            user_id=user_id,
                            status=HabitStatus(status).value,
                        )
                    )
        logger.info(
            "State saved",
            extra={"user_id": user_id, "habits": len(state.habits)},
        )


__all__ = ["SQLModelHabitRepository", "record_to_habit"]
