"""Per-user async adapter over the ``crud`` layer.

Reads never raise: a failed read is logged and comes back as an empty or
default result, so "fetch failed" and "no data" look the same downstream.
Writes raise :class:`StoreWriteError` so callers can roll back and tell the
user.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app import crud
from app.db import SessionLocal
from app.schemas.habit import Habit, HabitIn, HabitPatch
from app.schemas.log import DayLog, dump_habit_status
from app.schemas.profile import ProfileIn, ProfileOut

logger = logging.getLogger(__name__)


class StoreWriteError(Exception):
    pass


class RecordNotFound(StoreWriteError):
    pass


class HabitStore:
    def __init__(self, user_id: str, session_factory: Callable[[], Session] = SessionLocal):
        self.user_id = user_id
        self.session_factory = session_factory

    async def _run(self, fn: Callable[..., Any], *args: Any) -> Any:
        def call() -> Any:
            with self.session_factory() as db:
                return fn(db, self.user_id, *args)

        return await asyncio.to_thread(call)

    async def _read(self, what: str, fn: Callable[..., Any], *args: Any, default: Any = None) -> Any:
        try:
            return await self._run(fn, *args)
        except (SQLAlchemyError, ValueError):
            logger.warning("Reading %s for user %s failed", what, self.user_id, exc_info=True)
            return default

    async def _write(self, what: str, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return await self._run(fn, *args)
        except SQLAlchemyError as exc:
            logger.error("Writing %s for user %s failed: %s", what, self.user_id, exc)
            raise StoreWriteError(f"{what} write failed") from exc

    async def get_profile(self) -> Optional[ProfileOut]:
        def fetch(db: Session, user_id: str) -> Optional[ProfileOut]:
            row = crud.get_profile(db, user_id)
            return ProfileOut.model_validate(row) if row else None

        return await self._read("profile", fetch)

    async def upsert_profile(self, profile: ProfileIn) -> ProfileOut:
        def write(db: Session, user_id: str) -> ProfileOut:
            row = crud.upsert_profile(db, user_id, profile.model_dump(exclude_unset=True))
            return ProfileOut.model_validate(row)

        return await self._write("profile", write)

    async def list_habits(self) -> List[Habit]:
        def fetch(db: Session, user_id: str) -> List[Habit]:
            return [Habit.from_row(row) for row in crud.list_habits(db, user_id)]

        return await self._read("habits", fetch, default=[])

    async def create_habit(self, habit: HabitIn) -> Habit:
        def write(db: Session, user_id: str) -> Habit:
            return Habit.from_row(crud.create_habit(db, user_id, habit.model_dump()))

        return await self._write("habit", write)

    async def update_habit(self, habit_id: str, patch: HabitPatch) -> Habit:
        def write(db: Session, user_id: str) -> Optional[Habit]:
            row = crud.update_habit(db, user_id, habit_id, patch.model_dump(exclude_unset=True))
            return Habit.from_row(row) if row else None

        habit = await self._write("habit", write)
        if habit is None:
            raise RecordNotFound(f"habit {habit_id} not found")
        return habit

    async def delete_habit(self, habit_id: str) -> None:
        deleted = await self._write("habit", crud.delete_habit, habit_id)
        if not deleted:
            raise RecordNotFound(f"habit {habit_id} not found")

    async def seed_default_habits_if_empty(self) -> bool:
        return await self._write("default habits", crud.seed_default_habits_if_empty)

    async def get_log(self, date_string: str) -> Optional[DayLog]:
        def fetch(db: Session, user_id: str) -> Optional[DayLog]:
            row = crud.get_log(db, user_id, date_string)
            return DayLog.from_row(row) if row else None

        return await self._read("day log", fetch)

    async def upsert_log(self, log: DayLog, fields: Optional[List[str]] = None) -> DayLog:
        """Merge ``log`` into the store; ``fields`` limits which keys are written."""
        data: Dict[str, Any] = {
            "habit_status": dump_habit_status(log.habit_status),
            "mood": log.mood,
            "note": log.note,
        }
        if fields is not None:
            data = {key: value for key, value in data.items() if key in fields}

        def write(db: Session, user_id: str) -> DayLog:
            return DayLog.from_row(crud.upsert_log(db, user_id, log.date_string, data))

        return await self._write("day log", write)

    async def get_logs_in_range(self, start: str, end: str) -> List[DayLog]:
        def fetch(db: Session, user_id: str) -> List[DayLog]:
            return [DayLog.from_row(row) for row in crud.get_logs_in_range(db, user_id, start, end)]

        return await self._read("day logs", fetch, default=[])
